"""Default device ports per protocol."""

from __future__ import annotations

DEFAULT_HTTP_PORT = 8000
DEFAULT_HTTPS_PORT = 8443


def resolve_port(port: int | None, use_http: bool | None = None) -> int:
    """Return the explicit `port`, or the default for the chosen protocol."""

    if port is not None:
        return port
    return DEFAULT_HTTP_PORT if use_http else DEFAULT_HTTPS_PORT
