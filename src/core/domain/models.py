"""Domain models (Pydantic v2 + dataclasses).

- `ConnectionParameters` and `SoftwareVersion` are validated data coming from
  the stores or the device.
- `RequestOptions` is the mutable, per-call state the negotiation hooks pass
  around; it is a dataclass because it owns a live timer handle.

These models describe *what* a request needs, not *how* it is sent.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from core.domain.ports import resolve_port

if TYPE_CHECKING:
    from core.services.notices import SlowConnectionNotice

HTTP_UNAUTHORIZED = 401


class ConnectionParameters(BaseModel):
    """Network parameters for one device."""

    ip: str | None = Field(
        default=None,
        description="Device address (IP or hostname).",
    )
    port: int = Field(
        ...,
        ge=1,
        le=65535,
        description="Resolved port, never the 'unset' sentinel.",
    )
    secure: bool = Field(
        default=True,
        description="True for HTTPS, False for plain HTTP.",
    )

    @classmethod
    def from_stored(
        cls,
        *,
        ip: str | None,
        port: int | None,
        use_http: bool | None,
    ) -> "ConnectionParameters":
        """Build parameters from persisted values (port may be unset)."""

        return cls(ip=ip, port=resolve_port(port, use_http), secure=not use_http)

    @property
    def url(self) -> str:
        protocol = "https" if self.secure else "http"
        return f"{protocol}://{self.ip}:{self.port}"


class SoftwareVersion(BaseModel):
    """Reply of the device's `GetSoftwareVersion` call.

    Only `noPassword` drives the negotiation; the remaining fields are kept
    as extras for display.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    no_password: bool = Field(
        default=False,
        alias="noPassword",
        description="True when no password is configured on the device.",
    )


@dataclass
class RequestOptions:
    """Options for one in-flight device call.

    `password` is None when credentials are not part of the exchange and
    `""` when the user intentionally has no password.
    """

    ip: str | None = None
    port: int | None = None
    ssl: bool = True
    password: str | None = None
    no_session: bool = False
    timer: SlowConnectionNotice | None = None

    @property
    def url(self) -> str:
        protocol = "https" if self.ssl else "http"
        return f"{protocol}://{self.ip}:{self.port}"

    def with_connection(self, params: ConnectionParameters) -> "RequestOptions":
        """Copy with the connection fields replaced, everything else kept."""

        return replace(self, ip=params.ip, port=params.port, ssl=params.secure)

    def with_password(self, password: str) -> "RequestOptions":
        return replace(self, password=password)

    def release_timer(self) -> None:
        """Cancel and drop the slow-connection notice. Safe to call twice."""

        if self.timer is not None:
            self.timer.cancel()
        self.timer = None


@dataclass(frozen=True)
class FailureClassification:
    """Why an attempt failed, derived from the response (or its absence)."""

    is_connection_error: bool
    is_forbidden: bool

    @classmethod
    def from_status(cls, status_code: int | None) -> "FailureClassification":
        """`status_code` is None when no response was received."""

        return cls(
            is_connection_error=status_code is None,
            is_forbidden=status_code == HTTP_UNAUTHORIZED,
        )
