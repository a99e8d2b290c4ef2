"""Device transport: runs one API call through the lifecycle hooks.

Each call:
1. `before_all` builds the options once.
2. Every attempt goes through `before_each_attempt`, is sent, and ends in
   `on_success` or `on_failure`.
3. Options returned by `on_failure` are retried; None ends the call with a
   `DeviceRequestError`.

The attempt's slow-connection notice is released in a `finally` block, so
no notice outlives its attempt whatever the hooks do.
"""

from __future__ import annotations

from typing import Any

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import RequestOptions
from core.errors import DeviceRequestError, DeviceResponseError, DeviceUnreachableError
from core.interfaces.lifecycle import LifecycleHooks

SESSION_USER = "admin"


class DeviceHttpClient:
    """Calls `POST {protocol}://{ip}:{port}/api/{method}` on the device."""

    def __init__(
        self,
        hooks: LifecycleHooks,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._hooks = hooks
        self._settings = settings or AppSettings()
        self._transport = transport

    async def call(
        self,
        method: str,
        payload: dict[str, Any] | None = None,
        *,
        no_session: bool = False,
    ) -> httpx.Response:
        options = await self._hooks.before_all(RequestOptions(no_session=no_session))

        async with build_async_client(self._settings, transport=self._transport) as client:
            while True:
                options = await self._hooks.before_each_attempt(options)
                response: httpx.Response | None = None
                try:
                    response = await self._send(client, options, method, payload)
                except DeviceUnreachableError as exc:
                    error: DeviceRequestError = exc
                else:
                    if response.is_success:
                        await self._hooks.on_success(options)
                        return response
                    error = DeviceResponseError(
                        f"{method} failed with HTTP {response.status_code}",
                        status_code=response.status_code,
                    )
                finally:
                    options.release_timer()

                retry = await self._hooks.on_failure(options, error, response)
                if retry is None:
                    raise error
                options = retry

    async def _send(
        self,
        client: httpx.AsyncClient,
        options: RequestOptions,
        method: str,
        payload: dict[str, Any] | None,
    ) -> httpx.Response:
        if not options.ip:
            raise DeviceUnreachableError("No device address configured")

        # A password prompted after a 401 opts a no-session call into credentials.
        auth = None
        if options.password is not None:
            auth = httpx.BasicAuth(SESSION_USER, options.password)

        url = f"{options.url}/api/{method}"
        try:
            return await client.post(url, json=payload or {}, auth=auth)
        except (httpx.TransportError, httpx.InvalidURL) as exc:
            raise DeviceUnreachableError(f"Cannot reach {options.url}: {exc}") from exc
