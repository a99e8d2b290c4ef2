"""Connection negotiation for device calls.

`ConnectionNegotiator` decides, for every device call, which address, port,
protocol and password to use. It reacts to failed attempts by asking the
user for corrected values and persists whatever worked once a call succeeds.

It implements `core.interfaces.lifecycle.LifecycleHooks`; the transport
drives it:

    before_all -> before_each_attempt -> on_success
                                      -> on_failure -> (retry) before_each_attempt

Persistence rules:
- Connection parameters are written only once they are known not to be the
  cause of the failure (success, or a failure that got a response).
- The password is written only once it is known not to be the cause (success,
  or a failure other than 401).
"""

from __future__ import annotations

from typing import Any

from rich.console import Console

from core.domain.models import (
    ConnectionParameters,
    FailureClassification,
    RequestOptions,
)
from core.domain.ports import resolve_port
from core.interfaces.stores import CredentialStore, DeviceStatusSource, KeyValueStore
from core.services.notices import (
    DEFAULT_SLOW_CONNECTION_DELAY_SECONDS,
    NoPasswordNotice,
    SlowConnectionNotice,
)

PASSWORD_NOT_PROVIDED = "A password was not provided."
WRONG_PASSWORD = "Wrong password."


class ConnectionNegotiator:
    """Negotiation state machine exposed as the four lifecycle hooks.

    `device` may be bound after construction: the device API itself sends
    its requests through a transport that uses this negotiator.
    """

    def __init__(
        self,
        *,
        config: KeyValueStore,
        auth: CredentialStore,
        no_password_notice: NoPasswordNotice,
        console: Console,
        device: DeviceStatusSource | None = None,
        slow_connection_delay_seconds: float = DEFAULT_SLOW_CONNECTION_DELAY_SECONDS,
    ) -> None:
        self.config = config
        self.auth = auth
        self.device = device
        self.no_password_notice = no_password_notice
        self.slow_connection_delay_seconds = slow_connection_delay_seconds
        self._console = console

    async def prepare(self, no_session: bool) -> RequestOptions:
        """Build the options for a new call from the stores."""

        options = RequestOptions(no_session=no_session)

        if not no_session:
            if not self.no_password_notice.checked:
                if self.device is None:
                    raise RuntimeError("ConnectionNegotiator.device is not bound")
                version = await self.device.get_software_version()
                self.no_password_notice.mark_checked(no_password=version.no_password)
            password = await self.auth.get_key("password")
            options.password = password or ""

        params = ConnectionParameters.from_stored(
            ip=await self.config.get_key("ip"),
            port=await self.config.get_key("port"),
            use_http=await self.config.get_key("useHttp"),
        )
        return options.with_connection(params)

    async def before_all(self, options: RequestOptions) -> RequestOptions:
        return await self.prepare(options.no_session)

    async def before_each_attempt(self, options: RequestOptions) -> RequestOptions:
        options.release_timer()
        options.timer = SlowConnectionNotice(
            options.url,
            self._console,
            delay_seconds=self.slow_connection_delay_seconds,
        ).start()
        return options

    async def on_success(self, options: RequestOptions) -> None:
        options.release_timer()
        await self.save_password(options)
        await self.save_connection(options)

    async def on_failure(
        self,
        options: RequestOptions,
        error: BaseException,
        response: Any | None,
    ) -> RequestOptions | None:
        options.release_timer()
        status_code = None if response is None else response.status_code
        return await self.reconfigure(options, FailureClassification.from_status(status_code))

    async def reconfigure(
        self,
        options: RequestOptions,
        failure: FailureClassification,
    ) -> RequestOptions | None:
        """Ask for whatever caused `failure`; return the options to retry with.

        A connection error is handled first: an unreachable device cannot have
        rejected the password. Returns None when neither cause applies.
        """

        if failure.is_connection_error:
            self._console.print(
                "The device cannot be reached with the provided protocol, IP and port "
                f"({options.ip} {options.port} ssl: {options.ssl}).",
                style="red",
                markup=False,
                highlight=False,
            )
            ip = await self.config.prompt("ip")
            port = await self.config.prompt("port")
            use_http = await self.config.prompt("useHttp")
            params = ConnectionParameters.from_stored(ip=ip, port=port, use_http=use_http)
            return options.with_connection(params)

        await self.save_connection(options)

        if failure.is_forbidden:
            stored = await self.auth.get_key("password")
            message = PASSWORD_NOT_PROVIDED if not stored else WRONG_PASSWORD
            password = await self.auth.prompt("password", err=message)
            return options.with_password(password or "")

        await self.save_password(options)
        return None

    async def save_password(self, options: RequestOptions) -> None:
        if options.password is not None:
            await self.auth.set_key("password", options.password)

    async def save_connection(self, options: RequestOptions) -> None:
        use_http = not options.ssl
        await self.config.set_key("ip", options.ip)
        await self.config.set_key("useHttp", use_http)
        if options.port == resolve_port(None, use_http):
            await self.config.set_key("port", None)
        else:
            await self.config.set_key("port", options.port)
