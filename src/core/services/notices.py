"""User-facing notices raised by the negotiation layer.

- `SlowConnectionNotice`: one-shot, cancellable "still trying" message owned
  by a single attempt.
- `NoPasswordNotice`: process-scoped "warn once" state, created at startup and
  injected into the negotiator.
"""

from __future__ import annotations

import asyncio

from rich.console import Console

DEFAULT_SLOW_CONNECTION_DELAY_SECONDS = 4.0


def slow_connection_message(url: str) -> str:
    return (
        f"Testing connection to microcontroller at {url}... "
        "This can take a while if your connection is bad. "
        "If the url is incorrect, please abort mcsync and change the config file or run mcsync init."
    )


class SlowConnectionNotice:
    """Prints a "still trying" message if the attempt outlives `delay_seconds`.

    The message is advisory: it never aborts the request.
    """

    def __init__(
        self,
        url: str,
        console: Console,
        *,
        delay_seconds: float = DEFAULT_SLOW_CONNECTION_DELAY_SECONDS,
    ) -> None:
        self.url = url
        self.delay_seconds = delay_seconds
        self.fired = False
        self._console = console
        self._handle: asyncio.TimerHandle | None = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def start(self) -> "SlowConnectionNotice":
        """Schedule the message on the running event loop."""

        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_seconds, self._fire)
        return self

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.fired = True
        self._console.print(slow_connection_message(self.url), markup=False, highlight=False)


class NoPasswordNotice:
    """Set-once flag: the "no password on the device" warning fires at most once."""

    message = (
        "A password was not set for the microcontroller. "
        "Please set a password in the device settings."
    )

    def __init__(self, console: Console) -> None:
        self._console = console
        self.checked = False
        self.warned = False

    def mark_checked(self, *, no_password: bool) -> None:
        """Record the device status; warn when it has no password (first time only)."""

        if self.checked:
            return
        self.checked = True
        if no_password:
            self.warned = True
            self._console.print(self.message, style="orange1", markup=False, highlight=False)
