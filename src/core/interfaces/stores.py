"""Contracts for the persistent stores and the device status query.

Rules:
- Every access is async: stores may hit disk and prompts block on the user.
- `set_key(name, None)` clears the key so the default applies again.
- `prompt` only asks; it never writes to the store.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from core.domain.models import SoftwareVersion


@runtime_checkable
class KeyValueStore(Protocol):
    """Parameter store (`ip`, `port`, `useHttp`)."""

    async def get_key(self, name: str) -> Any:
        ...

    async def set_key(self, name: str, value: Any) -> None:
        ...

    async def prompt(self, name: str) -> Any:
        """Ask the user for `name`, pre-filled with the stored value."""

        ...


@runtime_checkable
class CredentialStore(Protocol):
    """Credential store (`password`)."""

    async def get_key(self, name: str) -> Any:
        ...

    async def set_key(self, name: str, value: Any) -> None:
        ...

    async def prompt(self, name: str, *, err: str | None = None) -> Any:
        """Ask the user for `name`, showing `err` as the reason for asking."""

        ...


@runtime_checkable
class DeviceStatusSource(Protocol):
    async def get_software_version(self) -> SoftwareVersion:
        ...
