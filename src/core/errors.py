"""Domain errors raised by the device transport."""

from __future__ import annotations


class DeviceRequestError(Exception):
    """A device call failed and the negotiation layer did not retry it.

    `status_code` is None when the device never answered.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeviceUnreachableError(DeviceRequestError):
    """No response was received (network error, wrong protocol/port, no address)."""


class DeviceResponseError(DeviceRequestError):
    """The device answered with a non-success status."""


class ConfigFileError(Exception):
    """A stored config file cannot be read back (invalid JSON or values)."""
