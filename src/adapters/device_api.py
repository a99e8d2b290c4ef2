"""Device API calls used by the CLI."""

from __future__ import annotations

from pydantic import ValidationError

from adapters.device_client import DeviceHttpClient
from core.domain.models import SoftwareVersion
from core.errors import DeviceResponseError


class DeviceApi:
    """Thin wrapper over `DeviceHttpClient` for the calls mcsync needs."""

    def __init__(self, client: DeviceHttpClient) -> None:
        self._client = client

    async def get_software_version(self, *, no_session: bool = True) -> SoftwareVersion:
        """Query the device status.

        The negotiator sends it without a session, since it tells whether a
        password exists at all; the CLI sends it with one to check the password.
        """

        response = await self._client.call("GetSoftwareVersion", no_session=no_session)
        try:
            return SoftwareVersion.model_validate_json(response.content)
        except ValidationError as exc:
            raise DeviceResponseError(
                "GetSoftwareVersion returned an invalid reply",
                status_code=response.status_code,
            ) from exc
