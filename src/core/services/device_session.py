"""Wiring of the negotiation layer with the concrete adapters.

The negotiator needs the device API (password status query), and the device
API sends through a transport driven by the negotiator; `open_device_session`
ties that knot once so entry points (CLI, tests) share one setup.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from rich.console import Console

from adapters.config_store import AuthConfigFile, MainConfigFile, open_stores
from adapters.device_api import DeviceApi
from adapters.device_client import DeviceHttpClient
from core.config import AppSettings
from core.services.negotiation import ConnectionNegotiator
from core.services.notices import NoPasswordNotice


@dataclass
class DeviceSession:
    config: MainConfigFile
    auth: AuthConfigFile
    negotiator: ConnectionNegotiator
    client: DeviceHttpClient
    api: DeviceApi


def open_device_session(
    *,
    settings: AppSettings | None = None,
    console: Console | None = None,
    no_password_notice: NoPasswordNotice | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> DeviceSession:
    settings = settings or AppSettings()
    console = console or Console(stderr=True)
    config, auth = open_stores(settings, console=console)

    negotiator = ConnectionNegotiator(
        config=config,
        auth=auth,
        no_password_notice=no_password_notice or NoPasswordNotice(console),
        console=console,
        slow_connection_delay_seconds=settings.slow_connection_warning_seconds,
    )
    client = DeviceHttpClient(negotiator, settings, transport=transport)
    api = DeviceApi(client)
    negotiator.device = api

    return DeviceSession(config=config, auth=auth, negotiator=negotiator, client=client, api=api)
