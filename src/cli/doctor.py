"""Doctor command for connection diagnostics.

Unlike the other commands it never prompts: it only reports what the stored
configuration looks like and whether the device answers with it.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.config_store import describe_connection, open_stores
from adapters.http_client import build_async_client
from cli.ui_components import describe_password
from core.config import AppSettings
from core.domain.models import ConnectionParameters
from core.errors import ConfigFileError

app = typer.Typer(no_args_is_help=True, help="Connection diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.post(url, json={})
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    config, auth = open_stores(settings)
    try:
        stored = config.load()
        password = auth.load().password
    except ConfigFileError as exc:
        _console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=2) from exc

    table = Table(title="mcsync Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Config dir", "OK", str(settings.config_dir))
    summary = describe_connection(config)
    if stored.ip:
        table.add_row("Device address", "OK", f"{summary['protocol']}://{summary['ip']} port {summary['port']}")
    else:
        table.add_row("Device address", "MISSING", "Run `mcsync init`")

    table.add_row("Password", "OK" if password else "OPTIONAL", describe_password(password))

    ok_http = False
    if stored.ip:
        params = ConnectionParameters.from_stored(ip=stored.ip, port=stored.port, use_http=stored.use_http)
        ok_http, detail_http = asyncio.run(_check_http(f"{params.url}/api/GetSoftwareVersion", settings))
        table.add_row("Device connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if stored.ip and not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] `mcsync status` asks for a new address, port and protocol "
            "when the device cannot be reached."
        )
