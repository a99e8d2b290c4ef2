"""mcsync command line interface."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Coroutine, TypeVar

import typer
from rich.console import Console

from adapters.config_store import describe_connection, open_stores
from cli import doctor
from cli.ui_components import build_config_table, build_version_table, print_banner
from core.config import AppSettings
from core.domain.models import SoftwareVersion
from core.errors import ConfigFileError, DeviceRequestError
from core.services.device_session import DeviceSession, open_device_session
from core.services.notices import NoPasswordNotice

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Sync files with a microcontroller over HTTP(S).")
config_app = typer.Typer(no_args_is_help=True, help="Inspect the stored device configuration.")
app.add_typer(config_app, name="config")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@dataclass
class CliState:
    settings: AppSettings
    no_password_notice: NoPasswordNotice

    def open_session(self) -> DeviceSession:
        return open_device_session(
            settings=self.settings,
            console=_err_console,
            no_password_notice=self.no_password_notice,
        )


@app.callback()
def main(ctx: typer.Context) -> None:
    ctx.obj = CliState(settings=AppSettings(), no_password_notice=NoPasswordNotice(_err_console))


def _run_device(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except DeviceRequestError as exc:
        _err_console.print(f"Device request failed: {exc}", style="red", markup=False)
        raise typer.Exit(code=1) from exc
    except ConfigFileError as exc:
        _err_console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=2) from exc


@app.command()
def init(ctx: typer.Context) -> None:
    """Ask for the device address, protocol and password, then verify them.

    The answers overwrite the stored configuration right away; if the device
    cannot be reached with them, the usual reconnection prompts follow.
    """

    state: CliState = ctx.obj
    print_banner(_console)
    session = state.open_session()

    async def _init() -> SoftwareVersion:
        ip = await session.config.prompt("ip")
        port = await session.config.prompt("port")
        use_http = await session.config.prompt("useHttp")
        password = await session.auth.prompt("password")
        await session.config.set_key("ip", ip)
        await session.config.set_key("port", port)
        await session.config.set_key("useHttp", use_http)
        await session.auth.set_key("password", password or "")
        return await _session_version(session)

    version = _run_device(_init())
    _console.print(build_version_table(version))
    _console.print(f"[green]Saved configuration to:[/green] {state.settings.config_dir}")


async def _session_version(session: DeviceSession) -> SoftwareVersion:
    # A session call: exercises both the connection and the password.
    return await session.api.get_software_version(no_session=False)


@app.command()
def status(ctx: typer.Context) -> None:
    """Connect to the device and show its software version."""

    state: CliState = ctx.obj
    session = state.open_session()
    version = _run_device(_session_version(session))
    _console.print(build_version_table(version))


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the stored connection parameters (the password is never printed)."""

    state: CliState = ctx.obj
    config, auth = open_stores(state.settings, console=_err_console)
    try:
        password = auth.load().password
        connection = describe_connection(config)
    except ConfigFileError as exc:
        _err_console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=2) from exc
    _console.print(build_config_table(connection, password))


def run() -> None:
    app()
