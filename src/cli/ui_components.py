"""CLI UI components (Rich).

Keeps table/panel layout out of the command functions.
"""

from __future__ import annotations

from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import SoftwareVersion


def print_banner(console: Console) -> None:
    title = Text("mcsync", style="bold cyan")
    subtitle = Text("Microcontroller sync client", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def describe_password(password: str | None) -> str:
    """Never show the secret itself."""

    if password is None:
        return "not set"
    return "empty" if password == "" else "set"


def build_config_table(connection: dict[str, str], password: str | None) -> Table:
    table = Table(title="Stored configuration")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for key, value in connection.items():
        table.add_row(key, value)
    table.add_row("password", describe_password(password))
    return table


def build_version_table(version: SoftwareVersion) -> Table:
    table = Table(title="Device")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    rows: dict[str, Any] = dict(version.model_extra or {})
    rows["noPassword"] = version.no_password
    for key in sorted(rows):
        table.add_row(key, str(rows[key]))
    return table
