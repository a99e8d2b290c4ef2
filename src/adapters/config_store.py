"""JSON-file stores for connection parameters and credentials.

- `config.json` holds `ip`, `port` and `useHttp`.
- `auth.json` holds `password` and is written with owner-only permissions.

A key set to None is removed from the file, so its default applies on the
next read. Prompts only ask: values are persisted by the negotiator once a
call succeeds.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Generic, TypeVar

import typer
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from rich.console import Console

from core.config import AppSettings
from core.domain.ports import resolve_port
from core.errors import ConfigFileError

ModelT = TypeVar("ModelT", bound=BaseModel)


class StoredConnection(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ip: str | None = Field(default=None, min_length=1)
    port: int | None = Field(default=None, ge=1, le=65535)
    use_http: bool | None = Field(default=None, alias="useHttp")


class StoredAuth(BaseModel):
    model_config = ConfigDict(extra="ignore")

    password: str | None = None


class JsonConfigFile(Generic[ModelT]):
    """Key-value view over one JSON file validated by `model`."""

    def __init__(
        self,
        path: Path,
        model: type[ModelT],
        *,
        private: bool = False,
        console: Console | None = None,
    ) -> None:
        self.path = path
        self._model = model
        self._private = private
        self._console = console or Console(stderr=True)

    def load(self) -> ModelT:
        if not self.path.exists():
            return self._model()
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return self._model()
        try:
            return self._model.model_validate_json(text)
        except ValidationError as exc:
            raise ConfigFileError(
                f"Invalid config file {self.path} ({exc.error_count()} error(s)); fix or delete it."
            ) from exc

    def values(self) -> dict[str, Any]:
        """Stored values keyed by their file names (unset keys omitted)."""

        return self.load().model_dump(mode="json", by_alias=True, exclude_none=True)

    async def get_key(self, name: str) -> Any:
        return getattr(self.load(), self._field_name(name))

    async def set_key(self, name: str, value: Any) -> None:
        field_name = self._field_name(name)
        data = self.load().model_dump()
        data[field_name] = value
        self._write(self._model.model_validate(data))

    def _field_name(self, name: str) -> str:
        for field_name, info in self._model.model_fields.items():
            if name in (field_name, info.alias):
                return field_name
        raise KeyError(f"Unknown config key: {name}")

    def _write(self, data: ModelT) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = data.model_dump(mode="json", by_alias=True, exclude_none=True)
        self.path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        if self._private:
            self.path.chmod(0o600)


class MainConfigFile(JsonConfigFile[StoredConnection]):
    """Parameter store: `ip`, `port`, `useHttp`."""

    def __init__(self, path: Path, *, console: Console | None = None) -> None:
        super().__init__(path, StoredConnection, console=console)

    async def prompt(self, name: str) -> Any:
        current = await self.get_key(name)
        if name == "ip":
            return self._prompt_ip(current)
        if name == "port":
            return self._prompt_port(current)
        if name == "useHttp":
            return typer.confirm("Use plain HTTP instead of HTTPS?", default=bool(current))
        raise KeyError(f"Unknown config key: {name}")

    def _prompt_ip(self, current: str | None) -> str:
        while True:
            ip = typer.prompt("Device IP or hostname", default=current).strip()
            if ip:
                return ip
            self._console.print("The device address cannot be blank.", style="red", markup=False)

    def _prompt_port(self, current: int | None) -> int | None:
        while True:
            raw = typer.prompt(
                "Port (leave empty for the protocol default)",
                default="" if current is None else str(current),
                show_default=current is not None,
            ).strip()
            if not raw:
                return None
            try:
                port = int(raw)
            except ValueError:
                port = 0
            if 1 <= port <= 65535:
                return port
            self._console.print(f"Invalid port: {raw!r} (expected 1-65535).", style="red", markup=False)


class AuthConfigFile(JsonConfigFile[StoredAuth]):
    """Credential store: `password`."""

    def __init__(self, path: Path, *, console: Console | None = None) -> None:
        super().__init__(path, StoredAuth, private=True, console=console)

    async def prompt(self, name: str, *, err: str | None = None) -> Any:
        self._field_name(name)
        if err:
            self._console.print(err, style="red", markup=False)
        return typer.prompt(
            "Device password (leave empty for none)",
            default="",
            show_default=False,
            hide_input=True,
        )


def open_stores(
    settings: AppSettings | None = None,
    *,
    console: Console | None = None,
) -> tuple[MainConfigFile, AuthConfigFile]:
    settings = settings or AppSettings()
    return (
        MainConfigFile(settings.config_file, console=console),
        AuthConfigFile(settings.auth_file, console=console),
    )


def describe_connection(config: MainConfigFile) -> dict[str, str]:
    """Human-readable summary of the stored connection (port resolved)."""

    stored = config.load()
    use_http = bool(stored.use_http)
    port = resolve_port(stored.port, use_http)
    return {
        "ip": stored.ip or "(not set)",
        "port": str(port) if stored.port is not None else f"{port} (default)",
        "protocol": "http" if use_http else "https",
    }
