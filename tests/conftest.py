"""pytest fixtures for mcsync tests.

Provides:
- FakeStore: in-memory parameter/credential store with scripted prompt answers
- FakeDevice: scripted `GetSoftwareVersion` replies
- a Console recording into a StringIO
"""

from __future__ import annotations

import io
from collections import deque
from typing import Any

import pytest
from rich.console import Console

from core.domain.models import SoftwareVersion
from core.services.negotiation import ConnectionNegotiator
from core.services.notices import NoPasswordNotice


class FakeStore:
    """In-memory store. `answers` are returned by `prompt`, in order."""

    def __init__(self, values: dict[str, Any] | None = None, answers: list[Any] | None = None) -> None:
        self.values: dict[str, Any] = dict(values or {})
        self.answers: deque[Any] = deque(answers or [])
        self.prompts: list[tuple[str, str | None]] = []
        self.writes: list[tuple[str, Any]] = []

    async def get_key(self, name: str) -> Any:
        return self.values.get(name)

    async def set_key(self, name: str, value: Any) -> None:
        self.writes.append((name, value))
        if value is None:
            self.values.pop(name, None)
        else:
            self.values[name] = value

    async def prompt(self, name: str, *, err: str | None = None) -> Any:
        self.prompts.append((name, err))
        return self.answers.popleft()


class FakeDevice:
    def __init__(self, no_password: bool = False) -> None:
        self.no_password = no_password
        self.calls = 0

    async def get_software_version(self) -> SoftwareVersion:
        self.calls += 1
        return SoftwareVersion(noPassword=self.no_password, version="1.2.3")


class RecordingConsole(Console):
    def __init__(self) -> None:
        self.buffer = io.StringIO()
        super().__init__(file=self.buffer, width=300, force_terminal=False, color_system=None)

    @property
    def text(self) -> str:
        return self.buffer.getvalue()


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def config_store() -> FakeStore:
    return FakeStore({"ip": "10.0.0.5", "useHttp": False})


@pytest.fixture
def auth_store() -> FakeStore:
    return FakeStore({"password": "secret"})


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def negotiator(
    config_store: FakeStore,
    auth_store: FakeStore,
    device: FakeDevice,
    console: RecordingConsole,
) -> ConnectionNegotiator:
    return ConnectionNegotiator(
        config=config_store,
        auth=auth_store,
        device=device,
        no_password_notice=NoPasswordNotice(console),
        console=console,
    )
