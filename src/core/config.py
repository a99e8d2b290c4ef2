"""Application settings.

- Centralizes environment variables (pydantic-settings) away from the CLI.
- Adapters (HTTP, stores) read their knobs from here consistently.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user config directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "mcsync"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "mcsync"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "mcsync"
    return Path.home() / ".config" / "mcsync"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Central application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MCSYNC_",
        extra="ignore",
        case_sensitive=False,
        # Project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per device request (seconds).",
    )
    slow_connection_warning_seconds: float = Field(
        default=4.0,
        gt=0,
        description="Delay before the 'still trying' message is printed.",
    )
    verify_tls: bool = Field(
        default=False,
        description="Verify the device certificate (devices ship self-signed ones).",
    )
    user_agent: str = Field(
        default="mcsync/0.1",
        min_length=1,
        description="User-Agent sent to the device.",
    )
    config_dir: Path = Field(
        default_factory=get_user_config_dir,
        description="Directory holding config.json and auth.json.",
    )

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.json"

    @property
    def auth_file(self) -> Path:
        return self.config_dir / "auth.json"
