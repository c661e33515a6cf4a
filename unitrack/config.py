"""Application Configuration — pydantic-settings, loaded once per process.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - Settings are passed explicitly into engine/store/service constructors;
      nothing re-reads configuration per request or per tick
    - Source precedence: init kwargs > UNITRACK_* env > .env > unitrack.json

Design Decisions:
    - unitrack.json keeps the keys users already have (api_key, prefix,
      timer_expire_days), so an existing config file keeps working
    - A unitrack.json that does not parse is logged and ignored; defaults apply
    - Defaults provided for everything except the Linear API key: the timer
      runs without it, submissions are only logged
"""

import logging
import os
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from unitrack.core.domain_types import (
    DEFAULT_ISSUE_PREFIX, DEFAULT_RETENTION_DAYS, SAVE_INTERVAL, TICK_INTERVAL,
)


logger = logging.getLogger(__name__)


def default_config_dir() -> Path:
    return Path(os.environ.get("UNITRACK_CONFIG_DIR") or Path.home() / ".config" / "unitrack")


def config_file_path() -> Path:
    explicit = os.environ.get("UNITRACK_CONFIG_FILE")
    return Path(explicit) if explicit else default_config_dir() / "unitrack.json"


class LenientJsonConfigSource(JsonConfigSettingsSource):
    """JSON config source that treats an unreadable file as empty."""

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        try:
            data = super()._read_file(file_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable config file {file_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {file_path}: expected a JSON object")
            return {}
        return data

class Settings(BaseSettings):
    """unitrack settings from env vars and ~/.config/unitrack/unitrack.json."""

    model_config = SettingsConfigDict(
        env_prefix="UNITRACK_", env_file=".env", case_sensitive=False, extra="ignore",
    )

    config_dir: Path = default_config_dir()

    # Linear
    api_key: str = ""
    linear_api_url: str = "https://api.linear.app/graphql"
    linear_timeout_seconds: float = 10.0
    linear_max_retries: int = 3
    linear_base_delay_ms: int = 500
    linear_max_delay_ms: int = 10_000

    # Issue keys
    prefix: str = DEFAULT_ISSUE_PREFIX

    # Timer
    timer_expire_days: int = DEFAULT_RETENTION_DAYS
    save_interval_seconds: float = SAVE_INTERVAL.total_seconds()
    tick_interval_seconds: float = TICK_INTERVAL.total_seconds()
    save_timeout_seconds: float = 2.0
    notifications_enabled: bool = True

    # Storage; defaults to <config_dir>/unitrack.db
    database_url: str | None = None

    # Local API
    host: str = "127.0.0.1"
    port: int = 7345

    # Observability
    log_level: str = "INFO"
    log_format: str = "text"
    log_file: Path | None = None

    @field_validator("timer_expire_days", mode="before")
    @classmethod
    def fallback_expire_days(cls, v: object) -> object:
        """Non-positive retention falls back to the default."""
        try:
            return v if int(v) > 0 else DEFAULT_RETENTION_DAYS
        except (TypeError, ValueError):
            return v

    @field_validator("prefix", mode="before")
    @classmethod
    def fallback_prefix(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return DEFAULT_ISSUE_PREFIX
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            LenientJsonConfigSource(settings_cls, json_file=config_file_path()),
            file_secret_settings,
        )

    @property
    def resolved_database_url(self) -> str:
        return self.database_url or f"sqlite+aiosqlite:///{self.config_dir / 'unitrack.db'}"

    @property
    def resolved_log_file(self) -> Path:
        return self.log_file or self.config_dir / "unitrack.log"

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.timer_expire_days)

    @property
    def save_interval(self) -> timedelta:
        return timedelta(seconds=self.save_interval_seconds)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
