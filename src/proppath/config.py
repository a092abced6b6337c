from __future__ import annotations

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ProppathConfig(BaseSettings):
    """Process-wide settings, read from ``PROPPATH_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROPPATH_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: LogLevel = "WARNING"
    rich_console: bool = True
    validate_on_write: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


PROPPATH_CONFIG = ProppathConfig()


__all__ = ["LogLevel", "PROPPATH_CONFIG", "ProppathConfig"]
