from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_TIMEZONE = "UTC"
DEFAULT_TIMEOUT_SECONDS = 30


def _strip_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Env var with whitespace/newlines stripped; empty counts as unset."""
    val = os.getenv(key)
    if val is None:
        return default
    stripped = val.strip()
    return stripped if stripped else default


def resolve_zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"unknown time zone {name!r}") from e


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    database_id: Optional[str] = None
    date_property: Optional[str] = None
    hide_property: Optional[str] = None
    title_property: Optional[str] = None

    export_path: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE

    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    @staticmethod
    def load() -> "Settings":
        load_dotenv()

        timeout_str = _strip_env("NOTION_TIMEOUT_SECONDS") or str(DEFAULT_TIMEOUT_SECONDS)
        try:
            timeout_seconds = int(timeout_str)
        except ValueError:
            timeout_seconds = DEFAULT_TIMEOUT_SECONDS

        return Settings(
            api_key=_strip_env("NOTION_API_KEY"),
            database_id=_strip_env("NOTION_DATABASE_ID"),
            date_property=_strip_env("NOTION_DATE_PROPERTY"),
            hide_property=_strip_env("NOTION_HIDE_PROPERTY"),
            title_property=_strip_env("NOTION_TITLE_PROPERTY"),
            export_path=_strip_env("NOTION_EXPORT"),
            timezone=_strip_env("NOTION_EXPORT_TIMEZONE") or DEFAULT_TIMEZONE,
            timeout_seconds=timeout_seconds,
        )

    def zone(self) -> tzinfo:
        return resolve_zone(self.timezone)
