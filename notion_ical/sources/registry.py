from __future__ import annotations

from typing import Callable, Dict

from ..config import Settings
from ..errors import ConfigurationError
from .adapters.notion_api import NotionApiSource
from .adapters.notion_export import NotionExportSource
from .base import BaseSource
from .types import LiveSourceConfig, SnapshotSourceConfig


def _api_source(settings: Settings) -> BaseSource:
    if not settings.database_id:
        raise ConfigurationError("reading from the API requires a database id (NOTION_DATABASE_ID)")
    return NotionApiSource(
        LiveSourceConfig(
            api_key=settings.api_key or "",
            database_id=settings.database_id,
            date_property=settings.date_property,
            hide_property=settings.hide_property,
            zone=settings.zone(),
            timeout_s=settings.timeout_seconds,
        )
    )


def _export_source(settings: Settings) -> BaseSource:
    return NotionExportSource(
        SnapshotSourceConfig(
            archive=settings.export_path or "",
            zone=settings.zone(),
            date_property=settings.date_property,
            title_property=settings.title_property,
            hide_property=settings.hide_property,
        )
    )


SOURCES: Dict[str, Callable[[Settings], BaseSource]] = {
    "api": _api_source,
    "export": _export_source,
}


def source_kind(settings: Settings) -> str:
    """Exactly one of an export file or an API key selects the source."""
    if settings.export_path and settings.api_key:
        raise ConfigurationError("either an export file or an API key should be set, not both")
    if settings.export_path:
        return "export"
    if settings.api_key:
        return "api"
    raise ConfigurationError("set an export file (NOTION_EXPORT) or an API key (NOTION_API_KEY)")


def build_source(settings: Settings) -> BaseSource:
    return SOURCES[source_kind(settings)](settings)
