from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ...errors import ConfigurationError, SchemaError
from ...models import Event, EventProperty
from ..base import BaseSource
from ..blocks import ContentFlattener, rich_text_to_plain
from ..notion_service import NotionService, iter_pages
from ..properties import LiveProperty, notion_date_range
from ..types import LiveSourceConfig

logger = logging.getLogger(__name__)


def resolve_property(
    schema: Dict[str, Dict[str, Any]],
    prop_type: str,
    wanted: Optional[str],
) -> str:
    """
    Name of the one schema field of *prop_type* called *wanted* (or, with no
    name given, the one field of that type). Zero or several matches is a
    configuration error listing every field name.
    """
    matches = [
        name for name, prop in schema.items()
        if prop.get("type") == prop_type and (not wanted or name == wanted)
    ]
    if len(matches) != 1:
        target = f"{prop_type} property {wanted!r}" if wanted else f"a single {prop_type} property"
        raise ConfigurationError(
            f"expected {target}, found {len(matches)} {matches}; "
            f"available properties: {sorted(schema)}"
        )
    return matches[0]


class NotionApiSource(BaseSource):
    """
    Events from the rows of a Notion database, read through the API.

    Construction checks the database exists and resolves the date (and
    optional hide) field; read_all() then pages through the rows and each
    row's block tree.
    """

    def __init__(self, cfg: LiveSourceConfig, service: Optional[NotionService] = None):
        self.cfg = cfg
        self._service = service or NotionService.from_api_key(cfg.api_key, timeout_s=cfg.timeout_s)
        self._flattener = ContentFlattener(self._service)

        self._database = self._service.find_database(cfg.database_id)
        schema = self._database.get("properties") or {}

        self.date_property = resolve_property(schema, "date", cfg.date_property)
        self.hide_property = (
            resolve_property(schema, "checkbox", cfg.hide_property) if cfg.hide_property else None
        )
        logger.info(
            "[live] database=%s date_property=%r hide_property=%r",
            cfg.database_id, self.date_property, self.hide_property,
        )

    def name(self) -> str:
        return rich_text_to_plain(self._database.get("title"))

    def query_filter(self) -> Dict[str, Any]:
        parts: List[Dict[str, Any]] = [
            {"property": self.date_property, "date": {"is_not_empty": True}},
        ]
        if self.hide_property:
            parts.append({"property": self.hide_property, "checkbox": {"does_not_equal": True}})
        if len(parts) == 1:
            return parts[0]
        return {"and": parts}

    def read_all(self) -> List[Event]:
        query_filter = self.query_filter()

        def fetch(cursor: Optional[str]) -> Dict[str, Any]:
            response = self._service.query_database(
                self.cfg.database_id, filter=query_filter, start_cursor=cursor,
            )
            logger.debug(
                "[live] queried database=%s cursor=%s rows=%d has_more=%s",
                self.cfg.database_id, cursor, len(response.get("results", [])), response.get("has_more"),
            )
            return response

        events = [self._event_from_page(page) for page in iter_pages(fetch)]
        logger.info("[live] database=%s events=%d", self.cfg.database_id, len(events))
        return events

    def _event_from_page(self, page: Dict[str, Any]) -> Event:
        page_id = page["id"]
        title: Optional[str] = None
        start: Optional[datetime] = None
        end: Optional[datetime] = None
        properties: List[EventProperty] = []

        for name, prop in (page.get("properties") or {}).items():
            kind = prop.get("type")
            if kind == "title":
                title = rich_text_to_plain(prop.get("title"))
                continue
            if kind == "date" and name == self.date_property:
                date = prop.get("date")
                if not date or not date.get("start"):
                    raise SchemaError(f"row {page_id} has no value for date property {name!r}")
                start, end = notion_date_range(date, self.cfg.zone)
                continue
            if kind == "relation":
                continue
            properties.append(LiveProperty(name=name, payload=prop))

        if title is None:
            raise SchemaError(f"row {page_id} has no title property")
        if start is None:
            raise SchemaError(f"row {page_id} is missing date property {self.date_property!r}")

        properties.sort(key=lambda p: p.name)

        icon = page.get("icon") or {}
        emoji = icon.get("emoji") if icon.get("type") == "emoji" else None

        content = list(self._flattener.flatten(page_id))

        try:
            return Event(
                id=page_id,
                title=title,
                emoji=emoji,
                url=page.get("url"),
                start=start,
                end=end,
                content=content,
                properties=properties,
            )
        except ValidationError as e:
            raise SchemaError(f"row {page_id}: {e}") from e
