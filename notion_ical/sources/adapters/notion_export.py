"""
Events from a Notion workspace export (ZIP of Markdown & CSV).

The database table is the first top-level CSV entry of the archive. Its
columns are untyped text: the title and date columns are found by name
(explicit, else by synonym) and every other column is passed through as is.

Exports carry no stable row id, so the event id is a content hash of the
title and the start instant. The same title + date always yields the same
id, so export-and-regenerate cycles keep calendar UIDs stable.
"""
from __future__ import annotations

import csv
import hashlib
import io
import logging
import re
import zipfile
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import PurePosixPath
from typing import List, Optional, Sequence

from pydantic import ValidationError

from ...errors import ConfigurationError, ConnectivityError, SchemaError
from ...models import Event, EventProperty
from ..base import BaseSource
from ..date_range import parse_date_range
from ..properties import SnapshotProperty
from ..types import SnapshotSourceConfig

logger = logging.getLogger(__name__)

TABULAR_EXTENSIONS = (".csv",)

DATE_SYNONYMS = ("date", "when", "period")
TITLE_SYNONYMS = ("name", "title")

HIDDEN_VALUES = frozenset({"yes", "true"})

ORIGIN_TAG = "@notion-ical-export"

# "Events 0123456789abcdef0123456789abcdef_all" -> "Events"
_NOTION_ID_SUFFIX_RE = re.compile(r"\s+[0-9a-f]{32}$", re.IGNORECASE)


# ============================================================
# Helpers
# ============================================================

def find_column(headers: Sequence[str], synonyms: Sequence[str]) -> Optional[str]:
    """
    First header equal to a synonym (case-insensitive), else the first one
    containing a synonym. Synonyms are tried in the order given.
    """
    lowered = [(h, h.lower()) for h in headers]
    for syn in synonyms:
        for header, low in lowered:
            if low == syn:
                return header
    for syn in synonyms:
        for header, low in lowered:
            if syn in low:
                return header
    return None


def rfc3339(dt: datetime) -> str:
    """
    RFC 3339 text of an aware datetime, byte-for-byte as Go's
    time.MarshalText writes it: "Z" for a zero offset, fractional seconds
    only when present and without trailing zeros.
    """
    s = dt.strftime("%Y-%m-%dT%H:%M:%S")
    if dt.microsecond:
        s += "." + f"{dt.microsecond:06d}".rstrip("0")

    offset = dt.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return s + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{s}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def make_event_id(title: str, start: datetime) -> str:
    digest = hashlib.sha256(title.encode("utf-8") + rfc3339(start).encode("utf-8")).hexdigest()
    return digest + ORIGIN_TAG


def find_tabular_entry(archive: zipfile.ZipFile) -> str:
    for info in archive.infolist():
        if info.is_dir() or "/" in info.filename.rstrip("/"):
            continue
        if info.filename.lower().endswith(TABULAR_EXTENSIONS):
            return info.filename
    raise ConfigurationError(
        f"cannot find a CSV file at the top level of the ZIP file; entries: "
        f"{[i.filename for i in archive.infolist()][:20]}"
    )


@dataclass(frozen=True)
class _Columns:
    title: str
    date: str
    hide: Optional[str] = None


# ============================================================
# Source
# ============================================================

class NotionExportSource(BaseSource):
    def __init__(self, cfg: SnapshotSourceConfig):
        self.cfg = cfg
        try:
            self._archive = zipfile.ZipFile(cfg.archive)
        except (zipfile.BadZipFile, OSError) as e:
            raise ConnectivityError(f"unable to open ZIP file: {type(e).__name__}: {e}") from e
        self.entry = find_tabular_entry(self._archive)
        logger.info("[export] using %s", self.entry)

    def close(self) -> None:
        self._archive.close()

    def __enter__(self) -> "NotionExportSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def name(self) -> str:
        stem = PurePosixPath(self.entry).stem
        if stem.endswith("_all"):
            stem = stem[: -len("_all")]
        return _NOTION_ID_SUFFIX_RE.sub("", stem)

    def read_all(self) -> List[Event]:
        events: List[Event] = []
        hidden = 0
        try:
            with self._archive.open(self.entry) as raw:
                reader = csv.reader(io.TextIOWrapper(raw, encoding="utf-8-sig", newline=""))
                headers = next(reader, None)
                if headers is None:
                    raise SchemaError(f"{self.entry}: no header row")
                columns = self._resolve_columns(headers)

                for record in reader:
                    if not record:
                        continue
                    if columns.hide and self._is_hidden(headers, record, columns.hide):
                        hidden += 1
                        continue
                    events.append(self._event_from_row(headers, record, columns, reader.line_num))
        except csv.Error as e:
            raise SchemaError(f"{self.entry}: malformed CSV: {e}") from e
        except UnicodeDecodeError as e:
            raise SchemaError(f"{self.entry}: not UTF-8: {e}") from e
        except (zipfile.BadZipFile, OSError) as e:
            raise ConnectivityError(f"failed reading {self.entry}: {type(e).__name__}: {e}") from e

        logger.info("[export] entry=%s events=%d hidden=%d", self.entry, len(events), hidden)
        return events

    def _resolve_columns(self, headers: List[str]) -> _Columns:
        date_col = self._resolve_column(headers, self.cfg.date_property, DATE_SYNONYMS, "date")
        title_col = self._resolve_column(headers, self.cfg.title_property, TITLE_SYNONYMS, "title")

        hide_col = None
        if self.cfg.hide_property:
            if self.cfg.hide_property not in headers:
                raise ConfigurationError(
                    f"hide column {self.cfg.hide_property!r} not in {headers}"
                )
            hide_col = self.cfg.hide_property

        logger.debug("[export] title=%r date=%r hide=%r", title_col, date_col, hide_col)
        return _Columns(title=title_col, date=date_col, hide=hide_col)

    @staticmethod
    def _resolve_column(
        headers: List[str],
        explicit: Optional[str],
        synonyms: Sequence[str],
        label: str,
    ) -> str:
        if explicit:
            if explicit not in headers:
                raise ConfigurationError(f"{label} column {explicit!r} not in {headers}")
            return explicit
        found = find_column(headers, synonyms)
        if found is None:
            raise ConfigurationError(
                f"no {label} column: none of {list(synonyms)} found in {headers}"
            )
        return found

    @staticmethod
    def _is_hidden(headers: List[str], record: List[str], hide_col: str) -> bool:
        if len(record) != len(headers):
            return False
        return record[headers.index(hide_col)].strip().lower() in HIDDEN_VALUES

    def _event_from_row(
        self,
        headers: List[str],
        record: List[str],
        columns: _Columns,
        line: int,
    ) -> Event:
        if len(record) != len(headers):
            raise SchemaError(
                f"{self.entry} line {line}: {len(record)} values for {len(headers)} columns"
            )
        cells = dict(zip(headers, record))

        start, end = parse_date_range(cells[columns.date], self.cfg.zone)
        title = cells[columns.title]

        properties: List[EventProperty] = [
            SnapshotProperty(name=header, raw=value)
            for header, value in zip(headers, record)
            if header not in (columns.date, columns.title)
        ]

        try:
            return Event(
                id=make_event_id(title, start),
                title=title,
                start=start,
                end=end,
                properties=properties,
            )
        except ValidationError as e:
            raise SchemaError(f"{self.entry} line {line}: {e}") from e
