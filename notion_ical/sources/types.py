from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timezone, tzinfo
from typing import BinaryIO, Optional, Union


@dataclass(frozen=True)
class LiveSourceConfig:
    """
    Reading straight from a database through the Notion API.

    date_property: date field used for event timing. When unset the database
        must have exactly one date field.
    hide_property: checkbox field; rows with it ticked are left out.
    zone: zone for date-only values that carry no time zone of their own.
    """
    api_key: str
    database_id: str
    date_property: Optional[str] = None
    hide_property: Optional[str] = None
    zone: tzinfo = timezone.utc
    timeout_s: int = 30


@dataclass(frozen=True)
class SnapshotSourceConfig:
    """
    Reading a ZIP file produced by Notion's "Export" (Markdown & CSV).

    archive: path of the ZIP file, or an already opened binary file object.
    zone: zone every date in the export is interpreted in.
    """
    archive: Union[str, "os.PathLike[str]", BinaryIO]
    zone: tzinfo = timezone.utc
    date_property: Optional[str] = None
    title_property: Optional[str] = None
    hide_property: Optional[str] = None
