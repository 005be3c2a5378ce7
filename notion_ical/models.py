from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EventProperty(BaseModel):
    """
    One displayable (name, value) pair of a record.

    Subclasses decide how `value` is rendered from what the origin provided.
    """
    model_config = ConfigDict(frozen=True)

    name: str

    @property
    def value(self) -> str:
        raise NotImplementedError


class Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    emoji: Optional[str] = None
    url: Optional[str] = None

    start: datetime
    end: datetime

    content: List[str] = Field(default_factory=list)
    properties: List[EventProperty] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _end_defaults_to_start(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("end") is None:
            data = dict(data)
            data["end"] = data.get("start")
        return data

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "Event":
        if self.end < self.start:
            raise ValueError(f"event {self.id!r} ends ({self.end.isoformat()}) before it starts ({self.start.isoformat()})")
        return self

    def description(self) -> str:
        """
        Plain-text body for the calendar entry.

        Properties come first, one "name: value" line each (multi-line values
        start on their own line), then every content line followed by a blank line.
        """
        parts: List[str] = []
        for prop in self.properties:
            line = prop.name + ":"
            value = prop.value
            if "\n" in value:
                line += "\n" + value
            else:
                line += " " + value
            parts.append(line)
            parts.append("\n")

        for line in self.content:
            parts.append(line)
            parts.append("\n\n")

        return "".join(parts)
