from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..models import Event


class BaseSource(ABC):
    @abstractmethod
    def name(self) -> str:
        """Human-readable label for the whole collection (calendar title)."""

    @abstractmethod
    def read_all(self) -> List[Event]:
        """
        Complete, ordered materialization of all events.

        Either every event is returned or an error is raised; there is no
        partial result.
        """
