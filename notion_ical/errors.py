"""
Error kinds raised while reading a collection.

None of these are retried or recovered internally: any of them aborts the
in-progress read_all() and reaches the caller with enough context (field
name, row, block id) to diagnose.
"""
from __future__ import annotations


class NotionIcalError(Exception):
    """Base for every failure surfaced by a source."""


class ConfigurationError(NotionIcalError):
    """Ambiguous or missing date / title / hide field, or bad source selection."""


class ConnectivityError(NotionIcalError):
    """Opaque failure from the remote service client or archive I/O."""


class SchemaError(NotionIcalError):
    """Tabular row/column mismatch or a record that cannot become an event."""


class DateParseError(NotionIcalError, ValueError):
    """Date string matches no accepted format."""
