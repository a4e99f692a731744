"""
Exceptions raised by schema_explorer.

Catalog failures are not represented here: errors raised by the database
driver propagate unchanged so callers can tell bad input apart from an
unreachable catalog.
"""

from __future__ import annotations

from typing import Any


class SchemaExplorerError(Exception):
    """Base class for schema_explorer errors."""


class InvalidArgumentError(SchemaExplorerError, ValueError):
    """A required identifier or setting is blank or malformed."""


class SnapshotFormatError(SchemaExplorerError):
    """A snapshot file does not have the expected record shape."""


def require_identifier(value: Any, argument: str) -> str:
    """Return ``value`` stripped, or raise if it is blank."""
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{argument} cannot be null or empty.")
    return str(value).strip()
