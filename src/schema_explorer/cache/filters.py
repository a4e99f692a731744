"""In-memory name filtering over a materialized object universe."""

from __future__ import annotations

from typing import Iterable, List, Optional

from schema_explorer.models import SchemaObjectMetadata


def filter_by_names(
    universe: Iterable[SchemaObjectMetadata],
    requested: Optional[Iterable[str]],
    contains: bool = False,
) -> List[SchemaObjectMetadata]:
    """
    Select the objects whose names match any requested name.

    Matching is case-insensitive; with ``contains`` a requested name matches
    any object name it is a substring of. The universe order is preserved and
    an empty or missing request yields an empty list.
    """
    if isinstance(requested, str):
        requested = [requested]
    wanted = [name.strip().lower() for name in (requested or []) if name and name.strip()]
    if not wanted:
        return []

    if contains:
        return [
            obj for obj in universe
            if any(name in obj.name.lower() for name in wanted)
        ]

    wanted_set = set(wanted)
    return [obj for obj in universe if obj.name.lower() in wanted_set]
