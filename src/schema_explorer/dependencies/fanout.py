"""
Bounded expansion of dependency edges into full object definitions.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from schema_explorer.cache.filters import filter_by_names
from schema_explorer.cache.store import MetadataCacheStore
from schema_explorer.config import DEFAULT_FAN_OUT_LIMIT
from schema_explorer.errors import InvalidArgumentError
from schema_explorer.models import (
    EXPANDABLE_TYPES,
    ObjectKind,
    RelationshipEdge,
    SchemaObjectMetadata,
)

logger = logging.getLogger(__name__)


class FanOutAggregator:
    """
    Expands procedure, function and trigger dependents from the metadata cache.

    At most ``limit`` dependents per type are expanded so a response stays
    within what the consumer can take; the rest are dropped.
    """

    def __init__(self, cache_store: MetadataCacheStore, limit: int = DEFAULT_FAN_OUT_LIMIT):
        if limit < 0:
            raise InvalidArgumentError("limit cannot be negative")
        self.cache_store = cache_store
        self.limit = limit

    def expand_dependents(self, edges: Iterable[RelationshipEdge]) -> List[SchemaObjectMetadata]:
        """
        Expand dependents into metadata records.

        Returns:
            Procedures, then functions, then triggers, each in edge order
        """
        buckets: Dict[str, List[str]] = {object_type: [] for object_type in EXPANDABLE_TYPES}
        for edge in edges:
            object_type = edge.dependent_type.upper()
            if object_type in buckets:
                buckets[object_type].append(edge.dependent_name)

        expanded: List[SchemaObjectMetadata] = []
        for object_type in EXPANDABLE_TYPES:
            names = buckets[object_type]
            if not names:
                continue
            if len(names) > self.limit:
                logger.debug(f"Expanding {self.limit} of {len(names)} {object_type} dependents")

            kind = ObjectKind.from_object_type(object_type)
            universe = self.cache_store.get_or_fetch(kind)
            for name in names[:self.limit]:
                matches = filter_by_names(universe, [name])
                if matches:
                    expanded.append(matches[0])
                else:
                    logger.warning(f"{object_type} {name} not found in {kind.value} metadata")

        return expanded
