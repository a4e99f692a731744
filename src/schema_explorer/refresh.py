"""
Manual invalidation and repopulation of metadata snapshots.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional

from schema_explorer.cache.store import MetadataCacheStore
from schema_explorer.models import ALL_KINDS, ObjectKind, SchemaObjectMetadata

logger = logging.getLogger(__name__)


class CacheRefreshTool:
    """Refreshes one snapshot, or every snapshot in a fixed order."""

    def __init__(self, cache_store: MetadataCacheStore, kinds: Optional[Iterable[ObjectKind]] = None):
        """
        Initialize the refresh tool.

        Args:
            cache_store: Store whose snapshots are refreshed
            kinds: Kinds refreshed by ``refresh_all``, in order (defaults to all kinds)
        """
        self.cache_store = cache_store
        self.kinds: List[ObjectKind] = [ObjectKind.parse(k) for k in (kinds or ALL_KINDS)]

    def refresh_kind(self, kind: ObjectKind) -> List[SchemaObjectMetadata]:
        """Drop the snapshot for ``kind`` and repopulate it from the catalog."""
        kind = ObjectKind.parse(kind)
        logger.info(f"Refreshing {kind.value} metadata cache")
        self.cache_store.invalidate(kind)
        return self.cache_store.get_or_fetch(kind)

    def refresh_all(
        self,
        on_refreshed: Optional[Callable[[ObjectKind, int], None]] = None,
    ) -> Dict[ObjectKind, int]:
        """
        Refresh every configured kind in order.

        Stops at the first failure and re-raises it; kinds refreshed before
        the failure stay refreshed, later kinds are not touched.

        Args:
            on_refreshed: Optional callback receiving (kind, object count)

        Returns:
            Dict of kind -> number of objects cached
        """
        counts: Dict[ObjectKind, int] = {}
        for kind in self.kinds:
            counts[kind] = len(self.refresh_kind(kind))
            if on_refreshed:
                on_refreshed(kind, counts[kind])

        logger.info(f"Refreshed {len(counts)} metadata snapshots")
        return counts
