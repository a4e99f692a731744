"""
Cache-aside store for catalog metadata snapshots.

Each object kind is persisted as one JSON array file in the cache directory.
Snapshots are only ever written whole, after a complete fetch, and are only
removed by explicit invalidation. Nothing is kept in memory between calls.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional

from schema_explorer.cache.filters import filter_by_names
from schema_explorer.errors import SnapshotFormatError
from schema_explorer.models import ObjectKind, SchemaObjectMetadata

logger = logging.getLogger(__name__)


class MetadataCacheStore:
    """
    Serves object universes from disk snapshots, fetching on a miss.

    Snapshot layout:
        <cache_dir>/
        ├── procedures_metadata.json
        ├── functions_metadata.json
        ├── tables_metadata.json
        ├── triggers_metadata.json
        └── views_metadata.json
    """

    def __init__(self, fetcher: Any, cache_dir: Path):
        """
        Initialize the store.

        Args:
            fetcher: Object with ``fetch_all(kind)`` (normally a CatalogFetcher)
            cache_dir: Directory holding the snapshot files; created on first write
        """
        self.fetcher = fetcher
        self.cache_dir = Path(cache_dir)

    def snapshot_path(self, kind: ObjectKind) -> Path:
        """Return the snapshot file path for a kind."""
        return self.cache_dir / ObjectKind.parse(kind).snapshot_filename

    def get_or_fetch(self, kind: ObjectKind) -> List[SchemaObjectMetadata]:
        """
        Return the full universe for ``kind``.

        An unreadable snapshot is logged and treated as a miss. Catalog
        failures propagate; a failure to persist the fetched universe does not.
        """
        kind = ObjectKind.parse(kind)
        path = self.snapshot_path(kind)

        if path.exists():
            try:
                objects = self._read_snapshot(kind, path)
            except (OSError, ValueError, SnapshotFormatError) as e:
                logger.warning(f"Ignoring unreadable {kind.value} snapshot {path}: {e}")
            else:
                logger.info(f"Loaded {len(objects)} {kind.value} from cache")
                return objects

        objects = self.fetcher.fetch_all(kind)
        self._write_snapshot(kind, path, objects)
        return objects

    def invalidate(self, kind: ObjectKind) -> bool:
        """
        Delete the snapshot for ``kind``.

        Returns:
            True if a snapshot file was removed
        """
        path = self.snapshot_path(kind)
        existed = path.exists()
        path.unlink(missing_ok=True)
        logger.info(f"Invalidated {ObjectKind.parse(kind).value} snapshot ({'removed' if existed else 'absent'})")
        return existed

    def lookup(
        self,
        kind: ObjectKind,
        names: Optional[Iterable[str]],
        exact: Optional[bool] = None,
    ) -> List[SchemaObjectMetadata]:
        """
        Return the objects of ``kind`` matching any of ``names``.

        Args:
            kind: Object kind
            names: Requested names
            exact: Force exact (True) or substring (False) matching;
                   None uses the kind's default
        """
        kind = ObjectKind.parse(kind)
        contains = kind.matches_by_substring if exact is None else not exact
        matches = filter_by_names(self.get_or_fetch(kind), names, contains=contains)
        logger.info(f"Filtered to {len(matches)} {kind.value} by name")
        return matches

    def _read_snapshot(self, kind: ObjectKind, path: Path) -> List[SchemaObjectMetadata]:
        """Deserialize a snapshot file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, list):
            raise SnapshotFormatError(f"Snapshot {path} is not a JSON array")

        return [SchemaObjectMetadata.from_dict(record, kind) for record in data]

    def _write_snapshot(self, kind: ObjectKind, path: Path, objects: List[SchemaObjectMetadata]) -> None:
        """Persist a complete universe, replacing any previous snapshot."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            text = json.dumps([obj.to_dict() for obj in objects], indent=2, ensure_ascii=False)
            path.write_text(text, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not write {kind.value} snapshot {path}: {e}")
            return

        logger.info(f"Cached {len(objects)} {kind.value} to {path}")
