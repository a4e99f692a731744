"""
SchemaExplorer - the operations exposed to tool-invoking clients.

Wires the catalog fetcher, cache store, dependency resolver, fan-out
aggregator and refresh tool together from one Settings object. Every
instance owns its collaborators; nothing is shared between instances.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from schema_explorer.cache.store import MetadataCacheStore
from schema_explorer.catalog.connection import ConnectionProvider, OracleConnectionProvider
from schema_explorer.catalog.fetcher import CatalogFetcher
from schema_explorer.catalog.inspector import CatalogInspector
from schema_explorer.config import Settings
from schema_explorer.dependencies.fanout import FanOutAggregator
from schema_explorer.dependencies.resolver import DependencyResolver
from schema_explorer.errors import InvalidArgumentError
from schema_explorer.models import DependencyAnalysis, ObjectKind, SchemaObjectMetadata
from schema_explorer.refresh import CacheRefreshTool

logger = logging.getLogger(__name__)


class SchemaExplorer:
    """
    Entry point for metadata listing, dependency analysis and cache refresh.

    Example:
        explorer = SchemaExplorer.from_settings(Settings.load("explorer.yaml"))
        tables = explorer.list_objects("tables", names=["EMP"])
        analysis = explorer.get_dependents("EMPLOYEES", "TABLE", expand=True)
    """

    def __init__(
        self,
        connection_provider: ConnectionProvider,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        owner = self.settings.schema_owner

        self.fetcher = CatalogFetcher(connection_provider, schema_owner=owner)
        self.cache_store = MetadataCacheStore(self.fetcher, self.settings.resolve_cache_dir())
        self.resolver = DependencyResolver(connection_provider, schema_owner=owner)
        self.aggregator = FanOutAggregator(self.cache_store, limit=self.settings.fan_out_limit)
        self.refresher = CacheRefreshTool(self.cache_store)
        self.inspector = CatalogInspector(connection_provider, schema_owner=owner)

    @classmethod
    def from_settings(cls, settings: Settings) -> SchemaExplorer:
        """Create an explorer connecting to Oracle with ``settings.connection_string``."""
        if not settings.connection_string:
            raise InvalidArgumentError(
                "No connection string configured (set SCHEMA_EXPLORER_ORACLE_CONN or --conn)"
            )
        return cls(OracleConnectionProvider(settings.connection_string), settings)

    def list_objects(
        self,
        kind: ObjectKind,
        names: Optional[Iterable[str]] = None,
    ) -> List[SchemaObjectMetadata]:
        """List all cached objects of a kind, or only those matching ``names``."""
        if names is None:
            return self.cache_store.get_or_fetch(kind)
        return self.cache_store.lookup(kind, names)

    def get_definition(self, kind: ObjectKind, name: str) -> str:
        """Fetch one object's definition straight from the catalog."""
        return self.fetcher.fetch_definition(kind, name)

    def get_dependents(
        self,
        object_name: str,
        object_type: str,
        expand: bool = False,
        limit: Optional[int] = None,
    ) -> DependencyAnalysis:
        """
        Analyze what depends on an object.

        Args:
            object_name: Target object name
            object_type: Target object type (TABLE, VIEW, PROCEDURE, ...)
            expand: Also expand procedure/function/trigger dependents
            limit: Per-type expansion cap overriding the configured one

        Returns:
            DependencyAnalysis with edges and any expanded definitions
        """
        edges = self.resolver.get_dependents(object_name, object_type)
        analysis = DependencyAnalysis(
            object_name=object_name.strip().upper(),
            object_type=object_type.strip().upper(),
            edges=edges,
        )

        if expand:
            aggregator = self.aggregator
            if limit is not None and limit != aggregator.limit:
                aggregator = FanOutAggregator(self.cache_store, limit=limit)
            analysis.expanded = aggregator.expand_dependents(edges)

        return analysis

    def refresh(self, kind: Optional[ObjectKind] = None, **kwargs: Any) -> Dict[ObjectKind, int]:
        """
        Refresh one kind's snapshot, or all snapshots when ``kind`` is None.

        Returns:
            Dict of kind -> number of objects cached
        """
        if kind is None:
            return self.refresher.refresh_all(**kwargs)
        kind = ObjectKind.parse(kind)
        return {kind: len(self.refresher.refresh_kind(kind))}
