"""
Schema Explorer - cached schema metadata and dependency analysis for Oracle

Lets automated clients explore a relational schema without re-querying
expensive catalog views on every request.

Features:
- Per-kind metadata snapshots persisted to disk (cache-aside, manual refresh)
- Name lookups over cached tables, views, triggers, procedures and functions
- Live reverse-dependency analysis with bounded definition expansion
- Live inspection of columns, keys, constraints, indexes, synonyms and packages
"""

__version__ = "0.1.0"
__author__ = "Schema Explorer Contributors"

from schema_explorer.models import (
    ObjectKind,
    SchemaObjectMetadata,
    RelationshipEdge,
    DependencyAnalysis,
)
from schema_explorer.config import Settings
from schema_explorer.errors import InvalidArgumentError, SchemaExplorerError

from schema_explorer.catalog import (
    CatalogFetcher,
    CatalogInspector,
    OracleConnectionProvider,
)
from schema_explorer.cache import MetadataCacheStore, filter_by_names
from schema_explorer.dependencies import DependencyResolver, FanOutAggregator
from schema_explorer.refresh import CacheRefreshTool
from schema_explorer.explorer import SchemaExplorer

__all__ = [
    # Core models
    "ObjectKind",
    "SchemaObjectMetadata",
    "RelationshipEdge",
    "DependencyAnalysis",
    # Configuration and errors
    "Settings",
    "InvalidArgumentError",
    "SchemaExplorerError",
    # Catalog
    "CatalogFetcher",
    "CatalogInspector",
    "OracleConnectionProvider",
    # Cache
    "MetadataCacheStore",
    "filter_by_names",
    # Dependencies
    "DependencyResolver",
    "FanOutAggregator",
    "CacheRefreshTool",
    "SchemaExplorer",
]
