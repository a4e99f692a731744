"""
Catalog access for Oracle databases.

Provides the connection provider, the fetcher for cached object kinds,
and live inspections that bypass the cache.
"""

from schema_explorer.catalog.connection import ConnectionProvider, OracleConnectionProvider
from schema_explorer.catalog.fetcher import CatalogFetcher
from schema_explorer.catalog.inspector import CatalogInspector

__all__ = [
    "ConnectionProvider",
    "OracleConnectionProvider",
    "CatalogFetcher",
    "CatalogInspector",
]
