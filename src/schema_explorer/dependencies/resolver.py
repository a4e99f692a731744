"""
Reverse-dependency lookup against the catalog.

Edges are always queried live and never persisted.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from schema_explorer.catalog.connection import ConnectionProvider
from schema_explorer.errors import require_identifier
from schema_explorer.models import RelationshipEdge

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Finds the objects that depend on a given object."""

    def __init__(self, connection_provider: ConnectionProvider, schema_owner: Optional[str] = None):
        """
        Initialize resolver.

        Args:
            connection_provider: Source of catalog connections
            schema_owner: Owner of both the target and its dependents;
                          None uses the login user's dependencies
        """
        self.connection_provider = connection_provider
        self.schema_owner = schema_owner.upper() if schema_owner else None

    def get_dependents(self, object_name: str, object_type: str) -> List[RelationshipEdge]:
        """
        Get the objects referencing ``object_name`` of ``object_type``.

        Recycle-bin objects and objects referencing system-owned targets are
        excluded. Results are ordered by dependent name, then dependent type.
        """
        object_name = require_identifier(object_name, "object_name").upper()
        object_type = require_identifier(object_type, "object_type").upper()

        logger.info(f"Getting dependents of {object_type} {object_name}")

        if self.schema_owner:
            view = "all_dependencies"
            scope = "AND d.owner = :owner AND d.referenced_owner = :owner"
            binds = {"owner": self.schema_owner}
        else:
            view = "user_dependencies"
            scope = "AND d.referenced_owner = USER"
            binds = {}

        try:
            with self.connection_provider.connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(f"""
                        SELECT DISTINCT d.name AS object_name, d.type AS object_type
                        FROM {view} d
                        WHERE d.referenced_name = :object_name
                            AND d.referenced_type = :object_type
                            AND d.name NOT LIKE 'BIN$%'
                            AND d.referenced_owner NOT IN ('SYS', 'SYSTEM')
                            {scope}
                        ORDER BY d.name, d.type
                    """, object_name=object_name, object_type=object_type, **binds)
                    rows = cursor.fetchall()
                finally:
                    cursor.close()
        except Exception:
            logger.exception(f"Error getting dependents of {object_type} {object_name}")
            raise

        edges = sorted(
            {
                RelationshipEdge(
                    dependent_name=name,
                    dependent_type=dep_type.upper(),
                    referenced_name=object_name,
                    referenced_type=object_type,
                )
                for name, dep_type in rows
            },
            key=lambda edge: (edge.dependent_name, edge.dependent_type),
        )

        logger.info(f"Retrieved {len(edges)} dependents of {object_type} {object_name}")
        return edges
