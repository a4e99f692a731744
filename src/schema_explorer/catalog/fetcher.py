"""
Catalog fetcher for Oracle data dictionary views.

Reads the complete universe of one object kind, or a single object's
definition, from the catalog. Queries are scoped to the configured schema
owner through the ALL_* views; without an owner the USER_* views are used.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from schema_explorer.catalog.connection import ConnectionProvider
from schema_explorer.errors import require_identifier
from schema_explorer.models import ObjectKind, SchemaObjectMetadata

logger = logging.getLogger(__name__)


def as_text(value: Any) -> str:
    """Convert a fetched column value (str, CLOB or None) to text."""
    if value is None:
        return ""
    if hasattr(value, "read"):
        value = value.read()
    return str(value)


def catalog_view(view: str, schema_owner: Optional[str]) -> Tuple[str, str, Dict[str, str]]:
    """
    Pick the catalog view and owner predicate for a dictionary view family.

    Returns:
        Tuple of (view name, owner predicate or "1 = 1", bind values)
    """
    if schema_owner:
        return f"all_{view}", "owner = :owner", {"owner": schema_owner}
    return f"user_{view}", "1 = 1", {}


def read_source_text(
    cursor,
    name: str,
    source_type: str,
    schema_owner: Optional[str] = None,
) -> str:
    """Concatenate the stored source lines of one object, in line order."""
    view, owner_clause, binds = catalog_view("source", schema_owner)
    cursor.execute(f"""
        SELECT text
        FROM {view}
        WHERE {owner_clause}
            AND name = :name
            AND type = :source_type
        ORDER BY line
    """, name=name, source_type=source_type, **binds)
    return "".join(as_text(row[0]) for row in cursor.fetchall())


class CatalogFetcher:
    """
    Fetches cached object kinds from the Oracle catalog.

    Uses Oracle data dictionary views:
    - ALL_TABLES / USER_TABLES
    - ALL_VIEWS / USER_VIEWS
    - ALL_TRIGGERS / USER_TRIGGERS
    - ALL_OBJECTS / USER_OBJECTS (procedures and functions)
    - ALL_SOURCE / USER_SOURCE and DBMS_METADATA (definitions)
    """

    def __init__(self, connection_provider: ConnectionProvider, schema_owner: Optional[str] = None):
        """
        Initialize fetcher.

        Args:
            connection_provider: Source of catalog connections
            schema_owner: Owner to scope queries to; None queries the login user's objects
        """
        self.connection_provider = connection_provider
        self.schema_owner = schema_owner.upper() if schema_owner else None

    def fetch_all(self, kind: ObjectKind) -> List[SchemaObjectMetadata]:
        """
        Fetch every object of ``kind`` with its definition.

        Any connection or query failure propagates; no partial result is returned.
        """
        kind = ObjectKind.parse(kind)
        fetchers = {
            ObjectKind.TABLES: self._fetch_tables,
            ObjectKind.VIEWS: self._fetch_views,
            ObjectKind.TRIGGERS: self._fetch_triggers,
            ObjectKind.PROCEDURES: self._fetch_routines,
            ObjectKind.FUNCTIONS: self._fetch_routines,
        }

        logger.info(f"Fetching all {kind.value} from catalog")
        try:
            with self.connection_provider.connection() as conn:
                cursor = conn.cursor()
                try:
                    objects = fetchers[kind](cursor, kind)
                finally:
                    cursor.close()
        except Exception:
            logger.exception(f"Error fetching {kind.value} from catalog")
            raise

        logger.info(f"Retrieved {len(objects)} {kind.value} from catalog")
        return objects

    def fetch_definition(self, kind: ObjectKind, name: str) -> str:
        """
        Fetch the full definition of one object.

        Args:
            kind: Object kind
            name: Object name as stored in the catalog

        Returns:
            Definition text, empty if the catalog returned nothing
        """
        name = require_identifier(name, "name").upper()
        kind = ObjectKind.parse(kind)

        logger.info(f"Fetching definition of {kind.object_type} {name}")
        try:
            with self.connection_provider.connection() as conn:
                cursor = conn.cursor()
                try:
                    return self._read_definition(cursor, kind, name)
                finally:
                    cursor.close()
        except Exception:
            logger.exception(f"Error fetching definition of {kind.object_type} {name}")
            raise

    def _read_definition(self, cursor, kind: ObjectKind, name: str) -> str:
        """Read a definition on an open cursor."""
        if kind == ObjectKind.TRIGGERS:
            return read_source_text(cursor, name, "TRIGGER", self.schema_owner)

        if self.schema_owner:
            cursor.execute(
                "SELECT DBMS_METADATA.GET_DDL(:object_type, :name, :owner) FROM dual",
                object_type=kind.object_type, name=name, owner=self.schema_owner,
            )
        else:
            cursor.execute(
                "SELECT DBMS_METADATA.GET_DDL(:object_type, :name) FROM dual",
                object_type=kind.object_type, name=name,
            )
        row = cursor.fetchone()
        return as_text(row[0]) if row else ""

    def _fetch_tables(self, cursor, kind: ObjectKind) -> List[SchemaObjectMetadata]:
        """Get user tables with their DDL, skipping temporary and system tables."""
        view, owner_clause, binds = catalog_view("tables", self.schema_owner)
        ddl_args = "'TABLE', table_name, owner" if self.schema_owner else "'TABLE', table_name"

        cursor.execute(f"""
            SELECT table_name, DBMS_METADATA.GET_DDL({ddl_args}) AS table_ddl
            FROM {view}
            WHERE {owner_clause}
                AND temporary = 'N'
                AND nested = 'NO'
                AND secondary = 'N'
                AND table_name NOT LIKE 'SYS\\_%' ESCAPE '\\'
            ORDER BY table_name
        """, **binds)

        return [
            SchemaObjectMetadata(name=table_name, kind=kind, definition=as_text(ddl))
            for table_name, ddl in cursor.fetchall()
        ]

    def _fetch_views(self, cursor, kind: ObjectKind) -> List[SchemaObjectMetadata]:
        view, owner_clause, binds = catalog_view("views", self.schema_owner)
        cursor.execute(f"""
            SELECT view_name, text_vc
            FROM {view}
            WHERE {owner_clause}
            ORDER BY view_name
        """, **binds)

        return [
            SchemaObjectMetadata(name=view_name, kind=kind, definition=as_text(text))
            for view_name, text in cursor.fetchall()
        ]

    def _fetch_triggers(self, cursor, kind: ObjectKind) -> List[SchemaObjectMetadata]:
        """Get triggers; definitions come from the stored trigger source."""
        view, owner_clause, binds = catalog_view("triggers", self.schema_owner)
        cursor.execute(f"""
            SELECT trigger_name, trigger_type, triggering_event, table_name, description
            FROM {view}
            WHERE {owner_clause}
            ORDER BY trigger_name
        """, **binds)
        trigger_rows = cursor.fetchall()

        source_view, source_owner_clause, source_binds = catalog_view("source", self.schema_owner)
        cursor.execute(f"""
            SELECT name, text
            FROM {source_view}
            WHERE {source_owner_clause}
                AND type = 'TRIGGER'
            ORDER BY name, line
        """, **source_binds)

        sources: Dict[str, List[str]] = defaultdict(list)
        for name, text in cursor.fetchall():
            sources[name].append(as_text(text))

        triggers = []
        for trigger_name, trigger_type, event, table_name, description in trigger_rows:
            triggers.append(SchemaObjectMetadata(
                name=trigger_name,
                kind=kind,
                definition="".join(sources.get(trigger_name, [])),
                attributes={
                    "TriggerType": trigger_type,
                    "TriggeringEvent": event,
                    "TableName": table_name,
                    "Description": description,
                },
            ))
        return triggers

    def _fetch_routines(self, cursor, kind: ObjectKind) -> List[SchemaObjectMetadata]:
        """Get valid standalone procedures or functions with their DDL."""
        view, owner_clause, binds = catalog_view("objects", self.schema_owner)
        cursor.execute(f"""
            SELECT object_name
            FROM {view}
            WHERE {owner_clause}
                AND object_type = :object_type
                AND status = 'VALID'
            ORDER BY object_name
        """, object_type=kind.object_type, **binds)
        names = [row[0] for row in cursor.fetchall()]

        routines = []
        for name in names:
            routines.append(SchemaObjectMetadata(
                name=name,
                kind=kind,
                definition=self._read_definition(cursor, kind, name),
                attributes={"Type": kind.object_type},
            ))
        return routines
