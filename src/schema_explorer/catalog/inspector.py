"""
Live catalog inspections that are never cached.

Columns, keys, constraints, indexes, synonyms, routine parameters and package
source change too often, or are too cheap to query, to be worth a snapshot.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from schema_explorer.catalog.connection import ConnectionProvider
from schema_explorer.catalog.fetcher import as_text, catalog_view, read_source_text
from schema_explorer.errors import require_identifier
from schema_explorer.models import (
    ColumnMetadata,
    ConstraintMetadata,
    IndexMetadata,
    KeyMetadata,
    ParameterMetadata,
    SynonymMetadata,
)

logger = logging.getLogger(__name__)

# Owners whose constraints are never reported
SYSTEM_OWNERS = (
    "SYS", "SYSTEM", "XDB", "OUTLN", "CTXSYS", "DBSNMP", "ORDDATA", "ORDSYS",
    "MDSYS", "WMSYS", "OLAPSYS", "EXFSYS", "SYSMAN", "APEX_040000", "FLOWS_FILES",
)


class CatalogInspector:
    """Runs one read-only catalog query per call, on a fresh connection."""

    def __init__(self, connection_provider: ConnectionProvider, schema_owner: Optional[str] = None):
        self.connection_provider = connection_provider
        self.schema_owner = schema_owner.upper() if schema_owner else None

    def _run(self, description: str, work: Callable[[Any], Any]) -> Any:
        """Run ``work(cursor)`` on a new connection, logging failures before re-raising."""
        logger.info(f"Getting {description}")
        try:
            with self.connection_provider.connection() as conn:
                cursor = conn.cursor()
                try:
                    result = work(cursor)
                finally:
                    cursor.close()
        except Exception:
            logger.exception(f"Error getting {description}")
            raise

        if isinstance(result, list):
            logger.info(f"Retrieved {len(result)} {description}")
        return result

    def get_columns(self, table_name: str) -> List[ColumnMetadata]:
        """Get column metadata for a table, in column order."""
        table_name = require_identifier(table_name, "table_name").upper()
        view, owner_clause, binds = catalog_view("tab_columns", self.schema_owner)

        def work(cursor) -> List[ColumnMetadata]:
            cursor.execute(f"""
                SELECT
                    column_name,
                    data_type,
                    nullable,
                    data_default,
                    data_length,
                    data_precision,
                    data_scale
                FROM {view}
                WHERE {owner_clause} AND table_name = :table_name
                ORDER BY column_id
            """, table_name=table_name, **binds)

            columns = []
            for row in cursor.fetchall():
                col_name, data_type, nullable, default, length, precision, scale = row
                default = as_text(default).strip()
                columns.append(ColumnMetadata(
                    name=col_name,
                    data_type=data_type,
                    nullable=nullable == "Y",
                    default_value=default or None,
                    data_length=length,
                    precision=precision,
                    scale=scale,
                ))
            return columns

        return self._run(f"columns for table {table_name}", work)

    def get_primary_keys(self, table_name: str) -> List[KeyMetadata]:
        """Get primary key columns for a table, in key position order."""
        return self._get_keys(table_name, "P")

    def get_foreign_keys(self, table_name: str) -> List[KeyMetadata]:
        """Get foreign key columns for a table with the constraint they reference."""
        return self._get_keys(table_name, "R")

    def _get_keys(self, table_name: str, constraint_type: str) -> List[KeyMetadata]:
        table_name = require_identifier(table_name, "table_name").upper()
        key_type = "Primary" if constraint_type == "P" else "Foreign"
        cons_view, _, binds = catalog_view("constraints", self.schema_owner)
        cols_view = cons_view.replace("constraints", "cons_columns")
        owner_join = "AND cols.owner = cons.owner" if self.schema_owner else ""
        owner_clause = "cons.owner = :owner" if self.schema_owner else "1 = 1"

        def work(cursor) -> List[KeyMetadata]:
            cursor.execute(f"""
                SELECT cols.column_name, cons.constraint_name, cons.r_constraint_name
                FROM {cols_view} cols
                JOIN {cons_view} cons
                    ON cols.constraint_name = cons.constraint_name
                    {owner_join}
                WHERE {owner_clause}
                    AND cons.constraint_type = :constraint_type
                    AND cons.table_name = :table_name
                ORDER BY cons.constraint_name, cols.position
            """, constraint_type=constraint_type, table_name=table_name, **binds)

            return [
                KeyMetadata(
                    column_name=column_name,
                    constraint_name=constraint_name,
                    key_type=key_type,
                    referenced_constraint_name=r_constraint,
                )
                for column_name, constraint_name, r_constraint in cursor.fetchall()
            ]

        return self._run(f"{key_type.lower()} keys for table {table_name}", work)

    def get_unique_constraints(self, table_name: str) -> List[ConstraintMetadata]:
        """Get unique constraints for a table, one entry per constrained column."""
        table_name = require_identifier(table_name, "table_name").upper()
        excluded = ", ".join(f"'{owner}'" for owner in SYSTEM_OWNERS)
        scope = "AND ac.owner = :owner" if self.schema_owner else ""
        binds = {"owner": self.schema_owner} if self.schema_owner else {}

        def work(cursor) -> List[ConstraintMetadata]:
            cursor.execute(f"""
                SELECT ac.constraint_name, acc.column_name
                FROM all_cons_columns acc
                JOIN all_constraints ac
                    ON acc.owner = ac.owner
                    AND acc.constraint_name = ac.constraint_name
                WHERE acc.table_name = :table_name
                    AND ac.constraint_type = 'U'
                    AND ac.owner NOT IN ({excluded})
                    AND ac.owner NOT LIKE '%SYS%'
                    {scope}
                ORDER BY ac.constraint_name, acc.position
            """, table_name=table_name, **binds)

            return [
                ConstraintMetadata(name=name, constraint_type="Unique", column_name=column)
                for name, column in cursor.fetchall()
            ]

        return self._run(f"unique constraints for table {table_name}", work)

    def get_check_constraints(self, table_name: str) -> List[ConstraintMetadata]:
        """Get check constraints (including NOT NULL checks) for a table."""
        table_name = require_identifier(table_name, "table_name").upper()
        view, owner_clause, binds = catalog_view("constraints", self.schema_owner)

        def work(cursor) -> List[ConstraintMetadata]:
            cursor.execute(f"""
                SELECT constraint_name, search_condition
                FROM {view}
                WHERE {owner_clause}
                    AND table_name = :table_name
                    AND constraint_type = 'C'
                ORDER BY constraint_name
            """, table_name=table_name, **binds)

            return [
                ConstraintMetadata(
                    name=name,
                    constraint_type="Check",
                    search_condition=as_text(condition) or None,
                )
                for name, condition in cursor.fetchall()
            ]

        return self._run(f"check constraints for table {table_name}", work)

    def list_indexes(self, table_name: str) -> List[IndexMetadata]:
        """List indexes on a table with their columns in position order."""
        table_name = require_identifier(table_name, "table_name").upper()
        view, owner_clause, binds = catalog_view("indexes", self.schema_owner)
        cols_view = view.replace("indexes", "ind_columns")
        cols_owner_clause = "index_owner = :owner" if self.schema_owner else "1 = 1"

        def work(cursor) -> List[IndexMetadata]:
            cursor.execute(f"""
                SELECT index_name, uniqueness
                FROM {view}
                WHERE {owner_clause} AND table_name = :table_name
                ORDER BY index_name
            """, table_name=table_name, **binds)
            indexes = [
                IndexMetadata(name=index_name, is_unique=uniqueness == "UNIQUE")
                for index_name, uniqueness in cursor.fetchall()
            ]

            cursor.execute(f"""
                SELECT index_name, column_name
                FROM {cols_view}
                WHERE {cols_owner_clause} AND table_name = :table_name
                ORDER BY index_name, column_position
            """, table_name=table_name, **binds)
            by_name: Dict[str, IndexMetadata] = {index.name: index for index in indexes}
            for index_name, column_name in cursor.fetchall():
                if index_name in by_name:
                    by_name[index_name].columns.append(column_name)

            return indexes

        return self._run(f"indexes for table {table_name}", work)

    def list_synonyms(self) -> List[SynonymMetadata]:
        """List synonyms visible to the configured owner (all visible if unset)."""
        scope = "WHERE owner IN (:owner, 'PUBLIC')" if self.schema_owner else ""
        binds = {"owner": self.schema_owner} if self.schema_owner else {}

        def work(cursor) -> List[SynonymMetadata]:
            cursor.execute(f"""
                SELECT synonym_name, table_owner, table_name
                FROM all_synonyms
                {scope}
                ORDER BY synonym_name
            """, **binds)
            return [
                SynonymMetadata(name=name, table_owner=owner, base_object_name=base)
                for name, owner, base in cursor.fetchall()
            ]

        return self._run("synonyms", work)

    def get_parameters(self, object_name: str) -> List[ParameterMetadata]:
        """Get the arguments of a standalone procedure or function."""
        object_name = require_identifier(object_name, "object_name").upper()
        view, owner_clause, binds = catalog_view("arguments", self.schema_owner)

        def work(cursor) -> List[ParameterMetadata]:
            cursor.execute(f"""
                SELECT argument_name, data_type, in_out, position
                FROM {view}
                WHERE {owner_clause}
                    AND object_name = :object_name
                    AND package_name IS NULL
                ORDER BY position
            """, object_name=object_name, **binds)
            return [
                ParameterMetadata(
                    name=name,
                    data_type=data_type,
                    direction=direction or "IN",
                    position=position or 0,
                )
                for name, data_type, direction, position in cursor.fetchall()
            ]

        return self._run(f"parameters for {object_name}", work)

    def get_package_source(self, package_name: str, body: bool = False) -> str:
        """Get a package specification, or its body, as one text."""
        package_name = require_identifier(package_name, "package_name").upper()
        source_type = "PACKAGE BODY" if body else "PACKAGE"

        return self._run(
            f"{source_type.lower()} source for {package_name}",
            lambda cursor: read_source_text(cursor, package_name, source_type, self.schema_owner),
        )
