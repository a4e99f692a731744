"""
Core data models for the schema_explorer package.

Defines the object kinds that are cached as snapshots, the metadata records
stored in those snapshots, the dependency edges discovered from the catalog,
and the records returned by live catalog inspections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from schema_explorer.errors import InvalidArgumentError, SnapshotFormatError


class ObjectKind(str, Enum):
    """Schema object kinds that are cached as one snapshot file each."""
    PROCEDURES = "procedures"
    FUNCTIONS = "functions"
    TABLES = "tables"
    TRIGGERS = "triggers"
    VIEWS = "views"

    @classmethod
    def parse(cls, value: Any) -> ObjectKind:
        """Parse a kind from its value ("tables") or its catalog type ("TABLE")."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for kind in cls:
            if text in (kind.value, kind.object_type.lower()):
                return kind
        raise InvalidArgumentError(f"Unknown object kind: {value!r}")

    @classmethod
    def from_object_type(cls, object_type: str) -> Optional[ObjectKind]:
        """Map a catalog object type (PROCEDURE, TRIGGER, ...) to its kind."""
        object_type = (object_type or "").strip().upper()
        for kind in cls:
            if kind.object_type == object_type:
                return kind
        return None

    @property
    def object_type(self) -> str:
        """Catalog object type, as used by DBMS_METADATA and *_DEPENDENCIES."""
        return _OBJECT_TYPES[self]

    @property
    def name_field(self) -> str:
        """Name of the field carrying the object name in a snapshot record."""
        return _NAME_FIELDS[self]

    @property
    def snapshot_filename(self) -> str:
        return f"{self.value}_metadata.json"

    @property
    def matches_by_substring(self) -> bool:
        """Whether name filters for this kind use "contains" semantics."""
        return self in (ObjectKind.TABLES, ObjectKind.TRIGGERS, ObjectKind.VIEWS)


_OBJECT_TYPES = {
    ObjectKind.PROCEDURES: "PROCEDURE",
    ObjectKind.FUNCTIONS: "FUNCTION",
    ObjectKind.TABLES: "TABLE",
    ObjectKind.TRIGGERS: "TRIGGER",
    ObjectKind.VIEWS: "VIEW",
}

_NAME_FIELDS = {
    ObjectKind.PROCEDURES: "Name",
    ObjectKind.FUNCTIONS: "Name",
    ObjectKind.TABLES: "TableName",
    ObjectKind.TRIGGERS: "TriggerName",
    ObjectKind.VIEWS: "ViewName",
}

# Fixed order used when every snapshot is refreshed
ALL_KINDS: List[ObjectKind] = [
    ObjectKind.PROCEDURES,
    ObjectKind.FUNCTIONS,
    ObjectKind.TABLES,
    ObjectKind.TRIGGERS,
    ObjectKind.VIEWS,
]

# Dependent types the fan-out expands, in aggregation order
EXPANDABLE_TYPES = ("PROCEDURE", "FUNCTION", "TRIGGER")


@dataclass
class SchemaObjectMetadata:
    """
    One catalog object of a cached kind.

    The snapshot form uses kind-specific field names, e.g.
    ``{"TableName": "EMPLOYEES", "Definition": "CREATE TABLE ..."}``.
    Kind-specific extras (trigger event, owning table, ...) live in
    ``attributes`` under their snapshot field names.
    """
    name: str
    kind: ObjectKind
    definition: str = ""
    attributes: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the snapshot record shape."""
        data: Dict[str, Any] = {self.kind.name_field: self.name}
        for key, value in self.attributes.items():
            data[key] = value
        data["Definition"] = self.definition
        return data

    @classmethod
    def from_dict(cls, data: Any, kind: ObjectKind) -> SchemaObjectMetadata:
        """Create from a snapshot record, rejecting records of the wrong shape."""
        if not isinstance(data, dict):
            raise SnapshotFormatError(f"Expected an object, got {type(data).__name__}")

        name = data.get(kind.name_field)
        if not isinstance(name, str):
            raise SnapshotFormatError(f"Record has no '{kind.name_field}' field")

        definition = data.get("Definition") or ""
        if not isinstance(definition, str):
            raise SnapshotFormatError(f"Definition of {name} is not text")

        attributes = {
            key: value for key, value in data.items()
            if key not in (kind.name_field, "Definition")
        }
        return cls(name=name, kind=kind, definition=definition, attributes=attributes)


@dataclass(frozen=True)
class RelationshipEdge:
    """A dependent object that references a target object."""
    dependent_name: str
    dependent_type: str
    referenced_name: str
    referenced_type: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "dependent_name": self.dependent_name,
            "dependent_type": self.dependent_type,
            "referenced_name": self.referenced_name,
            "referenced_type": self.referenced_type,
        }


@dataclass
class DependencyAnalysis:
    """Dependents of one object, with the expanded subset of their definitions."""
    object_name: str
    object_type: str
    edges: List[RelationshipEdge] = field(default_factory=list)
    expanded: List[SchemaObjectMetadata] = field(default_factory=list)

    @property
    def unexpanded(self) -> List[RelationshipEdge]:
        """Edges whose dependent type is never expanded into a definition."""
        return [
            edge for edge in self.edges
            if edge.dependent_type.upper() not in EXPANDABLE_TYPES
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "object_name": self.object_name,
            "object_type": self.object_type,
            "dependents": [e.to_dict() for e in self.edges],
            "expanded": [o.to_dict() for o in self.expanded],
            "unexpanded": [e.to_dict() for e in self.unexpanded],
        }


@dataclass
class ColumnMetadata:
    """Metadata for a single table column."""
    name: str
    data_type: str
    nullable: bool = True
    default_value: Optional[str] = None
    data_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "data_type": self.data_type,
            "nullable": self.nullable,
            "default_value": self.default_value,
            "data_length": self.data_length,
            "precision": self.precision,
            "scale": self.scale,
        }


@dataclass
class KeyMetadata:
    """One column of a primary or foreign key."""
    column_name: str
    constraint_name: str
    key_type: str  # "Primary" or "Foreign"
    referenced_constraint_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column_name": self.column_name,
            "constraint_name": self.constraint_name,
            "key_type": self.key_type,
            "referenced_constraint_name": self.referenced_constraint_name,
        }


@dataclass
class ConstraintMetadata:
    """A unique or check constraint."""
    name: str
    constraint_type: str  # "Unique" or "Check"
    column_name: Optional[str] = None
    search_condition: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "constraint_type": self.constraint_type,
            "column_name": self.column_name,
            "search_condition": self.search_condition,
        }


@dataclass
class IndexMetadata:
    """An index on a table and its ordered columns."""
    name: str
    is_unique: bool = False
    columns: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "is_unique": self.is_unique,
            "columns": self.columns,
        }


@dataclass
class SynonymMetadata:
    name: str
    table_owner: Optional[str] = None
    base_object_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "table_owner": self.table_owner,
            "base_object_name": self.base_object_name,
        }


@dataclass
class ParameterMetadata:
    """An argument of a standalone procedure or function."""
    name: Optional[str]  # None for a function's return value
    data_type: Optional[str]
    direction: str = "IN"
    position: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "data_type": self.data_type,
            "direction": self.direction,
            "position": self.position,
        }
