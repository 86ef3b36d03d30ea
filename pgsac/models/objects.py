"""Catalog object models.

This module defines the in-memory model produced by extraction and
consumed by export. Every instance is immutable: extraction builds the
model once and hands it to the exporter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ObjectType(str, Enum):
    """Exported object types.

    Declaration order is the order in which objects appear in a Schema.
    """

    TABLE = "table"
    VIEW = "view"
    MATERIALIZED_VIEW = "materialized_view"
    FUNCTION = "function"

    @property
    def rank(self) -> int:
        """Position of this type in the schema ordering."""
        return list(ObjectType).index(self)


class CatalogCategory(str, Enum):
    """What a single listing call enumerates.

    Regular functions and aggregates are listed separately because their
    definitions are reconstructed through different catalog paths. Both
    are exported as ObjectType.FUNCTION.
    """

    TABLE = "table"
    VIEW = "view"
    MATERIALIZED_VIEW = "materialized_view"
    FUNCTION = "function"
    AGGREGATE = "aggregate"

    @property
    def object_type(self) -> ObjectType:
        if self is CatalogCategory.AGGREGATE:
            return ObjectType.FUNCTION
        return ObjectType(self.value)

    @property
    def label(self) -> str:
        """Human-readable plural used in log and error messages."""
        return self.value.replace("_", " ") + "s"

    @property
    def is_routine(self) -> bool:
        return self in (CatalogCategory.FUNCTION, CatalogCategory.AGGREGATE)


# Extraction order within a schema
EXTRACTION_ORDER = (
    CatalogCategory.TABLE,
    CatalogCategory.VIEW,
    CatalogCategory.MATERIALIZED_VIEW,
    CatalogCategory.FUNCTION,
    CatalogCategory.AGGREGATE,
)

# Namespaces holding engine-internal objects; never extracted
SYSTEM_NAMESPACES = frozenset({"pg_catalog", "information_schema", "pg_toast"})


@dataclass(frozen=True)
class CatalogEntry:
    """One row of a listing call.

    Attributes:
        schema: Owning namespace as reported by the catalog
        name: Unqualified object name
        category: Listing category the row came from
        signature: Argument type list for routines (e.g. "integer, text")
        arg_types: Parameter type OIDs as an oidvector literal (e.g. "23 25")
    """

    schema: str
    name: str
    category: CatalogCategory
    signature: Optional[str] = None
    arg_types: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        """Schema-qualified name, with the signature for routines.

        Examples:
            >>> CatalogEntry("app", "users", CatalogCategory.TABLE).qualified_name
            'app.users'
            >>> CatalogEntry("app", "add", CatalogCategory.FUNCTION, "integer, integer").qualified_name
            'app.add(integer, integer)'
        """
        if self.category.is_routine:
            return f"{self.schema}.{self.name}({self.signature or ''})"
        return f"{self.schema}.{self.name}"

    @property
    def sort_key(self) -> tuple[str, str]:
        return self.name, self.signature or ""


@dataclass(frozen=True)
class Object:
    """A single database object and its DDL.

    `depends` is reserved for dependency-ordered export and is never
    populated by extraction.
    """

    schema: str
    name: str
    type: ObjectType
    definition: str
    signature: Optional[str] = None
    depends: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.definition or not self.definition.strip():
            raise ValueError(f"Object {self.schema}.{self.name} has an empty definition")

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}"

    @property
    def sort_key(self) -> tuple[int, str, str]:
        return self.type.rank, self.name, self.signature or ""


@dataclass(frozen=True)
class Schema:
    """A schema and its objects, ordered by type then name."""

    name: str
    objects: tuple[Object, ...] = field(default_factory=tuple)

    def objects_of_type(self, object_type: ObjectType) -> list[Object]:
        return [obj for obj in self.objects if obj.type == object_type]

    def group_by_type(self) -> dict[ObjectType, list[Object]]:
        """Bucket objects by type, keeping their relative order."""
        groups: dict[ObjectType, list[Object]] = {}
        for obj in self.objects:
            groups.setdefault(obj.type, []).append(obj)
        return groups

    @property
    def object_count(self) -> int:
        return len(self.objects)
