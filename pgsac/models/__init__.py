"""PGSAC models package.

This package contains the immutable catalog object model produced by
extraction, plus the Pydantic models for project configuration and
run results.
"""

from pgsac.models.objects import (
    EXTRACTION_ORDER,
    SYSTEM_NAMESPACES,
    CatalogCategory,
    CatalogEntry,
    Object,
    ObjectType,
    Schema,
)
from pgsac.models.project import ConnectionConfig, Project, PsqlOptions
from pgsac.models.results import ExportResult, RunResult

__all__ = [
    # Catalog object models
    "ObjectType",
    "CatalogCategory",
    "CatalogEntry",
    "Object",
    "Schema",
    "EXTRACTION_ORDER",
    "SYSTEM_NAMESPACES",
    # Project models
    "ConnectionConfig",
    "PsqlOptions",
    "Project",
    # Result models
    "ExportResult",
    "RunResult",
]
