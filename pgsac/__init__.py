"""PGSAC - PostgreSQL schema as code."""

__version__ = "0.1.0"

# Re-export key models for convenience
from pgsac.models import (
    CatalogCategory,
    CatalogEntry,
    ConnectionConfig,
    ExportResult,
    Object,
    ObjectType,
    Project,
    PsqlOptions,
    RunResult,
    Schema,
)

# Re-export core classes for custom backends
from pgsac.core import CatalogSource, Exporter, ExtractRunner, SchemaExtractor

# Re-export catalog backends
from pgsac.catalog import PsqlCatalogSource, SQLCatalogSource

__all__ = [
    # Version
    "__version__",
    # Models
    "ObjectType",
    "CatalogCategory",
    "CatalogEntry",
    "Object",
    "Schema",
    "ConnectionConfig",
    "PsqlOptions",
    "Project",
    "ExportResult",
    "RunResult",
    # Core
    "CatalogSource",
    "SchemaExtractor",
    "Exporter",
    "ExtractRunner",
    # Backends
    "SQLCatalogSource",
    "PsqlCatalogSource",
]
