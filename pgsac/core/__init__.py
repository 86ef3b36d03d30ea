"""PGSAC core package.

This package contains the catalog source interface and the extraction,
export and run orchestration built on top of it.
"""

from pgsac.core.catalog import CatalogSource
from pgsac.core.exporter import Exporter
from pgsac.core.extractor import SchemaExtractor
from pgsac.core.runner import ExtractRunner

__all__ = [
    "CatalogSource",
    "SchemaExtractor",
    "Exporter",
    "ExtractRunner",
]
