"""PGSAC catalog backends.

This package contains the concrete catalog sources: direct queries over
a SQLAlchemy engine and invocation of the external psql client. Both
share the catalog queries and DDL assembly in this package.
"""

from pgsac.catalog.base import QueryCatalogSource
from pgsac.catalog.listing import (
    RELATION_BASIC,
    RELATION_EXTENDED,
    ROUTINE,
    ListingFormat,
    ParsedListing,
    parse_listing,
)
from pgsac.catalog.psql import PsqlCatalogSource
from pgsac.catalog.sql import SQLCatalogSource

__all__ = [
    # Catalog sources
    "QueryCatalogSource",
    "SQLCatalogSource",
    "PsqlCatalogSource",
    # psql listing parsing
    "ListingFormat",
    "ParsedListing",
    "RELATION_BASIC",
    "RELATION_EXTENDED",
    "ROUTINE",
    "parse_listing",
]
