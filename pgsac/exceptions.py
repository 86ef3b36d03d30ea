"""PGSAC exception hierarchy."""

from __future__ import annotations


class PGSACError(Exception):
    """Base exception for all PGSAC errors."""

    pass


class ConfigurationError(PGSACError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(PGSACError):
    """Raised when a project file fails validation."""

    pass


class ConnectionError(PGSACError):
    """Raised when the catalog source cannot be reached or authenticated."""

    pass


class CatalogError(PGSACError):
    """Raised when a catalog query or client invocation fails."""

    pass


class ListingError(PGSACError):
    """Raised when enumerating the objects of a category fails."""

    pass


class DefinitionError(PGSACError):
    """Raised when reconstructing the DDL of a single object fails."""

    pass


class ExtractionError(PGSACError):
    """Raised when extraction of a schema is aborted."""

    pass


class ExportError(PGSACError):
    """Raised when writing the exported file tree fails."""

    pass
