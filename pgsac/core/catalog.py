"""Base CatalogSource abstract class.

This module defines the CatalogSource interface through which the
extractor reads the database catalog. The extractor depends only on
listing and definition retrieval; how a backend obtains them (typed
queries, an external client, ...) stays behind this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from pgsac.models.objects import CatalogCategory, CatalogEntry
from pgsac.models.project import ConnectionConfig


class CatalogSource(ABC):
    """Base class for catalog backends.

    Examples:
        Using a catalog source as a context manager:
        >>> with SQLCatalogSource(connection) as source:
        ...     entries = source.list_objects("public", CatalogCategory.TABLE)
        ...     ddl = source.fetch_definition(entries[0])
    """

    #: Short backend name used in logs and run results
    name: str = "catalog"

    def __init__(self, connection: ConnectionConfig, options: Optional[dict[str, Any]] = None):
        """Initialize catalog source.

        Args:
            connection: Database connection parameters
            options: Optional backend-specific options
        """
        self.connection_config = connection
        self.options = options or {}
        self.connection: Optional[Any] = None

    @abstractmethod
    def connect(self) -> None:
        """Establish access to the catalog.

        Raises:
            ConnectionError: If the database cannot be reached or authenticated
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release catalog access.

        Safe to call when already disconnected.
        """
        pass

    @abstractmethod
    def test_connection(self) -> bool:
        """Test connectivity to the catalog.

        Returns:
            True if connection is successful, False otherwise
        """
        pass

    @abstractmethod
    def list_objects(self, schema: str, category: CatalogCategory) -> list[CatalogEntry]:
        """Enumerate the objects of one category in a schema.

        Rows are returned as the catalog reports them, including their
        owning namespace; filtering of system namespaces is the caller's
        job. Routine entries carry their signature and arg-type vector.

        Args:
            schema: Schema name (exact, case-sensitive)
            category: Object category to list

        Returns:
            Entries ordered by name

        Raises:
            CatalogError: If the listing query or command fails
        """
        pass

    @abstractmethod
    def fetch_definition(self, entry: CatalogEntry) -> str:
        """Reconstruct the complete DDL of a single object.

        For routines the entry's arg-type vector selects the overload.

        Args:
            entry: Listing entry identifying the object

        Returns:
            DDL text able to recreate the object

        Raises:
            CatalogError: If the definition cannot be retrieved
        """
        pass

    def __enter__(self) -> CatalogSource:
        """Context manager entry: establish connection.

        Returns:
            Self
        """
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit: close connection."""
        self.disconnect()

    @property
    def is_connected(self) -> bool:
        """Check if connection is established.

        Returns:
            True if connected, False otherwise
        """
        return self.connection is not None
