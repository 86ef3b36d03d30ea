"""Direct-query catalog source using SQLAlchemy.

This module reads the PostgreSQL catalog over an established database
connection, with typed results and bound parameters.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from pgsac.catalog.base import QueryCatalogSource
from pgsac.catalog.queries import Query
from pgsac.core.config import config
from pgsac.exceptions import CatalogError, ConnectionError
from pgsac.models.project import ConnectionConfig

logger = logging.getLogger(__name__)


class SQLCatalogSource(QueryCatalogSource):
    """Catalog source backed by a SQLAlchemy engine (psycopg2 driver).

    Options:
        - echo: Enable SQLAlchemy SQL logging (default: False)

    Examples:
        >>> connection = ConnectionConfig(database="mydb", user="postgres", password="secret")
        >>> with SQLCatalogSource(connection) as source:
        ...     tables = source.list_objects("public", CatalogCategory.TABLE)
    """

    name = "sql"

    def __init__(self, connection: ConnectionConfig, options: Optional[dict[str, Any]] = None):
        super().__init__(connection, options)
        self.engine: Optional[Engine] = None

    def _build_url(self) -> URL:
        """Build the SQLAlchemy URL from the connection config.

        URL.create escapes credentials, so passwords may contain any character.
        """
        cfg = self.connection_config
        return URL.create(
            "postgresql+psycopg2",
            username=cfg.user,
            password=cfg.password,
            host=cfg.host,
            port=cfg.port,
            database=cfg.database,
        )

    def connect(self) -> None:
        """Create the engine and verify the connection.

        Raises:
            ConnectionError: If connection fails
        """
        cfg = self.connection_config
        try:
            self.engine = create_engine(
                self._build_url(),
                pool_pre_ping=True,
                echo=self.options.get("echo", False),
                connect_args={
                    "sslmode": cfg.sslmode,
                    "connect_timeout": config.connection_timeout,
                },
            )
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            self.connection = self.engine
        except SQLAlchemyError as e:
            self.disconnect()
            raise ConnectionError(
                f"Failed to connect to PostgreSQL at {cfg.host}:{cfg.port}/{cfg.database}: {e}"
            ) from e
        logger.info(f"Connected to {cfg.host}:{cfg.port}/{cfg.database}")

    def disconnect(self) -> None:
        """Dispose the engine. Safe to call even if already disconnected."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self.connection = None

    def test_connection(self) -> bool:
        """Test connectivity by running SELECT 1.

        Returns:
            True if connection is successful, False otherwise
        """
        if not self.is_connected:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def _fetch_rows(self, query: Query, params: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(query.sql), params)
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            raise CatalogError(f"catalog query failed: {e}") from e
