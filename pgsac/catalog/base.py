"""Query-driven catalog source base class.

This module provides listing and definition retrieval on top of a single
primitive, `_fetch_rows`, which runs one catalog query and returns its
rows as mappings. Backends differ only in how that query reaches the
server and may override individual steps where their client offers a
better path.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Optional

from pgsac.catalog import ddl, queries
from pgsac.catalog.queries import Query
from pgsac.core.catalog import CatalogSource
from pgsac.exceptions import CatalogError
from pgsac.models.objects import CatalogCategory, CatalogEntry


class QueryCatalogSource(CatalogSource):
    """Base class for catalog sources that can run catalog queries.

    Subclasses must implement:
    - connect() / disconnect() / test_connection()
    - _fetch_rows(): run a Query with bind parameters

    Examples:
        Subclass implementation:
        >>> class MyCatalogSource(QueryCatalogSource):
        ...     def _fetch_rows(self, query, params):
        ...         return [dict(zip(query.columns, row)) for row in run(query.sql, params)]
    """

    @abstractmethod
    def _fetch_rows(self, query: Query, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Run a catalog query.

        Args:
            query: Query to run
            params: Values for the query's bind parameters

        Returns:
            Rows keyed by `query.columns`

        Raises:
            CatalogError: If the query fails
        """
        pass

    def list_objects(self, schema: str, category: CatalogCategory) -> list[CatalogEntry]:
        """List objects of a category via the catalog listing queries."""
        self._require_connection()
        if category.is_routine:
            rows = self._fetch_rows(queries.routine_listing(category), {"schema": schema})
            return [
                CatalogEntry(
                    schema=row["schema_name"],
                    name=row["object_name"],
                    category=category,
                    signature=row["signature"] or "",
                    arg_types=row["arg_types"] or "",
                )
                for row in rows
            ]

        rows = self._fetch_rows(queries.relation_listing(category), {"schema": schema})
        return [
            CatalogEntry(schema=row["schema_name"], name=row["object_name"], category=category)
            for row in rows
        ]

    def fetch_definition(self, entry: CatalogEntry) -> str:
        """Reconstruct DDL for a listed object."""
        self._require_connection()
        if entry.category is CatalogCategory.TABLE:
            return self._table_definition(entry)
        if entry.category is CatalogCategory.VIEW:
            return self._view_definition(entry)
        if entry.category is CatalogCategory.MATERIALIZED_VIEW:
            return self._materialized_view_definition(entry)
        if entry.category is CatalogCategory.FUNCTION:
            return self._function_definition(entry)
        return self._aggregate_definition(entry)

    def _table_definition(self, entry: CatalogEntry) -> str:
        params = self._params(entry)
        info = self._fetch_one(queries.TABLE_INFO, params, entry)
        columns = self._fetch_rows(queries.TABLE_COLUMNS, params)
        constraints = self._fetch_rows(queries.TABLE_CONSTRAINTS, params)
        indexes = self._fetch_rows(queries.RELATION_INDEXES, params)
        return ddl.build_table(entry.schema, entry.name, info, columns, constraints, indexes)

    def _view_definition(self, entry: CatalogEntry) -> str:
        row = self._fetch_one(queries.view_query(entry.category), self._params(entry), entry)
        return ddl.build_view(
            entry.schema, entry.name, row["view_def"], row.get("options"), row.get("check_option")
        )

    def _materialized_view_definition(self, entry: CatalogEntry) -> str:
        params = self._params(entry)
        row = self._fetch_one(queries.view_query(entry.category), params, entry)
        indexes = self._fetch_rows(queries.RELATION_INDEXES, params)
        return ddl.build_materialized_view(
            entry.schema, entry.name, row["view_def"], indexes, row.get("options")
        )

    def _function_definition(self, entry: CatalogEntry) -> str:
        row = self._fetch_one(queries.FUNCTION_DEFINITION, self._params(entry), entry)
        return row["function_def"]

    def _aggregate_definition(self, entry: CatalogEntry) -> str:
        row = self._fetch_one(queries.AGGREGATE_DEFINITION, self._params(entry), entry)
        return ddl.build_aggregate(entry.schema, entry.name, row)

    def _fetch_one(self, query: Query, params: dict[str, Any], entry: CatalogEntry) -> dict[str, Any]:
        rows = self._fetch_rows(query, params)
        if not rows:
            raise CatalogError(f"{entry.qualified_name} not found in catalog")
        if len(rows) > 1:
            raise CatalogError(f"{entry.qualified_name} matched {len(rows)} catalog rows")
        return rows[0]

    @staticmethod
    def _params(entry: CatalogEntry) -> dict[str, Optional[str]]:
        params = {"schema": entry.schema, "name": entry.name}
        if entry.category.is_routine:
            params["arg_types"] = entry.arg_types or ""
        return params

    def _require_connection(self) -> None:
        if not self.is_connected:
            raise CatalogError("Not connected to database")
