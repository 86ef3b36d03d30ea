"""Tests for the SQLAlchemy catalog backend.

Catalog queries are answered by replacing `_fetch_rows`, so no server
is needed.
"""

import pytest
from sqlalchemy.exc import OperationalError

from pgsac.catalog import queries
from pgsac.catalog import sql as sql_module
from pgsac.catalog.sql import SQLCatalogSource
from pgsac.exceptions import CatalogError, ConnectionError
from pgsac.models.objects import CatalogCategory, CatalogEntry
from pgsac.models.project import ConnectionConfig

VIEW_COLUMNS = queries.view_query(CatalogCategory.VIEW).columns


class RowFeeder:
    """Replacement for `_fetch_rows` that answers by query."""

    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    def __call__(self, query, params):
        self.calls.append((query, params))
        return self.answers.get(query.columns, [])


@pytest.fixture
def source():
    source = SQLCatalogSource(ConnectionConfig(database="appdb", user="reader", password="p@ss:w/rd"))
    source.connection = object()
    return source


class TestBuildUrl:
    """Test URL construction."""

    def test_credentials_escaped(self, source):
        url = source._build_url()

        assert url.drivername == "postgresql+psycopg2"
        assert url.password == "p@ss:w/rd"
        assert url.host == "localhost"
        assert url.port == 5432
        assert url.database == "appdb"


class TestConnect:
    """Test connection handling."""

    def test_connect_failure_wrapped(self, monkeypatch):
        def failing_engine(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr(sql_module, "create_engine", failing_engine)
        source = SQLCatalogSource(ConnectionConfig(database="appdb", user="reader"))

        with pytest.raises(ConnectionError, match="localhost:5432/appdb"):
            source.connect()
        assert not source.is_connected

    def test_not_connected(self):
        source = SQLCatalogSource(ConnectionConfig(database="appdb", user="reader"))

        assert not source.test_connection()
        with pytest.raises(CatalogError, match="Not connected"):
            source.list_objects("app", CatalogCategory.TABLE)


class TestListing:
    """Test listing through catalog queries."""

    def test_relation_listing(self, source):
        feeder = RowFeeder({
            ("schema_name", "object_name"): [
                {"schema_name": "app", "object_name": "users"},
                {"schema_name": "app", "object_name": "orders"},
            ],
        })
        source._fetch_rows = feeder

        entries = source.list_objects("app", CatalogCategory.TABLE)

        assert [e.name for e in entries] == ["users", "orders"]
        query, params = feeder.calls[0]
        assert params == {"schema": "app"}
        assert "('r', 'p')" in query.sql

    def test_routine_listing(self, source):
        feeder = RowFeeder({
            ("schema_name", "object_name", "signature", "arg_types"): [
                {"schema_name": "app", "object_name": "my_agg", "signature": "numeric", "arg_types": "1700"},
                {"schema_name": "app", "object_name": "count_all", "signature": None, "arg_types": None},
            ],
        })
        source._fetch_rows = feeder

        entries = source.list_objects("app", CatalogCategory.AGGREGATE)

        assert [(e.name, e.signature, e.arg_types) for e in entries] == [
            ("my_agg", "numeric", "1700"),
            ("count_all", "", ""),
        ]
        assert "('a')" in feeder.calls[0][0].sql


class TestDefinitions:
    """Test definition reconstruction."""

    def test_function_selected_by_arg_types(self, source):
        feeder = RowFeeder({
            ("function_def",): [{"function_def": "CREATE OR REPLACE FUNCTION app.add(a integer, b integer)\n"}],
        })
        source._fetch_rows = feeder
        entry = CatalogEntry("app", "add", CatalogCategory.FUNCTION, "integer, integer", "23 23")

        ddl = source.fetch_definition(entry)

        assert ddl.startswith("CREATE OR REPLACE FUNCTION app.add")
        query, params = feeder.calls[0]
        assert query is queries.FUNCTION_DEFINITION
        assert params == {"schema": "app", "name": "add", "arg_types": "23 23"}

    def test_view(self, source):
        source._fetch_rows = RowFeeder({
            VIEW_COLUMNS: [{"view_def": " SELECT 1;", "options": "security_barrier=true", "check_option": "CASCADED"}],
        })

        ddl = source.fetch_definition(CatalogEntry("app", "v", CatalogCategory.VIEW))

        assert ddl == (
            "CREATE OR REPLACE VIEW app.v WITH (security_barrier=true) AS\n"
            "SELECT 1\n"
            "  WITH CASCADED CHECK OPTION"
        )

    def test_aggregate_uses_aggregate_query(self, source):
        row = {
            "arguments": "numeric",
            "kind": "n",
            "sfunc": "numeric_add",
            "stype": "numeric",
            "sspace": 0,
            "finalfunc": None,
            "finalfunc_extra": False,
            "combinefunc": None,
            "serialfunc": None,
            "deserialfunc": None,
            "initcond": None,
            "sortop": None,
            "parallel": "u",
        }
        feeder = RowFeeder({queries.AGGREGATE_DEFINITION.columns: [row]})
        source._fetch_rows = feeder
        entry = CatalogEntry("app", "my_agg", CatalogCategory.AGGREGATE, "numeric", "1700")

        ddl = source.fetch_definition(entry)

        assert ddl == (
            "CREATE AGGREGATE app.my_agg(numeric) (\n"
            "    SFUNC = numeric_add,\n"
            "    STYPE = numeric\n"
            ")"
        )
        assert [call[0] for call in feeder.calls] == [queries.AGGREGATE_DEFINITION]

    def test_missing_object(self, source):
        source._fetch_rows = RowFeeder({})

        with pytest.raises(CatalogError, match="app.gone not found in catalog"):
            source.fetch_definition(CatalogEntry("app", "gone", CatalogCategory.TABLE))

    def test_ambiguous_object(self, source):
        source._fetch_rows = RowFeeder({VIEW_COLUMNS: [{"view_def": "SELECT 1"}, {"view_def": "SELECT 2"}]})

        with pytest.raises(CatalogError, match="matched 2 catalog rows"):
            source.fetch_definition(CatalogEntry("app", "v", CatalogCategory.VIEW))
