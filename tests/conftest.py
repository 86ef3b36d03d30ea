"""Shared fixtures: an in-memory catalog source standing in for PostgreSQL."""

from typing import Optional

import pytest

from pgsac.core.catalog import CatalogSource
from pgsac.exceptions import CatalogError
from pgsac.models.objects import CatalogCategory, CatalogEntry
from pgsac.models.project import ConnectionConfig, Project


class FakeCatalogSource(CatalogSource):
    """Catalog source serving canned listings and definitions.

    Listings are keyed by (schema, category) and returned in the order
    given, which lets tests feed deliberately unsorted catalogs.
    """

    name = "fake"

    def __init__(
        self,
        listings: Optional[dict] = None,
        definitions: Optional[dict] = None,
        fail_definitions: Optional[set] = None,
        fail_listings: Optional[set] = None,
    ):
        super().__init__(ConnectionConfig(database="testdb", user="tester"))
        self.listings = listings or {}
        self.definitions = definitions or {}
        self.fail_definitions = fail_definitions or set()
        self.fail_listings = fail_listings or set()
        self.fetched: list[CatalogEntry] = []
        self.disconnected = False

    def connect(self) -> None:
        self.connection = "fake"

    def disconnect(self) -> None:
        self.connection = None
        self.disconnected = True

    def test_connection(self) -> bool:
        return self.is_connected

    def list_objects(self, schema: str, category: CatalogCategory) -> list[CatalogEntry]:
        if category in self.fail_listings:
            raise CatalogError("permission denied for pg_class")
        return list(self.listings.get((schema, category), []))

    def fetch_definition(self, entry: CatalogEntry) -> str:
        self.fetched.append(entry)
        if entry.qualified_name in self.fail_definitions:
            raise CatalogError("relation does not exist")
        if entry.qualified_name in self.definitions:
            return self.definitions[entry.qualified_name]
        return f"-- {entry.category.value} {entry.qualified_name}\nSELECT 1"


def entry(schema, name, category, signature=None, arg_types=None) -> CatalogEntry:
    """Shorthand for building catalog entries."""
    return CatalogEntry(
        schema=schema,
        name=name,
        category=category,
        signature=signature,
        arg_types=arg_types,
    )


@pytest.fixture
def app_source():
    """Schema `app` with table `users` and view `active_users`."""
    source = FakeCatalogSource(
        listings={
            ("app", CatalogCategory.TABLE): [entry("app", "users", CatalogCategory.TABLE)],
            ("app", CatalogCategory.VIEW): [entry("app", "active_users", CatalogCategory.VIEW)],
        },
        definitions={
            "app.users": "CREATE TABLE app.users (\n    id integer NOT NULL\n)",
            "app.active_users": (
                "CREATE OR REPLACE VIEW app.active_users AS\n SELECT users.id\n   FROM app.users;"
            ),
        },
    )
    source.connect()
    yield source
    source.disconnect()


@pytest.fixture
def project(tmp_path):
    """Minimal project writing into a temporary directory."""
    return Project(
        backend="sql",
        connection=ConnectionConfig(database="testdb", user="tester"),
        schemas=["app"],
        output=str(tmp_path / "schemas"),
    )
