"""Tests for object and project models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from pgsac.core import config as config_module
from pgsac.models.objects import (
    EXTRACTION_ORDER,
    CatalogCategory,
    CatalogEntry,
    Object,
    ObjectType,
    Schema,
)
from pgsac.models.project import ConnectionConfig, Project


class TestObjectModel:
    """Test catalog object model."""

    def test_empty_definition_rejected(self):
        with pytest.raises(ValueError, match="empty definition"):
            Object("app", "users", ObjectType.TABLE, "  ")

    def test_objects_are_immutable(self):
        obj = Object("app", "users", ObjectType.TABLE, "CREATE TABLE app.users ()")

        with pytest.raises(AttributeError):
            obj.name = "accounts"

    def test_qualified_names(self):
        routine = CatalogEntry("app", "add", CatalogCategory.FUNCTION, "integer, integer", "23 23")
        relation = CatalogEntry("app", "users", CatalogCategory.TABLE)

        assert routine.qualified_name == "app.add(integer, integer)"
        assert relation.qualified_name == "app.users"

    def test_category_mapping(self):
        assert CatalogCategory.AGGREGATE.object_type is ObjectType.FUNCTION
        assert CatalogCategory.MATERIALIZED_VIEW.label == "materialized views"
        assert EXTRACTION_ORDER[0] is CatalogCategory.TABLE
        assert [c for c in EXTRACTION_ORDER if c.is_routine] == [
            CatalogCategory.FUNCTION,
            CatalogCategory.AGGREGATE,
        ]

    def test_group_by_type(self):
        schema = Schema(
            name="app",
            objects=(
                Object("app", "users", ObjectType.TABLE, "CREATE TABLE app.users ()"),
                Object("app", "v", ObjectType.VIEW, "CREATE VIEW app.v AS SELECT 1"),
                Object("app", "orders", ObjectType.TABLE, "CREATE TABLE app.orders ()"),
            ),
        )

        groups = schema.group_by_type()

        assert list(groups) == [ObjectType.TABLE, ObjectType.VIEW]
        assert [obj.name for obj in groups[ObjectType.TABLE]] == ["users", "orders"]


class TestProjectModel:
    """Test project configuration models."""

    def test_defaults(self):
        project = Project(connection=ConnectionConfig(database="appdb", user="reader"))

        assert project.version == 1
        assert project.schemas == ["public"]
        assert project.disambiguate_overloads is True
        assert project.connection.port == 5432
        assert project.connection.sslmode == "disable"

    def test_defaults_follow_environment(self, monkeypatch):
        monkeypatch.setenv("PGSAC_BACKEND", "psql")
        monkeypatch.setenv("PGSAC_OUTPUT_DIR", "/srv/schemas")
        monkeypatch.setenv("PGSAC_PSQL_PATH", "/opt/pg/bin/psql")
        monkeypatch.setattr(config_module, "config", config_module.load_config())

        project = Project(connection=ConnectionConfig(database="appdb", user="reader"))

        assert project.backend == "psql"
        assert project.output == "/srv/schemas"
        assert project.psql.path == "/opt/pg/bin/psql"

    def test_empty_password_is_none(self):
        assert ConnectionConfig(database="appdb", user="reader", password="").password is None

    def test_password_hidden_from_repr(self):
        assert "s3cret" not in repr(ConnectionConfig(database="appdb", user="reader", password="s3cret"))

    def test_invalid_sslmode(self):
        with pytest.raises(PydanticValidationError, match="Invalid sslmode"):
            ConnectionConfig(database="appdb", user="reader", sslmode="always")

    def test_blank_schema_rejected(self):
        with pytest.raises(PydanticValidationError, match="Schema names must not be empty"):
            Project(connection=ConnectionConfig(database="appdb", user="reader"), schemas=["app", " "])

    def test_unsupported_version(self):
        with pytest.raises(PydanticValidationError, match="Unsupported project version"):
            Project(version=2, connection=ConnectionConfig(database="appdb", user="reader"))
