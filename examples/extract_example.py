"""Programmatic extraction example.

This example extracts two schemas with each catalog backend and writes
them as SQL files, without going through a project file.

Prerequisites:
- PostgreSQL running locally with schemas `public` and `app`
- psql on PATH for the psql backend
"""

from pgsac import ConnectionConfig, Exporter, SchemaExtractor
from pgsac.catalog import PsqlCatalogSource, SQLCatalogSource
from pgsac.utils import configure_logging


CONNECTION = ConnectionConfig(
    host="localhost",
    port=5432,
    database="postgres",
    user="postgres",
    password="postgres",
)


def example_sql_backend():
    """Example 1: Direct catalog queries."""
    print("\n" + "=" * 60)
    print("Example 1: SQL backend")
    print("=" * 60)

    with SQLCatalogSource(CONNECTION) as source:
        schemas = SchemaExtractor(source).extract_schemas(["public", "app"])

    for schema in schemas:
        print(f"  {schema.name}: {schema.object_count} objects")
        for object_type, objects in schema.group_by_type().items():
            print(f"    {object_type.value}: {', '.join(obj.name for obj in objects)}")

    result = Exporter("./schemas-sql").export(schemas)
    print(f"  ✓ Wrote {result.file_count} files to {result.output_dir}")


def example_psql_backend():
    """Example 2: psql client with verbose listings."""
    print("\n" + "=" * 60)
    print("Example 2: psql backend")
    print("=" * 60)

    with PsqlCatalogSource(CONNECTION, {"extended": True}) as source:
        schemas = SchemaExtractor(source).extract_schemas(["public", "app"])

    result = Exporter("./schemas-psql").export(schemas)
    print(f"  ✓ Wrote {result.file_count} files to {result.output_dir}")


if __name__ == "__main__":
    configure_logging(level="INFO")
    example_sql_backend()
    example_psql_backend()
