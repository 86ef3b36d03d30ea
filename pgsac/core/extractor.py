"""Schema extractor.

This module turns a catalog source into the ordered, immutable object
model consumed by the exporter.
"""

from __future__ import annotations

import logging

from pgsac.core.catalog import CatalogSource
from pgsac.exceptions import CatalogError, DefinitionError, ExtractionError, ListingError
from pgsac.models.objects import (
    EXTRACTION_ORDER,
    SYSTEM_NAMESPACES,
    CatalogCategory,
    CatalogEntry,
    Object,
    Schema,
)

logger = logging.getLogger(__name__)


class SchemaExtractor:
    """Extract tables, views, materialized views and functions per schema.

    Schemas are processed one at a time, categories within a schema one at
    a time and definitions one object at a time. Any failure aborts the
    whole call; no partial result is returned.

    Examples:
        >>> with SQLCatalogSource(connection) as source:
        ...     schemas = SchemaExtractor(source).extract_schemas(["public"])
    """

    def __init__(self, source: CatalogSource):
        """Initialize extractor.

        Args:
            source: Catalog backend to read from
        """
        self.source = source

    def extract_schemas(self, schema_names: list[str]) -> list[Schema]:
        """Extract every requested schema.

        Args:
            schema_names: Schema names, in output order

        Returns:
            One Schema per requested name

        Raises:
            ExtractionError: If any category of any schema fails
        """
        schemas = []
        for schema_name in schema_names:
            schemas.append(self.extract_schema(schema_name))
        return schemas

    def extract_schema(self, schema_name: str) -> Schema:
        """Extract all object categories of a single schema.

        Raises:
            ExtractionError: If listing or a definition fails
        """
        logger.info(f"Extracting schema {schema_name}")
        objects: list[Object] = []
        routines: list[Object] = []

        for category in EXTRACTION_ORDER:
            try:
                extracted = self._extract_category(schema_name, category)
            except (ListingError, DefinitionError) as e:
                raise ExtractionError(
                    f"error extracting {category.label} from schema {schema_name}: {e}"
                ) from e

            if category.is_routine:
                routines.extend(extracted)
            else:
                objects.extend(extracted)

        # Regular functions and aggregates form one alphabetical partition
        objects.extend(sorted(routines, key=lambda obj: obj.sort_key))

        logger.info(f"Extracted {len(objects)} objects from schema {schema_name}")
        return Schema(name=schema_name, objects=tuple(objects))

    def _extract_category(self, schema_name: str, category: CatalogCategory) -> list[Object]:
        try:
            entries = self.source.list_objects(schema_name, category)
        except CatalogError as e:
            raise ListingError(f"error listing {category.label}: {e}") from e

        retained = []
        for entry in entries:
            if entry.schema in SYSTEM_NAMESPACES:
                logger.debug(f"Skipping system object {entry.qualified_name}")
                continue
            retained.append(entry)

        logger.info(f"Found {len(retained)} {category.label} in schema {schema_name}")

        objects = []
        for entry in sorted(retained, key=lambda e: e.sort_key):
            objects.append(self._build_object(entry))
        return objects

    def _build_object(self, entry: CatalogEntry) -> Object:
        object_type = entry.category.object_type
        logger.debug(f"Fetching definition of {object_type.value} {entry.qualified_name}")

        try:
            definition = self.source.fetch_definition(entry)
        except CatalogError as e:
            raise DefinitionError(
                f"error getting {object_type.value} definition for {entry.qualified_name}: {e}"
            ) from e

        if not definition or not definition.strip():
            raise DefinitionError(
                f"error getting {object_type.value} definition for {entry.qualified_name}: "
                f"catalog returned an empty definition"
            )

        return Object(
            schema=entry.schema,
            name=entry.name,
            type=object_type,
            definition=definition,
            signature=entry.signature if entry.category.is_routine else None,
        )
