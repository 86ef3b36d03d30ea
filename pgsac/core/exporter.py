"""File-tree exporter.

Writes one SQL file per object:

    <output-dir>/<schema>/<table|view|materialized_view|function>/<stem>.sql

Existing files are overwritten; files of objects that are no longer in
the model are left in place.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Union

from pgsac.exceptions import ExportError
from pgsac.models.objects import Object, ObjectType, Schema
from pgsac.models.results import ExportResult

logger = logging.getLogger(__name__)

STATEMENT_TERMINATOR = ";"

_UNSAFE_FILENAME_CHARS = re.compile(r'[\s/\\:*?"<>|]')


def render_object(obj: Object) -> str:
    """Render the file contents for an object.

    The definition is stripped of surrounding whitespace and of any
    trailing terminators, then exactly one terminator is appended.

    Examples:
        >>> render_object(Object("app", "v", ObjectType.VIEW, " SELECT 1;; "))
        '-- Object: app.v\\n-- Type: view\\n\\nSELECT 1;\\n'
    """
    body = obj.definition.strip()
    while body.endswith(STATEMENT_TERMINATOR):
        body = body[: -len(STATEMENT_TERMINATOR)].rstrip()
    header = f"-- Object: {obj.schema}.{obj.name}\n-- Type: {obj.type.value}\n\n"
    return f"{header}{body}{STATEMENT_TERMINATOR}\n"


def safe_filename(name: str) -> str:
    """Turn a catalog name into a single path component.

    Characters that are unsafe in file names become underscores, and so
    do the dots of a name made only of dots.

    Examples:
        >>> safe_filename("a/b")
        'a_b'
        >>> safe_filename("..")
        '__'
    """
    name = _UNSAFE_FILENAME_CHARS.sub("_", name)
    if not name.strip("."):
        name = "_" * max(len(name), 1)
    return name


def file_stem(obj: Object, overloaded: bool) -> str:
    """File name (without extension) for an object.

    Overloaded functions are named `<name>(<signature>)`. Every stem goes
    through `safe_filename`.
    """
    if overloaded and obj.type == ObjectType.FUNCTION:
        return safe_filename(f"{obj.name}({obj.signature or ''})")
    return safe_filename(obj.name)


class Exporter:
    """Write schemas to a directory tree.

    With `disambiguate_overloads` off, functions are named by base name
    only and overloads overwrite each other (last one wins). The collision
    is logged, not prevented.

    Examples:
        >>> result = Exporter("./schemas").export(schemas)
        >>> print(f"Wrote {result.file_count} files")
    """

    def __init__(self, base_dir: Union[str, Path], disambiguate_overloads: bool = True):
        """Initialize exporter.

        Args:
            base_dir: Root of the output tree
            disambiguate_overloads: Name overloaded function files by signature
        """
        self.base_dir = Path(base_dir)
        self.disambiguate_overloads = disambiguate_overloads

    def export(self, schemas: list[Schema]) -> ExportResult:
        """Write every object of every schema.

        Args:
            schemas: Extracted schemas

        Returns:
            ExportResult listing the written files

        Raises:
            ExportError: On the first directory or file failure. Files written
                before the failure stay on disk.
        """
        started_at = datetime.now()
        written: list[Path] = []

        for schema in schemas:
            try:
                written.extend(self._export_schema(schema))
            except ExportError as e:
                raise ExportError(f"error exporting schema {schema.name}: {e}") from e

        completed_at = datetime.now()
        logger.info(f"Exported {len(schemas)} schemas ({len(written)} files) to {self.base_dir}")
        return ExportResult(
            output_dir=str(self.base_dir),
            schemas_exported=len(schemas),
            files_written=[str(path) for path in written],
            duration_seconds=(completed_at - started_at).total_seconds(),
            started_at=started_at,
            completed_at=completed_at,
        )

    def _export_schema(self, schema: Schema) -> list[Path]:
        schema_dir = self.base_dir / safe_filename(schema.name)
        self._make_dir(schema_dir)

        written = []
        for object_type, objects in schema.group_by_type().items():
            type_dir = schema_dir / object_type.value
            self._make_dir(type_dir)

            name_counts = Counter(obj.name for obj in objects)
            if not self.disambiguate_overloads:
                for name, count in name_counts.items():
                    if count > 1:
                        logger.warning(
                            f"{count} overloads of {schema.name}.{name} share {name}.sql; "
                            f"only the last one written is kept"
                        )

            for obj in objects:
                overloaded = name_counts[obj.name] > 1
                stem = file_stem(obj, overloaded and self.disambiguate_overloads)
                written.append(self._export_object(type_dir / f"{stem}.sql", obj))
        return written

    def _make_dir(self, path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(f"error creating directory {path}: {e}") from e

    def _export_object(self, path: Path, obj: Object) -> Path:
        try:
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(render_object(obj))
        except OSError as e:
            raise ExportError(f"error exporting object {obj.qualified_name} to {path}: {e}") from e
        logger.debug(f"Wrote {path}")
        return path
