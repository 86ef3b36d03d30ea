"""Extract runner.

This module provides the runner that resolves the configured catalog
backend and drives extraction followed by export.
"""

from __future__ import annotations

import importlib
import logging
from datetime import datetime
from typing import Optional

from pgsac.core.catalog import CatalogSource
from pgsac.core.exporter import Exporter
from pgsac.core.extractor import SchemaExtractor
from pgsac.exceptions import ConfigurationError, PGSACError
from pgsac.models.project import Project
from pgsac.models.results import ExportResult, RunResult

logger = logging.getLogger(__name__)

# Backend name -> catalog source class
DEFAULT_BACKENDS = {
    "sql": "pgsac.catalog.sql.SQLCatalogSource",
    "psql": "pgsac.catalog.psql.PsqlCatalogSource",
}


class ExtractRunner:
    """Run extraction and export for a project.

    Extraction finishes for every schema before the first file is
    written, so a failed extraction leaves the output tree untouched.

    Examples:
        >>> runner = ExtractRunner()
        >>> result = runner.run(project)
        >>> print(f"Extracted {result.objects_extracted} objects")
    """

    def __init__(self, backends: Optional[dict[str, str]] = None):
        """Initialize runner.

        Args:
            backends: Backend name to "module.Class" path overrides
        """
        self.backends = dict(DEFAULT_BACKENDS)
        if backends:
            self.backends.update(backends)

    def run(self, project: Project) -> RunResult:
        """Extract the project's schemas and export them.

        Args:
            project: Project configuration

        Returns:
            RunResult; on failure `success` is False and `error_message`
            holds the error
        """
        started_at = datetime.now()
        schemas_extracted = 0
        objects_extracted = 0
        export_result: Optional[ExportResult] = None

        try:
            source = self.create_source(project)
            with source:
                schemas = SchemaExtractor(source).extract_schemas(project.schemas)
            schemas_extracted = len(schemas)
            objects_extracted = sum(schema.object_count for schema in schemas)

            exporter = Exporter(project.output, disambiguate_overloads=project.disambiguate_overloads)
            export_result = exporter.export(schemas)
        except PGSACError as e:
            logger.error(f"Run failed: {e}")
            completed_at = datetime.now()
            return RunResult(
                success=False,
                backend=project.backend,
                schemas_extracted=schemas_extracted,
                objects_extracted=objects_extracted,
                export_result=export_result,
                duration_seconds=(completed_at - started_at).total_seconds(),
                started_at=started_at,
                completed_at=completed_at,
                error_message=str(e),
            )

        completed_at = datetime.now()
        return RunResult(
            success=True,
            backend=project.backend,
            schemas_extracted=schemas_extracted,
            objects_extracted=objects_extracted,
            export_result=export_result,
            duration_seconds=(completed_at - started_at).total_seconds(),
            started_at=started_at,
            completed_at=completed_at,
        )

    def create_source(self, project: Project) -> CatalogSource:
        """Instantiate the catalog source for the project's backend.

        Raises:
            ConfigurationError: If the backend is unknown or cannot be loaded
        """
        class_path = self.backends.get(project.backend)
        if class_path is None:
            raise ConfigurationError(
                f"Unknown backend '{project.backend}'. "
                f"Available backends: {sorted(self.backends)}"
            )

        module_path, class_name = class_path.rsplit(".", 1)
        source_class = self._load_backend_class(module_path, class_name)

        options = {}
        if project.backend == "psql":
            options = project.psql.model_dump()
        return source_class(project.connection, options)

    def _load_backend_class(self, module_path: str, class_name: str) -> type:
        """Dynamically import and return a catalog source class.

        Raises:
            ConfigurationError: If module/class not found
        """
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            raise ConfigurationError(
                f"Failed to import backend module '{module_path}'.\n"
                f"Error: {e}"
            ) from e

        try:
            return getattr(module, class_name)
        except AttributeError as e:
            available_classes = [name for name in dir(module) if not name.startswith("_")]
            raise ConfigurationError(
                f"Class '{class_name}' not found in module '{module_path}'.\n"
                f"Available classes: {available_classes}"
            ) from e
