"""Result models for export and extraction runs.

This module defines result classes that capture outcomes and metrics
from the export step and from a complete extract-and-export run.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field as PydanticField


class ExportResult(BaseModel):
    """Result of writing schemas to the output tree."""

    output_dir: str = PydanticField(
        ...,
        description="Base directory the tree was written to",
    )

    schemas_exported: int = PydanticField(
        0,
        description="Number of schemas written",
        ge=0,
    )

    files_written: list[str] = PydanticField(
        default_factory=list,
        description="Paths of written files, in write order",
    )

    duration_seconds: float = PydanticField(
        0.0,
        description="Duration of export in seconds",
        ge=0.0,
    )

    started_at: datetime = PydanticField(
        ...,
        description="Export start time",
    )

    completed_at: Optional[datetime] = PydanticField(
        None,
        description="Export completion time",
    )

    model_config = {"extra": "forbid"}

    @property
    def file_count(self) -> int:
        return len(self.files_written)


class RunResult(BaseModel):
    """Result of a complete extract-and-export run."""

    success: bool = PydanticField(
        ...,
        description="Whether extraction and export both succeeded",
    )

    backend: str = PydanticField(
        ...,
        description="Catalog backend used",
    )

    schemas_extracted: int = PydanticField(
        0,
        description="Number of schemas extracted",
        ge=0,
    )

    objects_extracted: int = PydanticField(
        0,
        description="Number of objects extracted across all schemas",
        ge=0,
    )

    export_result: Optional[ExportResult] = PydanticField(
        None,
        description="Export step result",
    )

    duration_seconds: float = PydanticField(
        0.0,
        description="Total duration in seconds",
        ge=0.0,
    )

    started_at: datetime = PydanticField(
        ...,
        description="Run start time",
    )

    completed_at: Optional[datetime] = PydanticField(
        None,
        description="Run completion time",
    )

    error_message: Optional[str] = PydanticField(
        None,
        description="Error message if the run failed",
    )

    model_config = {"extra": "forbid"}
