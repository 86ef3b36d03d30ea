"""Project and connection configuration models.

This module defines the Project model that represents a complete
extraction setup: where to connect, which schemas to extract, which
catalog backend to use and where to write the result.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field as PydanticField, field_validator


def _config():
    # Imported lazily: pgsac.core imports these models
    from pgsac.core.config import config

    return config


class ConnectionConfig(BaseModel):
    """PostgreSQL connection parameters.

    Examples:
        >>> ConnectionConfig(database="mydb", user="postgres", password="secret")
        ConnectionConfig(host='localhost', port=5432, database='mydb', ...)
    """

    host: str = PydanticField(
        "localhost",
        description="Database host",
    )

    port: int = PydanticField(
        5432,
        description="Database port",
        gt=0,
        lt=65536,
    )

    database: str = PydanticField(
        ...,
        description="Database name",
        min_length=1,
    )

    user: str = PydanticField(
        ...,
        description="Database user",
        min_length=1,
    )

    password: Optional[str] = PydanticField(
        None,
        description="Database password (psql receives it through PGPASSWORD only)",
        repr=False,
    )

    sslmode: str = PydanticField(
        "disable",
        description="libpq SSL mode",
    )

    model_config = {"extra": "forbid"}

    @field_validator("sslmode")
    @classmethod
    def validate_sslmode(cls, v: str) -> str:
        """Validate SSL mode."""
        valid_modes = {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}
        if v not in valid_modes:
            raise ValueError(f"Invalid sslmode: {v}. Must be one of: {valid_modes}")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty password (e.g. an unset ${PGPASSWORD:-}) as no password."""
        return v or None


class PsqlOptions(BaseModel):
    """Options for the psql-based catalog backend."""

    path: str = PydanticField(
        default_factory=lambda: _config().psql_path,
        description="psql executable name or path",
    )

    extended: bool = PydanticField(
        False,
        description="Use the verbose (\\dt+) forms of listing meta-commands",
    )

    model_config = {"extra": "forbid"}


class Project(BaseModel):
    """Extraction project configuration.

    Examples:
        >>> Project(
        ...     connection=ConnectionConfig(database="mydb", user="postgres"),
        ...     schemas=["public", "app"],
        ...     output="./schemas",
        ... )
    """

    version: int = PydanticField(
        1,
        description="Project file schema version",
    )

    backend: str = PydanticField(
        default_factory=lambda: _config().backend,
        description="Catalog backend: 'sql' (direct queries) or 'psql' (external client)",
    )

    connection: ConnectionConfig = PydanticField(
        ...,
        description="Database connection",
    )

    schemas: list[str] = PydanticField(
        default_factory=lambda: ["public"],
        description="Schemas to extract, in order",
        min_length=1,
    )

    output: str = PydanticField(
        default_factory=lambda: str(_config().output_dir),
        description="Output directory for the exported file tree",
    )

    disambiguate_overloads: bool = PydanticField(
        True,
        description="Name overloaded function files by signature",
    )

    psql: PsqlOptions = PydanticField(
        default_factory=PsqlOptions,
        description="psql backend options",
    )

    model_config = {"extra": "forbid"}

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: int) -> int:
        """Validate project file version."""
        if v != 1:
            raise ValueError(f"Unsupported project version: {v}. Only version 1 is supported.")
        return v

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Validate backend name."""
        valid_backends = {"sql", "psql"}
        if v not in valid_backends:
            raise ValueError(f"Invalid backend: {v}. Must be one of: {valid_backends}")
        return v

    @field_validator("schemas")
    @classmethod
    def validate_schemas(cls, v: list[str]) -> list[str]:
        """Reject blank schema names."""
        for name in v:
            if not name or not name.strip():
                raise ValueError("Schema names must not be empty")
        return v
