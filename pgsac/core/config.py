"""PGSAC configuration management.

This module centralizes all configuration loading from environment variables
and provides sensible defaults. All modules should import configuration
values from here rather than reading environment variables directly.

Environment Variables:
    PGSAC_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
                     Default: INFO

    PGSAC_LOG_FORMAT: Log output format (text, json)
                      Default: text

    PGSAC_OUTPUT_DIR: Base directory for the exported file tree
                      Default: ./schemas

    PGSAC_BACKEND: Catalog backend (sql, psql)
                   Default: sql

    PGSAC_PSQL_PATH: psql executable used by the psql backend
                     Default: psql

    PGSAC_CONNECTION_TIMEOUT: Connection timeout in seconds
                              Default: 30

    PGSAC_QUERY_TIMEOUT: Timeout for a single psql invocation in seconds
                         Default: 300
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


@dataclass
class PGSACConfig:
    """PGSAC configuration container.

    Usage:
        from pgsac.core.config import config

        output_dir = config.output_dir
        timeout = config.connection_timeout
    """

    # Logging Configuration
    log_level: str = field(default_factory=lambda: _get_str("PGSAC_LOG_LEVEL", "INFO").upper())
    log_format: str = field(default_factory=lambda: _get_str("PGSAC_LOG_FORMAT", "text"))

    # Output Configuration
    output_dir: Path = field(default_factory=lambda: Path(_get_str("PGSAC_OUTPUT_DIR", "./schemas")))

    # Backend Configuration
    backend: str = field(default_factory=lambda: _get_str("PGSAC_BACKEND", "sql"))
    psql_path: str = field(default_factory=lambda: _get_str("PGSAC_PSQL_PATH", "psql"))

    # Connection/Timeout Configuration
    connection_timeout: int = field(default_factory=lambda: _get_int("PGSAC_CONNECTION_TIMEOUT", 30))
    query_timeout: int = field(default_factory=lambda: _get_int("PGSAC_QUERY_TIMEOUT", 300))

    def __post_init__(self):
        """Validate configuration after initialization."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level not in valid_levels:
            raise ValueError(
                f"Invalid PGSAC_LOG_LEVEL: {self.log_level}. "
                f"Must be one of: {valid_levels}"
            )

        valid_formats = {"text", "json"}
        if self.log_format not in valid_formats:
            raise ValueError(
                f"Invalid PGSAC_LOG_FORMAT: {self.log_format}. "
                f"Must be one of: {valid_formats}"
            )

        valid_backends = {"sql", "psql"}
        if self.backend not in valid_backends:
            raise ValueError(
                f"Invalid PGSAC_BACKEND: {self.backend}. "
                f"Must be one of: {valid_backends}"
            )

        if self.connection_timeout < 1:
            raise ValueError(f"PGSAC_CONNECTION_TIMEOUT must be >= 1, got {self.connection_timeout}")

        if self.query_timeout < 1:
            raise ValueError(f"PGSAC_QUERY_TIMEOUT must be >= 1, got {self.query_timeout}")


def load_config() -> PGSACConfig:
    """Load configuration from environment.

    Call this to refresh config if the environment has changed.

    Returns:
        New PGSACConfig instance
    """
    return PGSACConfig()


# Global configuration instance - loaded once at import time
# Use load_config() to refresh if needed
config = load_config()
