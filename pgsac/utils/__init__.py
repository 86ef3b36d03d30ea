"""PGSAC utilities package.

This package contains utility functions for YAML parsing,
logging setup, and other cross-cutting concerns.
"""

from pgsac.utils.logging import configure_logging
from pgsac.utils.yaml_parser import (
    load_project,
    load_yaml,
    parse_project,
    save_yaml,
    substitute_env_vars,
)

__all__ = [
    "configure_logging",
    "load_project",
    "load_yaml",
    "parse_project",
    "save_yaml",
    "substitute_env_vars",
]
