"""YAML parsing utilities for PGSAC.

This module provides functions for loading and saving project files
with environment variable substitution and validation.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from pgsac.exceptions import ValidationError
from pgsac.models.project import Project

# Matches ${VAR_NAME} or ${VAR_NAME:-default}
_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def substitute_env_vars(data: Any) -> Any:
    """Recursively substitute environment variables in data structure.

    Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.

    Args:
        data: Data structure (dict, list, str, etc.)

    Returns:
        Data with environment variables substituted

    Raises:
        ValidationError: If a variable is unset and has no default

    Examples:
        >>> os.environ['DB_HOST'] = 'localhost'
        >>> substitute_env_vars('${DB_HOST}')
        'localhost'
        >>> substitute_env_vars('${MISSING:-fallback}')
        'fallback'
    """
    if isinstance(data, dict):
        return {k: substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [substitute_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replace_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2)

            value = os.environ.get(var_name)
            if value is not None:
                return value
            if default_value is not None:
                return default_value
            raise ValidationError(
                f"Environment variable '{var_name}' not found and no default provided"
            )

        return _ENV_PATTERN.sub(replace_var, data)
    else:
        return data


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file into a dictionary with environment variable substitution.

    Args:
        path: Path to YAML file

    Returns:
        Dictionary with YAML contents and environment variables substituted

    Raises:
        ValidationError: If file cannot be read or parsed, or required env vars are missing
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {path}: {e}") from e
    except FileNotFoundError:
        raise ValidationError(f"File not found: {path}")
    except OSError as e:
        raise ValidationError(f"Failed to load {path}: {e}") from e

    if data is None:
        raise ValidationError(f"Empty YAML file: {path}")
    if not isinstance(data, dict):
        raise ValidationError(f"Expected a mapping at the top of {path}")
    return substitute_env_vars(data)


def load_project(path: Path) -> Project:
    """Load and validate a project from a YAML file.

    Args:
        path: Path to project YAML file

    Returns:
        Validated Project object

    Raises:
        ValidationError: If project is invalid
    """
    return parse_project(load_yaml(path), source=str(path))


def parse_project(data: dict[str, Any], source: str = "command line") -> Project:
    """Validate an already loaded project mapping.

    Args:
        data: Project mapping (YAML contents, possibly with CLI overrides applied)
        source: Where the data came from, for error messages

    Raises:
        ValidationError: If project is invalid
    """
    try:
        return Project(**data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid project in {source}: {e}") from e


def save_yaml(data: dict[str, Any], path: Path) -> None:
    """Save dictionary to YAML file.

    Args:
        data: Dictionary to save
        path: Path to save to

    Raises:
        ValidationError: If save fails
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                data,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )
    except OSError as e:
        raise ValidationError(f"Failed to save YAML to {path}: {e}") from e
