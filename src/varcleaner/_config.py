"""Configuration loading from ``[tool.varcleaner]`` in pyproject.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

__all__ = ["ConfigError", "VarCleanerConfig", "load_config"]

DEFAULT_PYPROJECT = Path("pyproject.toml")


class ConfigError(Exception):
    """Raised when the configuration file cannot be used."""


@dataclass
class VarCleanerConfig:
    """Settings for a varcleaner run.

    Attributes:
        ignore_functions: Glob patterns of function names to skip
        ignore_literals: Literal texts never reported as repeated
        cache: Whether per-file results are cached
    """

    ignore_functions: list[str] = field(default_factory=list)
    ignore_literals: set[str] = field(default_factory=set)
    cache: bool = True


def _string_list(table: dict[str, Any], key: str) -> list[str]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"tool.varcleaner.{key} must be a list of strings")
    return value


def load_config(pyproject_path: Path | None = None) -> VarCleanerConfig:
    """Load configuration from pyproject.toml.

    Args:
        pyproject_path: Path to the TOML file (default: ./pyproject.toml)

    Returns:
        Loaded configuration, or defaults if the file does not exist

    Raises:
        ConfigError: If the file is not valid TOML or a value has the wrong type
    """
    path = pyproject_path or DEFAULT_PYPROJECT
    if not path.exists():
        return VarCleanerConfig()

    try:
        with open(path, "rb") as f:
            pyproject_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as error:
        raise ConfigError(f"Failed to read {path}: {error}") from error

    table = pyproject_data.get("tool", {}).get("varcleaner", {})
    if not isinstance(table, dict):
        raise ConfigError("tool.varcleaner must be a table")

    cache = table.get("cache", True)
    if not isinstance(cache, bool):
        raise ConfigError("tool.varcleaner.cache must be a boolean")

    return VarCleanerConfig(
        ignore_functions=_string_list(table, "ignore-functions"),
        ignore_literals=set(_string_list(table, "ignore-literals")),
        cache=cache,
    )
