"""Tests for pyproject.toml configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from varcleaner._config import ConfigError, VarCleanerConfig, load_config


def _pyproject(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "pyproject.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    """Test defaults when there is no pyproject.toml."""
    config = load_config(tmp_path / "pyproject.toml")

    assert config == VarCleanerConfig()
    assert config.cache is True


def test_missing_table_gives_defaults(tmp_path: Path) -> None:
    """Test defaults when the file has no [tool.varcleaner] table."""
    path = _pyproject(tmp_path, '[project]\nname = "demo"\n')

    assert load_config(path) == VarCleanerConfig()


def test_values_loaded(tmp_path: Path) -> None:
    """Test that all supported keys are read."""
    path = _pyproject(
        tmp_path,
        "[tool.varcleaner]\n"
        'ignore-functions = ["test_*", "main"]\n'
        "ignore-literals = ['\"\"', \"0\"]\n"
        "cache = false\n",
    )

    config = load_config(path)

    assert config.ignore_functions == ["test_*", "main"]
    assert config.ignore_literals == {'""', "0"}
    assert config.cache is False


def test_invalid_toml(tmp_path: Path) -> None:
    """Test that malformed TOML raises ConfigError."""
    path = _pyproject(tmp_path, "[tool.varcleaner\n")

    with pytest.raises(ConfigError):
        load_config(path)


@pytest.mark.parametrize(
    "content",
    [
        '[tool.varcleaner]\nignore-functions = "test_*"\n',
        "[tool.varcleaner]\nignore-literals = [1, 2]\n",
        '[tool.varcleaner]\ncache = "yes"\n',
        '[tool]\nvarcleaner = "on"\n',
    ],
)
def test_wrong_types(tmp_path: Path, content: str) -> None:
    """Test that values of the wrong type raise ConfigError."""
    path = _pyproject(tmp_path, content)

    with pytest.raises(ConfigError):
        load_config(path)
