"""Tests for version utility helpers."""

import tomllib
from pathlib import Path

import mediashelf
from mediashelf.utils.version import get_pyproject_version


def test_get_pyproject_version_matches_pyproject() -> None:
    """Test that get_pyproject_version matches the version in pyproject.toml."""
    with Path("pyproject.toml").open("rb") as f:
        pyproject = tomllib.load(f)

    expected_version = pyproject["project"]["version"]

    assert get_pyproject_version() == expected_version
    assert mediashelf.__version__ == expected_version
