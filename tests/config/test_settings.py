"""Tests for settings configuration utilities."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mediashelf.config.settings import (
    LogLevel,
    MediaShelfConfig,
    find_yaml_config_file,
    get_data_path,
)


@pytest.fixture(autouse=True)
def isolate_working_directory(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Set the working directory to a temporary path for each test."""
    monkeypatch.chdir(tmp_path)


def test_get_data_path_reads_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that the data path comes from MS_DATA_PATH."""
    monkeypatch.setenv("MS_DATA_PATH", str(tmp_path / "library"))

    assert get_data_path() == (tmp_path / "library").resolve()


def test_get_data_path_defaults_to_data_dir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that the data path falls back to ./data."""
    monkeypatch.delenv("MS_DATA_PATH", raising=False)

    assert get_data_path() == (tmp_path / "data").resolve()


def test_find_yaml_config_file_prefers_existing_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that find_yaml_config_file finds a config.yml in the data path."""
    monkeypatch.setenv("MS_DATA_PATH", str(tmp_path))
    config_file = tmp_path / "config.yml"
    config_file.write_text("log_level: INFO", encoding="utf-8")

    assert find_yaml_config_file() == config_file.resolve()


def test_find_yaml_config_file_default_location(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that a missing config file resolves to the default config.yaml."""
    monkeypatch.setenv("MS_DATA_PATH", str(tmp_path))

    assert find_yaml_config_file() == tmp_path.resolve() / "config.yaml"


def test_config_loads_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that settings are read from the YAML file in the data path."""
    monkeypatch.setenv("MS_DATA_PATH", str(tmp_path))
    (tmp_path / "config.yaml").write_text(
        "log_level: debug\n"
        "import_timeout: 2.5\n"
        "max_import_items: 100\n"
        "seed_default_lists: false\n"
        "web:\n  port: 8080\n",
        encoding="utf-8",
    )

    config = MediaShelfConfig()

    assert config.log_level == LogLevel.DEBUG
    assert config.import_timeout == 2.5
    assert config.max_import_items == 100
    assert config.seed_default_lists is False
    assert config.web.port == 8080
    assert config.web.enabled is True
    assert config.data_path == tmp_path.resolve()


def test_init_arguments_override_yaml(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that arguments passed to the model win over the YAML file."""
    monkeypatch.setenv("MS_DATA_PATH", str(tmp_path))
    (tmp_path / "config.yaml").write_text("max_import_items: 5\n", encoding="utf-8")

    assert MediaShelfConfig(max_import_items=7).max_import_items == 7


def test_defaults_without_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test the defaults when no configuration file exists."""
    monkeypatch.setenv("MS_DATA_PATH", str(tmp_path))

    config = MediaShelfConfig()

    assert config.log_level == LogLevel.INFO
    assert config.import_timeout == 0
    assert config.max_import_items == 0
    assert config.seed_default_lists is True
    assert "IMPORT_TIMEOUT: 0" in str(config)


@pytest.mark.parametrize(
    "overrides", [{"import_timeout": -1}, {"max_import_items": -3}]
)
def test_negative_limits_are_rejected(overrides: dict) -> None:
    """Test that limits may not be negative."""
    with pytest.raises(ValidationError):
        MediaShelfConfig(**overrides)


def test_log_level_lookup_is_case_insensitive() -> None:
    """Test that log levels accept any casing."""
    assert LogLevel("success") is LogLevel.SUCCESS
    assert str(LogLevel.WARNING) == "WARNING"
