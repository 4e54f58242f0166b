"""MediaShelf Configuration Settings."""

from __future__ import annotations

import os
from enum import StrEnum
from functools import cached_property, lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

__all__ = [
    "LogLevel",
    "MediaShelfConfig",
    "WebConfig",
    "find_yaml_config_file",
    "get_config",
    "get_data_path",
]


def get_data_path() -> Path:
    """Return the data directory resolved from ``MS_DATA_PATH``."""
    return Path(os.getenv("MS_DATA_PATH", "./data")).resolve()


def find_yaml_config_file() -> Path:
    """Find the YAML configuration file in the data path.

    Returns:
        Path: The path to an existing YAML configuration file or the default location.
    """
    data_path = get_data_path()
    for ext in ("yaml", "yml"):
        yaml_file = data_path / f"config.{ext}"
        if yaml_file.exists():
            return yaml_file.resolve()
    return data_path / "config.yaml"


class BaseStrEnum(StrEnum):
    """String enumeration with case-insensitive lookup."""

    @classmethod
    def _missing_(cls, value: object) -> BaseStrEnum | None:
        value = value.lower() if isinstance(value, str) else value
        for member in cls:
            if member.lower() == value:
                return member
        return None

    def __repr__(self) -> str:
        """Return the string value of the enum member."""
        return self.value

    def __str__(self) -> str:
        """Return the string representation of the enum member."""
        return repr(self)


class LogLevel(BaseStrEnum):
    """Enumeration of available logging levels.

    Note: SUCCESS is a custom level used by this application.
    """

    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class WebConfig(BaseModel):
    """Configuration for the embedded web server."""

    enabled: bool = Field(default=True, description="Enable the MediaShelf web server")
    host: str = Field(default="0.0.0.0", description="Host for the web server")
    port: int = Field(default=4747, description="Port for the web server")


class MediaShelfConfig(BaseSettings):
    """Application configuration.

    Configuration is sourced from a YAML file in the data directory, optionally
    combined with parameters passed directly to the model.
    """

    log_level: LogLevel = Field(
        default=LogLevel.INFO, description="Logging level for the application"
    )
    web: WebConfig = Field(
        default_factory=WebConfig, description="Embedded web server configuration"
    )
    import_timeout: float = Field(
        default=0,
        ge=0,
        description="Deadline in seconds for a single library import (0 disables)",
    )
    max_import_items: int = Field(
        default=0,
        ge=0,
        description="Maximum media items accepted in one snapshot (0 is unlimited)",
    )
    seed_default_lists: bool = Field(
        default=True, description="Create the default lists for newly created owners"
    )

    @cached_property
    def data_path(self) -> Path:
        """Get the data path for MediaShelf."""
        return get_data_path()

    def __str__(self) -> str:
        """Creates a human-readable representation of the configuration."""
        return (
            f"MediaShelf Config: DATA_PATH: {self.data_path}, "
            f"LOG_LEVEL: {self.log_level}, IMPORT_TIMEOUT: {self.import_timeout}"
        )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order of configuration sources."""
        return (
            init_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=find_yaml_config_file()),
        )

    model_config = SettingsConfigDict(extra="ignore")


@lru_cache(maxsize=1)
def get_config() -> MediaShelfConfig:
    """Get the singleton instance of MediaShelfConfig."""
    return MediaShelfConfig()
