"""
Connector Configuration

Pydantic-based settings management using environment variables.
Provides the defaults every ``init`` call starts from; connection specs
themselves are supplied by the caller.

Usage:
    from dbconnect.config import get_settings

    settings = get_settings()
    print(settings.connector.separator)
    print(settings.connector.odm_timeout)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dbconnect.models import PACKAGE_LOGGER

_DOTENV_PATH = Path.cwd() / ".env"


class ConnectorSettings(BaseSettings):
    """Defaults shared by every connector."""

    separator: str = Field(
        default=":",
        description="Separator between physical database name and alias in mongodb names",
    )
    odm_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds to wait for the ODM connection to open or fail",
    )
    postgres_pool_min_size: int = Field(
        default=1,
        ge=0,
        description="Minimum size of each PostgreSQL pool",
    )
    postgres_pool_max_size: int = Field(
        default=10,
        gt=0,
        le=100,
        description="Maximum size of each PostgreSQL pool",
    )
    mysql_connect_timeout: int = Field(
        default=10,
        gt=0,
        description="MySQL connection timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="DBCONNECT_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Separator must be a non-empty string."""
        if not v:
            raise ValueError("separator must not be empty")
        return v

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> "ConnectorSettings":
        """Ensure pool bounds are consistent."""
        if self.postgres_pool_max_size < self.postgres_pool_min_size:
            raise ValueError("postgres_pool_max_size must be >= postgres_pool_min_size")
        return self


class LoggingSettings(BaseSettings):
    """Level and output of the ``dbconnect`` package logger."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Package log level",
    )
    format: str | None = Field(
        default=None,
        description="Attach a stream handler with this format (None = leave handlers to the app)",
    )

    model_config = SettingsConfigDict(
        env_prefix="DBCONNECT_LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Apply these settings to the package logger only."""
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        package_logger.setLevel(getattr(logging, self.level))
        if self.format and not any(h.get_name() == PACKAGE_LOGGER for h in package_logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(self.format))
            handler.set_name(PACKAGE_LOGGER)
            package_logger.addHandler(handler)


class Settings(BaseSettings):
    """
    Main settings.

    Environment Variables:
        DBCONNECT_*: Connector defaults (see ConnectorSettings)
        DBCONNECT_LOG_*: Logging configuration (see LoggingSettings)
    """

    connector: ConnectorSettings = Field(default_factory=ConnectorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def configure_logging(self) -> "Settings":
        """Configure the package logger when settings are loaded."""
        self.logging.configure()
        return self


def _apply_dotenv() -> None:
    if os.getenv("DBCONNECT_ENV_SOURCE", "dotenv").lower() != "dotenv":
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=False)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv()
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (used by tests that change the environment)."""
    get_settings.cache_clear()
