"""
Connection Models

Pydantic models and enums shared by the registry, the connectors and the
lifecycle coordinator.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

PACKAGE_LOGGER = "dbconnect"


class BackendKind(str, Enum):
    """Backend family a connection spec is routed to."""

    MONGODB = "mongodb"
    ODM = "odm"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    REDIS = "redis"


class ConnectionState(str, Enum):
    """Lifecycle state of one requested connection."""

    PENDING = "pending"
    CONNECTED = "connected"
    FAILED = "failed"
    CLOSED = "closed"


class ConnectionSpec(BaseModel):
    """One requested connection."""

    connection_string: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("connection_string", "connectionString"),
        description="URI identifying backend kind and target",
    )
    name: str | list[str] | None = Field(
        None, description="Logical name, or list of names for document store aliases"
    )
    orm: bool = Field(
        default=False,
        validation_alias=AliasChoices("orm", "mongoose"),
        description="Connect through the injected ODM instead of the native driver",
    )
    options: dict[str, Any] = Field(
        default_factory=dict, description="Extra keyword options passed to the driver"
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def collect_driver_options(cls, data: Any) -> Any:
        """Move unknown keys into ``options``."""
        if not isinstance(data, dict):
            return data
        known = {"connection_string", "connectionString", "name", "orm", "mongoose", "options"}
        extras = {key: value for key, value in data.items() if key not in known}
        if not extras:
            return data
        cleaned = {key: value for key, value in data.items() if key in known}
        cleaned["options"] = {**extras, **dict(data.get("options") or {})}
        return cleaned

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | list[str] | None) -> str | list[str] | None:
        """Reject empty names; a list must hold non-empty strings."""
        if v is None:
            return v
        if isinstance(v, str):
            if not v.strip():
                raise ValueError("name must not be empty")
            return v
        if not v:
            raise ValueError("name list must not be empty")
        if any(not item.strip() for item in v):
            raise ValueError("name list must hold non-empty strings")
        return v

    @property
    def names(self) -> list[str]:
        """Requested names as a list (empty when no name was given)."""
        if self.name is None:
            return []
        if isinstance(self.name, str):
            return [self.name]
        return list(self.name)

    @property
    def display_name(self) -> str:
        """Name used in log lines and error messages."""
        if self.name is None:
            return self.connection_string.split("@")[-1]
        return ", ".join(self.names)


class ConnectOptions(BaseModel):
    """Options shared by every connector of one ``init`` call."""

    logger: Any = Field(default=None, description="Sink with info() and error() methods")
    separator: str = Field(default=":", min_length=1)
    odm: Any = Field(
        default=None,
        validation_alias=AliasChoices("odm", "mongoose"),
        description="ODM module or object (mongoengine-compatible)",
    )
    odm_timeout: float = Field(default=60.0, gt=0)
    postgres_pool_min_size: int = Field(default=1, ge=0)
    postgres_pool_max_size: int = Field(default=10, gt=0)
    mysql_connect_timeout: int = Field(default=10, gt=0)

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    @model_validator(mode="after")
    def default_logger(self) -> "ConnectOptions":
        if self.logger is None:
            self.logger = logging.getLogger(PACKAGE_LOGGER)
        return self

    @classmethod
    def from_settings(cls, settings=None, **overrides: Any) -> "ConnectOptions":
        """
        Build options from ``ConnectorSettings``; explicit overrides win.

        Args:
            settings: ConnectorSettings instance (defaults to cached settings)
            **overrides: Option values that take precedence

        Returns:
            ConnectOptions
        """
        if settings is None:
            from dbconnect.config import get_settings

            settings = get_settings().connector
        values = settings.model_dump()
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


class RegisteredHandle(BaseModel):
    """A name/handle pair produced by a connector."""

    name: str
    handle: Any
    parent: str | None = Field(None, description="Primary name when this is an alias")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def is_alias(self) -> bool:
        return self.parent is not None


class ConnectOutcome(BaseModel):
    """Result bookkeeping for one requested connection."""

    kind: BackendKind
    target: str
    state: ConnectionState = ConnectionState.PENDING
    names: list[str] = Field(default_factory=list)
    error: str | None = None
