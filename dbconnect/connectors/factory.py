"""Connector factory: route connection specs to backend families."""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import ValidationError

from dbconnect.connectors.base import BaseConnector, ConfigurationError
from dbconnect.connectors.mongo import MongoConnector
from dbconnect.connectors.mysql import MySQLConnector
from dbconnect.connectors.odm import ODMConnector
from dbconnect.connectors.postgres import PostgresConnector
from dbconnect.connectors.redis import RedisConnector
from dbconnect.connectors.urls import infer_backend_kind
from dbconnect.models import BackendKind, ConnectionSpec, ConnectOptions

# Dispatch order of the families during init.
DISPATCH_ORDER = (
    BackendKind.ODM,
    BackendKind.MONGODB,
    BackendKind.MYSQL,
    BackendKind.POSTGRESQL,
    BackendKind.REDIS,
)

_CONNECTORS: dict[BackendKind, type[BaseConnector]] = {
    BackendKind.MONGODB: MongoConnector,
    BackendKind.ODM: ODMConnector,
    BackendKind.POSTGRESQL: PostgresConnector,
    BackendKind.MYSQL: MySQLConnector,
    BackendKind.REDIS: RedisConnector,
}


def resolve_backend_kind(spec: ConnectionSpec) -> BackendKind:
    """Resolve the family of one spec from its ORM flag and URL scheme."""
    kind = infer_backend_kind(spec.connection_string)
    if spec.orm:
        if kind is not BackendKind.MONGODB:
            raise ConfigurationError(
                f"ORM flag requires a mongodb connection string, got {kind.value}"
            )
        kind = BackendKind.ODM
    if isinstance(spec.name, list) and kind is not BackendKind.MONGODB:
        raise ConfigurationError(
            f"Name lists are only supported for mongodb connections, got {kind.value}"
        )
    return kind


def coerce_spec(raw: ConnectionSpec | dict[str, Any]) -> ConnectionSpec:
    """Accept ConnectionSpec objects or plain config dicts."""
    if isinstance(raw, ConnectionSpec):
        return raw
    try:
        return ConnectionSpec.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid connection spec: {e}") from e


def classify_specs(
    specs: Iterable[ConnectionSpec | dict[str, Any]],
    options: ConnectOptions,
) -> dict[BackendKind, list[ConnectionSpec]]:
    """
    Partition specs into per-family buckets, preserving input order.

    Raises:
        ConfigurationError: For an unroutable scheme, a malformed spec, more
            than one ODM spec, or an ODM spec without an injected ODM
    """
    buckets: dict[BackendKind, list[ConnectionSpec]] = {kind: [] for kind in DISPATCH_ORDER}
    for raw in specs:
        spec = coerce_spec(raw)
        buckets[resolve_backend_kind(spec)].append(spec)

    if len(buckets[BackendKind.ODM]) > 1:
        raise ConfigurationError("Only one ODM connection can be configured")
    if buckets[BackendKind.ODM] and options.odm is None:
        raise ConfigurationError("An ODM instance (e.g. mongoengine) must be provided")
    return buckets


def create_connector(kind: BackendKind, options: ConnectOptions) -> BaseConnector:
    """Create the connector for a backend family."""
    try:
        connector_class = _CONNECTORS[kind]
    except KeyError:
        raise ConfigurationError(f"Unsupported backend kind: {kind}") from None
    return connector_class(options)
