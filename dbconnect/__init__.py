"""
dbconnect

Connect to a mixed set of databases (MongoDB, PostgreSQL, MySQL, Redis, and
MongoDB through an ODM) concurrently, expose each connection under a name,
and close them all gracefully.

Usage:
    from dbconnect import ConnectOptions, LifecycleCoordinator

    coordinator = LifecycleCoordinator()
    await coordinator.init(configs, ConnectOptions(odm=mongoengine))
    db = coordinator.get("alpha")
    await coordinator.close()
"""

from dbconnect.connectors.base import (
    ConfigurationError,
    ConnectError,
    ConnectorError,
    ConnectTimeoutError,
    HandleNotFoundError,
    NameCollisionError,
)
from dbconnect.coordinator import LifecycleCoordinator
from dbconnect.models import (
    BackendKind,
    ConnectionSpec,
    ConnectionState,
    ConnectOptions,
    ConnectOutcome,
    RegisteredHandle,
)
from dbconnect.registry import ConnectionRegistry, RegistryEntry, get_registry

__all__ = [
    "LifecycleCoordinator",
    "ConnectionRegistry",
    "RegistryEntry",
    "get_registry",
    "BackendKind",
    "ConnectionSpec",
    "ConnectionState",
    "ConnectOptions",
    "ConnectOutcome",
    "RegisteredHandle",
    "ConnectorError",
    "ConfigurationError",
    "ConnectError",
    "ConnectTimeoutError",
    "NameCollisionError",
    "HandleNotFoundError",
]
