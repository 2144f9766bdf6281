"""
Backend Connectors Module

One connector per backend family, all exposing the same async
``connect`` / ``close`` interface.

Available Connectors:
    - BaseConnector: Abstract base class
    - MongoConnector: Native document store (pymongo AsyncMongoClient)
    - ODMConnector: Document store through an injected ODM (mongoengine)
    - PostgresConnector: PostgreSQL pool per spec (asyncpg)
    - MySQLConnector: MySQL client (mysql-connector-python)
    - RedisConnector: Key-value client (redis.asyncio)

Usage:
    from dbconnect.connectors import create_connector

    connector = create_connector(BackendKind.POSTGRESQL, ConnectOptions())
    handles = await connector.connect(spec)
"""

from dbconnect.connectors.base import (
    BaseConnector,
    ConfigurationError,
    ConnectError,
    ConnectorError,
    ConnectTimeoutError,
    HandleNotFoundError,
    NameCollisionError,
)
from dbconnect.connectors.events import Settlement
from dbconnect.connectors.factory import classify_specs, create_connector, resolve_backend_kind
from dbconnect.connectors.mongo import MongoConnector
from dbconnect.connectors.mysql import MySQLConnector
from dbconnect.connectors.odm import ODMConnector
from dbconnect.connectors.postgres import PostgresConnector
from dbconnect.connectors.redis import RedisConnector
from dbconnect.connectors.urls import default_name, infer_backend_kind

__all__ = [
    "BaseConnector",
    "MongoConnector",
    "ODMConnector",
    "PostgresConnector",
    "MySQLConnector",
    "RedisConnector",
    "Settlement",
    "classify_specs",
    "create_connector",
    "resolve_backend_kind",
    "infer_backend_kind",
    "default_name",
    "ConnectorError",
    "ConfigurationError",
    "ConnectError",
    "ConnectTimeoutError",
    "NameCollisionError",
    "HandleNotFoundError",
]
