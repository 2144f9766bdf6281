"""
MySQL Connector

Async-compatible MySQL connector using mysql-connector-python.

The underlying driver is synchronous, so connect and close run in worker
threads via asyncio.to_thread. The registered handle is the driver's client
object.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import parse_qsl, unquote, urlparse

import mysql.connector
from mysql.connector import Error as MySQLError

from dbconnect.connectors.base import BaseConnector, ConfigurationError
from dbconnect.connectors.urls import default_name
from dbconnect.models import BackendKind, ConnectionSpec, RegisteredHandle

logger = logging.getLogger(__name__)


class MySQLConnector(BaseConnector):
    """MySQL connector using mysql-connector-python."""

    kind = BackendKind.MYSQL

    async def connect(self, spec: ConnectionSpec) -> list[RegisteredHandle]:
        """Open the client and check it is connected."""
        name = spec.name or default_name(spec.connection_string)
        params = self.connection_params(spec)
        try:
            client = await asyncio.to_thread(self._connect_sync, params)
        except MySQLError as exc:
            logger.error(f"MySQL connection failed: {exc}")
            raise self.connect_error(spec, exc) from exc
        except Exception as exc:
            logger.error(f"Unexpected error during MySQL connection: {exc}")
            raise self.connect_error(spec, exc) from exc

        self.connected(name)
        return [RegisteredHandle(name=name, handle=client)]

    def connection_params(self, spec: ConnectionSpec) -> dict[str, Any]:
        """Translate a mysql:// URL into driver keyword arguments."""
        try:
            parsed = urlparse(spec.connection_string)
            port = parsed.port
        except ValueError as e:
            raise ConfigurationError(f"Invalid MySQL/{spec.display_name} connection string") from e
        if not parsed.hostname:
            raise ConfigurationError(f"Invalid MySQL/{spec.display_name} connection string")
        params: dict[str, Any] = {
            "host": parsed.hostname,
            "port": port or 3306,
            "user": unquote(parsed.username or "root"),
            "password": unquote(parsed.password or ""),
            "connection_timeout": self.options.mysql_connect_timeout,
        }
        database = parsed.path.lstrip("/")
        if database:
            params["database"] = database
        params.update({key: _query_value(value) for key, value in parse_qsl(parsed.query)})
        params.update(spec.options)
        return params

    def _connect_sync(self, params: dict[str, Any]) -> Any:
        client = mysql.connector.connect(**params)
        if not client.is_connected():
            client.close()
            raise MySQLError(msg="connection was not established")
        return client

    async def _close_handle(self, handle: Any) -> None:
        await asyncio.to_thread(handle.close)


def _query_value(value: str) -> Any:
    """Convert numeric and boolean query-string values for the driver."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if value.isdigit():
        return int(value)
    return value
