"""
MongoDB Connector

Native document store connector using pymongo's asyncio client.

One client (one socket pool) serves a primary database plus any number of
aliases: extra names that point at other databases on the same client.
Aliases are registered next to the primary and share its lifecycle; only
the primary is ever closed.

Name syntax:
    name: "sales"                    # alias "sales" -> database "sales"
    name: ["db1:alpha", "db1:beta"]  # aliases "alpha" and "beta" -> database "db1"

The primary is registered as "<physical db>:<alias>, <alias>, ...".
"""

import logging
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from dbconnect.connectors.base import BaseConnector
from dbconnect.models import BackendKind, ConnectionSpec, RegisteredHandle

logger = logging.getLogger(__name__)

# Database the driver falls back to when the URI names none.
DEFAULT_DATABASE = "test"


class MongoConnector(BaseConnector):
    """Document store connector using the native pymongo driver."""

    kind = BackendKind.MONGODB

    async def connect(self, spec: ConnectionSpec) -> list[RegisteredHandle]:
        """
        Connect to MongoDB and resolve the primary database and its aliases.

        Raises:
            ConnectError: If the server cannot be reached
        """
        try:
            client = AsyncMongoClient(spec.connection_string, **spec.options)
        except PyMongoError as e:
            raise self.connect_error(spec, e) from e

        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"MongoDB connection failed: {e}")
            await self._discard(client)
            raise self.connect_error(spec, e) from e

        database = client.get_default_database(default=DEFAULT_DATABASE)
        requested = spec.names or [database.name]
        pairs = [self.split_name(name) for name in requested]

        primary = self.primary_name(database.name, [alias for _, alias in pairs])
        handles = [RegisteredHandle(name=primary, handle=database)]
        for physical, alias in pairs:
            handles.append(RegisteredHandle(name=alias, handle=client[physical], parent=primary))

        self.connected(spec.display_name if spec.name is not None else database.name)
        return handles

    def split_name(self, name: str) -> tuple[str, str]:
        """Split ``physical<sep>alias``; the alias defaults to the physical name."""
        physical, _, alias = name.partition(self.options.separator)
        return physical, alias or physical

    @staticmethod
    def primary_name(database_name: str, aliases: list[str]) -> str:
        return f"{database_name}:{', '.join(aliases)}"

    async def _close_handle(self, handle: Any) -> None:
        await handle.client.close()

    async def _discard(self, client: AsyncMongoClient) -> None:
        try:
            await client.close()
        except Exception as e:
            logger.debug(f"Ignoring error while discarding Mongo client: {e}")
