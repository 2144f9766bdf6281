"""
Redis Connector

Key-value connector using redis.asyncio.

Readiness is event-driven: a probe task answers with "ready" once the server
replies to PING, or "error" when the driver raises. Both events feed a
Settlement, so an attempt settles exactly once. Errors reported after the
client is ready are logged and never fail the connect that already
succeeded.
"""

import asyncio
import logging
from typing import Any

import redis.asyncio as redis

from dbconnect.connectors.base import BaseConnector
from dbconnect.connectors.events import Settlement
from dbconnect.connectors.urls import default_name
from dbconnect.models import BackendKind, ConnectionSpec, RegisteredHandle

logger = logging.getLogger(__name__)


class RedisConnector(BaseConnector):
    """Key-value connector using redis-py's asyncio client."""

    kind = BackendKind.REDIS

    async def connect(self, spec: ConnectionSpec) -> list[RegisteredHandle]:
        """
        Create the client and wait for its ready event.

        Raises:
            ConnectError: If the driver reports an error before ready
        """
        name = spec.name or default_name(spec.connection_string)
        settlement = Settlement(self.kind, name)

        try:
            client = redis.from_url(spec.connection_string, **spec.options)
        except (ValueError, redis.RedisError) as e:
            raise self.connect_error(spec, e) from e

        probe = asyncio.create_task(self._probe(client, name, spec, settlement))
        try:
            await settlement.wait()
        except Exception:
            await probe
            await self._discard(client)
            raise

        self.connected(name)
        return [RegisteredHandle(name=name, handle=client)]

    async def _probe(
        self, client: Any, name: str, spec: ConnectionSpec, settlement: Settlement
    ) -> None:
        try:
            await client.ping()
        except Exception as e:
            self.on_error(name, spec, settlement, e)
        else:
            self.on_ready(client, settlement)

    def on_ready(self, client: Any, settlement: Settlement) -> None:
        settlement.resolve(client)

    def on_error(
        self, name: str, spec: ConnectionSpec, settlement: Settlement, error: BaseException
    ) -> None:
        """
        Handle a driver error event.

        Every error is logged. Only an error that arrives before ready fails
        the pending connect; later ones leave the settled outcome alone.
        """
        self.log.error(f"{self.label}/{name}: an error occurred: {error}")
        settlement.reject(self.connect_error(spec, error))

    async def _close_handle(self, handle: Any) -> None:
        await handle.aclose()

    async def _discard(self, client: Any) -> None:
        try:
            await client.aclose()
        except Exception as e:
            logger.debug(f"Ignoring error while discarding Redis client: {e}")
