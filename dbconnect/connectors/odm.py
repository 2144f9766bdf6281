"""
ODM Connector

Document store connector that goes through an object-document mapper the
caller owns (``mongoengine`` or anything exposing the same ``connect`` /
``disconnect`` functions). The ODM keeps one global connection, so at most
one ODM spec is accepted per run.

mongoengine connects lazily and its client may never report anything on a
dead server, so readiness is probed with a ping: a successful ping is the
"open" event, a raised error is the "error" event, and a watchdog turns
silence into ConnectTimeoutError.
"""

import asyncio
import logging
from typing import Any

from dbconnect.connectors.base import BaseConnector, ConfigurationError
from dbconnect.connectors.events import Settlement
from dbconnect.models import BackendKind, ConnectionSpec, RegisteredHandle

logger = logging.getLogger(__name__)

# Connection alias ODM documents bind to unless they say otherwise.
ODM_ALIAS = "default"


class ODMConnector(BaseConnector):
    """Document store connector through an injected ODM."""

    kind = BackendKind.ODM

    @property
    def odm(self) -> Any:
        if self.options.odm is None:
            raise ConfigurationError("An ODM instance (e.g. mongoengine) must be provided")
        return self.options.odm

    async def connect(self, spec: ConnectionSpec) -> list[RegisteredHandle]:
        """
        Configure the ODM's global connection and wait for it to open.

        Raises:
            ConfigurationError: If no ODM was injected
            ConnectError: If the ODM reports an error
            ConnectTimeoutError: If the ODM stays silent past the watchdog
        """
        odm = self.odm
        name = spec.name or ODM_ALIAS
        settlement = Settlement(self.kind, name)

        try:
            client = odm.connect(host=spec.connection_string, alias=ODM_ALIAS, **spec.options)
        except Exception as e:
            raise self.connect_error(spec, e) from e

        probe = asyncio.create_task(self._probe(client, spec, settlement))
        try:
            await settlement.wait(timeout=self.options.odm_timeout)
        except Exception:
            await self._discard(name)
            raise
        finally:
            if not probe.done():
                probe.cancel()

        self.connected(name)
        return [RegisteredHandle(name=name, handle=client)]

    async def _discard(self, name: str) -> None:
        """Drop the global connection a failed connect left configured."""
        try:
            await asyncio.to_thread(self.odm.disconnect, alias=ODM_ALIAS)
        except Exception as e:
            self.log.error(f"{self.label}/{name} connection close error: {e}")

    async def _probe(self, client: Any, spec: ConnectionSpec, settlement: Settlement) -> None:
        try:
            await self._ping(client)
        except Exception as e:
            self.on_error(spec, settlement, e)
        else:
            self.on_open(client, settlement)

    async def _ping(self, client: Any) -> None:
        await asyncio.to_thread(client.admin.command, "ping")

    def on_open(self, client: Any, settlement: Settlement) -> None:
        settlement.resolve(client)

    def on_error(self, spec: ConnectionSpec, settlement: Settlement, error: BaseException) -> None:
        if not settlement.reject(self.connect_error(spec, error)):
            self.log.error(f"{self.label}/{settlement.target}: an error occurred: {error}")

    async def _close_handle(self, handle: Any) -> None:
        await asyncio.to_thread(self.odm.disconnect, alias=ODM_ALIAS)
