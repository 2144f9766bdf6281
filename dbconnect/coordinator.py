"""
Lifecycle Coordinator

Connects a heterogeneous list of connection specs concurrently, registers
every resulting handle under its logical name, and later closes them all.

Usage:
    coordinator = LifecycleCoordinator()
    await coordinator.init(
        [
            {"connection_string": "postgresql://u:p@db/app", "name": "app"},
            {"connection_string": "redis://cache:6379/0", "name": "cache"},
            {"connection_string": "mongodb://mongo/db1", "name": ["db1:alpha", "db1:beta"]},
        ],
        ConnectOptions(separator=":"),
    )
    pool = coordinator.get("app")
    ...
    await coordinator.close()

Failure semantics:
    ``init`` fails with the first connect error. Sibling connects are not
    cancelled; if one of them succeeds later its handles are still
    registered (and closed by ``close``). ``wait_pending`` waits for them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from dbconnect.connectors.base import BaseConnector, NameCollisionError
from dbconnect.connectors.factory import DISPATCH_ORDER, classify_specs, create_connector
from dbconnect.models import (
    BackendKind,
    ConnectionSpec,
    ConnectionState,
    ConnectOptions,
    ConnectOutcome,
)
from dbconnect.registry import ConnectionRegistry, RegistryEntry, get_registry

logger = logging.getLogger(__name__)


class LifecycleCoordinator:
    """Owns the registry and drives connect/close across backend families."""

    def __init__(self, registry: ConnectionRegistry | None = None):
        self.registry = registry if registry is not None else get_registry()
        self._options: ConnectOptions | None = None
        self._connectors: dict[BackendKind, BaseConnector] = {}
        self._outcomes: list[ConnectOutcome] = []
        self._owners: dict[str, ConnectOutcome] = {}
        self._tasks: list[asyncio.Task] = []

    @property
    def options(self) -> ConnectOptions:
        if self._options is None:
            self._options = ConnectOptions.from_settings()
        return self._options

    @property
    def outcomes(self) -> list[ConnectOutcome]:
        """Per-spec outcomes of the last ``init``, in dispatch order."""
        return list(self._outcomes)

    def get(self, name: str) -> Any:
        """Handle registered under ``name``."""
        return self.registry.get(name)

    def names(self) -> list[str]:
        return self.registry.names()

    async def init(
        self,
        specs: Iterable[ConnectionSpec | dict[str, Any]],
        options: ConnectOptions | dict[str, Any] | None = None,
    ) -> None:
        """
        Connect every spec concurrently and register the handles.

        Args:
            specs: Connection specs (models or plain dicts), in input order
            options: Shared options (defaults come from ConnectorSettings)

        Raises:
            ConfigurationError: Before any connect starts, for unroutable or
                malformed specs or a missing ODM
            ConnectError: First connect failure (ConnectTimeoutError for the
                ODM watchdog)
            NameCollisionError: First duplicate name or alias
        """
        if isinstance(options, dict):
            options = ConnectOptions(**options)
        self._options = options or ConnectOptions.from_settings()
        # Connectors from an earlier run hold that run's options.
        self._connectors = {}
        self._owners = {}

        buckets = classify_specs(specs, self._options)

        self._outcomes = []
        self._tasks = []
        for kind in DISPATCH_ORDER:
            if not buckets[kind]:
                continue
            connector = create_connector(kind, self._options)
            self._connectors[kind] = connector
            for spec in buckets[kind]:
                outcome = ConnectOutcome(kind=kind, target=spec.display_name)
                self._outcomes.append(outcome)
                task = asyncio.create_task(
                    self._connect_one(connector, spec, outcome),
                    name=f"connect:{kind.value}:{outcome.target}",
                )
                self._tasks.append(task)

        if not self._tasks:
            logger.debug("No connection specs given")
            return

        logger.debug(f"Connecting {len(self._tasks)} connection(s)")
        done, pending = await asyncio.wait(self._tasks, return_when=asyncio.FIRST_EXCEPTION)

        for task in pending:
            task.add_done_callback(self._report_late_failure)

        failures = [task.exception() for task in self._tasks if task in done and task.exception()]
        if failures:
            for extra in failures[1:]:
                self.options.logger.error(f"Additional connection failure: {extra}")
            raise failures[0]

    async def _connect_one(
        self,
        connector: BaseConnector,
        spec: ConnectionSpec,
        outcome: ConnectOutcome,
    ) -> None:
        try:
            handles = await connector.connect(spec)
        except Exception as e:
            outcome.state = ConnectionState.FAILED
            outcome.error = str(e)
            raise

        for registered in handles:
            try:
                self.registry.register(
                    registered.name,
                    registered.handle,
                    connector.kind,
                    parent=registered.parent,
                )
            except NameCollisionError as e:
                outcome.error = str(e)
                if not outcome.names:
                    # Nothing of this connection made it into the registry.
                    outcome.state = ConnectionState.FAILED
                    await connector.close(registered.name, registered.handle)
                else:
                    outcome.state = ConnectionState.CONNECTED
                raise
            outcome.names.append(registered.name)
            if not registered.is_alias:
                self._owners[registered.name] = outcome

        outcome.state = ConnectionState.CONNECTED

    def _report_late_failure(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.options.logger.error(f"Connection failed after init had already failed: {error}")

    async def wait_pending(self) -> None:
        """Wait for connects still running after a failed ``init``."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def close(self) -> None:
        """
        Close every registered connection.

        Aliases are dropped first, then all primaries are closed
        concurrently. Never raises; calling it again is a no-op.
        """
        for alias in self.registry.aliases():
            self.registry.unregister(alias.name)

        primaries = self.registry.primaries()
        if not primaries:
            return

        results = await asyncio.gather(
            *(self._close_one(entry) for entry in primaries),
            return_exceptions=True,
        )
        for entry, result in zip(primaries, results):
            if isinstance(result, Exception):
                self.options.logger.error(f"{entry.kind.value}/{entry.name} close failed: {result}")

    async def _close_one(self, entry: RegistryEntry) -> None:
        try:
            await self._connector_for(entry.kind).close(entry.name, entry.handle)
        finally:
            self.registry.unregister(entry.name)
            outcome = self._owners.pop(entry.name, None)
            if outcome is not None:
                outcome.state = ConnectionState.CLOSED

    def _connector_for(self, kind: BackendKind) -> BaseConnector:
        if kind not in self._connectors:
            self._connectors[kind] = create_connector(kind, self.options)
        return self._connectors[kind]

    async def __aenter__(self) -> "LifecycleCoordinator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    def __repr__(self) -> str:
        return f"<LifecycleCoordinator {len(self.registry)} registered>"
