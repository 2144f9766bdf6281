"""
Base Backend Connector

Abstract base class for all backend connectors. Each backend family exposes
the same small async capability interface to the lifecycle coordinator.

All connectors must implement:
- connect(): Establish the connection and return the handles to register
- close(): Release a registered handle (best-effort, never raises)
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from dbconnect.models import BackendKind, ConnectionSpec, ConnectOptions, RegisteredHandle

logger = logging.getLogger(__name__)


# ============================================================================
# Errors
# ============================================================================


class ConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class ConfigurationError(ConnectorError):
    """Connection spec cannot be routed or is missing a required dependency."""

    pass


class ConnectError(ConnectorError):
    """Driver reported a failure while establishing a connection."""

    def __init__(self, kind: BackendKind, target: str, cause: BaseException | str | None = None):
        self.kind = kind
        self.target = target
        self.cause = cause
        label = LABELS.get(kind, str(kind))
        message = f"{label}/{target} connection error"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ConnectTimeoutError(ConnectError, TimeoutError):
    """Driver signalled neither success nor failure before the watchdog expired."""

    def __init__(self, kind: BackendKind, target: str, timeout: float):
        self.timeout = timeout
        super().__init__(kind, target, f"no response after {timeout:g}s")


class NameCollisionError(ConnectorError):
    """A registry name or alias is already taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Cannot register multiple connections under name {name!r}")


class HandleNotFoundError(ConnectorError, KeyError):
    """No handle is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No connection registered under name {name!r}")

    def __str__(self) -> str:
        return self.args[0]


LABELS = {
    BackendKind.MONGODB: "Mongo",
    BackendKind.ODM: "Mongoengine",
    BackendKind.POSTGRESQL: "PostgreSQL",
    BackendKind.MYSQL: "MySQL",
    BackendKind.REDIS: "Redis",
}


# ============================================================================
# Base Connector
# ============================================================================


class BaseConnector(ABC):
    """
    Abstract base class for backend connectors.

    One connector instance serves every spec of its family for the duration
    of one ``init``/``close`` cycle. Connectors do not touch the registry:
    ``connect`` returns the name/handle pairs and the coordinator registers
    them.

    Usage:
        class MyConnector(BaseConnector):
            kind = BackendKind.REDIS

            async def connect(self, spec):
                client = ...
                return [RegisteredHandle(name="cache", handle=client)]

            async def _close_handle(self, handle):
                await handle.aclose()

        connector = MyConnector(ConnectOptions())
        handles = await connector.connect(spec)
        await connector.close("cache", handles[0].handle)
    """

    kind: BackendKind

    def __init__(self, options: ConnectOptions):
        """
        Initialize connector.

        Args:
            options: Options shared by every connector of this run
        """
        self.options = options

    @property
    def label(self) -> str:
        """Backend label used in log lines."""
        return LABELS[self.kind]

    @property
    def log(self) -> Any:
        """Caller-supplied logger sink."""
        return self.options.logger

    @abstractmethod
    async def connect(self, spec: ConnectionSpec) -> list[RegisteredHandle]:
        """
        Establish a connection for one spec.

        Args:
            spec: Connection spec routed to this family

        Returns:
            Handles to register; the primary comes first, aliases after it

        Raises:
            ConnectError: If the driver reports a failure
            ConfigurationError: If the connection spec is malformed for this family
        """
        pass

    @abstractmethod
    async def _close_handle(self, handle: Any) -> None:
        """Release the driver resource behind a handle. May raise."""
        pass

    async def close(self, name: str, handle: Any) -> None:
        """
        Close a registered handle.

        Best-effort: a failure is logged once and never propagated.
        """
        try:
            await self._close_handle(handle)
        except Exception as e:
            self.log.error(f"{self.label}/{name} connection close error: {e}")
            return
        self.log.info(f"{self.label}/{name} connection closed")

    def connected(self, name: str) -> None:
        """Log a successful connect."""
        self.log.info(f"{self.label}/{name} connection OK")

    def connect_error(self, spec: ConnectionSpec, cause: BaseException | str) -> ConnectError:
        """Build a ConnectError carrying this family and the connection's target."""
        return ConnectError(self.kind, spec.display_name, cause)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} kind={self.kind.value}>"
