"""
Single-settlement adapter for event-driven drivers.

Some drivers report readiness through callbacks ("ready", "open", "error")
rather than an awaitable. ``Settlement`` turns those callbacks into one
awaitable outcome: the first ``resolve``/``reject`` wins and every later
event is ignored.
"""

import asyncio
import logging
from typing import Any

from dbconnect.connectors.base import ConnectTimeoutError
from dbconnect.models import BackendKind

logger = logging.getLogger(__name__)


class Settlement:
    """
    One-shot outcome of an event-driven connect attempt.

    Usage:
        settlement = Settlement(BackendKind.REDIS, "cache")
        client.on("ready", lambda: settlement.resolve(client))
        client.on("error", settlement.reject)
        handle = await settlement.wait(timeout=60)
    """

    def __init__(self, kind: BackendKind, target: str):
        self.kind = kind
        self.target = target
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def settled(self) -> bool:
        return self._future.done()

    @property
    def succeeded(self) -> bool:
        return (
            self._future.done()
            and not self._future.cancelled()
            and self._future.exception() is None
        )

    def resolve(self, value: Any = None) -> bool:
        """Settle successfully. Returns False if already settled."""
        if self._future.done():
            logger.debug(f"Ignoring late success for {self.kind.value}/{self.target}")
            return False
        self._future.set_result(value)
        return True

    def reject(self, error: BaseException) -> bool:
        """Settle with an error. Returns False if already settled."""
        if self._future.done():
            logger.debug(f"Ignoring late error for {self.kind.value}/{self.target}: {error}")
            return False
        self._future.set_exception(error)
        return True

    async def wait(self, timeout: float | None = None) -> Any:
        """
        Wait for the outcome.

        Args:
            timeout: Watchdog interval in seconds (None = wait forever)

        Returns:
            Value passed to ``resolve``

        Raises:
            ConnectTimeoutError: If nothing settled within ``timeout``
            Exception: Whatever was passed to ``reject``
        """
        if timeout is None:
            return await self._future
        try:
            return await asyncio.wait_for(asyncio.shield(self._future), timeout)
        except asyncio.TimeoutError:
            if self.reject(ConnectTimeoutError(self.kind, self.target, timeout)):
                logger.debug(f"Watchdog expired for {self.kind.value}/{self.target}")
            return await self._future
