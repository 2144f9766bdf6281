"""
Connection registry.

Maps logical names to live connection handles. Names are unique across the
whole registry: a second registration under a taken name raises
NameCollisionError and the earlier entry stays in place.

Registration never awaits, so on the single event loop the duplicate check
and the write happen in one uninterrupted step even when many connects
finish at once.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from dbconnect.connectors.base import HandleNotFoundError, NameCollisionError
from dbconnect.models import BackendKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryEntry:
    """A registered handle."""

    name: str
    handle: Any
    kind: BackendKind
    parent: str | None = None

    @property
    def is_alias(self) -> bool:
        return self.parent is not None


class ConnectionRegistry:
    """Name -> handle mapping with collision detection."""

    def __init__(self) -> None:
        self._entries: dict[str, RegistryEntry] = {}

    def register(
        self,
        name: str,
        handle: Any,
        kind: BackendKind,
        parent: str | None = None,
    ) -> RegistryEntry:
        """
        Register a handle under a name.

        Args:
            name: Logical name
            handle: Driver handle
            kind: Backend family that owns the handle
            parent: Primary name when registering an alias

        Returns:
            The new entry

        Raises:
            NameCollisionError: If the name is already registered
        """
        if name in self._entries:
            raise NameCollisionError(name)
        entry = RegistryEntry(name=name, handle=handle, kind=kind, parent=parent)
        self._entries[name] = entry
        logger.debug(f"Registered {kind.value} handle {name!r}")
        return entry

    def get(self, name: str) -> Any:
        """Return the handle registered under ``name``."""
        return self.entry(name).handle

    def entry(self, name: str) -> RegistryEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise HandleNotFoundError(name) from None

    def unregister(self, name: str) -> RegistryEntry | None:
        """Remove a name. Unknown names are ignored."""
        entry = self._entries.pop(name, None)
        if entry is not None:
            logger.debug(f"Unregistered {entry.kind.value} handle {name!r}")
        return entry

    def names(self) -> list[str]:
        return list(self._entries)

    def primaries(self) -> list[RegistryEntry]:
        return [entry for entry in self._entries.values() if not entry.is_alias]

    def aliases(self) -> list[RegistryEntry]:
        return [entry for entry in self._entries.values() if entry.is_alias]

    def aliases_of(self, parent: str) -> list[RegistryEntry]:
        return [entry for entry in self._entries.values() if entry.parent == parent]

    def clear(self) -> None:
        self._entries.clear()

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"<ConnectionRegistry {len(self._entries)} entries>"


@lru_cache
def get_registry() -> ConnectionRegistry:
    """Process-wide shared registry."""
    return ConnectionRegistry()
