"""SourceRegistry: named sources required by a selector tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from .errors import SourceConnectionError, UnknownSourceError
from .transport import SourceConnector, SourceHandle
from .values import Empty, Value, _Empty

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "/lm/merge/source"


@dataclass
class SourceEntry:
    """Connection to one source plus its most recent value."""

    handle: SourceHandle
    local_name: str
    value: Value | _Empty = Empty


class SourceRegistry:
    """Maps source names to connections and cached values.

    Usage::

        registry = SourceRegistry(bus)
        root.declare_sources(registry)
        registry.refresh()
        registry.get("/foo:o")
    """

    def __init__(self, connector: SourceConnector, prefix: str = DEFAULT_PREFIX) -> None:
        self.connector = connector
        self.prefix = prefix
        self._entries: dict[str, SourceEntry] = {}

    # -- Declaration ----------------------------------------------------

    def declare(self, name: str) -> None:
        """Connect to *name* once; repeated declarations are ignored."""
        if name in self._entries:
            return
        local_name = self._next_local_name()
        try:
            handle = self.connector.open(name, local_name)
        except OSError as exc:
            raise SourceConnectionError(name, str(exc)) from exc
        self._entries[name] = SourceEntry(handle=handle, local_name=local_name)
        logger.info("connected source %s to %s", name, local_name)

    def _next_local_name(self) -> str:
        """First free ``<prefix><n>:i`` name."""
        taken = {e.local_name for e in self._entries.values()}
        n = 1
        while True:
            candidate = f"{self.prefix}{n}:i"
            if candidate not in taken and not self.connector.query_name(candidate):
                return candidate
            n += 1

    # -- Per-tick -------------------------------------------------------

    def refresh(self) -> None:
        """Pull the latest value of every source; keep the cache when idle."""
        for name, entry in self._entries.items():
            try:
                value = entry.handle.poll_latest()
            except (SourceConnectionError, OSError) as exc:
                logger.warning("source %s unavailable: %s", name, exc, extra={"source": name})
                continue
            if value is not None:
                entry.value = value

    def get(self, name: str) -> Value | _Empty:
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownSourceError(name)
        return entry.value

    # -- Introspection --------------------------------------------------

    def has(self, name: str) -> bool:
        return name in self._entries

    def names(self) -> list[str]:
        return list(self._entries)

    def local_name(self, name: str) -> str:
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownSourceError(name)
        return entry.local_name

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    # -- Lifecycle ------------------------------------------------------

    def interrupt(self) -> None:
        for entry in self._entries.values():
            entry.handle.interrupt()

    def close(self) -> None:
        for entry in self._entries.values():
            entry.handle.close()
        self._entries.clear()

    def __enter__(self) -> "SourceRegistry":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
