"""Boundaries to the outside world: named sources and output sinks.

Only an in-process implementation is provided; a middleware binding
implements the same protocols.
"""

from __future__ import annotations

import json
import threading
from typing import IO, Any, Protocol

from .errors import SourceConnectionError
from .values import Value, from_native, to_native


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

class SourceHandle(Protocol):
    def poll_latest(self) -> Value | None:
        """Newest value, or ``None`` if nothing new since the last poll."""

    def interrupt(self) -> None: ...

    def close(self) -> None: ...


class SourceConnector(Protocol):
    def open(self, name: str, local_name: str | None = None) -> SourceHandle:
        """Connect to *name*; raises SourceConnectionError if it cannot be found."""

    def query_name(self, name: str) -> bool: ...


class OutputSink(Protocol):
    def emit(self, value: Value) -> None: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# In-process bus
# ---------------------------------------------------------------------------

class MemoryHandle:
    """Reader end of a MemoryBus channel."""

    def __init__(self, bus: "MemoryBus", name: str, local_name: str | None) -> None:
        self.bus = bus
        self.name = name
        self.local_name = local_name
        self._seen = 0
        self.closed = False

    def poll_latest(self) -> Value | None:
        if self.closed:
            return None
        value, serial = self.bus._latest(self.name)
        if serial == self._seen:
            return None
        self._seen = serial
        return value

    def interrupt(self) -> None:
        pass

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.bus._release(self)


class MemoryBus:
    """Named latest-value channels shared within one process.

    ``open`` fails for names that were never published unless the bus
    was created with ``autocreate=True``.
    """

    def __init__(self, autocreate: bool = False) -> None:
        self.autocreate = autocreate
        self._lock = threading.Lock()
        self._channels: dict[str, tuple[Value | None, int]] = {}
        self._readers: dict[str, MemoryHandle] = {}

    def publish(self, name: str, value: Any) -> None:
        with self._lock:
            _, serial = self._channels.get(name, (None, 0))
            self._channels[name] = (from_native(value), serial + 1)

    def create(self, name: str) -> None:
        """Announce a channel without publishing any data on it."""
        with self._lock:
            self._channels.setdefault(name, (None, 0))

    def query_name(self, name: str) -> bool:
        with self._lock:
            return name in self._channels or name in self._readers

    def open(self, name: str, local_name: str | None = None) -> MemoryHandle:
        with self._lock:
            if name not in self._channels:
                if not self.autocreate:
                    raise SourceConnectionError(name)
                self._channels[name] = (None, 0)
            handle = MemoryHandle(self, name, local_name)
            if local_name is not None:
                self._readers[local_name] = handle
            return handle

    def _latest(self, name: str) -> tuple[Value | None, int]:
        with self._lock:
            return self._channels.get(name, (None, 0))

    def _release(self, handle: MemoryHandle) -> None:
        with self._lock:
            if handle.local_name is not None:
                self._readers.pop(handle.local_name, None)


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------

class CollectingSink:
    """Keeps every emitted record in memory."""

    def __init__(self) -> None:
        self.records: list[Value] = []

    def emit(self, value: Value) -> None:
        self.records.append(value)

    def close(self) -> None:
        pass


class StreamSink:
    """Writes each record as one JSON line."""

    def __init__(self, stream: IO[str]) -> None:
        self.stream = stream

    def emit(self, value: Value) -> None:
        print(json.dumps(to_native(value), ensure_ascii=False, default=str), file=self.stream)
        self.stream.flush()

    def close(self) -> None:
        pass
