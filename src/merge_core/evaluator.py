"""Evaluator: parse once, then refresh → select → emit on every tick."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

from .errors import SelectionError
from .parser import parse
from .reader import Node
from .registry import DEFAULT_PREFIX, SourceRegistry
from .selector import RootSelector
from .transport import OutputSink, SourceConnector
from .values import VList

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = 0.1


class State(Enum):
    CONFIGURED = auto()
    RUNNING = auto()
    STOPPED = auto()


@dataclass
class TickStats:
    ticks: int = 0
    emitted: int = 0
    failed: int = 0
    skipped: int = 0


class Evaluator:
    """Drives the tick loop for one parsed format.

    Usage::

        ev = Evaluator.configure("(/foo:o[1] /bar:o)", bus, sink)
        ev.tick()          # one refresh/select/emit cycle
        ev.run()           # periodic loop until stop()
    """

    def __init__(
        self,
        root: RootSelector,
        registry: SourceRegistry,
        sink: OutputSink,
        period: float = DEFAULT_PERIOD,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.root = root
        self.registry = registry
        self.sink = sink
        self.state = State.CONFIGURED
        self.stats = TickStats()
        self._period = DEFAULT_PERIOD
        self.set_period(period)
        self._clock = clock
        self._tick_lock = threading.Lock()
        self._stop = threading.Event()
        # stop() interrupts the default wait
        self._sleep = sleep if sleep is not None else self._stop.wait

    @classmethod
    def configure(
        cls,
        spec: str | list | tuple | Node,
        connector: SourceConnector,
        sink: OutputSink,
        *,
        period: float = DEFAULT_PERIOD,
        port_prefix: str = DEFAULT_PREFIX,
        **kwargs,
    ) -> "Evaluator":
        """Parse *spec* and declare its sources; errors propagate."""
        root = parse(spec)
        registry = SourceRegistry(connector, port_prefix)
        try:
            root.declare_sources(registry)
        except Exception:
            registry.close()
            raise
        logger.info(
            "configured format %s with %d source(s)", root.to_format(), len(registry)
        )
        return cls(root, registry, sink, period=period, **kwargs)

    # -- Period ---------------------------------------------------------

    @property
    def period(self) -> float:
        return self._period

    def set_period(self, period: float) -> None:
        if not math.isfinite(period) or period <= 0:
            raise ValueError("period must be a finite number larger than 0")
        self._period = period

    def set_frequency(self, frequency: float) -> None:
        if not math.isfinite(frequency) or frequency <= 0:
            raise ValueError("frequency must be a finite number larger than 0")
        self.set_period(1.0 / frequency)

    # -- Ticking --------------------------------------------------------

    def tick(self) -> VList | None:
        """Run one cycle; returns the emitted record or ``None`` if skipped."""
        if self.state is State.STOPPED:
            raise RuntimeError("evaluator is stopped")
        if not self._tick_lock.acquire(blocking=False):
            self.stats.skipped += 1
            logger.debug("tick skipped: previous tick still running")
            return None
        try:
            self.stats.ticks += 1
            self.registry.refresh()
            try:
                record = self.root.evaluate(self.registry)
            except SelectionError as exc:
                self.stats.failed += 1
                logger.warning(
                    "tick %d failed: %s", self.stats.ticks, exc,
                    extra={"source": exc.source, "tick": self.stats.ticks},
                )
                return None
            self.sink.emit(record)
            self.stats.emitted += 1
            return record
        finally:
            self._tick_lock.release()

    def run(self, max_ticks: int | None = None) -> None:
        """Tick every ``period`` seconds until stop() or *max_ticks*.

        A tick that overruns its period skips the missed slots instead of
        firing them back to back.
        """
        if self.state is State.STOPPED:
            raise RuntimeError("evaluator is stopped")
        self.state = State.RUNNING
        logger.info("running at %.3f s period", self._period)
        count = 0
        deadline = self._clock()
        try:
            while not self._stop.is_set():
                self.tick()
                count += 1
                if max_ticks is not None and count >= max_ticks:
                    break
                deadline += self._period
                now = self._clock()
                if now > deadline:
                    missed = int((now - deadline) // self._period) + 1
                    self.stats.skipped += missed
                    deadline += missed * self._period
                self._sleep(deadline - now)
        finally:
            # a stop() issued before or during this run is consumed here
            self._stop.clear()
            if self.state is State.RUNNING:
                self.state = State.CONFIGURED

    def stop(self) -> None:
        self._stop.set()

    def close(self) -> None:
        self.stop()
        self.state = State.STOPPED
        self.registry.interrupt()
        self.registry.close()
        self.sink.close()

    # -- Diagnostics ----------------------------------------------------

    def info(self) -> str:
        return self.root.to_string()
