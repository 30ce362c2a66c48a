"""Shared fixtures."""

import pytest

from merge_core.registry import SourceRegistry
from merge_core.transport import CollectingSink, MemoryBus


@pytest.fixture
def bus():
    return MemoryBus()


@pytest.fixture
def sink():
    return CollectingSink()


@pytest.fixture
def make_registry(bus):
    """Publish *sources* on the bus, declare them and refresh once."""

    def _make(**sources):
        registry = SourceRegistry(bus)
        for name, value in sources.items():
            bus.publish(name, value)
            registry.declare(name)
        registry.refresh()
        return registry

    return _make
