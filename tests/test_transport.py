"""Tests for the in-process transport."""

import io
import json

import pytest

from merge_core.errors import SourceConnectionError
from merge_core.transport import CollectingSink, MemoryBus, StreamSink
from merge_core.values import VScalar, from_native


def test_open_unknown_name_fails():
    with pytest.raises(SourceConnectionError):
        MemoryBus().open("/x")

def test_autocreate_opens_unknown_name():
    bus = MemoryBus(autocreate=True)
    handle = bus.open("/x")
    assert handle.poll_latest() is None
    assert bus.query_name("/x")

def test_poll_returns_each_value_once():
    bus = MemoryBus()
    bus.publish("/x", 1)
    handle = bus.open("/x")
    assert handle.poll_latest() == VScalar(1)
    assert handle.poll_latest() is None

def test_poll_returns_only_newest():
    bus = MemoryBus()
    bus.publish("/x", 1)
    handle = bus.open("/x")
    bus.publish("/x", 2)
    bus.publish("/x", 3)
    assert handle.poll_latest() == VScalar(3)

def test_closed_handle_polls_nothing():
    bus = MemoryBus()
    bus.publish("/x", 1)
    handle = bus.open("/x", "/in:i")
    handle.close()
    assert handle.poll_latest() is None
    assert not bus.query_name("/in:i")

def test_collecting_sink():
    sink = CollectingSink()
    sink.emit(VScalar(1))
    assert sink.records == [VScalar(1)]

def test_stream_sink_writes_json_lines():
    buf = io.StringIO()
    sink = StreamSink(buf)
    sink.emit(from_native([1, ["a", 2.5]]))
    sink.emit(from_native([]))
    lines = buf.getvalue().splitlines()
    assert [json.loads(line) for line in lines] == [[1, ["a", 2.5]], []]
