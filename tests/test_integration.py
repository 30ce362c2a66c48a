"""End-to-end tests: format text → ticks → emitted records."""

from merge_core import CollectingSink, Evaluator, MemoryBus, parse, to_native


def test_documented_example():
    """(/foo:o[3,1] /bar:o[2,3][1-4] (/baz:o))"""
    bus = MemoryBus()
    bus.publish("/foo:o", [1, 2, 3])
    bus.publish("/bar:o", [[9], [1, 2, 3, 4, 5], [6, 7, 8, 9]])
    bus.publish("/baz:o", ["x", "y"])
    sink = CollectingSink()
    ev = Evaluator.configure("(/foo:o[3,1] /bar:o[2,3][1-4] (/baz:o))", bus, sink)
    ev.tick()
    assert to_native(sink.records[0]) == [3, 1, 1, 2, 3, 4, 6, 7, 8, 9, ["x", "y"]]


def test_property_examples():
    bus = MemoryBus()
    bus.publish("P", [10, 20, 30, 40])
    bus.publish("Q", [[1, 2], [3, 4]])
    bus.publish("A", 5)
    bus.publish("B", [6, 7])

    cases = {
        "(P[2])": [20],
        "(P[2-4])": [20, 30, 40],
        "(Q[1,2][1])": [1, 3],
        "(A B)": [5, 6, 7],
    }
    for text, expected in cases.items():
        sink = CollectingSink()
        ev = Evaluator.configure(text, bus, sink)
        ev.tick()
        assert to_native(sink.records[0]) == expected, text
        ev.close()


def test_loop_survives_transient_failures():
    bus = MemoryBus()
    bus.create("late")
    bus.publish("early", [1, 2])
    sink = CollectingSink()
    ev = Evaluator.configure("(early late[1])", bus, sink)

    assert ev.tick() is None            # "late" has no data yet
    bus.publish("late", ["a"])
    assert to_native(ev.tick()) == [1, 2, "a"]
    bus.publish("late", [])
    assert ev.tick() is None            # index out of range this tick
    bus.publish("late", ["b", "c"])
    assert to_native(ev.tick()) == [1, 2, "b"]

    assert ev.stats.ticks == 4
    assert ev.stats.failed == 2
    assert [to_native(r) for r in sink.records] == [[1, 2, "a"], [1, 2, "b"]]


def test_parse_once_render_many():
    root = parse("(A[1] (B[2-3]))")
    assert root.to_string() == root.to_string()
    assert parse(root.to_format()) == root
