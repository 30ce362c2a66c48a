"""merge_core — merge named live data sources into one record per tick."""

from .errors import (
    ConfigurationError,
    FormatSyntaxError,
    IllegalRangeError,
    IndexOutOfRangeError,
    IndexTypeError,
    MergeCoreError,
    RangeError,
    SelectionError,
    SourceConnectionError,
    UnknownSourceError,
)
from .evaluator import Evaluator, State
from .parser import parse
from .registry import SourceRegistry
from .selector import GroupSelector, RootSelector, Selector, SourceSelector
from .transport import CollectingSink, MemoryBus, StreamSink
from .values import Empty, Value, VList, VScalar, from_native, to_native
from .console import MergeConsole

__all__ = [
    "parse",
    "Evaluator",
    "State",
    "SourceRegistry",
    "Selector",
    "SourceSelector",
    "GroupSelector",
    "RootSelector",
    "MemoryBus",
    "CollectingSink",
    "StreamSink",
    "Empty",
    "Value",
    "VList",
    "VScalar",
    "from_native",
    "to_native",
    "MergeConsole",
    "MergeCoreError",
    "ConfigurationError",
    "FormatSyntaxError",
    "IllegalRangeError",
    "RangeError",
    "SourceConnectionError",
    "UnknownSourceError",
    "SelectionError",
    "IndexTypeError",
    "IndexOutOfRangeError",
]
