"""Value types for merge_core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class VScalar:
    value: Any  # number, string or any opaque primitive

    def __str__(self) -> str:
        v = self.value
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        return str(v)


@dataclass(frozen=True, slots=True)
class VList:
    items: tuple["Value", ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __str__(self) -> str:
        return "(" + " ".join(str(v) for v in self.items) + ")"

    def __len__(self) -> int:
        return len(self.items)


class _Empty:
    """Singleton for a source that has not produced any data yet."""

    _instance: "_Empty | None" = None

    def __new__(cls) -> "_Empty":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Empty"

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return "Empty"


Empty = _Empty()

Value = Union[VScalar, VList]


# ---------------------------------------------------------------------------
# Native conversion
# ---------------------------------------------------------------------------

def from_native(obj: Any) -> Value:
    """Convert nested Python lists/tuples and scalars to a Value.

    Values are passed through unchanged.
    """
    if isinstance(obj, (VScalar, VList)):
        return obj
    if isinstance(obj, (list, tuple)):
        return VList(tuple(from_native(o) for o in obj))
    return VScalar(obj)


def to_native(value: Value | _Empty) -> Any:
    """Convert a Value back to plain Python objects (``Empty`` → ``None``)."""
    if isinstance(value, VList):
        return [to_native(v) for v in value.items]
    if isinstance(value, VScalar):
        return value.value
    return None
