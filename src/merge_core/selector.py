"""Selector tree: source references and (root) groups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from .errors import IndexOutOfRangeError, IndexTypeError
from .values import Value, VList, _Empty

if TYPE_CHECKING:
    from .registry import SourceRegistry


# ---------------------------------------------------------------------------
# SourceSelector
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SourceSelector:
    """Selects (part of) the latest value of one named source.

    ``index_groups`` holds one tuple of 0-based indices per bracketed
    ``[...]`` clause. Without index groups the whole value is selected.
    """

    name: str
    index_groups: tuple[tuple[int, ...], ...] = ()

    def declare_sources(self, registry: SourceRegistry) -> None:
        registry.declare(self.name)

    def sources(self) -> list[str]:
        return [self.name]

    def select(self, out: list[Value], registry: SourceRegistry) -> None:
        data = registry.get(self.name)
        if not self.index_groups:
            # no indices, select all
            if isinstance(data, _Empty):
                return
            _add(out, data)
            return
        self._select_recursive(out, data, self.index_groups)

    def _select_recursive(
        self,
        out: list[Value],
        data: Value | _Empty,
        groups: tuple[tuple[int, ...], ...],
    ) -> None:
        if isinstance(data, _Empty):
            raise IndexTypeError("cannot index source without data yet", self.name)
        if not isinstance(data, VList):
            raise IndexTypeError("cannot index non-list type", self.name)

        indices, rest = groups[0], groups[1:]
        for idx in indices:
            if idx >= len(data.items):
                raise IndexOutOfRangeError(self.name, idx, len(data.items))
            item = data.items[idx]
            if rest:
                if not isinstance(item, VList):
                    raise IndexTypeError("cannot index non-list type", self.name)
                self._select_recursive(out, item, rest)
            else:
                _add(out, item)

    def to_string(self, indent: int = 0) -> str:
        return " " * indent + self.to_format() + "\n"

    def to_format(self) -> str:
        return self.name + "".join(
            "[" + ",".join(str(i + 1) for i in group) + "]"
            for group in self.index_groups
        )


# ---------------------------------------------------------------------------
# GroupSelector / RootSelector
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class GroupSelector:
    """Wraps the output of its children in a nested list."""

    children: tuple["Selector", ...]

    def declare_sources(self, registry: SourceRegistry) -> None:
        for child in self.children:
            child.declare_sources(registry)

    def sources(self) -> list[str]:
        names: list[str] = []
        for child in self.children:
            for name in child.sources():
                if name not in names:
                    names.append(name)
        return names

    def select(self, out: list[Value], registry: SourceRegistry) -> None:
        nested: list[Value] = []
        self._select_children(nested, registry)
        out.append(VList(tuple(nested)))

    def _select_children(self, out: list[Value], registry: SourceRegistry) -> None:
        for child in self.children:
            child.select(out, registry)

    def to_string(self, indent: int = 0) -> str:
        pad = " " * indent
        body = "".join(child.to_string(indent + 2) for child in self.children)
        return f"{pad}(\n{body}{pad})\n"

    def to_format(self) -> str:
        return "(" + " ".join(child.to_format() for child in self.children) + ")"


@dataclass(frozen=True, slots=True)
class RootSelector(GroupSelector):
    """Entry point of a format; does *not* wrap its children's output."""

    def select(self, out: list[Value], registry: SourceRegistry) -> None:
        self._select_children(out, registry)

    def evaluate(self, registry: SourceRegistry) -> VList:
        """Select into a fresh top-level record."""
        out: list[Value] = []
        self.select(out, registry)
        return VList(tuple(out))


Selector = Union[SourceSelector, GroupSelector, RootSelector]


def _add(out: list[Value], value: Value) -> None:
    """Splice the elements of a list, append a scalar directly."""
    if isinstance(value, VList):
        out.extend(value.items)
    else:
        out.append(value)
