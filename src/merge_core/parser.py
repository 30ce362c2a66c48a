"""FormatParser: token tree → Selector tree.

Grammar::

    format      := group
    group       := '(' specifier (specifier)* ')'
    specifier   := group | source_ref
    source_ref  := name ('[' index_list ']')*
    index_list  := index (',' index)*
    index       := INTEGER | INTEGER '-' INTEGER
    name        := [A-Za-z0-9_:/]+
"""

from __future__ import annotations

import re

from .errors import FormatSyntaxError, IllegalRangeError
from .reader import Node, Token, to_tree
from .selector import GroupSelector, RootSelector, Selector, SourceSelector


_NAME_RE = re.compile(r"^[A-Za-z0-9_:/]+$")
_INT_RE = re.compile(r"^\d+$")

MAX_INDEX = 2**31 - 1
MAX_GROUP_SIZE = 65536  # indices per bracketed group after range expansion


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def parse(spec: str | list | tuple | Node) -> RootSelector:
    """Parse a format (text, nested list or Node) into a RootSelector."""
    node = to_tree(spec)
    return RootSelector(_parse_children(node))


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

def _parse_children(node: Node) -> tuple[Selector, ...]:
    if not node.items:
        raise FormatSyntaxError("empty group", "()", node.position)
    return tuple(_parse_specifier(item) for item in node.items)


def _parse_specifier(item) -> Selector:
    if isinstance(item, Node):
        return GroupSelector(_parse_children(item))
    if isinstance(item, Token):
        return parse_source_ref(item.value, item.position)
    raise FormatSyntaxError("unexpected token", repr(item))


# ---------------------------------------------------------------------------
# Source references
# ---------------------------------------------------------------------------

def parse_source_ref(text: str, position: int | None = None) -> SourceSelector:
    """Parse ``name[...][...]`` into a SourceSelector.

    Each bracketed list becomes one index group; indices are converted
    from 1-based to 0-based.
    """
    start = text.find("[")
    name = text if start == -1 else text[:start]
    if not _NAME_RE.match(name):
        raise FormatSyntaxError("invalid source name", text, position)

    groups: list[tuple[int, ...]] = []
    while start != -1:
        end = text.find("]", start)
        if end == -1:
            raise FormatSyntaxError(
                "missing closing bracket", text, _offset(position, start)
            )
        nested = text.find("[", start + 1, end)
        if nested != -1:
            raise FormatSyntaxError(
                "unexpected opening bracket", text, _offset(position, nested)
            )
        groups.append(
            parse_indices(text[start + 1:end], _offset(position, start + 1))
        )

        rest = end + 1
        if rest == len(text):
            break
        if text[rest] != "[":
            raise FormatSyntaxError(
                "unexpected text after index group", text[rest:], _offset(position, rest)
            )
        start = rest

    return SourceSelector(name, tuple(groups))


def parse_indices(text: str, position: int | None = None) -> tuple[int, ...]:
    """Parse ``2,3,5-7`` into 0-based indices ``(1, 2, 4, 5, 6)``.

    Order and duplicates are preserved; ranges are inclusive and ascending.
    """
    indices: list[int] = []
    for part in text.split(","):
        bounds = part.split("-")
        if len(bounds) == 1:
            if len(indices) >= MAX_GROUP_SIZE:
                raise IllegalRangeError(
                    f"more than {MAX_GROUP_SIZE} indices in one group", part, position
                )
            indices.append(_to_index(bounds[0], position) - 1)
        elif len(bounds) == 2:
            first = _to_index(bounds[0], position)
            last = _to_index(bounds[1], position)
            if first > last:
                raise IllegalRangeError(
                    "end of range before start of range", part, position
                )
            if len(indices) + last - first + 1 > MAX_GROUP_SIZE:
                raise IllegalRangeError(
                    f"range expands to more than {MAX_GROUP_SIZE} indices", part, position
                )
            indices.extend(range(first - 1, last))
        else:
            raise IllegalRangeError("illegal range specification", part, position)
    return tuple(indices)


def _to_index(text: str, position: int | None) -> int:
    if not _INT_RE.match(text) or len(text) > len(str(MAX_INDEX)):
        raise FormatSyntaxError("invalid integer", text, position)
    value = int(text)
    if value > MAX_INDEX:
        raise FormatSyntaxError("invalid integer", text, position)
    if value < 1:
        raise FormatSyntaxError("indices start at 1", text, position)
    return value


def _offset(position: int | None, delta: int) -> int | None:
    return None if position is None else position + delta
