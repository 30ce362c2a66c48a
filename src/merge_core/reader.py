"""Reader layer: converts format text or nested lists into a token tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .errors import FormatSyntaxError


@dataclass(slots=True)
class Token:
    """A bare word, e.g. ``/bar:o[2,3][1-4]``."""

    value: str
    position: int | None = None


@dataclass(slots=True)
class Node:
    """A parenthesised group of tokens and nested nodes."""

    items: list["Item"] = field(default_factory=list)
    position: int | None = None


Item = Union[Token, Node]


# ---------------------------------------------------------------------------
# Raw text
# ---------------------------------------------------------------------------

def read(text: str) -> Node:
    """Read format text into a single top-level Node.

    Whitespace separates tokens, ``(`` / ``)`` open and close groups and
    whitespace inside ``[...]`` is dropped so ``a[1, 2]`` stays one token.
    """
    stack: list[Node] = [Node(position=None)]
    word: list[str] = []
    word_start = 0
    depth = 0  # bracket depth inside the current word

    def flush() -> None:
        if word:
            stack[-1].items.append(Token("".join(word), word_start))
            word.clear()

    for pos, ch in enumerate(text):
        if depth:
            if ch == "]":
                depth -= 1
            elif ch == "[":
                depth += 1
            if not ch.isspace():
                word.append(ch)
            continue

        if ch.isspace():
            flush()
        elif ch == "(":
            flush()
            node = Node(position=pos)
            stack[-1].items.append(node)
            stack.append(node)
        elif ch == ")":
            flush()
            if len(stack) == 1:
                raise FormatSyntaxError("unexpected closing parenthesis", ")", pos)
            stack.pop()
        else:
            if not word:
                word_start = pos
            if ch == "[":
                depth += 1
            word.append(ch)

    if depth:
        raise FormatSyntaxError("missing closing bracket", "".join(word), word_start)
    flush()
    if len(stack) > 1:
        raise FormatSyntaxError(
            "missing closing parenthesis", "(", stack[-1].position
        )

    top = stack[0].items
    if len(top) != 1 or not isinstance(top[0], Node):
        raise FormatSyntaxError("format must be a single group", text.strip(), 0)
    return top[0]


# ---------------------------------------------------------------------------
# Pre-tokenised input
# ---------------------------------------------------------------------------

def from_nested(obj: Any) -> Node:
    """Wrap an already-split nested list (e.g. from a command argument)."""
    if not isinstance(obj, (list, tuple)):
        raise FormatSyntaxError("format must be a list", str(obj))
    return Node([_item_from_nested(o) for o in obj])


def _item_from_nested(obj: Any) -> Item:
    if isinstance(obj, (Token, Node)):
        return obj
    if isinstance(obj, (list, tuple)):
        return from_nested(obj)
    if isinstance(obj, str):
        return Token(obj)
    raise FormatSyntaxError("unexpected token", repr(obj))


def to_tree(spec: str | list | tuple | Node) -> Node:
    """Accept text, nested lists or an existing Node and return a Node."""
    if isinstance(spec, Node):
        return spec
    if isinstance(spec, str):
        return read(spec)
    return from_nested(spec)
