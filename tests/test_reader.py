"""Tests for the Reader layer."""

import pytest

from merge_core.errors import FormatSyntaxError
from merge_core.reader import Node, Token, from_nested, read, to_tree


# ---------------------------------------------------------------------------
# read
# ---------------------------------------------------------------------------

def test_read_single_token():
    node = read("(A)")
    assert node == Node([Token("A", 1)], 0)

def test_read_multiple_tokens():
    node = read("(A B  C)")
    assert [t.value for t in node.items] == ["A", "B", "C"]

def test_read_nested_group():
    node = read("(/foo:o[3,1] (/baz:o))")
    assert isinstance(node.items[0], Token)
    assert node.items[0].value == "/foo:o[3,1]"
    inner = node.items[1]
    assert isinstance(inner, Node)
    assert inner.items[0].value == "/baz:o"

def test_read_group_glued_to_word():
    node = read("(a(b))")
    assert node.items[0].value == "a"
    assert isinstance(node.items[1], Node)

def test_read_whitespace_inside_brackets_dropped():
    node = read("(P[1, 2][3 - 4])")
    assert node.items[0].value == "P[1,2][3-4]"

def test_read_token_positions():
    node = read("( A  bb )")
    assert node.items[0].position == 2
    assert node.items[1].position == 5

def test_read_surrounding_whitespace():
    node = read("  (A)\n")
    assert node.items[0].value == "A"


def test_read_missing_closing_parenthesis():
    with pytest.raises(FormatSyntaxError, match="missing closing parenthesis"):
        read("(A (B)")

def test_read_unexpected_closing_parenthesis():
    with pytest.raises(FormatSyntaxError, match="unexpected closing parenthesis"):
        read("(A))")

def test_read_missing_closing_bracket():
    with pytest.raises(FormatSyntaxError, match="missing closing bracket") as info:
        read("(A[1,2)")
    assert info.value.position == 1

def test_read_requires_single_group():
    with pytest.raises(FormatSyntaxError, match="single group"):
        read("(A) (B)")

def test_read_bare_word_rejected():
    with pytest.raises(FormatSyntaxError, match="single group"):
        read("A")

def test_read_empty_text_rejected():
    with pytest.raises(FormatSyntaxError):
        read("   ")


# ---------------------------------------------------------------------------
# from_nested / to_tree
# ---------------------------------------------------------------------------

def test_from_nested_list():
    node = from_nested(["A[1]", ["B"]])
    assert node == Node([Token("A[1]"), Node([Token("B")])])

def test_from_nested_rejects_number():
    with pytest.raises(FormatSyntaxError, match="unexpected token"):
        from_nested(["A", 3])

def test_from_nested_rejects_non_list():
    with pytest.raises(FormatSyntaxError, match="must be a list"):
        from_nested("A")

def test_to_tree_passes_node_through():
    node = Node([Token("A")])
    assert to_tree(node) is node

def test_to_tree_text_and_list_agree():
    assert [t.value for t in to_tree("(A B)").items] == [t.value for t in to_tree(["A", "B"]).items]
