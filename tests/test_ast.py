from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from livexpr.livexpr_ast import (
    Branch,
    Leaf,
    affected_ranges,
    collect_errors,
    touches,
)
from livexpr.livexpr_lexer import Token
from livexpr.livexpr_parser import parse_text


def brackets_2_minus_1() -> Branch:
    """The tree for "(2-1)" at offset 0."""
    return Branch(
        "brackets",
        [
            Leaf("bracket", "(", (0, 1)),
            Branch(
                "operation",
                [
                    Leaf("number", "2", (1, 2)),
                    Leaf("operator", "-", (2, 3)),
                    Leaf("number", "1", (3, 4)),
                ],
            ),
            Leaf("bracket", ")", (4, 5)),
        ],
    )


def test_leaf_repr_and_eq() -> None:
    leaf = Leaf("number", "42", (0, 2))
    assert repr(leaf) == "Leaf(number, '42', (0, 2))"
    assert leaf == Leaf("number", "42", (0, 2))
    assert leaf != Leaf("number", "42", (1, 3))
    assert leaf != "42"
    assert len({leaf, Leaf("number", "42", (0, 2))}) == 1


def test_leaf_from_token() -> None:
    leaf = Leaf.from_token(Token("identifier", "abc", (4, 7), True))
    assert leaf == Leaf("identifier", "abc", (4, 7))


def test_leaf_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError, match="Unknown leaf kind"):
        Leaf("whitespace", " ", (0, 1))  # type: ignore[arg-type]


def test_leaf_rejects_reversed_range() -> None:
    with pytest.raises(ValueError, match="Reversed range"):
        Leaf("error", "x", (3, 2))


def test_branch_range_spans_children() -> None:
    node = brackets_2_minus_1()
    assert node.range == (0, 5)
    assert node.children[1].range == (1, 4)


def test_branch_requires_children() -> None:
    with pytest.raises(ValueError, match="at least one child"):
        Branch("has-error", [])


def test_branch_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError, match="Unknown branch kind"):
        Branch("call", [Leaf("number", "1", (0, 1))])  # type: ignore[arg-type]


def test_nodes_are_immutable() -> None:
    node = brackets_2_minus_1()
    with pytest.raises(AttributeError, match="immutable"):
        node.kind = "operation"  # type: ignore[misc]
    with pytest.raises(AttributeError, match="immutable"):
        node.children[0].text = "["  # type: ignore[union-attr]
    assert isinstance(node.children, tuple)


def test_to_dict() -> None:
    node = Branch("has-error", [Leaf("error", "?", (0, 1))])
    assert node.to_dict() == {
        "kind": "has-error",
        "range": [0, 1],
        "children": [{"kind": "error", "text": "?", "range": [0, 1]}],
    }


def test_walk_is_pre_order() -> None:
    kinds = [n.kind for n in brackets_2_minus_1().walk()]
    assert kinds == ["brackets", "bracket", "operation", "number", "operator", "number", "bracket"]


def test_collect_errors_left_to_right() -> None:
    tree = parse_text("? (1 2")
    assert [(e.text, e.range) for e in collect_errors(tree)] == [
        ("?", (0, 1)),
        ("Missing operator", (1, 1)),
        (" ", (1, 2)),
        ("Missing operator", (2, 2)),
        ("Missing closing bracket", (4, 4)),
        ("Missing operator", (4, 4)),
        (" ", (4, 5)),
        ("Missing operator", (5, 5)),
    ]
    assert tree.collect_errors() == collect_errors(tree)


def test_collect_errors_on_leaf() -> None:
    assert collect_errors(Leaf("number", "1", (0, 1))) == []
    error = Leaf("error", "Missing term", (0, 0))
    assert error.collect_errors() == [error]


@pytest.mark.parametrize(
    "edit_kind,caret,expected",
    [
        ("insert", 2, False),
        ("insert", 3, True),
        ("insert", 4, True),
        ("insert", 5, False),
        ("delete", 2, False),
        ("delete", 3, True),
        ("delete", 5, True),
        ("delete", 6, False),
    ],
)
def test_touches(edit_kind: str, caret: int, expected: bool) -> None:
    assert touches((2, 5), edit_kind, caret) is expected  # type: ignore[arg-type]


def test_affected_ranges_leaf_boundary_law() -> None:
    leaf = Leaf("number", "123", (2, 5))
    assert leaf.affected_ranges("insert", 2) == []
    assert leaf.affected_ranges("insert", 5) == []
    assert leaf.affected_ranges("insert", 3) == [(2, 5)]
    assert leaf.affected_ranges("delete", 2) == []
    assert leaf.affected_ranges("delete", 3) == [(2, 5)]
    assert leaf.affected_ranges("delete", 5) == [(2, 5)]


def test_affected_ranges_bracket_override() -> None:
    node = brackets_2_minus_1()
    assert node.affected_ranges("insert", 1) == [(0, 1), (4, 5)]
    assert node.affected_ranges("insert", 4) == [(0, 1), (4, 5)]
    assert node.affected_ranges("delete", 1) == [(0, 1), (4, 5)]
    assert node.affected_ranges("delete", 5) == [(0, 1), (4, 5)]


def test_affected_ranges_descends_when_brackets_untouched() -> None:
    node = brackets_2_minus_1()
    assert node.affected_ranges("delete", 2) == [(1, 2)]
    assert node.affected_ranges("delete", 4) == [(3, 4)]
    assert node.affected_ranges("insert", 2) == []


def test_affected_ranges_outside_tree() -> None:
    node = brackets_2_minus_1()
    assert node.affected_ranges("insert", 0) == []
    assert node.affected_ranges("insert", 5) == []
    assert node.affected_ranges("delete", 0) == []


def test_affected_ranges_operation_union(tree_of: Any) -> None:
    tree = tree_of("12+345")
    assert affected_ranges(tree, "insert", 1) == [(0, 2)]
    assert affected_ranges(tree, "insert", 4) == [(3, 6)]
    assert affected_ranges(tree, "delete", 3) == [(2, 3)]
    assert affected_ranges(tree, "insert", 3) == []


def test_affected_ranges_nested_brackets() -> None:
    tree = parse_text("((1))")
    # caret right inside the inner opening bracket
    assert tree.affected_ranges("delete", 2) == [(1, 2), (3, 4)]
    assert tree.affected_ranges("insert", 1) == [(0, 1), (4, 5)]


def test_affected_ranges_through_has_error() -> None:
    tree = parse_text("(12")
    assert tree.affected_ranges("insert", 2) == [(1, 3)]
    assert tree.affected_ranges("delete", 1) == [(0, 1)]


@given(
    st.text(alphabet="0123456789ab+-*/() ?", max_size=30),
    st.sampled_from(["insert", "delete"]),
    st.integers(min_value=0, max_value=31),
)  # type: ignore[misc]
def test_affected_ranges_are_touched_leaf_ranges(text: str, edit_kind: str, caret: int) -> None:
    tree = parse_text(text)
    leaf_ranges = {n.range for n in tree.walk() if isinstance(n, Leaf)}
    ranges = tree.affected_ranges(edit_kind, caret)  # type: ignore[arg-type]
    assert ranges == sorted(set(ranges))
    for r in ranges:
        assert r in leaf_ranges
        assert r[0] < r[1]


def test_queries_on_a_deep_tree() -> None:
    tree = parse_text("1+" * 1000 + "1")
    assert tree.affected_ranges("delete", 1) == [(0, 1)]
    assert tree.affected_ranges("delete", 2001) == [(2000, 2001)]
    assert tree.affected_ranges("insert", 2000) == []
    assert collect_errors(tree) == []
    kinds = [n.kind for n in tree.walk()]
    assert kinds[:3] == ["operation", "operation", "operation"]
    assert kinds[-2:] == ["operator", "number"]
