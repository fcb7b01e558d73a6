from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from livexpr.livexpr_ast import ASTNode, Branch, Leaf
from livexpr.livexpr_cursor import Cursor
from livexpr.livexpr_lexer import Token, tokenize
from livexpr.livexpr_parser import Parser, parse, parse_text


def num(text: str, start: int) -> Leaf:
    return Leaf("number", text, (start, start + len(text)))


def op(text: str, start: int) -> Leaf:
    return Leaf("operator", text, (start, start + 1))


def err(text: str, at: int) -> Leaf:
    return Leaf("error", text, (at, at))


def prune(node: dict[str, Any]) -> Any:
    """Reduce a serialized tree to nested (kind, text-or-children) pairs."""
    if "children" in node:
        return (node["kind"], [prune(c) for c in node["children"]])
    return (node["kind"], node["text"])


def assert_branch_ranges(node: ASTNode) -> None:
    if isinstance(node, Branch):
        assert node.children
        assert node.range == (node.children[0].range[0], node.children[-1].range[1])
        for child in node.children:
            assert_branch_ranges(child)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("3", num("3", 0)),
        ("x", Leaf("identifier", "x", (0, 1))),
        (
            "1+2",
            Branch("operation", [num("1", 0), op("+", 1), num("2", 2)]),
        ),
        (
            "1-2*3",
            Branch(
                "operation",
                [
                    Branch("operation", [num("1", 0), op("-", 1), num("2", 2)]),
                    op("*", 3),
                    num("3", 4),
                ],
            ),
        ),
        (
            "(12)",
            Branch(
                "brackets",
                [
                    Leaf("bracket", "(", (0, 1)),
                    num("12", 1),
                    Leaf("bracket", ")", (3, 4)),
                ],
            ),
        ),
    ],
)
def test_well_formed_trees(source: str, expected: ASTNode) -> None:
    assert parse_text(source) == expected


def test_left_associative_chain_shape() -> None:
    tree = parse_text("a+b-c/d")
    assert prune(tree.to_dict()) == (
        "operation",
        [
            (
                "operation",
                [
                    ("operation", [("identifier", "a"), ("operator", "+"), ("identifier", "b")]),
                    ("operator", "-"),
                    ("identifier", "c"),
                ],
            ),
            ("operator", "/"),
            ("identifier", "d"),
        ],
    )


def test_well_formed_input_has_no_errors() -> None:
    tree = parse_text("3+4*(2-1)")
    assert tree.collect_errors() == []
    assert tree.range == (0, 9)


def test_empty_input_yields_missing_term() -> None:
    assert parse([]) == Leaf("error", "Missing term", (0, 0))


def test_missing_term_after_operator_sits_at_end() -> None:
    tree = parse_text("3+")
    assert tree == Branch("operation", [num("3", 0), op("+", 1), err("Missing term", 2)])
    assert tree.range == (0, 2)


def test_unexpected_token_as_term() -> None:
    tree = parse_text(")")
    assert tree == Branch("has-error", [Leaf("error", ")", (0, 1))])


def test_operator_as_term_is_wrapped() -> None:
    tree = parse_text("*2")
    assert prune(tree.to_dict()) == (
        "has-error",
        [("has-error", [("error", "*")]), ("error", "Missing operator"), ("number", "2")],
    )


def test_missing_operator_between_numbers() -> None:
    tree = parse_text("3 4")
    assert isinstance(tree, Branch)
    assert tree.kind == "has-error"
    assert tree.children[0] == num("3", 0)
    assert tree.children[1] == err("Missing operator", 1)
    marker = tree.children[1]
    assert num("3", 0).range[1] <= marker.range[0] <= num("4", 2).range[0]
    assert [e.text for e in tree.collect_errors()] == [
        "Missing operator",
        " ",
        "Missing operator",
    ]


def test_unmatched_opening_bracket() -> None:
    tree = parse_text("(2-1")
    assert tree == Branch(
        "has-error",
        [
            Leaf("bracket", "(", (0, 1)),
            Branch("operation", [num("2", 1), op("-", 2), num("1", 3)]),
            err("Missing closing bracket", 4),
        ],
    )


def test_lone_opening_bracket() -> None:
    tree = parse_text("(")
    assert tree == Branch(
        "has-error",
        [
            Leaf("bracket", "(", (0, 1)),
            err("Missing term", 1),
            err("Missing closing bracket", 1),
        ],
    )


def test_unclosed_bracket_does_not_consume_following_token() -> None:
    tree = parse_text("(1 2")
    assert isinstance(tree, Branch)
    assert [c.kind for c in tree.children] == ["has-error", "error", "has-error"]
    assert tree.children[1] == err("Missing operator", 2)


def test_leading_garbage_is_chained() -> None:
    tree = parse_text("? 3+4*(2-1)")
    assert isinstance(tree, Branch)
    assert tree.kind == "has-error"
    assert tree.children[0] == Branch("has-error", [Leaf("error", "?", (0, 1))])
    assert tree.children[1] == err("Missing operator", 1)
    assert tree.range == (0, 11)
    assert [e.text for e in tree.collect_errors()] == [
        "?",
        "Missing operator",
        " ",
        "Missing operator",
    ]


def test_parser_over_explicit_cursor() -> None:
    tokens = [Token("number", "7", (0, 1)), Token("operator", "/", (1, 2))]
    parser = Parser(Cursor(tokens))
    tree = parser.parse()
    assert tree == Branch("operation", [num("7", 0), op("/", 1), err("Missing term", 2)])
    assert parser.tokens.is_exhausted()


def test_parse_text_passes_edited_flags() -> None:
    tree = parse_text("1+2", [True, False, False])
    assert tree.range == (0, 3)


@given(st.text(alphabet="0123456789xy_+-*/() ?!", max_size=40))  # type: ignore[misc]
def test_parser_never_fails_and_keeps_range_invariant(text: str) -> None:
    tree = parse(tokenize(text))
    assert_branch_ranges(tree)
    for error in tree.collect_errors():
        assert error.range[0] <= error.range[1]


@given(st.text(alphabet="0123456789xy_+-*/() ?!", min_size=1, max_size=40))  # type: ignore[misc]
def test_every_token_appears_once_in_the_tree(text: str) -> None:
    tokens = tokenize(text)
    tree = parse(tokens)
    leaves = [
        (n.text, n.range)
        for n in tree.walk()
        if isinstance(n, Leaf) and n.range[0] < n.range[1]
    ]
    assert leaves == [(t.text, t.range) for t in tokens]


def test_long_leftover_chain() -> None:
    tree = parse_text(" " * 2000)
    assert tree.range == (0, 2000)
    errors = tree.collect_errors()
    assert len(errors) == 3999
    assert errors[-1] == Leaf("error", " ", (1999, 2000))


def test_long_operator_chain() -> None:
    tree = parse_text("1+" * 1000 + "1")
    assert isinstance(tree, Branch)
    assert tree.kind == "operation"
    assert tree.children[2] == num("1", 2000)
    assert tree.collect_errors() == []
    assert sum(1 for _ in tree.walk()) == 3001


def test_deeply_nested_open_brackets() -> None:
    tree = parse_text("(" * 2000)
    errors = tree.collect_errors()
    assert errors[0] == err("Missing term", 2000)
    assert errors[1:] == [err("Missing closing bracket", 2000)] * 2000


def test_deeply_nested_closed_brackets() -> None:
    text = "(" * 1500 + "x" + ")" * 1500
    tree = parse_text(text)
    assert isinstance(tree, Branch)
    assert tree.kind == "brackets"
    assert tree.range == (0, len(text))
    assert tree.collect_errors() == []
