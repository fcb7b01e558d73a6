"""
Defines the syntax tree for LIVEXPR expressions and the read-only queries over it.

Classes:
    Leaf:
        A node built from a single token, or a parser-synthesized error marker.
    Branch:
        An inner node of kind `operation`, `brackets` or `has-error`.
    ASTDict:
        TypedDict representation used to serialize nodes to plain dictionaries.

Every node tracks:
    kind (str): The closed node kind (see `livexpr_constants`).
    range (SourceRange): Half-open ``(start, end)`` interval into the source text.

A branch always has at least one child and its range always spans from its
first child's start to its last child's end. Zero-width ranges only occur on
synthesized `error` leaves.

Queries:
    collect_errors(node): All `error` leaves in left-to-right order.
    touches(range, edit_kind, caret): Whether an edit at `caret` reaches `range`.
    affected_ranges(node, edit_kind, caret): Source ranges a pending edit impacts.

Nodes are immutable once constructed. The tree is rebuilt from scratch on
every edit, so nothing is ever shared between two trees.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any, TypedDict, assert_never

from livexpr.livexpr_constants import (
    BRANCH_KINDS,
    LEAF_KINDS,
    BranchKind,
    EditKind,
    LeafKind,
    SourceRange,
)

if TYPE_CHECKING:
    from livexpr.livexpr_lexer import Token


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of a node used for serialization.

    Fields:
        kind (str): The node kind (e.g., "operation", "number", "error").
        text (str): The leaf text. Absent on branches.
        range (list[int]): ``[start, end]`` of the node.
        children (list[ASTDict]): Child nodes. Absent on leaves.
    """

    kind: str
    text: str
    range: list[int]
    children: list["ASTDict"]


class _Frozen:
    _frozen = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self._frozen:
            raise AttributeError(f"{type(self).__name__} nodes are immutable")
        super().__setattr__(name, value)


class Leaf(_Frozen):
    """
    A terminal node of the syntax tree.

    Args:
        kind (LeafKind): One of "number", "identifier", "bracket", "operator", "error".
        text (str): The token text, or the message of a synthesized error.
        range (SourceRange): Half-open source interval. May be zero-width for errors.

    Raises:
        ValueError: If `kind` is unknown or the range is reversed.
    """

    def __init__(self, kind: LeafKind, text: str, range: SourceRange) -> None:
        if kind not in LEAF_KINDS:
            raise ValueError(f"Unknown leaf kind: {kind!r}")
        if range[0] > range[1]:
            raise ValueError(f"Reversed range: {range}")
        self.kind: LeafKind = kind
        self.text = text
        self.range: SourceRange = (range[0], range[1])
        self._frozen = True

    @classmethod
    def from_token(cls, token: Token) -> Leaf:
        """Builds a leaf carrying the token's kind, text and range.

        Raises:
            ValueError: If the token kind has no leaf counterpart ("whitespace").
        """
        return cls(token.kind, token.text, token.range)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"Leaf({self.kind}, {self.text!r}, {self.range})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Leaf)
            and self.kind == other.kind
            and self.text == other.text
            and self.range == other.range
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.text, self.range))

    def to_dict(self) -> ASTDict:
        return {"kind": self.kind, "text": self.text, "range": list(self.range)}

    def walk(self) -> Iterator[ASTNode]:
        yield self

    def collect_errors(self) -> list[Leaf]:
        return collect_errors(self)

    def affected_ranges(self, edit_kind: EditKind, caret: int) -> list[SourceRange]:
        return affected_ranges(self, edit_kind, caret)


class Branch(_Frozen):
    """
    An inner node of the syntax tree.

    The range is derived from the children and is never passed in.

    Args:
        kind (BranchKind): One of "operation", "brackets", "has-error".
        children (Sequence[ASTNode]): At least one child, in source order.

    Raises:
        ValueError: If `kind` is unknown or `children` is empty.
    """

    def __init__(self, kind: BranchKind, children: Sequence[ASTNode]) -> None:
        if kind not in BRANCH_KINDS:
            raise ValueError(f"Unknown branch kind: {kind!r}")
        if not children:
            raise ValueError(f"A {kind} branch needs at least one child")
        self.kind: BranchKind = kind
        self.children: tuple[ASTNode, ...] = tuple(children)
        self.range: SourceRange = (self.children[0].range[0], self.children[-1].range[1])
        self._frozen = True

    def __repr__(self) -> str:
        preview = ", ".join(repr(c) for c in self.children)
        return f"Branch({self.kind}, {self.range}, children=[{preview}])"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Branch)
            and self.kind == other.kind
            and self.children == other.children
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.children))

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "range": list(self.range),
            "children": [c.to_dict() for c in self.children],
        }

    def walk(self) -> Iterator[ASTNode]:
        """Yields this node and every descendant in pre-order."""
        stack: list[ASTNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, Branch):
                stack.extend(reversed(node.children))

    def collect_errors(self) -> list[Leaf]:
        return collect_errors(self)

    def affected_ranges(self, edit_kind: EditKind, caret: int) -> list[SourceRange]:
        return affected_ranges(self, edit_kind, caret)


ASTNode = Branch | Leaf


def collect_errors(node: ASTNode) -> list[Leaf]:
    """Returns every `error` leaf under ``node``, depth-first, left to right."""
    errors: list[Leaf] = []
    stack: list[ASTNode] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Leaf):
            if current.kind == "error":
                errors.append(current)
        elif isinstance(current, Branch):
            stack.extend(reversed(current.children))
        else:
            assert_never(current)
    return errors


def touches(range: SourceRange, edit_kind: EditKind, caret: int) -> bool:
    """Whether a one-character edit at ``caret`` reaches ``range``.

    A delete removes the character left of the caret, so it reaches a range
    whose right edge is the caret. An insert only reaches a range when the
    caret is strictly inside it.
    """
    start, end = range
    if edit_kind == "delete":
        return start < caret <= end
    if edit_kind == "insert":
        return start < caret < end
    assert_never(edit_kind)


def _bracket_touched(bracket: ASTNode, edit_kind: EditKind, caret: int) -> bool:
    # Typing directly beside a bracket changes what it pairs with.
    start, end = bracket.range
    if edit_kind == "insert":
        return start <= caret <= end
    return touches(bracket.range, edit_kind, caret)


def affected_ranges(node: ASTNode, edit_kind: EditKind, caret: int) -> list[SourceRange]:
    """Returns the source ranges a pending edit at ``caret`` would impact.

    Args:
        node: The tree (or subtree) to query.
        edit_kind: "insert" or "delete".
        caret: Caret offset before the edit is applied.

    Returns:
        Leaf ranges in left-to-right order. Empty when the edit misses ``node``.
    """
    ranges: list[SourceRange] = []
    stack: list[ASTNode] = [node]
    while stack:
        current = stack.pop()
        if not touches(current.range, edit_kind, caret):
            continue
        if isinstance(current, Leaf):
            ranges.append(current.range)
        elif isinstance(current, Branch):
            if current.kind == "brackets":
                opening, closing = current.children[0], current.children[-1]
                if _bracket_touched(opening, edit_kind, caret) or _bracket_touched(
                    closing, edit_kind, caret
                ):
                    ranges.extend([opening.range, closing.range])
                    continue
            stack.extend(reversed(current.children))
        else:
            assert_never(current)
    return ranges


__all__ = [
    "ASTDict",
    "ASTNode",
    "Branch",
    "Leaf",
    "affected_ranges",
    "collect_errors",
    "touches",
]
