"""
LIVEXPR Expression Parser

Parses LIVEXPR tokens into a single syntax tree, whatever the input looks like.

The parser is a recursive-descent parser over a `Cursor` of `Token` objects.
It is built to run on every keystroke, so it never fails: malformed input is
turned into `error` leaves and `has-error` branches inside the returned tree.

Grammar
-------
    expression := term (operator term)*
    term       := number | identifier | '(' expression ')'

All operators share one precedence level and chain left to right:
``a + b * c`` parses as ``(a + b) * c``.

Recovery
--------
- Missing term: a zero-width ``error "Missing term"`` leaf stands in for the term.
- Unexpected token as term: the token is consumed and wrapped in a `has-error`
  branch holding an `error` leaf with the token's text and range.
- Missing closing bracket: `has-error` [``(``, inner expression,
  zero-width ``error "Missing closing bracket"``].
- Leftover tokens: each further expression is joined to the one before it by a
  `has-error` branch around a zero-width ``error "Missing operator"`` leaf at
  the boundary, nesting to the right.

Nesting is tracked on explicit stacks rather than the call stack, so long runs
of operators, leftovers or opening brackets do not exhaust the recursion limit.

Entry Points
------------
- `Parser.parse()`: Parse the whole token stream into one tree root.
- `parse()`: Parse a list of tokens.
- `parse_text()`: Lex and parse a string.

Returns
-------
ASTNode
    The root of the tree. Even empty input yields a root
    (``Leaf("error", "Missing term", (0, 0))``).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from livexpr.livexpr_ast import ASTNode, Branch, Leaf
from livexpr.livexpr_constants import (
    CLOSING_BRACKET,
    MISSING_CLOSING_BRACKET,
    MISSING_OPERATOR,
    MISSING_TERM,
    OPENING_BRACKET,
)
from livexpr.livexpr_cursor import Cursor
from livexpr.livexpr_lexer import Token, tokenize

LOG = logging.getLogger(__name__)


class _OpenExpression:
    """An expression still being chained, opened by ``opening`` (or the root)."""

    __slots__ = ("opening", "node", "operator")

    def __init__(self, opening: Leaf | None) -> None:
        self.opening = opening
        self.node: ASTNode | None = None
        self.operator: Leaf | None = None


class Parser:
    """
    LIVEXPR Parser Class

    Turns a stream of tokens into one syntax tree with embedded error nodes.

    Attributes
    ----------
    tokens : Cursor[Token]
        The token stream being parsed. Owned by this parser.

    Methods
    -------
    parse() -> ASTNode
        Parse every remaining token, chaining leftovers as `has-error` nodes.
    parse_expression() -> ASTNode
        Parse ``term (operator term)*``.
    parse_term() -> ASTNode
        Parse a single number, identifier or bracketed expression.
    parse_brackets(opening) -> ASTNode
        Parse the remainder of a bracketed expression after ``(``.
    """

    def __init__(self, tokens: Cursor[Token]) -> None:
        self.tokens = tokens

    def position(self) -> int:
        """Source offset right after the last consumed token, or 0."""
        index = self.tokens.last_consumed_index(strict=False)
        if index is None:
            return 0
        return self.tokens.items[index].end

    def parse(self) -> ASTNode:
        """Parse every remaining token into a single tree root."""
        parts = [self.parse_expression()]
        while not self.tokens.is_exhausted():
            # Tokens left over after a complete expression
            LOG.debug("missing operator at %d", parts[-1].range[1])
            parts.append(self.parse_expression())

        node = parts.pop()
        while parts:
            left = parts.pop()
            boundary = left.range[1]
            node = Branch(
                "has-error",
                [left, Leaf("error", MISSING_OPERATOR, (boundary, boundary)), node],
            )
        return node

    def parse_expression(self) -> ASTNode:
        """Parse a term followed by any number of ``operator term`` pairs."""
        # One entry per unclosed bracket, above the expression itself
        stack = [_OpenExpression(None)]
        while True:
            opening = self._next_opening()
            if opening is not None:
                stack.append(_OpenExpression(opening))
                continue

            term = self._parse_operand()
            while True:
                current = stack[-1]
                if current.node is None or current.operator is None:
                    current.node = term
                else:
                    current.node = Branch("operation", [current.node, current.operator, term])
                operator = self.tokens.next_if(lambda tok: tok.kind == "operator", strict=False)
                if operator is not None:
                    current.operator = Leaf.from_token(operator)
                    break
                stack.pop()
                if current.opening is None:
                    return current.node
                term = self._close_brackets(current.opening, current.node)

    def parse_term(self) -> ASTNode:
        """Parse a number, an identifier, or a bracketed expression."""
        opening = self._next_opening()
        if opening is not None:
            return self.parse_brackets(opening)
        return self._parse_operand()

    def parse_brackets(self, opening: Leaf) -> ASTNode:
        """Parse the inner expression and the closing bracket after ``opening``."""
        return self._close_brackets(opening, self.parse_expression())

    def _next_opening(self) -> Leaf | None:
        tok = self.tokens.next_if(
            lambda tok: tok.kind == "bracket" and tok.text == OPENING_BRACKET,
            strict=False,
        )
        return None if tok is None else Leaf.from_token(tok)

    def _parse_operand(self) -> ASTNode:
        # Any term except a bracketed one
        tok = self.tokens.next(strict=False)
        if tok is None:
            position = self.position()
            LOG.debug("missing term at %d", position)
            return Leaf("error", MISSING_TERM, (position, position))

        if tok.kind in ("number", "identifier"):
            return Leaf.from_token(tok)

        LOG.debug("unexpected token %r as term", tok)
        return Branch("has-error", [Leaf("error", tok.text, tok.range)])

    def _close_brackets(self, opening: Leaf, inner: ASTNode) -> ASTNode:
        closing = self.tokens.next_if(
            lambda tok: tok.kind == "bracket" and tok.text == CLOSING_BRACKET,
            strict=False,
        )
        if closing is None:
            end = inner.range[1]
            LOG.debug("missing closing bracket at %d", end)
            return Branch(
                "has-error",
                [opening, inner, Leaf("error", MISSING_CLOSING_BRACKET, (end, end))],
            )
        return Branch("brackets", [opening, inner, Leaf.from_token(closing)])


def parse(tokens: Sequence[Token]) -> ASTNode:
    """Parse a list of tokens into a single tree root."""
    return Parser(Cursor(tokens)).parse()


def parse_text(text: str, edited: Sequence[bool] | None = None) -> ASTNode:
    """Lex and parse ``text``."""
    return parse(tokenize(text, edited))


__all__ = ["Parser", "parse", "parse_text"]
