"""
Shared vocabularies for the LIVEXPR lexer, parser and tree.

Every kind set is closed: consumers match on these values exhaustively, so a
new kind must be added here and handled everywhere it is matched.
"""

import string
from typing import Literal

TokenKind = Literal["number", "identifier", "operator", "bracket", "whitespace", "error"]
BranchKind = Literal["operation", "brackets", "has-error"]
LeafKind = Literal["number", "identifier", "bracket", "operator", "error"]
EditKind = Literal["insert", "delete"]

SourceRange = tuple[int, int]
"""Half-open ``(start, end)`` character interval into the source text."""

TOKEN_KINDS: tuple[str, ...] = (
    "number",
    "identifier",
    "operator",
    "bracket",
    "whitespace",
    "error",
)
BRANCH_KINDS: tuple[str, ...] = ("operation", "brackets", "has-error")
LEAF_KINDS: tuple[str, ...] = ("number", "identifier", "bracket", "operator", "error")
EDIT_KINDS: tuple[str, ...] = ("insert", "delete")

# Character classes (ASCII only)
DIGITS = frozenset(string.digits)
IDENT_START = frozenset(string.ascii_letters + "_")
IDENT_CONTINUE = IDENT_START | DIGITS
OPERATORS = frozenset("+-*/")
BRACKETS = frozenset("()")
OPENING_BRACKET = "("
CLOSING_BRACKET = ")"

# Messages carried by parser-synthesized error leaves
MISSING_TERM = "Missing term"
MISSING_OPERATOR = "Missing operator"
MISSING_CLOSING_BRACKET = "Missing closing bracket"

DEFAULT_TEXT = "3 + 4 * (2 - 1)"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVEL_ENV = "LIVEXPR_LOG_LEVEL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

__all__ = [
    "BRACKETS",
    "BRANCH_KINDS",
    "BranchKind",
    "CLOSING_BRACKET",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_TEXT",
    "DIGITS",
    "EDIT_KINDS",
    "EditKind",
    "IDENT_CONTINUE",
    "IDENT_START",
    "LEAF_KINDS",
    "LOG_FORMAT",
    "LOG_LEVEL_ENV",
    "LOG_LEVELS",
    "LeafKind",
    "MISSING_CLOSING_BRACKET",
    "MISSING_OPERATOR",
    "MISSING_TERM",
    "OPENING_BRACKET",
    "OPERATORS",
    "SourceRange",
    "TOKEN_KINDS",
    "TokenKind",
]
