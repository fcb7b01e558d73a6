"""
Lexical analyzer for LIVEXPR arithmetic expressions.

This module converts a sequence of ``(character, edited)`` pairs into tokens:

Classes:
    Token: A single token with kind, text, half-open source range and edited flag.
    Lexer: Converts a Cursor over character pairs into a list of tokens.

Functions:
    tokenize(text, edited=None): Lexes a plain string.

Features:
    - Nothing is skipped: every input character ends up in exactly one token
    - Whitespace is never valid and becomes a one-character `error` token
    - Longest-match recognition of numbers and identifiers
    - A token is edited when any character it consumed is edited

The lexer has no failure path. End of input is the only way it stops.

Example:
    >>> [tok.text for tok in tokenize("12+ab")]
    ['12', '+', 'ab']
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from livexpr.livexpr_constants import (
    BRACKETS,
    DIGITS,
    IDENT_CONTINUE,
    IDENT_START,
    OPERATORS,
    SourceRange,
    TokenKind,
)
from livexpr.livexpr_cursor import Cursor

LOG = logging.getLogger(__name__)

CharPair = tuple[str, bool]


class Token:
    """Represents a single lexical token.

    Attributes:
        kind (TokenKind): The token class (e.g. 'number', 'identifier', 'error').
        text (str): The exact source characters of the token.
        range (SourceRange): Half-open ``(start, end)`` character interval.
        edited (bool): True if any character in the token was recently edited.
    """

    def __init__(
        self, kind: TokenKind, text: str, range: SourceRange, edited: bool = False
    ) -> None:
        self.kind = kind
        self.text = text
        self.range = range
        self.edited = edited

    @property
    def start(self) -> int:
        return self.range[0]

    @property
    def end(self) -> int:
        return self.range[1]

    def __repr__(self) -> str:
        flag = ", edited" if self.edited else ""
        return f"Token({self.kind}, {self.text!r}, {self.range}{flag})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.kind == other.kind
            and self.text == other.text
            and self.range == other.range
            and self.edited == other.edited
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.text, self.range, self.edited))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "text": self.text,
            "range": list(self.range),
            "edited": self.edited,
        }


class Lexer:
    """Lexical analyzer for LIVEXPR.

    Attributes:
        stream (Cursor[CharPair]): The ``(character, edited)`` pairs to tokenize.
    """

    def __init__(self, stream: Cursor[CharPair]) -> None:
        self.stream = stream

    def tokens(self) -> list[Token]:
        """Consumes the whole stream and returns every token in source order."""
        tokens: list[Token] = []
        while True:
            pair = self.stream.next(strict=False)
            if pair is None:
                break
            tokens.append(self.next_token(pair))
        LOG.debug("lexed %d characters into %d tokens", len(self.stream), len(tokens))
        return tokens

    def next_token(self, first: CharPair) -> Token:
        """Builds the token that starts with the already consumed pair ``first``."""
        ch, edited = first
        start = self.stream.upcoming_index() - 1

        # 1. Whitespace is never valid in an expression
        if ch.isspace():
            return self._close("error", ch, start, edited)

        # 2. Number
        if ch in DIGITS:
            text, edited = self._munch(ch, edited, lambda c: c in DIGITS)
            return self._close("number", text, start, edited)

        # 3. Identifier
        if ch in IDENT_START:
            text, edited = self._munch(ch, edited, lambda c: c in IDENT_CONTINUE)
            return self._close("identifier", text, start, edited)

        # 4. Operator or bracket
        if ch in OPERATORS:
            return self._close("operator", ch, start, edited)
        if ch in BRACKETS:
            return self._close("bracket", ch, start, edited)

        # 5. Unknown character → error
        return self._close("error", ch, start, edited)

    def _munch(
        self, text: str, edited: bool, accepts: Callable[[str], bool]
    ) -> tuple[str, bool]:
        """Greedily consumes following characters while ``accepts`` holds."""
        while True:
            pair = self.stream.next_if(lambda p: accepts(p[0]), strict=False)
            if pair is None:
                return text, edited
            text += pair[0]
            edited = edited or pair[1]

    def _close(self, kind: TokenKind, text: str, start: int, edited: bool) -> Token:
        return Token(kind, text, (start, self.stream.upcoming_index()), edited)


def tokenize(text: str, edited: Sequence[bool] | None = None) -> list[Token]:
    """Lexes ``text``, pairing each character with its edited flag.

    Args:
        text: The source string.
        edited: Optional per-character flags; every flag is False when omitted.

    Raises:
        ValueError: If ``edited`` does not have one flag per character.
    """
    if edited is None:
        edited = [False] * len(text)
    if len(edited) != len(text):
        raise ValueError(
            f"Expected {len(text)} edited flags, got {len(edited)}"
        )
    return Lexer(Cursor(zip(text, edited))).tokens()


__all__ = ["CharPair", "Lexer", "Token", "tokenize"]
