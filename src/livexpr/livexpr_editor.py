"""
In-memory text-box model that re-lexes and re-parses on every keystroke.

Classes:
    UserInput: Immutable characters paired with per-character edited flags.
    TextBox: A UserInput plus a caret position.
    EditorSession: Owns the current text box, tokens and tree.

Before an insert or delete is applied, the session asks the current tree which
ranges the edit affects. Once the edit is applied, exactly the characters in
those ranges (plus a newly inserted character) are flagged as edited, and every
other flag is reset. The flags then flow through the lexer into `Token.edited`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from livexpr.livexpr_ast import ASTNode, Leaf, collect_errors
from livexpr.livexpr_constants import DEFAULT_TEXT, EditKind, SourceRange
from livexpr.livexpr_cursor import Cursor
from livexpr.livexpr_lexer import CharPair, Lexer, Token
from livexpr.livexpr_parser import Parser

LOG = logging.getLogger(__name__)


class UserInput:
    """Characters of the text box and their edited flags, index for index."""

    def __init__(self, chars: Sequence[str], flags: Sequence[bool]) -> None:
        if len(chars) != len(flags):
            raise ValueError("Flags must have the same length as the value")
        self._chars = tuple(chars)
        self._flags = tuple(flags)

    @classmethod
    def from_text(cls, text: str) -> UserInput:
        """Every character of freshly loaded text counts as edited."""
        return cls(list(text), [True] * len(text))

    @property
    def text(self) -> str:
        return "".join(self._chars)

    @property
    def flags(self) -> tuple[bool, ...]:
        return self._flags

    def __len__(self) -> int:
        return len(self._chars)

    def __repr__(self) -> str:
        return f"UserInput({self.text!r})"

    def with_flags(self, flags: Sequence[bool]) -> UserInput:
        return UserInput(self._chars, flags)

    def insert(self, index: int, char: str) -> UserInput:
        return UserInput(
            self._chars[:index] + (char,) + self._chars[index:],
            self._flags[:index] + (True,) + self._flags[index:],
        )

    def delete(self, index: int) -> UserInput:
        return UserInput(
            self._chars[:index] + self._chars[index + 1 :],
            self._flags[:index] + self._flags[index + 1 :],
        )

    def zipped(self) -> list[CharPair]:
        return list(zip(self._chars, self._flags))


class TextBox:
    """A UserInput with a caret between characters (0..len)."""

    def __init__(self, user_input: UserInput, caret: int = 0) -> None:
        if not 0 <= caret <= len(user_input):
            raise ValueError(f"Caret {caret} outside 0..{len(user_input)}")
        self.user_input = user_input
        self.caret = caret

    @classmethod
    def from_text(cls, text: str) -> TextBox:
        return cls(UserInput.from_text(text), 0)

    def with_flags(self, flags: Sequence[bool]) -> TextBox:
        return TextBox(self.user_input.with_flags(flags), self.caret)

    def insert(self, char: str) -> TextBox:
        return TextBox(self.user_input.insert(self.caret, char), self.caret + 1)

    def delete(self) -> TextBox:
        """Removes the character left of the caret. No-op at the start."""
        if self.caret == 0:
            return self
        return TextBox(self.user_input.delete(self.caret - 1), self.caret - 1)

    def move_left(self) -> TextBox:
        if self.caret == 0:
            return self
        return TextBox(self.user_input, self.caret - 1)

    def move_right(self) -> TextBox:
        if self.caret == len(self.user_input):
            return self
        return TextBox(self.user_input, self.caret + 1)

    def render(self) -> str:
        """Two lines: the text with ``|`` at the caret, and ``^`` under edited characters."""
        text = self.user_input.text
        marks = "".join("^" if flag else " " for flag in self.user_input.flags)
        top = text[: self.caret] + "|" + text[self.caret :]
        bottom = marks[: self.caret] + " " + marks[self.caret :]
        return f"{top}\n{bottom.rstrip()}"


class EditorSession:
    """Keeps tokens and tree in step with a TextBox.

    Attributes:
        text_box (TextBox): The current text and caret.
        tokens (list[Token]): Tokens of the current text.
        tree (ASTNode): Tree of the current tokens.
    """

    def __init__(self, text: str = DEFAULT_TEXT) -> None:
        self.text_box = TextBox.from_text(text)
        self.tokens: list[Token]
        self.tree: ASTNode
        self._refresh()

    def _refresh(self) -> None:
        self.tokens = Lexer(Cursor(self.text_box.user_input.zipped())).tokens()
        self.tree = Parser(Cursor(self.tokens)).parse()

    def reset(self, text: str) -> None:
        self.text_box = TextBox.from_text(text)
        self._refresh()

    @property
    def text(self) -> str:
        return self.text_box.user_input.text

    @property
    def caret(self) -> int:
        return self.text_box.caret

    def affected(self, edit_kind: EditKind) -> list[SourceRange]:
        """Ranges of the current tree a pending edit at the caret would affect."""
        return self.tree.affected_ranges(edit_kind, self.caret)

    def _mark_affected(self, edit_kind: EditKind) -> TextBox:
        ranges = self.affected(edit_kind)
        LOG.debug("%s at %d affects %s", edit_kind, self.caret, ranges)
        flags = [
            any(start <= i < end for start, end in ranges)
            for i in range(len(self.text_box.user_input))
        ]
        return self.text_box.with_flags(flags)

    def type_char(self, char: str) -> None:
        if len(char) != 1:
            raise ValueError(f"Expected a single character, got {char!r}")
        self.text_box = self._mark_affected("insert").insert(char)
        self._refresh()

    def backspace(self) -> None:
        if self.caret == 0:
            return
        self.text_box = self._mark_affected("delete").delete()
        self._refresh()

    def left(self) -> None:
        self.text_box = self.text_box.move_left()

    def right(self) -> None:
        self.text_box = self.text_box.move_right()

    def handle_key(self, key: str) -> None:
        """Dispatches a key name the way a browser reports ``KeyboardEvent.key``."""
        if key == "Backspace":
            self.backspace()
        elif key == "ArrowLeft":
            self.left()
        elif key == "ArrowRight":
            self.right()
        elif len(key) == 1:
            self.type_char(key)

    def errors(self) -> list[Leaf]:
        return collect_errors(self.tree)

    def error_positions(self) -> list[int]:
        """Character indices to highlight for the current error leaves.

        Zero-width errors are shown on the character just before them, or on
        the nearest character when there is none. Empty text has nothing to
        highlight.
        """
        last = len(self.text) - 1
        if last < 0:
            return []
        positions: list[int] = []
        for leaf in self.errors():
            start, end = leaf.range
            if start == end:
                positions.append(min(max(start - 1, 0), last))
            else:
                positions.extend(range(start, end))
        return positions


__all__ = ["EditorSession", "TextBox", "UserInput"]
