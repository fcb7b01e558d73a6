"""
Forward-only cursor over a fixed sequence.

The cursor is the only way the lexer and the parser walk their input. It never
mutates the wrapped sequence; it only tracks the position of the next item.

Classes:
    Cursor: Position tracker with one-item lookahead and conditional consumption.
    CursorError: Base class for the local consumption failures below.
    CursorExhausted: Raised when no item remains.
    PredicateNotMet: Raised by `next_if` when the next item is rejected.
    NothingConsumedYet: Raised by `last_consumed_index` before any consumption.

Every fallible method accepts ``strict``. With ``strict=True`` (the default) a
failure raises one of the errors above; with ``strict=False`` the method
returns ``None`` instead, which is how the lexer and parser branch on "absent".

Example:
    >>> cursor = Cursor("ab")
    >>> cursor.next()
    'a'
    >>> cursor.next_if(lambda ch: ch == "x", strict=False) is None
    True
    >>> cursor.upcoming_index()
    1
"""

from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

T = TypeVar("T")


class CursorError(Exception):
    """Local, recoverable cursor failure. Never leaves the lexer or parser."""


class CursorExhausted(CursorError):
    def __init__(self, position: int) -> None:
        super().__init__(f"CursorExhausted: no item left at position=<{position}>")
        self.position = position


class PredicateNotMet(CursorError):
    def __init__(self, position: int) -> None:
        super().__init__(f"PredicateNotMet: item at position=<{position}> rejected")
        self.position = position


class NothingConsumedYet(CursorError):
    def __init__(self) -> None:
        super().__init__("NothingConsumedYet: no item has been consumed")


class Cursor(Generic[T]):
    """
    A forward-only view over an ordered sequence.

    Attributes:
        items (tuple[T, ...]): The wrapped items, frozen at construction.
    """

    def __init__(self, items: Iterable[T]) -> None:
        self.items: tuple[T, ...] = tuple(items)
        self._position = 0

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        return f"Cursor(position={self._position}, length={len(self.items)})"

    def is_exhausted(self) -> bool:
        return self._position >= len(self.items)

    def peek(self, strict: bool = True) -> T | None:
        """Returns the next item without consuming it.

        Raises:
            CursorExhausted: If nothing remains and ``strict`` is True.
        """
        if self.is_exhausted():
            if strict:
                raise CursorExhausted(self._position)
            return None
        return self.items[self._position]

    def next(self, strict: bool = True) -> T | None:
        """Consumes and returns the next item.

        Raises:
            CursorExhausted: If nothing remains and ``strict`` is True.
        """
        if self.is_exhausted():
            if strict:
                raise CursorExhausted(self._position)
            return None
        item = self.items[self._position]
        self._position += 1
        return item

    def next_if(self, predicate: Callable[[T], bool], strict: bool = True) -> T | None:
        """Consumes the next item only if ``predicate`` accepts it.

        The position is left unchanged when the item is rejected.

        Raises:
            CursorExhausted: If nothing remains and ``strict`` is True.
            PredicateNotMet: If the item is rejected and ``strict`` is True.
        """
        if self.is_exhausted():
            if strict:
                raise CursorExhausted(self._position)
            return None
        item = self.items[self._position]
        if not predicate(item):
            if strict:
                raise PredicateNotMet(self._position)
            return None
        self._position += 1
        return item

    def last_consumed_index(self, strict: bool = True) -> int | None:
        """Index of the most recently consumed item.

        Raises:
            NothingConsumedYet: If nothing was consumed and ``strict`` is True.
        """
        if self._position == 0:
            if strict:
                raise NothingConsumedYet()
            return None
        return self._position - 1

    def upcoming_index(self) -> int:
        """Index of the next item to consume; the length once exhausted."""
        return self._position


__all__ = [
    "Cursor",
    "CursorError",
    "CursorExhausted",
    "NothingConsumedYet",
    "PredicateNotMet",
]
