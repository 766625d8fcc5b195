"""Expansion of ``$NAME``, ``$$`` and ``$?`` in a command line."""

from __future__ import annotations

import string

from minish.environment import ShellState
from minish.quotes import QuoteTracker

_LETTERS = frozenset(string.ascii_letters)
_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")
_QUOTES = frozenset("'\"")


def _expansion_length(line: str, pos: int) -> int:
    """Length of the expansion starting at ``pos``, or 0 if none starts there."""
    if line[pos] != "$" or pos + 1 >= len(line):
        return 0
    following = line[pos + 1]
    if following in _QUOTES:
        return 1
    if following in "$?":
        return 2
    if following not in _LETTERS and following != "_":
        return 0
    end = pos + 2
    while end < len(line) and line[end] in _NAME_CHARS:
        end += 1
    return end - pos


class Expander:
    """Replaces variable references of a command line with their values."""

    def __init__(self, state: ShellState) -> None:
        self.state = state

    def split(self, line: str) -> list[str]:
        """Cut ``line`` into literal parts and ``$`` references, in order."""
        pieces: list[str] = []
        tracker = QuoteTracker()
        start = pos = 0
        while pos < len(line):
            tracker.feed(line[pos])
            length = _expansion_length(line, pos) if tracker.outside_single() else 0
            if length:
                if pos > start:
                    pieces.append(line[start:pos])
                pieces.append(line[pos : pos + length])
                pos += length
                start = pos
            else:
                pos += 1
        if start < len(line):
            pieces.append(line[start:])
        return pieces

    def _value(self, piece: str, tracker: QuoteTracker) -> str:
        for char in piece:
            tracker.feed(char)
        if (
            piece.startswith("$")
            and tracker.outside_single()
            and len(piece) > 1
            and piece[1] not in _QUOTES
        ):
            return self.state.value_of(piece[1:])
        return piece

    def expand(self, line: str) -> str:
        """Return ``line`` with every reference outside single quotes expanded."""
        tracker = QuoteTracker()
        return "".join(self._value(piece, tracker) for piece in self.split(line))


def expand_line(state: ShellState, line: str) -> str:
    """Expand the variable references of ``line`` against ``state``."""
    return Expander(state).expand(line)