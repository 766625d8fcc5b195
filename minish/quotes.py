"""Tracking of single and double quotes while scanning a command line."""

from __future__ import annotations


class QuoteTracker:
    """Follows quote state character by character.

    A single quote toggles single-quoting only outside double quotes, and a
    double quote toggles double-quoting only outside single quotes.
    """

    def __init__(self) -> None:
        self._single = False
        self._double = False

    def reset(self) -> None:
        """Forget any open quotes."""
        self._single = False
        self._double = False

    def feed(self, char: str) -> bool:
        """Account for ``char`` and report whether no quote is open afterwards."""
        if char == "'" and not self._double:
            self._single = not self._single
        elif char == '"' and not self._single:
            self._double = not self._double
        return self.outside_quotes()

    def outside_quotes(self) -> bool:
        """True when neither a single nor a double quote is open."""
        return not (self._single or self._double)

    def outside_single(self) -> bool:
        """True when no single quote is open."""
        return not self._single

    def in_single(self) -> bool:
        """True while inside single quotes."""
        return self._single