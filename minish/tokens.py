"""Words, redirections and the command structures built from them."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field

from minish.quotes import QuoteTracker

_SPACE = " \t\n\v\f\r"


class TokenType(enum.Enum):
    """Kinds of token seen while parsing a command line."""

    WORD = enum.auto()
    REDIRECT = enum.auto()
    CMD = enum.auto()
    HERE_DOC = enum.auto()
    READ_FILE = enum.auto()
    WRITE_FILE = enum.auto()
    APPEND_FILE = enum.auto()
    VALUE_REDIRECT = enum.auto()


REDIRECT_KINDS = frozenset(
    {
        TokenType.HERE_DOC,
        TokenType.READ_FILE,
        TokenType.WRITE_FILE,
        TokenType.APPEND_FILE,
    }
)


@dataclass
class Token:
    """One word of a command line and what it stands for."""

    word: str
    kind: TokenType = TokenType.WORD


@dataclass
class Redirect:
    """A redirection of one command: its kind and its target or delimiter."""

    kind: TokenType
    value: str | None


@dataclass
class Process:
    """One command of a pipeline with its arguments and redirections."""

    argv: list[str]
    redirects: list[Redirect] = field(default_factory=list)
    pid: int | None = None

    def add_redirect(self, kind: TokenType, value: str | None) -> Redirect:
        """Append a redirection and return it."""
        redirect = Redirect(kind, value)
        self.redirects.append(redirect)
        return redirect


def split_words(line: str) -> list[Token]:
    """Split ``line`` on whitespace that is not inside quotes."""
    text = line.strip(" \n\t")
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        while pos < len(text) and text[pos] in _SPACE:
            pos += 1
        start = pos
        tracker = QuoteTracker()
        while pos < len(text):
            char = text[pos]
            if char in _SPACE and tracker.outside_quotes():
                break
            tracker.feed(char)
            pos += 1
        tokens.append(Token(text[start:pos]))
    return tokens


def _kind_of(tokens: list[Token], index: int) -> TokenType:
    token = tokens[index]
    if token.kind is not TokenType.REDIRECT:
        return TokenType.CMD
    following = tokens[index + 1].word if index + 1 < len(tokens) else ""
    if token.word == "<":
        return TokenType.HERE_DOC if following.startswith("<") else TokenType.READ_FILE
    if token.word == ">":
        return TokenType.APPEND_FILE if following.startswith(">") else TokenType.WRITE_FILE
    return TokenType.CMD


def assign_redirect_types(tokens: list[Token]) -> list[Token]:
    """Give redirection operators their kind, merging ``< <`` and ``> >``."""
    result = [dataclasses.replace(token) for token in tokens]
    index = 0
    while index < len(result):
        token = result[index]
        kind = _kind_of(result, index)
        if kind is TokenType.HERE_DOC:
            result[index] = Token("<<", kind)
            del result[index + 1]
        elif kind is TokenType.APPEND_FILE:
            result[index] = Token(">>", kind)
            del result[index + 1]
        elif token.word.startswith(">"):
            token.kind = TokenType.WRITE_FILE
        elif token.word.startswith("<"):
            token.kind = TokenType.READ_FILE
        index += 1
    return result


def mark_redirect_values(tokens: list[Token]) -> list[Token]:
    """Mark every token that follows a redirection as its target."""
    result = [dataclasses.replace(token) for token in tokens]
    for before, token in zip(result, result[1:]):
        if before.kind in REDIRECT_KINDS:
            token.kind = TokenType.VALUE_REDIRECT
    return result


def unquote_word(word: str) -> str:
    """Remove the quote characters that open or close a quoted part."""
    tracker = QuoteTracker()
    kept = []
    for char in word:
        state = (tracker.in_single(), tracker.outside_quotes())
        tracker.feed(char)
        if state == (tracker.in_single(), tracker.outside_quotes()):
            kept.append(char)
    return "".join(kept)


def unquote(tokens: list[Token]) -> list[Token]:
    """Return the tokens with their quoting removed."""
    return [
        dataclasses.replace(token, word=unquote_word(token.word))
        if ("'" in token.word or '"' in token.word)
        else dataclasses.replace(token)
        for token in tokens
    ]