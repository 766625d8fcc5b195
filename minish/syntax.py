"""Checks for unbalanced quotes and misplaced pipes and redirections."""

from __future__ import annotations

_SPACE = " \t\n\v\f\r"


class ShellSyntaxError(ValueError):
    """A command line that cannot be parsed."""

    exit_status = 2

    def __init__(self, message: str = "bash: syntax error") -> None:
        super().__init__(message)


def _pipe_ok(line: str, point: int) -> bool:
    if line[point] != "|":
        return True
    for char in reversed(line[:point]):
        if char == "|":
            return False
        if char not in _SPACE:
            break
    else:
        return False
    for char in line[point + 1 :]:
        if char == "|":
            return False
        if char not in _SPACE:
            return True
    return False


def _redirect_ok(line: str, point: int) -> tuple[bool, int]:
    """Check a redirection at ``point``; also return the operator's last index."""
    if line.startswith((">>", "<<"), point):
        point += 1
    elif line[point] not in "<>":
        return True, point
    for char in line[point + 1 :]:
        if char in "<>|":
            return False, point
        if char not in _SPACE:
            return True, point
    return False, point


def is_valid_syntax(line: str) -> bool:
    """True if quotes are closed and every pipe and redirection has operands."""
    single = double = False
    index = 0
    while index < len(line):
        char = line[index]
        if char == "'" and not double:
            single = not single
        elif char == '"' and not single:
            double = not double
        if not single and not double:
            if not _pipe_ok(line, index):
                return False
            valid, index = _redirect_ok(line, index)
            if not valid:
                return False
        index += 1
    return not (single or double)


def check_syntax(line: str) -> None:
    """Raise ShellSyntaxError when ``line`` is not valid."""
    if not is_valid_syntax(line):
        raise ShellSyntaxError()