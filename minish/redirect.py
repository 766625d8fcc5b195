"""Here-documents and the files a command's redirections open."""

from __future__ import annotations

import itertools
import os
import sys
import tempfile
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import BinaryIO

from minish.signals import SignalMonitor, SignalStatus
from minish.tokens import Process, Redirect, TokenType

ReadLine = Callable[[str], "str | None"]

_HEREDOC_WARNING = (
    "bash: warning: here-document delimited by end-of-file (wanted `{}')\n"
)
_PARENT_ONLY = frozenset({"cd", "unset", "exit"})
_heredoc_ids = itertools.count()


class RedirectError(OSError):
    """A redirection target could not be opened."""

    exit_status = 1

    def __init__(self, path: str | None, reason: str) -> None:
        super().__init__(f"bash: {path}: {reason}")
        self.path = path
        self.reason = reason


def read_heredoc(
    redirect: Redirect,
    read_line: ReadLine,
    directory: str | os.PathLike[str] | None = None,
    index: int = 0,
) -> bool:
    """Collect here-document lines into a file and point ``redirect`` at it.

    Lines are read with ``read_line`` until one equals the delimiter (True is
    returned) or it returns None at end of input (a warning is printed and
    False is returned). KeyboardInterrupt from ``read_line`` propagates.
    """
    base = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    path = base / f"heredoc_{index}"
    delimiter = redirect.value or ""
    try:
        with open(path, "w", encoding="utf-8") as handle:
            while (line := read_line(">")) is not None:
                if line == delimiter:
                    return True
                handle.write(line)
            sys.stderr.write(_HEREDOC_WARNING.format(delimiter))
            return False
    finally:
        redirect.value = str(path)


def read_all_heredocs(
    processes: Iterable[Process],
    read_line: ReadLine,
    directory: str | os.PathLike[str] | None = None,
    monitor: SignalMonitor | None = None,
) -> bool:
    """Read every here-document of the pipeline in order.

    Returns True when reading was interrupted; the caller then abandons the
    command line. The monitor's interrupt is cleared before returning.
    """
    monitor = monitor if monitor is not None else SignalMonitor()
    for process in processes:
        for redirect in process.redirects:
            if redirect.kind is not TokenType.HERE_DOC:
                continue
            if monitor.status is SignalStatus.INTERRUPT:
                continue
            try:
                read_heredoc(redirect, read_line, directory, next(_heredoc_ids))
            except KeyboardInterrupt:
                monitor.status = SignalStatus.INTERRUPT
                sys.stdout.write("\n")
    if monitor.status is SignalStatus.INTERRUPT:
        monitor.status = SignalStatus.NONE
        return True
    return False


def _open_input(path: str | None) -> BinaryIO:
    if path is None or not os.access(path, os.F_OK):
        raise RedirectError(path, "No such file or directory")
    if not os.access(path, os.R_OK):
        raise RedirectError(path, "Permission denied")
    try:
        return open(path, "rb")
    except OSError as exc:
        raise RedirectError(path, "Permission denied") from exc


def _open_output(redirect: Redirect) -> BinaryIO:
    mode = "ab" if redirect.kind is TokenType.APPEND_FILE else "wb"
    try:
        handle = open(redirect.value or "", mode)
    except OSError as exc:
        raise RedirectError(redirect.value, "Permission denied") from exc
    if not os.access(redirect.value or "", os.W_OK):
        handle.close()
        raise RedirectError(redirect.value, "Permission denied")
    return handle


def open_redirects(
    redirects: Iterable[Redirect],
) -> tuple[BinaryIO | None, BinaryIO | None]:
    """Open every redirection in order and return the final (input, output).

    Earlier files of the same direction are opened and closed again, so
    output files are still created. The caller closes what is returned.
    """
    stdin: BinaryIO | None = None
    stdout: BinaryIO | None = None
    try:
        for redirect in redirects:
            if redirect.kind in (TokenType.HERE_DOC, TokenType.READ_FILE):
                if stdin is not None:
                    stdin.close()
                    stdin = None
                stdin = _open_input(redirect.value)
            elif redirect.kind in (TokenType.WRITE_FILE, TokenType.APPEND_FILE):
                if stdout is not None:
                    stdout.close()
                    stdout = None
                stdout = _open_output(redirect)
    except RedirectError:
        for handle in (stdin, stdout):
            if handle is not None:
                handle.close()
        raise
    return stdin, stdout


def runs_in_parent(argv: Sequence[str]) -> bool:
    """True for builtins that must change the shell itself, not a child."""
    if not argv:
        return False
    name = argv[0]
    return name in _PARENT_ONLY or (name == "export" and len(argv) > 1)