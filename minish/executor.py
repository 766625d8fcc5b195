"""Finding the program a command names and reporting why it cannot run."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence


class CommandError(Exception):
    """A command cannot be started; ``exit_status`` is what the shell reports."""

    def __init__(self, message: str, exit_status: int) -> None:
        super().__init__(message)
        self.exit_status = exit_status


def is_directory(path: str) -> bool:
    """True if ``path`` names an existing directory."""
    return os.path.isdir(path)


def path_from_env(envp: Iterable[str]) -> str | None:
    """The value of the first ``PATH=`` entry, or None."""
    for entry in envp:
        if entry.startswith("PATH="):
            return entry[len("PATH="):]
    return None


def _search_path(name: str, path: str) -> str | None:
    if name.startswith((".", "/")):
        return name
    if "/" in name:
        name = name[name.rfind("/"):]
    for directory in filter(None, path.split(":")):
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def resolve_command(argv: Sequence[str], path: str | None) -> list[str] | None:
    """Return ``argv`` with its program resolved, or None if none is found.

    Names starting with ``.`` or ``/`` are taken as they are; other names are
    looked up in ``path``, falling back to an executable of that name
    relative to the working directory.
    """
    name = argv[0]
    runnable_here = os.access(name, os.X_OK)
    if path is None and not runnable_here:
        return None
    found = _search_path(name, path) if path is not None else None
    if found is None:
        return list(argv) if runnable_here else None
    return [found, *argv[1:]]


def _command_error(name: str) -> CommandError:
    if os.access(name, os.X_OK):
        return CommandError(f"minishell: {name}: Permission denied", 126)
    if os.access(name, os.F_OK):
        return CommandError(f"bash: {name}: No such file or directory", 127)
    return CommandError(f"bash: {name}: command not found", 127)


def prepare_command(argv: Sequence[str], envp: Sequence[str]) -> list[str]:
    """Return the argument vector to execute, or raise CommandError.

    Leading empty words are dropped before the program is looked up.
    """
    words = list(argv)
    while words and not words[0]:
        words.pop(0)
    if not words:
        raise CommandError("bash: : command not found", 127)
    if is_directory(words[0]):
        raise CommandError(f"minishell: {words[0]}: Is a directory", 126)
    resolved = resolve_command(words, path_from_env(envp))
    if resolved is None:
        raise _command_error(words[0])
    return resolved