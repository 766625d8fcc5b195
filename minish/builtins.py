"""Commands the shell carries out itself: cd, echo, pwd, env, export, unset, exit."""

from __future__ import annotations

import os
import re
import string
import sys
from collections.abc import Callable, Sequence
from typing import TextIO

from minish.environment import ShellState

_LETTERS = frozenset(string.ascii_letters)
_ALNUM = frozenset(string.ascii_letters + string.digits)
_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


class BuiltinExit(Exception):
    """The shell itself must terminate with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(f"shell exits with status {status}")
        self.status = status


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _current_dir() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def _valid_identifier(name: str) -> bool:
    if not name or name[0] == "_":
        return True
    if name[0] not in _LETTERS:
        return False
    return all(char in _ALNUM for char in name)


def _export_argument(arg: str) -> tuple[str, str | None]:
    """Split an ``export`` argument into a name and an optional value."""
    if "=" in arg and len(arg) >= 2 and arg.strip("="):
        parts = [part for part in arg.split("=") if part]
        return parts[0], (parts[1] if len(parts) > 1 else None)
    return arg, None


def _exit_argument_invalid(arg: str) -> bool:
    if not arg:
        return False
    first, second = arg[0], arg[1:2]
    if first in _LETTERS or second in ("+", "-"):
        return True
    if first in "+-":
        return False
    return any(char not in _ALNUM for char in arg)


def cd(state: ShellState, argv: Sequence[str], stdout: TextIO, stderr: TextIO) -> int:
    """Change the working directory and keep PWD and OLDPWD up to date."""
    if len(argv) == 1:
        home = state.env.get("HOME")
        if home is None:
            stderr.write("bash: cd: HOME not set\n")
            return state.exit_code
        try:
            os.chdir(home)
        except OSError:
            stdout.write(f"bash: cd: {home}: No such file or directory\n")
            state.exit_code = 1
        return state.exit_code
    if len(argv) > 2:
        stderr.write("bash: cd: too many arguments\n")
        state.exit_code = 1
        return state.exit_code
    target = argv[1]
    if target.startswith("-"):
        current = _current_dir()
        if current is not None:
            stdout.write(f"{current}\n")
        return state.exit_code

    previous = _current_dir()
    if target.startswith("/"):
        destination = target
    elif target.startswith("~"):
        home = state.env.get("HOME")
        if home is None:
            stderr.write("bash: cd: HOME not set\n")
            return state.exit_code
        destination = home + target[1:] if len(target) != 1 else home
    else:
        destination = f"{previous or ''}/{target}"

    try:
        os.chdir(destination)
    except OSError:
        stderr.write(f"bash: cd: {target}: No such file or directory\n")
        state.exit_code = 1
    if previous is not None:
        state.env.set_value("OLDPWD", previous)
    current = _current_dir()
    if current is not None:
        state.env.set_value("PWD", current)
    return state.exit_code


def echo(state: ShellState, argv: Sequence[str], stdout: TextIO, stderr: TextIO) -> int:
    """Print the arguments separated by spaces; ``-n`` drops the newline."""
    if len(argv) > 2 and argv[1] == "-n":
        stdout.write(" ".join(argv[2:]))
    else:
        stdout.write(" ".join(argv[1:]) + "\n")
    return 0


def pwd(state: ShellState, argv: Sequence[str], stdout: TextIO, stderr: TextIO) -> int:
    """Print the working directory."""
    current = _current_dir()
    if current is None:
        return 1
    stdout.write(f"{current}\n")
    return 0


def env(state: ShellState, argv: Sequence[str], stdout: TextIO, stderr: TextIO) -> int:
    """Print every variable that has a value."""
    if len(argv) != 1:
        stderr.write("bash: env: too many arguments\n")
        return 127
    for line in state.env.env_lines():
        stdout.write(f"{line}\n")
    return 0


def export(state: ShellState, argv: Sequence[str], stdout: TextIO, stderr: TextIO) -> int:
    """Define variables, or list them all when called without arguments."""
    if len(argv) == 1:
        for line in state.env.export_lines():
            stdout.write(f"{line}\n")
        return 127
    for arg in argv[1:]:
        name, value = _export_argument(arg)
        if _valid_identifier(name):
            state.env.add(name, value)
        else:
            stderr.write(f"bash: export: `{name}': not a valid identifier\n")
            state.exit_code = 1
    return state.exit_code


def unset(state: ShellState, argv: Sequence[str], stdout: TextIO, stderr: TextIO) -> int:
    """Remove the named variables."""
    for name in argv[1:]:
        state.env.delete(name)
    return state.exit_code


def exit_builtin(
    state: ShellState, argv: Sequence[str], stdout: TextIO, stderr: TextIO
) -> int:
    """Request the end of the session, or set the exit status from an argument."""
    if len(argv) == 1:
        state.request_exit()
        return state.exit_code
    if len(argv) > 2:
        stderr.write("bash: exit: too many arguments\n")
        raise BuiltinExit(1)
    arg = argv[1]
    code = _atoi(arg)
    if _exit_argument_invalid(arg):
        code = 2
    elif code >= 256:
        code %= 256
    elif code < 0:
        code = 256 - ((-code) % 256)
    state.exit_code = code
    return code


_BuiltinFunc = Callable[[ShellState, Sequence[str], TextIO, TextIO], int]

_BUILTINS: dict[str, _BuiltinFunc] = {
    "cd": cd,
    "echo": echo,
    "pwd": pwd,
    "env": env,
    "export": export,
    "unset": unset,
    "exit": exit_builtin,
}


def is_builtin(name: str) -> bool:
    """True if ``name`` is carried out by the shell itself."""
    return name in _BUILTINS


def run_builtin(
    state: ShellState,
    argv: Sequence[str],
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run the builtin named by ``argv[0]`` and return its exit status."""
    if not argv or not is_builtin(argv[0]):
        raise LookupError(f"not a builtin: {argv[0] if argv else ''!r}")
    return _BUILTINS[argv[0]](
        state,
        argv,
        stdout if stdout is not None else sys.stdout,
        stderr if stderr is not None else sys.stderr,
    )