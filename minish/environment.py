"""Shell variables and the process-wide state of the shell."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

DEFAULT_PID = 112548

_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


def _atoi(text: str) -> int:
    """Read a leading integer the way the classic C routine does; 0 if none."""
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _parse_entry(entry: str) -> tuple[str, str | None]:
    key, sep, value = entry.partition("=")
    return (key, value) if sep else (key, None)


class Environment:
    """Ordered shell variables; a variable may exist without a value."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._vars: dict[str, str | None] = {}
        for entry in entries:
            key, value = _parse_entry(entry)
            self._vars[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __len__(self) -> int:
        return len(self._vars)

    def get(self, key: str) -> str | None:
        """Return the value of ``key``, or None when unset or valueless."""
        return self._vars.get(key)

    def add(self, key: str, value: str | None) -> None:
        """Define ``key``, updating it in place if it already exists."""
        if key in self._vars:
            self.set_value(key, value)
        else:
            self._vars[key] = value

    def set_value(self, key: str, value: str | None) -> None:
        """Change the value of an existing variable; unknown keys are ignored."""
        if key in self._vars:
            self._vars[key] = value

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        self._vars.pop(key, None)

    def to_envp(self) -> list[str]:
        """``KEY=VALUE`` strings for every variable that has a value."""
        return [
            f"{key}={value}"
            for key, value in self._vars.items()
            if value is not None and not key.startswith("$")
        ]

    def env_lines(self) -> list[str]:
        """Lines printed by the ``env`` builtin."""
        return self.to_envp()

    def export_lines(self) -> list[str]:
        """Lines printed by ``export`` without arguments, sorted by name."""
        lines = []
        for key in sorted(self._vars, key=lambda k: k.encode()):
            value = self._vars[key]
            if value is None:
                lines.append(f"declare -x {key}")
            else:
                lines.append(f'declare -x {key}="{value}"')
        return lines

    def bump_shell_level(self) -> None:
        """Increase SHLVL by one, creating it as 1 and clamping negatives to 0."""
        if "SHLVL" not in self._vars:
            self.add("SHLVL", "1")
            return
        current = self._vars["SHLVL"]
        if current is None:
            self._vars["SHLVL"] = "1"
            return
        level = _atoi(current)
        self._vars["SHLVL"] = "0" if level < 0 else str(level + 1)


class ShellState:
    """Variables, last exit status and exit request of one shell session."""

    def __init__(
        self,
        environ: Iterable[str] | Mapping[str, str] = (),
        pid: int = DEFAULT_PID,
    ) -> None:
        if isinstance(environ, Mapping):
            environ = [f"{key}={value}" for key, value in environ.items()]
        self.env = Environment(environ)
        self.env.bump_shell_level()
        self.pid = pid
        self.exit_code = 0
        self._exit_requested = False

    def value_of(self, key: str) -> str:
        """Expand a variable name: ``$`` is the pid, ``?`` the last status."""
        if key.startswith("$"):
            return str(self.pid)
        if key.startswith("?"):
            return str(self.exit_code)
        if not key:
            return ""
        value = self.env.get(key)
        return "" if value is None else value

    def request_exit(self) -> None:
        """Ask the prompt loop to stop."""
        self._exit_requested = True

    def running(self) -> bool:
        """True until an exit has been requested."""
        return not self._exit_requested