"""Running a parsed command line: parent builtins, pipelines and waiting."""

from __future__ import annotations

import contextlib
import io
import os
import signal
import subprocess
import sys
import tempfile
import threading
from collections.abc import Iterable, Iterator, Sequence
from typing import IO, TextIO, Union

from minish.builtins import run_builtin
from minish.environment import ShellState
from minish.executor import CommandError, prepare_command
from minish.redirect import (
    ReadLine,
    RedirectError,
    open_redirects,
    read_all_heredocs,
    runs_in_parent,
)
from minish.signals import SignalMonitor
from minish.tokens import Process, TokenType

_CHILD_BUILTINS = frozenset({"echo", "pwd", "env"})
_RULE = "----------------------"
_FOOTER = "============================================"
_REDIRECT_NAMES = {
    TokenType.HERE_DOC: "HEREDOC",
    TokenType.APPEND_FILE: "APPEND",
    TokenType.READ_FILE: "READ",
    TokenType.WRITE_FILE: "WRITE",
}

_Outcome = Union[int, "subprocess.Popen[bytes]"]


def _runs_as_child_builtin(argv: Sequence[str]) -> bool:
    if not argv:
        return False
    name = argv[0]
    return name in _CHILD_BUILTINS or (name == "export" and len(argv) == 1)


def _fileno(stream: TextIO) -> int | None:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _close(handle: IO[bytes] | None) -> None:
    if handle is not None:
        handle.close()


def _launch_error(name: str) -> CommandError:
    if os.access(name, os.X_OK):
        return CommandError(f"minishell: {name}: Permission denied", 126)
    if os.access(name, os.F_OK):
        return CommandError(f"bash: {name}: No such file or directory", 127)
    return CommandError(f"bash: {name}: command not found", 127)


@contextlib.contextmanager
def _watching(monitor: SignalMonitor) -> Iterator[None]:
    """Route SIGINT and SIGQUIT to ``monitor`` while children run."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = {
        signum: signal.signal(signum, monitor.handle)
        for signum in (signal.SIGINT, signal.SIGQUIT)
    }
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)


class _PipelineRun:
    """Starts the commands of one pipeline and collects their results."""

    def __init__(
        self,
        state: ShellState,
        stdout: TextIO,
        stderr: TextIO,
        stack: contextlib.ExitStack,
    ) -> None:
        self.state = state
        self.stdout = stdout
        self.stderr = stderr
        self.stack = stack
        self.envp = state.env.to_envp()
        self.env = dict(entry.partition("=")[::2] for entry in self.envp)
        self.children: list[subprocess.Popen[bytes]] = []
        out_fd = _fileno(stdout)
        self.captured_out = None if out_fd is not None else self._temporary()
        self.final_out = out_fd if out_fd is not None else self.captured_out
        err_fd = _fileno(stderr)
        self.captured_err = None if err_fd is not None else self._temporary()
        self.child_err = err_fd if err_fd is not None else self.captured_err

    def _temporary(self) -> IO[bytes]:
        return self.stack.enter_context(tempfile.TemporaryFile())

    def _buffered(self, data: bytes) -> IO[bytes]:
        handle = self._temporary()
        handle.write(data)
        handle.seek(0)
        return handle

    def stage(
        self, process: Process, incoming: IO[bytes] | None, last: bool
    ) -> tuple[IO[bytes] | None, _Outcome]:
        """Start one command; return the next command's input and the outcome."""
        argv = process.argv
        try:
            stdin_file, stdout_file = open_redirects(process.redirects)
        except RedirectError as exc:
            _close(incoming)
            self.stderr.write(f"{exc}\n")
            return (None if last else self._buffered(b"")), exc.exit_status
        if runs_in_parent(argv):
            _close(stdin_file)
            _close(stdout_file)
            stdin_file = stdout_file = None
        if stdin_file is not None:
            self.stack.enter_context(stdin_file)
            _close(incoming)
            incoming = stdin_file
        if stdout_file is not None:
            self.stack.enter_context(stdout_file)

        if _runs_as_child_builtin(argv):
            _close(incoming)
            buffer = io.StringIO()
            status = run_builtin(self.state, argv, buffer, self.stderr)
            text = buffer.getvalue()
            if stdout_file is not None:
                stdout_file.write(text.encode())
                return (None if last else self._buffered(b"")), status
            if last:
                self.stdout.write(text)
                return None, status
            return self._buffered(text.encode()), status

        try:
            command = prepare_command(argv, self.envp)
        except CommandError as exc:
            _close(incoming)
            self.stderr.write(f"{exc}\n")
            return (None if last else self._buffered(b"")), exc.exit_status

        if stdout_file is not None:
            target: IO[bytes] | int | None = stdout_file
        elif last:
            target = self.final_out
        else:
            target = subprocess.PIPE
        program = command[0] if "/" in command[0] else os.path.join(".", command[0])
        self.stdout.flush()
        self.stderr.flush()
        try:
            child = subprocess.Popen(
                command,
                executable=program,
                stdin=incoming,
                stdout=target,
                stderr=self.child_err,
                env=self.env,
            )
        except OSError:
            error = _launch_error(command[0])
            self.stderr.write(f"{error}\n")
            return (None if last else self._buffered(b"")), error.exit_status
        finally:
            _close(incoming)
        self.children.append(child)
        if last:
            return None, child
        if target is subprocess.PIPE:
            return child.stdout, child
        return self._buffered(b""), child

    def finish(self, outcome: _Outcome) -> int:
        """Wait for every child, pass on captured output, return the status."""
        for child in self.children:
            child.wait()
        if isinstance(outcome, int):
            status = outcome
        else:
            code = outcome.returncode
            status = code if code >= 0 else 0
        for captured, stream in (
            (self.captured_out, self.stdout),
            (self.captured_err, self.stderr),
        ):
            if captured is not None:
                captured.seek(0)
                stream.write(captured.read().decode(errors="replace"))
        return status


def run_parent_builtin(
    state: ShellState,
    process: Process,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> bool:
    """Run ``process`` in the shell itself if it must change the shell.

    Returns True when it was run; its redirections are not applied.
    """
    if not runs_in_parent(process.argv):
        return False
    run_builtin(state, process.argv, stdout, stderr)
    return True


def run_pipeline(
    state: ShellState,
    processes: Iterable[Process],
    read_line: ReadLine,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run a command line and return the shell's new exit status.

    Here-documents are read first with ``read_line``. A first command that
    must change the shell runs alone in the shell; otherwise every command
    is started with its input and output connected, and the status of the
    last one becomes the exit status.
    """
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr
    commands = list(processes)
    if not commands:
        return state.exit_code
    monitor = SignalMonitor()
    if read_all_heredocs(commands, read_line, monitor=monitor):
        state.exit_code = 128 + signal.SIGINT
        return state.exit_code
    if run_parent_builtin(state, commands[0], out, err):
        return state.exit_code

    with contextlib.ExitStack() as stack, _watching(monitor):
        run = _PipelineRun(state, out, err, stack)
        incoming: IO[bytes] | None = None
        outcome: _Outcome = state.exit_code
        for position, process in enumerate(commands):
            incoming, outcome = run.stage(
                process, incoming, position == len(commands) - 1
            )
        state.exit_code = run.finish(outcome)
    monitor.settle(state, out)
    return state.exit_code


def format_processes(processes: Iterable[Process]) -> str:
    """Describe commands and their redirections for debugging."""
    parts: list[str] = []
    for process in processes:
        parts.append(f"\n{_RULE}\n")
        parts.append("".join(f"[{word}] " for word in process.argv))
        parts.append(f"\n{_RULE}\n")
        for redirect in process.redirects:
            value = "(null)" if redirect.value is None else redirect.value
            parts.append(f"redirect: [{value}]\n")
            name = _REDIRECT_NAMES.get(redirect.kind)
            if name is not None:
                parts.append(f"type: [{name}]\n")
    parts.append(f"{_FOOTER}\n")
    return "".join(parts)