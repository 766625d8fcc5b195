"""Recording of signals received while child commands run."""

from __future__ import annotations

import enum
import signal
from types import FrameType
from typing import TextIO

from minish.environment import ShellState


class SignalStatus(enum.Enum):
    """The last signal noticed by the shell while it was waiting."""

    NONE = 0
    QUIT = 1
    INTERRUPT = 2


class SignalMonitor:
    """Remembers SIGINT and SIGQUIT so their effect can be applied later."""

    def __init__(self) -> None:
        self.status = SignalStatus.NONE

    def handle(self, signum: int, frame: FrameType | None = None) -> None:
        """Signal handler: note SIGQUIT or SIGINT, ignore anything else."""
        if signum == signal.SIGQUIT:
            self.status = SignalStatus.QUIT
        elif signum == signal.SIGINT:
            self.status = SignalStatus.INTERRUPT

    def settle(self, state: ShellState, stdout: TextIO) -> SignalStatus:
        """Report a noted signal, set the exit status and forget the signal.

        Returns the status that was noted before it was cleared.
        """
        noted = self.status
        if noted is SignalStatus.QUIT:
            stdout.write("Coredump\n")
            state.exit_code = 128 + signal.SIGQUIT
        elif noted is SignalStatus.INTERRUPT:
            stdout.write("\n")
            state.exit_code = 128 + signal.SIGINT
        self.status = SignalStatus.NONE
        return noted