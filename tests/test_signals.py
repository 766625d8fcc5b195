import io
import signal

from minish.environment import ShellState
from minish.signals import SignalMonitor, SignalStatus


def test_new_monitor_has_no_signal():
    assert SignalMonitor().status is SignalStatus.NONE


def test_interrupt_sets_status_and_newline():
    monitor = SignalMonitor()
    state = ShellState([])
    out = io.StringIO()
    monitor.handle(signal.SIGINT, None)
    assert monitor.status is SignalStatus.INTERRUPT
    assert monitor.settle(state, out) is SignalStatus.INTERRUPT
    assert out.getvalue() == "\n"
    assert state.exit_code == 128 + signal.SIGINT
    assert monitor.status is SignalStatus.NONE


def test_quit_reports_coredump():
    monitor = SignalMonitor()
    state = ShellState([])
    out = io.StringIO()
    monitor.handle(signal.SIGQUIT, None)
    assert monitor.settle(state, out) is SignalStatus.QUIT
    assert out.getvalue() == "Coredump\n"
    assert state.exit_code == 128 + signal.SIGQUIT


def test_settle_without_signal_changes_nothing():
    monitor = SignalMonitor()
    state = ShellState([])
    state.exit_code = 7
    out = io.StringIO()
    assert monitor.settle(state, out) is SignalStatus.NONE
    assert out.getvalue() == ""
    assert state.exit_code == 7


def test_other_signals_are_ignored():
    monitor = SignalMonitor()
    monitor.handle(signal.SIGTERM, None)
    assert monitor.status is SignalStatus.NONE


def test_last_signal_wins():
    monitor = SignalMonitor()
    monitor.handle(signal.SIGQUIT, None)
    monitor.handle(signal.SIGINT, None)
    assert monitor.status is SignalStatus.INTERRUPT