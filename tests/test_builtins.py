import io
import os

import pytest

from minish.builtins import (
    BuiltinExit,
    cd,
    echo,
    env,
    exit_builtin,
    export,
    is_builtin,
    pwd,
    run_builtin,
    unset,
)
from minish.environment import ShellState


def _run(state, argv):
    out, err = io.StringIO(), io.StringIO()
    status = run_builtin(state, argv, out, err)
    return status, out.getvalue(), err.getvalue()


@pytest.mark.parametrize("name", ["cd", "echo", "pwd", "env", "export", "unset", "exit"])
def test_is_builtin_known(name):
    assert is_builtin(name) is True


@pytest.mark.parametrize("name", ["ls", "cdx", "", "Echo"])
def test_is_builtin_unknown(name):
    assert is_builtin(name) is False


def test_run_builtin_unknown_raises():
    with pytest.raises(LookupError):
        run_builtin(ShellState({}), ["ls"], io.StringIO(), io.StringIO())


def test_echo_plain():
    status, out, _ = _run(ShellState({}), ["echo", "a", "b"])
    assert (status, out) == (0, "a b\n")


def test_echo_no_arguments():
    assert _run(ShellState({}), ["echo"])[1] == "\n"


def test_echo_n_flag():
    assert _run(ShellState({}), ["echo", "-n", "a", "b"])[1] == "a b"


def test_echo_n_alone_is_printed():
    assert _run(ShellState({}), ["echo", "-n"])[1] == "-n\n"


def test_echo_direct_call():
    out = io.StringIO()
    assert echo(ShellState({}), ["echo", "x"], out, io.StringIO()) == 0
    assert out.getvalue() == "x\n"


def test_pwd_prints_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = io.StringIO()
    assert pwd(ShellState({}), ["pwd"], out, io.StringIO()) == 0
    assert out.getvalue() == os.getcwd() + "\n"


def test_env_prints_envp():
    state = ShellState({"A": "1", "B": "2"})
    out = io.StringIO()
    assert env(state, ["env"], out, io.StringIO()) == 0
    assert out.getvalue().splitlines() == state.env.to_envp()


def test_env_too_many_arguments():
    status, out, err = _run(ShellState({}), ["env", "x"])
    assert status == 127
    assert out == ""
    assert err == "bash: env: too many arguments\n"


def test_export_without_arguments_lists():
    state = ShellState({"B": "2", "A": "1"})
    out = io.StringIO()
    assert export(state, ["export"], out, io.StringIO()) == 127
    assert out.getvalue().splitlines() == state.env.export_lines()


def test_export_sets_value():
    state = ShellState({})
    _run(state, ["export", "NAME=value"])
    assert state.env.get("NAME") == "value"
    assert state.exit_code == 0


def test_export_without_value_declares():
    state = ShellState({})
    _run(state, ["export", "NAME"])
    assert "NAME" in state.env
    assert state.env.get("NAME") is None


def test_export_keeps_only_first_value_part():
    state = ShellState({})
    _run(state, ["export", "NAME=b=c"])
    assert state.env.get("NAME") == "b"


def test_export_trailing_equals_has_no_value():
    state = ShellState({"NAME": "old"})
    _run(state, ["export", "NAME="])
    assert "NAME" in state.env
    assert state.env.get("NAME") is None


def test_export_underscore_name_accepts_anything():
    state = ShellState({})
    _run(state, ["export", "_x-y=1"])
    assert state.env.get("_x-y") == "1"


@pytest.mark.parametrize("arg", ["1A=2", "A-B", "="])
def test_export_invalid_identifier(arg):
    state = ShellState({})
    size = len(state.env)
    status, _, err = _run(state, ["export", arg])
    assert status == 1
    assert state.exit_code == 1
    assert "not a valid identifier" in err
    assert len(state.env) == size


def test_export_error_message_names_identifier():
    _, _, err = _run(ShellState({}), ["export", "1A"])
    assert err == "bash: export: `1A': not a valid identifier\n"


def test_unset_removes():
    state = ShellState({"A": "1", "B": "2"})
    unset(state, ["unset", "A", "missing"], io.StringIO(), io.StringIO())
    assert "A" not in state.env
    assert state.env.get("B") == "2"


def test_exit_without_argument_requests_exit():
    state = ShellState({})
    _run(state, ["exit"])
    assert state.running() is False


def test_exit_with_number_sets_code():
    state = ShellState({})
    status = exit_builtin(state, ["exit", "5"], io.StringIO(), io.StringIO())
    assert status == 5
    assert state.exit_code == 5
    assert state.running() is True


@pytest.mark.parametrize("arg", ["abc", "a1", "1.5", "++1"])
def test_exit_non_numeric_gives_two(arg):
    state = ShellState({})
    _run(state, ["exit", arg])
    assert state.exit_code == 2


def test_exit_wraps_large_values():
    state = ShellState({})
    _run(state, ["exit", "263"])
    assert state.exit_code == 7


def test_exit_negative_value():
    state = ShellState({})
    _run(state, ["exit", "-1"])
    assert state.exit_code == 255


def test_exit_too_many_arguments():
    err = io.StringIO()
    with pytest.raises(BuiltinExit) as info:
        exit_builtin(ShellState({}), ["exit", "1", "2"], io.StringIO(), err)
    assert info.value.status == 1
    assert err.getvalue() == "bash: exit: too many arguments\n"


def test_cd_absolute_updates_pwd_and_oldpwd(tmp_path, monkeypatch):
    start = tmp_path / "start"
    target = tmp_path / "target"
    start.mkdir()
    target.mkdir()
    monkeypatch.chdir(start)
    before = os.getcwd()
    state = ShellState({"PWD": before, "OLDPWD": ""})
    status, _, err = _run(state, ["cd", str(target)])
    assert status == 0
    assert err == ""
    assert os.getcwd() == os.path.realpath(target)
    assert state.env.get("OLDPWD") == before
    assert state.env.get("PWD") == os.getcwd()


def test_cd_relative(tmp_path, monkeypatch):
    (tmp_path / "sub").mkdir()
    monkeypatch.chdir(tmp_path)
    status, out, err = _run(ShellState({}), ["cd", "sub"])
    assert status == 0
    assert out == ""
    assert err == ""
    assert os.getcwd() == os.path.realpath(tmp_path / "sub")


def test_cd_missing_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = ShellState({})
    status, _, err = _run(state, ["cd", "nowhere"])
    assert status == 1
    assert state.exit_code == 1
    assert err == "bash: cd: nowhere: No such file or directory\n"
    assert os.getcwd() == os.path.realpath(tmp_path)


def test_cd_too_many_arguments(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = ShellState({})
    _, _, err = _run(state, ["cd", "a", "b"])
    assert err == "bash: cd: too many arguments\n"
    assert state.exit_code == 1


def test_cd_no_argument_goes_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(tmp_path)
    _run(ShellState({"HOME": str(home)}), ["cd"])
    assert os.getcwd() == os.path.realpath(home)


def test_cd_home_not_set(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _, _, err = _run(ShellState({}), ["cd"])
    assert err == "bash: cd: HOME not set\n"
    assert os.getcwd() == os.path.realpath(tmp_path)


def test_cd_tilde_paths(tmp_path, monkeypatch):
    home = tmp_path / "home"
    (home / "sub").mkdir(parents=True)
    monkeypatch.chdir(tmp_path)
    state = ShellState({"HOME": str(home)})
    _run(state, ["cd", "~/sub"])
    assert os.getcwd() == os.path.realpath(home / "sub")
    _run(state, ["cd", "~"])
    assert os.getcwd() == os.path.realpath(home)


def test_cd_tilde_without_home(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _, _, err = _run(ShellState({}), ["cd", "~"])
    assert err == "bash: cd: HOME not set\n"


def test_cd_dash_prints_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = io.StringIO()
    cd(ShellState({}), ["cd", "-"], out, io.StringIO())
    assert out.getvalue() == os.getcwd() + "\n"
    assert os.getcwd() == os.path.realpath(tmp_path)