import io
import os

import pytest

from tinyshell.builtins import (
    ShellExit,
    cd,
    echo,
    exit_builtin,
    export,
    is_builtin,
    parse_exit_code,
    print_env,
    pwd,
    run_builtin,
    unset,
    validate_name,
)
from tinyshell.environment import Environment
from tinyshell.status import get_exit_code, set_exit_code


@pytest.fixture(autouse=True)
def reset_status():
    set_exit_code(0)
    yield
    set_exit_code(0)


@pytest.mark.parametrize("name", ["pwd", "cd", "export", "echo", "unset", "env", "exit"])
def test_is_builtin_true(name):
    assert is_builtin(name) is True


@pytest.mark.parametrize("name", ["ls", "", None, "echo2"])
def test_is_builtin_false(name):
    assert is_builtin(name) is False


def test_validate_name_accepts_valid(capsys):
    assert validate_name("_ok1", "export", "_ok1") is True
    assert capsys.readouterr().err == ""


def test_validate_name_bad_start(capsys):
    assert validate_name("1abc", "export", "1abc") is False
    assert capsys.readouterr().err == "export: `1abc': not a valid identifier\n"


def test_validate_name_bad_middle_shows_rest(capsys):
    assert validate_name("a-b", "unset", "a-b") is False
    assert capsys.readouterr().err == "unset: `-b': not a valid identifier\n"


def test_validate_name_shows_assignment_part(capsys):
    assert validate_name("", "export", "=x") is False
    assert capsys.readouterr().err == "export: `=x': not a valid identifier\n"


@pytest.mark.parametrize("arg, expected", [("42", 42), ("+7", 7), ("", 0), ("0", 0)])
def test_parse_exit_code_plain(arg, expected):
    assert parse_exit_code(arg) == expected


def test_parse_exit_code_wraps_into_byte():
    for arg in ["-1", "256", "9223372036854775807", "-9223372036854775808"]:
        assert 0 <= parse_exit_code(arg) <= 255
    assert parse_exit_code("256") == parse_exit_code("0")
    assert parse_exit_code("-1") == parse_exit_code("255")


def test_parse_exit_code_out_of_range(capsys):
    assert parse_exit_code("9223372036854775808") == 2
    assert "numeric argument required" in capsys.readouterr().err


def test_parse_exit_code_negative_zero(capsys):
    assert parse_exit_code("-0") == 2
    assert capsys.readouterr().err == "exit: -0: numeric argument required\n"


def test_parse_exit_code_not_numeric():
    with pytest.raises(ValueError, match="exit: abc: numeric argument required"):
        parse_exit_code("abc")


def test_pwd_writes_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = io.StringIO()
    assert pwd(out) == 0
    assert out.getvalue() == os.getcwd() + "\n"


@pytest.mark.parametrize(
    "args, expected",
    [
        (["echo"], "\n"),
        (["echo", "a", "b"], "a b\n"),
        (["echo", "-n", "-n", "x"], "x"),
        (["echo", "-nn", "x"], "-nn x\n"),
        (["echo", "x", "-n"], "x -n\n"),
        (["echo", "-n"], ""),
    ],
)
def test_echo(args, expected):
    out = io.StringIO()
    assert echo(args, out) == 0
    assert out.getvalue() == expected


def test_print_env_skips_valueless():
    env = Environment(["A=1", "B", "C="])
    out = io.StringIO()
    assert print_env(env, out) == 0
    assert out.getvalue() == "A=1\nC=\n"


def test_export_lists_sorted():
    env = Environment(["B=2", "A"])
    out = io.StringIO()
    assert export(env, ["export"], out) == 0
    assert out.getvalue() == 'declare -x A\ndeclare -x B="2"\n'


def test_export_adds_and_updates():
    env = Environment(["A=1"])
    out = io.StringIO()
    assert export(env, ["export", "A=9", "NEW=x", "EMPTY"], out) == 0
    assert env.get("A") == "9"
    assert env.get("NEW") == "x"
    assert "EMPTY" in env and env.get("EMPTY") is None
    assert out.getvalue() == ""


def test_export_existing_without_value_clears_value():
    env = Environment(["A=1"])
    export(env, ["export", "A"], io.StringIO())
    assert "A" in env
    assert env.get("A") is None


def test_export_invalid_name(capsys):
    env = Environment()
    assert export(env, ["export", "1x=2", "OK=1"], io.StringIO()) == 1
    assert get_exit_code() == 1
    assert env.get("OK") == "1"
    assert "1x" not in env
    assert capsys.readouterr().err == "export: `=2': not a valid identifier\n"


def test_unset_removes():
    env = Environment(["A=1", "B=2"])
    assert unset(env, ["unset", "A", "MISSING"]) == 0
    assert list(env) == ["B"]


def test_unset_no_args():
    env = Environment(["A=1"])
    assert unset(env, ["unset"]) == 0
    assert list(env) == ["A"]


def test_unset_invalid_stops_later_removals(capsys):
    env = Environment(["A=1", "B=2"])
    assert unset(env, ["unset", "A", "b-c", "B"]) == 1
    assert list(env) == ["B"]
    assert capsys.readouterr().err == "unset: `-c': not a valid identifier\n"


def test_cd_updates_dirs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    start = os.getcwd()
    (tmp_path / "sub").mkdir()
    env = Environment({"PWD": start, "OLDPWD": start, "HOME": start})
    assert cd(env, ["cd", "sub"], io.StringIO()) == 0
    assert os.getcwd() == os.path.join(start, "sub")
    assert env.get("PWD") == os.getcwd()
    assert env.get("OLDPWD") == start


def test_cd_dash_prints_and_returns(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    start = os.getcwd()
    (tmp_path / "sub").mkdir()
    env = Environment({"PWD": start, "OLDPWD": start, "HOME": start})
    cd(env, ["cd", "sub"], io.StringIO())
    out = io.StringIO()
    assert cd(env, ["cd", "-"], out) == 0
    assert out.getvalue() == start + "\n"
    assert os.getcwd() == start


def test_cd_no_args_goes_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(tmp_path)
    env = Environment({"PWD": os.getcwd(), "OLDPWD": os.getcwd(), "HOME": str(home)})
    assert cd(env, ["cd"], io.StringIO()) == 0
    assert os.path.samefile(os.getcwd(), home)


def test_cd_too_many_arguments(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    env = Environment({"PWD": os.getcwd(), "HOME": os.getcwd()})
    assert cd(env, ["cd", "a", "b"], io.StringIO()) == 1
    assert capsys.readouterr().err == "cd: too many arguments\n"


def test_cd_missing_directory(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    env = Environment({"PWD": os.getcwd(), "HOME": os.getcwd()})
    assert cd(env, ["cd", "nope"], io.StringIO()) == 1
    assert get_exit_code() == 1
    assert capsys.readouterr().err == "cd: nope: No such file or directory\n"


def test_cd_home_unset(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    env = Environment({"PWD": os.getcwd()})
    assert cd(env, ["cd"], io.StringIO()) == 1
    assert os.getcwd() == env.get("PWD")


def test_exit_without_argument_uses_last_status():
    set_exit_code(5)
    with pytest.raises(ShellExit) as info:
        exit_builtin(["exit"])
    assert info.value.code == 5


def test_exit_with_number():
    with pytest.raises(ShellExit) as info:
        exit_builtin(["exit", "3"])
    assert info.value.code == 3
    assert get_exit_code() == 3


def test_exit_too_many_arguments(capsys):
    assert exit_builtin(["exit", "1", "2"]) == 1
    assert capsys.readouterr().err == "exit: too many arguments\n"


def test_exit_not_numeric(capsys):
    assert exit_builtin(["exit", "abc", "x"]) == 2
    assert get_exit_code() == 2
    assert capsys.readouterr().err == "exit: abc: numeric argument required\n"


def test_run_builtin_not_builtin():
    assert run_builtin(["ls"], Environment(), io.StringIO()) is None
    assert run_builtin([], Environment(), io.StringIO()) is None


def test_run_builtin_dispatches_echo():
    out = io.StringIO()
    assert run_builtin(["echo", "hi"], Environment(), out) == 0
    assert out.getvalue() == "hi\n"


def test_run_builtin_exit_prints_exit():
    out = io.StringIO()
    with pytest.raises(ShellExit) as info:
        run_builtin(["exit", "4"], Environment(), out)
    assert info.value.code == 4
    assert out.getvalue() == "exit\n"


def test_run_builtin_env_and_unset():
    env = Environment(["A=1", "B=2"])
    assert run_builtin(["unset", "A"], env, io.StringIO()) == 0
    out = io.StringIO()
    assert run_builtin(["env"], env, out) == 0
    assert out.getvalue() == "B=2\n"