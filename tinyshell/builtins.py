"""Commands the shell runs itself: pwd, cd, export, echo, unset, env, exit.

Every builtin takes its whole argument vector, command name included, writes
normal output to ``out`` and diagnostics to standard error, records its exit
status and returns it.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Callable, Dict, Optional, Sequence, TextIO

from tinyshell import messages
from tinyshell.environment import Environment, split_assignment
from tinyshell.status import get_exit_code, set_exit_code

_BUILTINS = frozenset({"pwd", "cd", "export", "echo", "unset", "env", "exit"})
_NUMBER = re.compile(r"([+-]?)([0-9]*)")
_LLONG_MAX = 2**63 - 1


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with status ``code``."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


def _error(message: str) -> None:
    print(message, file=sys.stderr)


def _is_name_start(char: str) -> bool:
    return char == "_" or (char.isascii() and char.isalpha())


def _is_name_char(char: str) -> bool:
    return char == "_" or (char.isascii() and char.isalnum())


def is_builtin(name: Optional[str]) -> bool:
    """Return True if ``name`` is run by the shell itself."""
    return bool(name) and name in _BUILTINS


def validate_name(name: str, command: str, arg: str) -> bool:
    """Return True if ``name`` is a valid variable name.

    Otherwise a "not a valid identifier" message for ``command`` and the
    argument ``arg`` is written to standard error.
    """
    if not name or not _is_name_start(name[0]):
        _error(messages.not_a_valid_identifier(command, arg, name))
        return False
    for index, char in enumerate(name):
        if not _is_name_char(char):
            _error(messages.not_a_valid_identifier(command, arg, name[index:]))
            return False
    return True


def parse_exit_code(arg: str) -> int:
    """Return the status, 0 to 255, that ``exit arg`` leaves with.

    Raises :class:`ValueError` when ``arg`` is not a number. A number out of
    the range of a signed 64-bit integer gives 2, after a message on
    standard error.
    """
    match = _NUMBER.fullmatch(arg)
    if match is None:
        raise ValueError(messages.numeric_argument_required(arg))
    sign = -1 if match.group(1) == "-" else 1
    value = int(match.group(2) or "0")
    too_long = (len(arg) > 19 and sign > 0) or (len(arg) > 20 and sign < 0)
    if sign > 0:
        out_of_range = value > _LLONG_MAX
    else:
        out_of_range = value == 0 or value - 1 > _LLONG_MAX
    if too_long or out_of_range:
        _error(messages.numeric_argument_required(arg))
        return 2
    return (value * sign) % 256


def pwd(out: TextIO) -> int:
    """Write the current directory to ``out``."""
    try:
        current = os.getcwd()
    except OSError:
        return set_exit_code(1)
    out.write(current + "\n")
    return set_exit_code(0)


def echo(args: Sequence[str], out: TextIO) -> int:
    """Write the arguments separated by spaces; leading ``-n`` drops the newline."""
    words = list(args[1:])
    newline = True
    while words and words[0] == "-n":
        newline = False
        words.pop(0)
    out.write(" ".join(words) + ("\n" if newline else ""))
    return set_exit_code(0)


def print_env(env: Environment, out: TextIO) -> int:
    """Write every variable that has a value as ``NAME=value``."""
    for line in env.env_lines():
        out.write(line + "\n")
    return set_exit_code(0)


def export(env: Environment, args: Sequence[str], out: TextIO) -> int:
    """Define variables, or list them all sorted when no argument is given."""
    if len(args) < 2:
        for line in env.export_lines():
            out.write(line + "\n")
        return set_exit_code(0)
    status = 0
    for arg in args[1:]:
        name, value = split_assignment(arg)
        if name in env:
            env.set(name, value)
        elif validate_name(name, "export", arg):
            env.set(name, value)
        else:
            status = 1
    return set_exit_code(status)


def unset(env: Environment, args: Sequence[str]) -> int:
    """Remove variables.

    After the first invalid name, the names that follow are checked but
    no longer removed.
    """
    failed = False
    for arg in args[1:]:
        valid = validate_name(arg, args[0], arg)
        if failed or not valid:
            failed = True
            continue
        env.unset(arg)
    return set_exit_code(1 if failed else 0)


def _cd_target(env: Environment, args: Sequence[str], out: TextIO) -> Optional[str]:
    arg = args[1] if len(args) > 1 else None
    if arg is None or arg in ("/", "~"):
        target = env.get("HOME")
        if target is None:
            _error("cd: HOME not set")
        return target
    if arg in ("~-", "-"):
        target = env.get("OLDPWD")
        if target is None:
            _error("cd: OLDPWD not set")
        elif arg == "-":
            out.write(target + "\n")
        return target
    if len(args) > 2:
        _error("cd: too many arguments")
        return None
    return arg


def cd(env: Environment, args: Sequence[str], out: TextIO) -> int:
    """Change directory and update PWD and OLDPWD.

    No argument, ``~`` and ``/`` go to HOME; ``-`` and ``~-`` go to OLDPWD,
    ``-`` also printing it.
    """
    target = _cd_target(env, args, out)
    if target is None:
        return set_exit_code(1)
    try:
        os.chdir(target)
    except OSError as exc:
        shown = args[1] if len(args) > 1 else target
        _error(f"cd: {shown}: {exc.strerror}")
        return set_exit_code(1)
    env.update_dirs(target)
    return set_exit_code(0)


def exit_builtin(args: Sequence[str]) -> int:
    """Raise :class:`ShellExit` with the requested status.

    With more than one numeric argument nothing happens but a message and
    status 1; a non-numeric argument gives a message and status 2.
    """
    if len(args) < 2:
        raise ShellExit(get_exit_code())
    try:
        code = parse_exit_code(args[1])
    except ValueError as exc:
        _error(str(exc))
        return set_exit_code(2)
    if len(args) > 2:
        _error("exit: too many arguments")
        return set_exit_code(1)
    raise ShellExit(set_exit_code(code))


def run_builtin(args: Sequence[str], env: Environment, out: TextIO) -> Optional[int]:
    """Run the builtin named by ``args[0]`` and return its status.

    Returns ``None`` when ``args[0]`` is not a builtin.
    """
    if not args or not is_builtin(args[0]):
        return None
    name = args[0]
    handlers: Dict[str, Callable[[], int]] = {
        "pwd": lambda: pwd(out),
        "cd": lambda: cd(env, args, out),
        "export": lambda: export(env, args, out),
        "echo": lambda: echo(args, out),
        "unset": lambda: unset(env, args),
        "env": lambda: print_env(env, out),
    }
    if name == "exit":
        out.write("exit\n")
        return exit_builtin(args)
    return handlers[name]()