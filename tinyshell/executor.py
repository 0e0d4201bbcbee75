"""Running a tokenized command line: builtins, programs and pipelines."""

from __future__ import annotations

import contextlib
import copy
import io
import os
import signal
import subprocess
import sys
import tempfile
import threading
from typing import IO, Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple, Union

from tinyshell.builtins import ShellExit, is_builtin, run_builtin
from tinyshell.commands import Command, CommandNotFound, find_command, is_directory, split_pipeline
from tinyshell.environment import Environment
from tinyshell.redirections import RedirectionError, Redirections, open_redirections
from tinyshell.status import install_child_handlers, set_exit_code
from tinyshell.tokens import Token

_SIGQUIT = getattr(signal, "SIGQUIT", None)

_Input = Union[int, IO[bytes]]
_Result = Union[int, "subprocess.Popen[bytes]"]


def _fileno(stream: object) -> Optional[int]:
    try:
        return stream.fileno()  # type: ignore[attr-defined]
    except (AttributeError, OSError, ValueError):
        return None


def _report(message: str) -> None:
    if message:
        print(message, file=sys.stderr)


def _close(stream: object) -> None:
    if not isinstance(stream, int) and hasattr(stream, "close"):
        stream.close()  # type: ignore[union-attr]


def resolve_program(args: Sequence[str], env: Environment) -> str:
    """Return the program to run for the command ``args``.

    Raises :class:`CommandNotFound` carrying the message and the exit
    status (126 or 127) the command fails with.
    """
    name = args[0] if args else ""
    if not name:
        raise CommandNotFound(": command not found")
    explicit = name.startswith((".", "/"))
    if explicit and is_directory(name):
        raise CommandNotFound(f"{name}: Is a directory", 126)
    if explicit and not os.path.exists(name):
        raise CommandNotFound(f"{name}: No such file or directory", 127)
    if name.startswith(".") and not os.access(name, os.X_OK):
        raise CommandNotFound(f"{name}: Permission denied", 126)
    return find_command(env.search_paths(), name)


def status_from_returncode(returncode: int) -> int:
    """Exit status of a child process: 128 plus the signal when killed."""
    if returncode < 0:
        return 128 - returncode
    return returncode


@contextlib.contextmanager
def _child_signals() -> Iterator[None]:
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    signums = [signal.SIGINT] + ([_SIGQUIT] if _SIGQUIT is not None else [])
    previous = {signum: signal.getsignal(signum) for signum in signums}
    install_child_handlers()
    try:
        yield
    finally:
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)


def _run_single_builtin(
    command: Command, env: Environment, source: TextIO, sink: TextIO
) -> int:
    try:
        redirs = open_redirections(command.tokens, source)
    except RedirectionError as exc:
        _report(exc.message)
        return set_exit_code(1 if exc.interrupted else exc.status)
    buffer = io.StringIO()
    try:
        status = run_builtin(
            command.args, env, sink if redirs.stdout is None else buffer
        )
    finally:
        if redirs.stdout is not None:
            redirs.stdout.write(buffer.getvalue().encode())
        redirs.close()
    return set_exit_code(0 if status is None else status)


def _run_child_builtin(args: Sequence[str], env: Environment) -> Tuple[int, str]:
    """Run a builtin as a pipeline member: its effects stay local to it."""
    buffer = io.StringIO()
    cwd = os.getcwd()
    try:
        status = run_builtin(args, copy.deepcopy(env), buffer)
    except ShellExit as exc:
        status = exc.code
    finally:
        os.chdir(cwd)
    return (0 if status is None else status), buffer.getvalue()


def _launch(
    command: Command,
    env: Environment,
    incoming: _Input,
    redirs: Redirections,
    last: bool,
    sink: TextIO,
    final_fd: Optional[int],
) -> Tuple[_Result, Optional[IO[bytes]]]:
    """Start one pipeline member; return its result and the input for the next."""
    if is_builtin(command.name):
        status, text = _run_child_builtin(command.args, env)
        if redirs.stdout is not None:
            redirs.stdout.write(text.encode())
            return status, None
        if last:
            sink.write(text)
            return status, None
        handle = tempfile.TemporaryFile()
        handle.write(text.encode())
        handle.seek(0)
        return status, handle  # type: ignore[return-value]
    if not command.args:
        return 0, None
    try:
        path = resolve_program(command.args, env)
    except CommandNotFound as exc:
        _report(exc.message)
        return exc.status, None
    target: Union[int, IO[bytes]]
    if redirs.stdout is not None:
        target = redirs.stdout
    elif not last:
        target = subprocess.PIPE
    elif final_fd is not None:
        target = final_fd
    else:
        target = subprocess.PIPE
    try:
        process = subprocess.Popen(
            list(command.args),
            executable=path,
            stdin=redirs.stdin if redirs.stdin is not None else incoming,
            stdout=target,
            env=env.to_envp(),
        )
    except OSError as exc:
        _report(f"{command.name}: {exc.strerror}")
        return 1, None
    if not last and redirs.stdout is None:
        return process, process.stdout
    return process, None


def _collect(results: List[_Result], sink: TextIO) -> int:
    if results and isinstance(results[-1], subprocess.Popen):
        captured = results[-1].stdout
        if captured is not None and not captured.closed:
            output = captured.read()
            captured.close()
            sink.write(output.decode(errors="replace"))
    status = 0
    for result in results:
        if isinstance(result, subprocess.Popen):
            status = status_from_returncode(result.wait())
        else:
            status = result
    return status


def _run_pipeline(
    commands: List[Command], env: Environment, source: TextIO, sink: TextIO
) -> int:
    with contextlib.suppress(AttributeError, OSError, ValueError):
        sink.flush()
    final_fd = _fileno(sink)
    first_input = _fileno(source)
    pending: Optional[IO[bytes]] = None
    results: List[_Result] = []
    last_index = len(commands) - 1
    with _child_signals():
        for index, command in enumerate(commands):
            last = index == last_index
            incoming: _Input
            if index == 0:
                incoming = first_input if first_input is not None else subprocess.DEVNULL
            else:
                incoming = pending if pending is not None else subprocess.DEVNULL
            pending = None
            try:
                redirs = open_redirections(command.tokens, source)
            except RedirectionError as exc:
                _close(incoming)
                _report(exc.message)
                if exc.interrupted:
                    _collect(results, sink)
                    return set_exit_code(exc.status)
                results.append(1)
                continue
            try:
                result, pending = _launch(
                    command, env, incoming, redirs, last, sink, final_fd
                )
            finally:
                redirs.close()
                _close(incoming)
            results.append(result)
        status = _collect(results, sink)
    return set_exit_code(status)


def execute(
    tokens: Iterable[Token],
    env: Environment,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """Run the command line ``tokens`` and return its exit status.

    A lone builtin runs in the shell itself and may change ``env`` or
    raise :class:`ShellExit`; in a pipeline every member runs apart and the
    status is that of the last one. Here-documents are read from ``stdin``;
    output that is not redirected goes to ``stdout``.
    """
    source = sys.stdin if stdin is None else stdin
    sink = sys.stdout if stdout is None else stdout
    commands = split_pipeline(list(tokens))
    if not commands:
        return set_exit_code(0)
    if len(commands) == 1 and is_builtin(commands[0].name):
        return _run_single_builtin(commands[0], env, source, sink)
    return _run_pipeline(commands, env, source, sink)