"""Opening the input and output files named by redirections."""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Optional, TextIO

from tinyshell import messages
from tinyshell.status import set_exit_code
from tinyshell.tokens import Token, TokenType


class RedirectionError(Exception):
    """Raised when a redirection cannot be set up.

    ``status`` is the exit status it leaves; ``interrupted`` is set when a
    here-document was cut short by Ctrl-C.
    """

    def __init__(
        self, message: str, status: int = 1, interrupted: bool = False
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.interrupted = interrupted


def _fail(message: str, status: int) -> RedirectionError:
    set_exit_code(status)
    return RedirectionError(message, status)


@dataclass
class Redirections:
    """Files a command reads from and writes to instead of the defaults."""

    stdin: Optional[BinaryIO] = None
    stdout: Optional[BinaryIO] = None

    def close(self) -> None:
        """Close any open files."""
        for stream in (self.stdin, self.stdout):
            if stream is not None:
                stream.close()
        self.stdin = None
        self.stdout = None

    def __enter__(self) -> "Redirections":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def read_heredoc(delimiter: str, stream: Optional[TextIO] = None) -> str:
    """Read lines from ``stream`` until a line equal to ``delimiter``.

    Returns the text read, without the delimiter line. At end of file a
    warning is written to standard error.
    """
    source = sys.stdin if stream is None else stream
    lines = []
    count = 1
    while True:
        sys.stdout.write("> ")
        sys.stdout.flush()
        line = source.readline()
        count += 1
        if not line:
            sys.stderr.write(messages.heredoc_eof_warning(delimiter, count) + "\n")
            break
        if line == delimiter + "\n":
            break
        lines.append(line)
    return "".join(lines)


def _open_input(name: str) -> BinaryIO:
    if not os.path.exists(name):
        raise _fail(f"{name}: No such file or directory", 1)
    if not os.access(name, os.R_OK):
        raise _fail(f"{name}: Permission denied", 126)
    try:
        return open(name, "rb")
    except OSError as exc:
        raise _fail(f"{name}: {exc.strerror}", 1) from exc


def _open_output(name: str, append: bool) -> BinaryIO:
    try:
        return open(name, "ab" if append else "wb")
    except OSError as exc:
        if not os.path.exists(name):
            raise _fail(f"{name}: Permission denied", 1) from exc
        raise _fail(f" : {exc.strerror}", 1) from exc


def _heredoc_file(delimiter: str, stream: Optional[TextIO]) -> BinaryIO:
    try:
        text = read_heredoc(delimiter, stream)
    except KeyboardInterrupt as exc:
        raise RedirectionError("", 130, interrupted=True) from exc
    handle = tempfile.TemporaryFile()
    handle.write(text.encode())
    handle.seek(0)
    return handle  # type: ignore[return-value]


def open_redirections(
    tokens: Iterable[Token], stdin: Optional[TextIO] = None
) -> Redirections:
    """Open the files named by the redirections of one command.

    Tokens are read up to the first pipe. ``stdin`` is where here-documents
    are read from. The first failing redirection raises
    :class:`RedirectionError`; later ones are not attempted.
    """
    result = Redirections()
    iterator = iter(tokens)
    try:
        for token in iterator:
            if token.type == TokenType.PIPE:
                break
            if token.type not in (TokenType.REDIRECT, TokenType.HEREDOC):
                continue
            target = next(iterator, None)
            if target is None or target.type == TokenType.PIPE:
                raise _fail(messages.syntax_error("newline"), 2)
            if token.content in ("<", "<<"):
                if result.stdin is not None:
                    result.stdin.close()
                    result.stdin = None
                if token.content == "<":
                    result.stdin = _open_input(target.content)
                else:
                    result.stdin = _heredoc_file(target.content, stdin)
            elif token.content in (">", ">>"):
                if result.stdout is not None:
                    result.stdout.close()
                    result.stdout = None
                result.stdout = _open_output(target.content, token.content == ">>")
    except BaseException:
        result.close()
        raise
    return result