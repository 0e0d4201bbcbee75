"""Commands built from tokens, program lookup and operator checks."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Union

from tinyshell.tokens import Token, TokenType


class CommandNotFound(Exception):
    """Raised when a program cannot be found or run."""

    def __init__(self, message: str, status: int = 127) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


@dataclass
class Command:
    """One command of a pipeline."""

    args: List[str]
    tokens: List[Token] = field(default_factory=list)
    path: Optional[str] = None

    @property
    def name(self) -> str:
        """The command word, or the empty string when there is none."""
        return self.args[0] if self.args else ""


def command_args(tokens: Iterable[Token]) -> List[str]:
    """Arguments of the command that starts ``tokens``, up to the first pipe.

    Redirection operators, file names and here-document limiters are left out.
    """
    args = []
    for token in tokens:
        if token.type == TokenType.PIPE:
            break
        if token.type > TokenType.FILENAME or token.type == TokenType.OPERATOR:
            args.append(token.content)
    return args


def _build(segment: List[Token]) -> Command:
    start = 0
    while start < len(segment) and not segment[start].content:
        start += 1
    segment = segment[start:]
    return Command(command_args(segment), segment)


def split_pipeline(tokens: Sequence[Token]) -> List[Command]:
    """Split ``tokens`` at pipes into the commands of a pipeline."""
    if not tokens:
        return []
    commands = []
    segment: List[Token] = []
    for token in tokens:
        if token.type == TokenType.PIPE:
            commands.append(_build(segment))
            segment = []
        else:
            segment.append(token)
    commands.append(_build(segment))
    return commands


def is_directory(path: str) -> bool:
    """Return True if ``path`` names a directory."""
    return bool(path) and os.path.isdir(path)


def find_command(paths: Optional[Sequence[str]], name: str) -> str:
    """Return the program to run for ``name``.

    ``paths`` are search directories ending in ``/``, or ``None`` when
    ``PATH`` is not set. Raises :class:`CommandNotFound` otherwise.
    """
    if is_directory(name):
        raise CommandNotFound(f"{name}: command not found")
    if paths is None:
        raise CommandNotFound(f"{name}: No such file or directory")
    for directory in paths:
        if name and os.access(name, os.X_OK):
            return name
        candidate = directory + name
        if os.access(candidate, os.X_OK):
            return candidate
    raise CommandNotFound(f"{name}: command not found")


def operator_allows(token: Union[Token, str], status: int) -> bool:
    """Return True if the command after ``&&`` or ``||`` should run,
    given the exit status of the command before it."""
    content = token.content if isinstance(token, Token) else token
    if content == "&&":
        return status == 0
    if content == "||":
        return status != 0
    return False