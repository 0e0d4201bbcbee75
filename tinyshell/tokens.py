"""Tokens produced by the lexer and helpers to inspect token sequences."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable


class TokenType(IntEnum):
    """Category of a token; the ordering of the values is significant."""

    REDIRECT = 0
    HEREDOC = 1
    PIPE = 2
    OPERATOR = 3
    LIMITER = 4
    FILENAME = 5
    WORD = 6
    PAREN = 7


@dataclass
class Token:
    """One lexical unit of a command line."""

    content: str
    type: TokenType = TokenType.WORD


def count_type(tokens: Iterable[Token], token_type: TokenType) -> int:
    """Count tokens of ``token_type``.

    Pipes are only counted outside parentheses.
    """
    depth = 0
    count = 0
    for token in tokens:
        if token_type == TokenType.PIPE:
            if token.content.startswith("("):
                depth += 1
            elif token.content.startswith(")"):
                depth -= 1
        if token.type == token_type and depth == 0:
            count += 1
    return count