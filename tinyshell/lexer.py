"""Breaking a command line into classified tokens."""

from __future__ import annotations

from typing import List, Optional

from tinyshell import messages
from tinyshell.status import set_exit_code
from tinyshell.tokens import Token, TokenType

_SPACES = frozenset(" \t\n\v\f\r")
_QUOTES = frozenset("'\"")
_FORBIDDEN_CHARS = frozenset("\\`[];#{}")
_FORBIDDEN_PAIRS = frozenset({"()", "<&", ">&", "&>", "$(", ")$", "[]", "&&", "||"})


class LexerError(Exception):
    """Raised when a command line cannot be tokenized.

    ``message`` is the diagnostic to show; it is empty when the line is
    rejected without one.
    """

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


def _fail(message: str) -> LexerError:
    set_exit_code(1)
    return LexerError(message)


def is_forbidden(text: str) -> Optional[str]:
    """Return the diagnostic if ``text`` starts with a forbidden character
    or sequence, otherwise ``None``."""
    if not text:
        return None
    if text[0] in _FORBIDDEN_CHARS:
        return messages.forbidden_character(text)
    if text[:2] in _FORBIDDEN_PAIRS:
        return messages.forbidden_sequence(text)
    return None


def delimiter_length(text: str) -> int:
    """Length of the delimiter starting ``text``, or 0 if there is none."""
    if not text:
        return 0
    first = text[0]
    if first in ("(", ")"):
        return 1
    if len(text) < 2:
        return 0
    if first in ("<", ">", "|") and text[1] != first:
        return 1
    if first in ("<", ">", "|", "&") and text[1] == first:
        return 2
    return 0


def skip_quotes(text: str) -> int:
    """Offset of the quote closing the one that starts ``text``.

    When the quote is never closed the length of ``text`` is returned.
    When ``text`` does not start with a quote, the offset of the last
    character before the first quote (or of the last character) is returned.
    """
    if not text:
        return 0
    if text[0] not in _QUOTES:
        first_quote = next(
            (index for index, char in enumerate(text) if char in _QUOTES), None
        )
        if first_quote is None:
            return len(text) - 1
        return first_quote - 1
    closing = text.find(text[0], 1)
    return len(text) if closing == -1 else closing


def text_length(text: str) -> int:
    """Length of the word starting ``text``, honouring quotes.

    Raises :class:`LexerError` on a forbidden character or an unclosed quote.
    """
    j = 0
    while j < len(text) and not delimiter_length(text[j:]) and text[j] not in _SPACES:
        message = is_forbidden(text[j:])
        if message:
            raise _fail(message)
        if text[j] in _QUOTES:
            k = skip_quotes(text[j:])
            if j + k >= len(text):
                raise _fail(
                    f"unexpected EOF while looking for matching `{text[j]}'"
                )
            j += k
        j += 1
    return j


def token_length(text: str) -> int:
    """Length of the token starting ``text``; 0 when no token can start there."""
    if len(text) > 1:
        length = delimiter_length(text)
        if length:
            return length
    elif text == ")":
        return delimiter_length(text)
    return text_length(text)


def classify(content: str, previous: Optional[Token] = None) -> TokenType:
    """Return the category of ``content`` given the token before it."""
    first = content[:1]
    size = len(content)
    if (first in ("<", ">") and size == 1) or (first == ">" and size == 2):
        return TokenType.REDIRECT
    if first == "<" and size == 2:
        return TokenType.HEREDOC
    if first == "|" and size == 1:
        return TokenType.PIPE
    if first in ("|", "&") and size == 2:
        return TokenType.OPERATOR
    if first in ("(", ")"):
        return TokenType.PAREN
    if previous is not None and previous.type == TokenType.HEREDOC:
        return TokenType.LIMITER
    if previous is not None and previous.type == TokenType.REDIRECT:
        return TokenType.FILENAME
    return TokenType.WORD


def tokenize(line: str) -> List[Token]:
    """Split ``line`` into classified tokens.

    Raises :class:`LexerError` when the line is rejected; in the cases
    that carry a diagnostic the exit status is set to 1.
    """
    tokens: List[Token] = []
    position = 0
    end = len(line)
    while position < end:
        while position < end and line[position] in _SPACES:
            position += 1
        if position >= end:
            break
        rest = line[position:]
        message = is_forbidden(rest)
        if message:
            raise _fail(message)
        length = token_length(rest)
        if not length:
            raise LexerError()
        content = rest[:length]
        position += length
        previous = tokens[-1] if tokens else None
        tokens.append(Token(content, classify(content, previous)))
        if (
            previous is not None
            and previous.type < TokenType.PIPE
            and content.startswith("$")
        ):
            raise _fail(f"{content}: ambiguous redirect")
    return tokens