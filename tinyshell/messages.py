"""Diagnostic messages the shell writes to standard error."""

from __future__ import annotations


def syntax_error(token: str) -> str:
    """Message for an unexpected token."""
    return f" syntax error near unexpected token `{token}'"


def heredoc_eof_warning(delimiter: str, line: int) -> str:
    """Warning for a here-document closed by end of file."""
    return (
        f"warning: here-document at line {line} "
        f"delimited by end-of-file (wanted `{delimiter}')"
    )


def forbidden_sequence(text: str) -> str:
    """Message for a forbidden two-character sequence starting ``text``."""
    return f"Forbidden sequence of characters detected: '{text}'"


def forbidden_character(text: str) -> str:
    """Message for the forbidden character that starts ``text``."""
    return f"Forbidden character detected: '{text[:1]}'"


def numeric_argument_required(arg: str) -> str:
    """Message for a non-numeric argument to ``exit``."""
    return f"exit: {arg}: numeric argument required"


def not_a_valid_identifier(command: str, arg: str, name: str) -> str:
    """Message for an invalid variable name given to ``command``.

    When ``arg`` holds an ``=``, the part from the ``=`` on is shown;
    otherwise ``name`` is shown.
    """
    _, sep, value = arg.partition("=")
    shown = sep + value if sep else name
    return f"{command}: `{shown}': not a valid identifier"