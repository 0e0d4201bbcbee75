"""Exit status of the last command and the interactive signal handlers."""

from __future__ import annotations

import signal
import sys
from types import FrameType

_SIGQUIT = getattr(signal, "SIGQUIT", None)


class _Status:
    """Holds the exit status shared by the whole shell."""

    def __init__(self) -> None:
        self.code = 0


_status = _Status()


def get_exit_code() -> int:
    """Return the exit status of the last command."""
    return _status.code


def set_exit_code(code: int) -> int:
    """Record ``code`` as the exit status of the last command and return it."""
    _status.code = code
    return code


def _prompt_handler(signum: int, frame: FrameType | None) -> None:
    if signum != signal.SIGINT:
        return
    set_exit_code(130)
    sys.stdout.write("\n")
    sys.stdout.flush()


def _child_handler(signum: int, frame: FrameType | None) -> None:
    if signum == signal.SIGINT:
        set_exit_code(130)
        sys.stdout.write("\n")
        sys.stdout.flush()
    elif _SIGQUIT is not None and signum == _SIGQUIT:
        sys.stdout.write("Quit (core dumped)\n")
        sys.stdout.flush()


def install_prompt_handlers() -> None:
    """Handle Ctrl-C at the prompt and ignore Ctrl-\\."""
    signal.signal(signal.SIGINT, _prompt_handler)
    if _SIGQUIT is not None:
        signal.signal(_SIGQUIT, signal.SIG_IGN)


def install_child_handlers() -> None:
    """Handle Ctrl-C and Ctrl-\\ while child processes are running."""
    signal.signal(signal.SIGINT, _child_handler)
    if _SIGQUIT is not None:
        signal.signal(_SIGQUIT, _child_handler)