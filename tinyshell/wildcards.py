"""Expansion of ``*`` patterns against directory entries."""

from __future__ import annotations

import os
from typing import List, Union

PathLike = Union[str, "os.PathLike[str]"]


def has_wildcard(text: str) -> bool:
    """Return True if ``text`` holds a ``*``."""
    return "*" in text


def match_wildcard(entry: str, pattern: str) -> bool:
    """Return True if ``entry`` matches ``pattern``.

    ``*`` stands for any run of characters. Matching succeeds as soon as
    the pattern is used up, so a pattern also matches entries it is a
    prefix of.
    """
    i = j = 0
    star = -1
    backtrack = -1
    while j < len(pattern) and i < len(entry):
        if pattern[j] == entry[i]:
            i += 1
            j += 1
        elif pattern[j] == "*":
            j += 1
            star = j
            backtrack = i
        elif star != -1:
            j = star
            backtrack += 1
            i = backtrack
        else:
            return False
    return all(char == "*" for char in pattern[j:])


def expand_wildcard(pattern: str, directory: PathLike = ".") -> List[str]:
    """Return the entries of ``directory`` matching ``pattern``, sorted.

    Entries starting with ``.`` (including ``.`` and ``..``) are only
    considered when the pattern starts with ``.``. When nothing matches,
    the pattern itself is returned as the only word.
    """
    show_hidden = pattern.startswith(".")
    entries = [".", "..", *os.listdir(directory)]
    matches = [
        name
        for name in entries
        if (show_hidden or not name.startswith("."))
        and match_wildcard(name, pattern)
    ]
    if not matches:
        return [pattern]
    return sorted(matches, key=os.fsencode)