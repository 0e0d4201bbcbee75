"""The shell's variables: lookup, export listing and search paths."""

from __future__ import annotations

import os
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union


def split_assignment(entry: str) -> Tuple[str, Optional[str]]:
    """Split ``NAME=value`` into its name and value.

    The value is ``None`` when ``entry`` has no ``=`` and the empty string
    when nothing follows the ``=``.
    """
    name, sep, value = entry.partition("=")
    return name, (value if sep else None)


class Environment:
    """Variables of the shell in the order they were defined.

    A variable may exist without a value (``export NAME``); its value is
    then ``None``.
    """

    def __init__(
        self, entries: Union[Iterable[str], Mapping[str, str]] = ()
    ) -> None:
        self._vars: Dict[str, Optional[str]] = {}
        if isinstance(entries, Mapping):
            for name, value in entries.items():
                self._vars[name] = value
        else:
            for entry in entries:
                name, value = split_assignment(entry)
                self._vars[name] = value

    def get(self, name: str) -> Optional[str]:
        """Value of ``name``, or ``None`` if it is unset or has no value."""
        return self._vars.get(name)

    def set(self, name: str, value: Optional[str]) -> None:
        """Give ``name`` the value ``value``, adding it at the end if new."""
        self._vars[name] = value

    def unset(self, name: str) -> None:
        """Remove ``name``; removing a missing variable is not an error."""
        self._vars.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._vars))

    def __len__(self) -> int:
        return len(self._vars)

    def ranked(self) -> List[str]:
        """Names in alphabetical order."""
        return sorted(self._vars, key=os.fsencode)

    def to_envp(self) -> Dict[str, str]:
        """Variables that have a value, as a mapping for child processes."""
        return {name: value for name, value in self._vars.items() if value is not None}

    def search_paths(self) -> Optional[List[str]]:
        """Directories of ``PATH``, each ending in ``/``.

        Empty entries are dropped. ``None`` when ``PATH`` is not set.
        """
        path = self._vars.get("PATH")
        if path is None:
            return None
        return [piece + "/" for piece in path.split(":") if piece]

    def export_lines(self) -> List[str]:
        """Lines printed by ``export`` without arguments, sorted by name."""
        lines = []
        for name in self.ranked():
            value = self._vars[name]
            if value is None:
                lines.append(f"declare -x {name}")
            else:
                lines.append(f'declare -x {name}="{value}"')
        return lines

    def env_lines(self) -> List[str]:
        """Lines printed by ``env``: variables with a value, in order."""
        return [
            f"{name}={value}"
            for name, value in self._vars.items()
            if value is not None
        ]

    def update_dirs(self, target: str) -> None:
        """Record a change of directory to ``target`` in PWD and OLDPWD."""
        current = self._vars.get("PWD")
        if target == current:
            return
        self._vars["OLDPWD"] = current
        self._vars["PWD"] = os.getcwd()