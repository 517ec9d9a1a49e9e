"""The shell's own copy of the environment, kept as ``NAME=value`` entries."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Optional, Union

_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


def _atoi(text: str) -> int:
    """Leading integer of ``text`` after optional blanks and sign, else 0."""
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _name_of(entry: str) -> str:
    return entry.partition("=")[0]


def _ascii_greater(a: str, b: str) -> bool:
    """True if ``a`` sorts after ``b`` on their common prefix."""
    for x, y in zip(a, b):
        if x != y:
            return x > y
    return False


def _sort_ascii(entries: list[str]) -> list[str]:
    """Order entries by adjacent swaps, restarting after each swap."""
    entries = list(entries)
    i = 0
    while i + 1 < len(entries):
        if _ascii_greater(entries[i], entries[i + 1]):
            entries[i], entries[i + 1] = entries[i + 1], entries[i]
            i = 0
        else:
            i += 1
    return entries


class Environment:
    """Ordered list of environment entries with the shell's lookup rules.

    Names are matched by prefix, as the shell has always done: an entry
    matches a name when one starts with the other in the way each
    operation describes.
    """

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)

    @classmethod
    def from_startup(
        cls, environ: Union[Mapping[str, str], Iterable[str]]
    ) -> "Environment":
        """Copy the process environment, raising ``SHLVL`` by one."""
        if isinstance(environ, Mapping):
            raw = [f"{name}={value}" for name, value in environ.items()]
        else:
            raw = list(environ)
        entries = []
        for entry in raw:
            if entry.startswith("SHLVL"):
                entry = f"SHLVL={_atoi(entry[6:]) + 1}"
            entries.append(entry)
        return cls(entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Environment({self._entries!r})"

    def get_path(self, name: str) -> Optional[str]:
        """Value of the last entry whose name is a prefix of ``name``."""
        value = None
        for entry in self._entries:
            entry_name = _name_of(entry)
            if name.startswith(entry_name):
                value = entry[len(entry_name) + 1 :]
        return value

    def update(self, name: str, value: str) -> bool:
        """Set ``name=value`` in the first entry whose name prefixes ``name``.

        Returns False, leaving the entries alone, if there is none.
        """
        for index, entry in enumerate(self._entries):
            if name.startswith(_name_of(entry)):
                self._entries[index] = f"{name}={value}"
                return True
        return False

    def replace_matching(self, entry: str, name: str) -> bool:
        """Replace the first entry starting with ``name`` by ``entry``."""
        for index, existing in enumerate(self._entries):
            if existing.startswith(name):
                self._entries[index] = entry
                return True
        return False

    def append(self, entry: str) -> None:
        """Add ``entry`` at the end."""
        self._entries.append(entry)

    def unset(self, name: str) -> None:
        """Drop every entry that starts with ``name``."""
        self._entries = [e for e in self._entries if not e.startswith(name)]

    def declare_lines(self) -> list[str]:
        """Lines printed by ``export`` without arguments."""
        kept: list[str] = []
        entries = iter(self._entries)
        for entry in entries:
            if entry.startswith("_"):
                following = next(entries, None)
                if following is None:
                    break
                entry = following
            kept.append(entry)
        lines = []
        for entry in _sort_ascii(kept):
            name, sep, value = entry.partition("=")
            if sep:
                lines.append(f'declare -x {name}="{value}"')
            else:
                lines.append(f"declare -x {name}")
        return lines

    def env_lines(self) -> list[str]:
        """Lines printed by ``env``: the entries that carry a value."""
        return [entry for entry in self._entries if "=" in entry]

    def as_dict(self) -> dict[str, str]:
        """Mapping of names to values, for starting other programs."""
        result = {}
        for entry in self._entries:
            name, sep, value = entry.partition("=")
            if sep:
                result[name] = value
        return result