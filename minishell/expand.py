"""Expansion of ``$NAME`` and ``$?`` inside words."""

from __future__ import annotations

from typing import Iterable

from .utils import var_len


def lookup_env(name: str, entries: Iterable[str]) -> str:
    """Return the value of the first entry starting with ``name``, or ""."""
    for entry in entries:
        if entry.startswith(name):
            return entry[len(name) + 1 :]
    return ""


def expand_variables(text: str, entries: Iterable[str], last_status: int) -> str:
    """Replace ``$?`` with ``last_status`` and ``$NAME`` with its value.

    A ``$`` at the end, before a space or before another ``$`` stops
    expansion and the text is returned as it stands at that point.
    Expanded values are scanned again from the start.
    """
    entries = list(entries)
    i = 0
    while i < len(text):
        cur, nxt = text[i], text[i + 1 : i + 2]
        if cur == "$" and nxt in ("", " ", "$"):
            return text
        if cur == "$" and nxt == "?":
            text = text[:i] + str(last_status) + text[i + 2 :]
            i = 0
        cur, nxt = text[i : i + 1], text[i + 1 : i + 2]
        if cur == "$" and nxt not in ("", "$", "?"):
            rest = text[i + 1 :]
            n = var_len(rest)
            text = text[:i] + lookup_env(rest[:n], entries) + rest[n:]
            i = -1
        i += 1
    return text