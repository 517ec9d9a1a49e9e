"""Character and string helpers shared by the shell."""

from __future__ import annotations

import string
from itertools import takewhile
from typing import Optional

BUILTINS = frozenset({"echo", "cd", "pwd", "export", "unset", "env", "exit"})

_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")
_ALPHA_CHARS = frozenset(string.ascii_letters)
_NUMBER_CHARS = frozenset(string.digits + "+-")


class ShellSyntaxError(Exception):
    """Raised when a command line is rejected before parsing."""

    status = 2

    def __init__(self, message: str = "Minishell: Syntax error") -> None:
        super().__init__(message)
        self.message = message


def is_name_char(c: str) -> bool:
    """Return True for an ASCII letter, digit or underscore."""
    return c in _NAME_CHARS


def check_alpha(text: str) -> bool:
    """Return True if ``text`` is non-empty and made of ASCII letters only."""
    return bool(text) and all(c in _ALPHA_CHARS for c in text)


def check_number(text: str) -> bool:
    """Return True if every character is a digit or a sign."""
    return all(c in _NUMBER_CHARS for c in text)


def var_len(text: str) -> int:
    """Length of the leading run of variable-name characters."""
    return sum(1 for _ in takewhile(is_name_char, text))


def count_words(text: Optional[str], sep: str) -> int:
    """Count the non-empty fields of ``text`` split on ``sep``.

    ``None`` counts as no words, an empty string as a single word.
    """
    if text is None:
        return 0
    if text == "":
        return 1
    return sum(1 for field in text.split(sep) if field)


def is_builtin(name: Optional[str]) -> bool:
    """Return True if ``name`` is one of the shell's builtin commands."""
    return name in BUILTINS