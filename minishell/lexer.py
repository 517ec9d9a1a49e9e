"""Split a command line into tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum

from .utils import ShellSyntaxError

_WORD = re.compile(r"[^ <>|'\"]+")


class TokenType(IntEnum):
    """Kinds of token produced by the lexer and refined by the parser."""

    REDIRECT = 2
    PIPE = 3
    WORD = 4
    WORD_JOINED = 40
    COMMAND = 5
    COMMAND_SINGLE = 50
    COMMAND_DOUBLE = 51
    SINGLE = 10
    SINGLE_SPACED = 101
    DOUBLE = 11
    DOUBLE_SPACED = 111


@dataclass
class Token:
    """One lexical unit of a command line."""

    text: str
    type: TokenType


def _char(line: str, pos: int) -> str:
    return line[pos : pos + 1]


def check_syntax(line: str, pos: int) -> None:
    """Raise ShellSyntaxError if the operator at ``pos`` is misplaced."""
    c = _char(line, pos)
    nxt = _char(line, pos + 1)
    after = _char(line, pos + 2)
    if line.startswith("|") or (c == "|" and nxt == ""):
        raise ShellSyntaxError()
    if line == ">" or (c == ">" and nxt in ("<", "|", "")):
        raise ShellSyntaxError()
    if line == "<" or (c == "<" and nxt in (">", "|", "")):
        raise ShellSyntaxError()
    if line == ">>" or (c == ">" and nxt == ">" and after in ("<", "|", "")):
        raise ShellSyntaxError()
    if line == "<<" or (c == "<" and nxt == "<" and after in (">", "|", "")):
        raise ShellSyntaxError()


def _quoted(line: str, pos: int) -> tuple[Token, int]:
    quote = line[pos]
    close = line.find(quote, pos + 1)
    if close == -1:
        content, end = line[pos + 1 :], len(line)
    else:
        content, end = line[pos + 1 : close], close + 1
    spaced = pos > 0 and line[pos - 1] == " "
    if quote == "'":
        kind = TokenType.SINGLE_SPACED if spaced else TokenType.SINGLE
    else:
        kind = TokenType.DOUBLE_SPACED if spaced else TokenType.DOUBLE
    return Token(content, kind), end


def tokenize(line: str) -> list[Token]:
    """Turn ``line`` into tokens, raising ShellSyntaxError on bad operators."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(line):
        check_syntax(line, pos)
        c = line[pos]
        if c == " ":
            pos += 1
            continue
        if c in "'\"":
            token, end = _quoted(line, pos)
        elif c in "<>":
            end = pos + 2 if _char(line, pos + 1) == c else pos + 1
            token = Token(line[pos:end], TokenType.REDIRECT)
        elif c == "|":
            end = pos + 1
            token = Token(c, TokenType.PIPE)
        else:
            match = _WORD.match(line, pos)
            end = match.end()
            joined = pos > 0 and line[pos - 1] in "'\""
            kind = TokenType.WORD_JOINED if joined else TokenType.WORD
            token = Token(match.group(), kind)
        tokens.append(token)
        pos = end
    return tokens


def count_pipelines(tokens: list[Token]) -> int:
    """Number of commands in the pipeline: one more than the pipe count."""
    return sum(1 for t in tokens if t.type == TokenType.PIPE) + 1