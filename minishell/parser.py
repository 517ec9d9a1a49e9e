"""Classify tokens and group them into pipeline instructions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Optional

from .expand import expand_variables
from .lexer import Token, TokenType, count_pipelines, tokenize

_T = TokenType

_ARG_TYPES = frozenset(
    {_T.SINGLE, _T.SINGLE_SPACED, _T.DOUBLE, _T.DOUBLE_SPACED, _T.WORD, _T.WORD_JOINED}
)
_COMMAND_TYPES = frozenset({_T.COMMAND, _T.COMMAND_SINGLE, _T.COMMAND_DOUBLE})
_QUOTED = frozenset({_T.SINGLE, _T.SINGLE_SPACED, _T.DOUBLE, _T.DOUBLE_SPACED})
_JOIN_QUOTED = frozenset({_T.SINGLE, _T.DOUBLE})
_SPACED_ARG = frozenset({_T.WORD, _T.SINGLE_SPACED, _T.DOUBLE_SPACED})
_GLUED_ARG = frozenset({_T.WORD_JOINED, _T.SINGLE, _T.DOUBLE})
_EXPANDED = frozenset(
    {_T.COMMAND, _T.COMMAND_DOUBLE, _T.DOUBLE, _T.DOUBLE_SPACED, _T.WORD, _T.WORD_JOINED}
)


class RedirectType(IntEnum):
    """Kinds of redirection."""

    OUT = 1
    IN = 2
    APPEND = 3
    HEREDOC = 4


_REDIRECT_OPS = {
    ">": RedirectType.OUT,
    "<": RedirectType.IN,
    ">>": RedirectType.APPEND,
    "<<": RedirectType.HEREDOC,
}


@dataclass
class Redirection:
    """One redirection of a command; ``heredoc`` holds a collected body."""

    type: RedirectType
    target: Optional[str] = None
    heredoc: Optional[str] = None


@dataclass
class Instruction:
    """One command of a pipeline."""

    cmd: Optional[str] = None
    arg: Optional[str] = None
    argv: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)


@dataclass
class ParsedLine:
    """A command line split into tokens and instructions."""

    line: str
    tokens: list[Token]
    instructions: list[Instruction]


class _Reader:
    """Cursor over a token list."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def kind(self) -> Optional[TokenType]:
        if 0 <= self.pos < len(self.tokens):
            return self.tokens[self.pos].type
        return None

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def take(self) -> str:
        text = self.tokens[self.pos].text
        self.pos += 1
        return text

    def skip(self, count: int = 1) -> None:
        self.pos += count


def _kind(tokens: list[Token], i: int) -> Optional[TokenType]:
    return tokens[i].type if 0 <= i < len(tokens) else None


def _as_command(tokens: list[Token], i: int) -> int:
    kind = _kind(tokens, i)
    if kind not in _ARG_TYPES:
        return i
    if kind in (_T.SINGLE, _T.SINGLE_SPACED):
        tokens[i].type = _T.COMMAND_SINGLE
    elif kind in (_T.DOUBLE, _T.DOUBLE_SPACED):
        tokens[i].type = _T.COMMAND_DOUBLE
    else:
        tokens[i].type = _T.COMMAND
    return i + 1


def classify_tokens(
    tokens: Iterable[Token], line: str, entries: Iterable[str], last_status: int
) -> list[Token]:
    """Mark command tokens and expand variables; returns new tokens."""
    tokens = [Token(t.text, t.type) for t in tokens]
    i = 0
    if _kind(tokens, 0) in _ARG_TYPES:
        i = _as_command(tokens, 0)
    if _kind(tokens, 0) == _T.REDIRECT:
        while _kind(tokens, i) == _T.REDIRECT:
            i += 2
        if _kind(tokens, i) not in _QUOTED:
            i = _as_command(tokens, i)
    while i < len(tokens):
        while _kind(tokens, i) == _T.REDIRECT:
            i += 2
        if _kind(tokens, i) == _T.PIPE:
            i += 1
            while _kind(tokens, i) == _T.REDIRECT:
                i += 2
            i = _as_command(tokens, i)
        else:
            i += 1
    if "$" in line:
        entries = list(entries)
        for token in tokens:
            if token.type in _EXPANDED:
                token.text = expand_variables(token.text, entries, last_status)
    return tokens


def _read_redirection(reader: _Reader) -> Redirection:
    redirect = Redirection(_REDIRECT_OPS[reader.take()])
    if reader.kind() in _ARG_TYPES:
        redirect.target = reader.take()
    if redirect.target is not None and reader.kind() in _JOIN_QUOTED:
        redirect.target += reader.take()
    if redirect.target is not None and reader.kind() == _T.WORD_JOINED:
        redirect.target += reader.take()
    return redirect


def _read_command(reader: _Reader) -> str:
    cmd = reader.take()
    if reader.kind() in _JOIN_QUOTED:
        cmd += reader.take()
    if reader.kind() == _T.WORD_JOINED:
        cmd += reader.take()
    return cmd


def _read_arguments(reader: _Reader, redirections: list[Redirection]) -> str:
    arg = reader.take()
    while not reader.at_end() and reader.kind() != _T.PIPE:
        kind = reader.kind()
        if kind == _T.REDIRECT:
            redirections.append(_read_redirection(reader))
        elif kind in _SPACED_ARG:
            arg += " " + reader.take()
        elif kind in _GLUED_ARG:
            arg += reader.take()
        else:
            break
    return arg


def _read_instruction(reader: _Reader) -> Instruction:
    instr = Instruction()
    while not reader.at_end() and reader.kind() != _T.PIPE:
        kind = reader.kind()
        if kind == _T.REDIRECT:
            instr.redirections.append(_read_redirection(reader))
        elif kind in _COMMAND_TYPES:
            instr.cmd = _read_command(reader)
        else:
            instr.arg = _read_arguments(reader, instr.redirections)
    return instr


def build_instructions(tokens: list[Token], pipeline_count: int) -> list[Instruction]:
    """Group classified tokens into ``pipeline_count`` instructions."""
    reader = _Reader(tokens)
    instructions = []
    for _ in range(pipeline_count):
        instructions.append(_read_instruction(reader))
        if reader.kind() == _T.PIPE:
            reader.skip()
    return instructions


def _put(argv: list[str], index: int, value: str) -> None:
    if index < len(argv):
        argv[index] = value
    else:
        argv.append(value)


def _argv_command(reader: _Reader, argv: list[str], index: int) -> int:
    word = reader.take()
    while not reader.at_end() and reader.kind() in _GLUED_ARG:
        word += reader.take()
    _put(argv, index, word)
    return index if reader.at_end() else index + 1


def _argv_arguments(reader: _Reader, argv: list[str], index: int) -> int:
    _put(argv, index, reader.take())
    while not reader.at_end() and reader.kind() != _T.PIPE:
        kind = reader.kind()
        if kind == _T.REDIRECT:
            reader.skip(2)
        elif kind in _SPACED_ARG:
            index += 1
            current = argv[index] if index < len(argv) else None
            text = reader.take()
            _put(argv, index, text if current is None else current + text)
        elif kind in _GLUED_ARG:
            _put(argv, index, argv[index] + reader.take())
        else:
            break
    return index


def _read_argv(reader: _Reader) -> list[str]:
    argv: list[str] = []
    index = 0
    while not reader.at_end():
        kind = reader.kind()
        if kind == _T.REDIRECT:
            reader.skip(2)
        elif kind == _T.PIPE:
            break
        elif kind in _COMMAND_TYPES:
            index = _argv_command(reader, argv, index)
        else:
            index = _argv_arguments(reader, argv, index)
    return argv


def build_argv(tokens: list[Token]) -> list[list[str]]:
    """Argument vectors, one per pipeline segment, redirections left out."""
    reader = _Reader(tokens)
    result = []
    while not reader.at_end():
        result.append(_read_argv(reader))
        if reader.kind() == _T.PIPE:
            reader.skip()
    return result


def parse(line: str, entries: Iterable[str], last_status: int) -> ParsedLine:
    """Tokenize, classify and group ``line``; raises ShellSyntaxError."""
    raw = tokenize(line)
    tokens = classify_tokens(raw, line, entries, last_status)
    instructions = build_instructions(tokens, count_pipelines(raw))
    for instr, argv in zip(instructions, build_argv(tokens)):
        instr.argv = argv
    return ParsedLine(line, tokens, instructions)