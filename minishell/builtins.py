"""The shell's builtin commands: echo, cd, pwd, env, unset, export, exit."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from typing import Callable, Optional, TextIO

from .environment import Environment
from .lexer import Token, TokenType
from .parser import Instruction
from .utils import check_number, is_name_char

_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_DIGITS = frozenset("0123456789")


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


@dataclass
class BuiltinContext:
    """What a builtin sees: the environment, the line and its tokens, streams.

    ``status`` collects the status set by error messages, as the shell
    reports it after the command.
    """

    env: Environment
    tokens: list[Token] = field(default_factory=list)
    line: str = ""
    stdout: Optional[TextIO] = None
    stderr: Optional[TextIO] = None
    status: int = 0


def _say(ctx: BuiltinContext, text: str) -> None:
    (ctx.stdout or sys.stdout).write(text)


def _complain(ctx: BuiltinContext, text: str) -> None:
    (ctx.stderr or sys.stderr).write(text)


def _error(ctx: BuiltinContext, message: str, status: int) -> int:
    _say(ctx, message + "\n")
    ctx.status = status
    return status


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _token_text(ctx: BuiltinContext, index: int) -> str:
    return ctx.tokens[index].text if 0 <= index < len(ctx.tokens) else ""


def _token_kind(ctx: BuiltinContext, index: int) -> Optional[TokenType]:
    return ctx.tokens[index].type if 0 <= index < len(ctx.tokens) else None


# echo ---------------------------------------------------------------------


def _echo_option_end(ctx: BuiltinContext) -> tuple[bool, int]:
    """Whether the second token is a ``-n`` option, and where it ends."""
    option = _token_text(ctx, 1)
    suppress = option.startswith("-n")
    end = 1
    while suppress and end < len(option):
        if option[end] != "n":
            suppress = False
            break
        end += 1
        if len(ctx.tokens) > 2 and _token_kind(ctx, 2) in (
            TokenType.SINGLE,
            TokenType.DOUBLE,
        ):
            suppress = False
    return suppress, end


def echo(instr: Instruction, ctx: BuiltinContext) -> int:
    """Print the arguments; a leading ``-n`` option drops the newline."""
    text = instr.arg
    if text is None:
        _say(ctx, "\n")
        return 0
    suppress, end = _echo_option_end(ctx)
    if suppress:
        if " " in text:
            end += 1
        _say(ctx, text[end:])
    else:
        _say(ctx, text + "\n")
    return 0


# cd / pwd / env -----------------------------------------------------------


def _getcwd(ctx: BuiltinContext) -> str:
    try:
        return os.getcwd()
    except OSError:
        _error(ctx, "cd: getcwd: ", 1)
        return ""


def _change_directory(arg: Optional[str], ctx: BuiltinContext) -> int:
    home = ctx.env.get_path("HOME")
    if not home:
        return _error(ctx, "cd: HOME not set", 1)
    if arg is None or arg.startswith("~"):
        target = home
    elif arg == "":
        return 0
    else:
        target = arg
    try:
        os.chdir(target)
    except OSError as exc:
        shown = arg if arg is not None else target
        _complain(ctx, f"Minishell: cd: {shown}: {os.strerror(exc.errno or 0)}\n")
        return 1
    return 0


def cd(instr: Instruction, ctx: BuiltinContext) -> int:
    """Change directory, keeping ``OLDPWD`` and ``PWD`` up to date."""
    arg = instr.arg
    if arg is not None and " " in arg:
        return _error(ctx, "cd: too many arguments", 1)
    ctx.env.update("OLDPWD", _getcwd(ctx))
    status = _change_directory(arg, ctx)
    ctx.env.update("PWD", _getcwd(ctx))
    ctx.status = status
    return status


def pwd(instr: Instruction, ctx: BuiltinContext) -> int:
    """Print the current directory."""
    try:
        _say(ctx, os.getcwd() + "\n")
    except OSError:
        pass
    return 0


def env_cmd(instr: Instruction, ctx: BuiltinContext) -> int:
    """Print every environment entry that has a value."""
    for line in ctx.env.env_lines():
        _say(ctx, line + "\n")
    return 0


def unset(instr: Instruction, ctx: BuiltinContext) -> int:
    """Remove the named variables."""
    if instr.arg is None:
        return 0
    for name in filter(None, instr.arg.split(" ")):
        ctx.env.unset(name)
    return 0


# export -------------------------------------------------------------------


def _valid_identifier(ctx: BuiltinContext, name: str, text: str) -> bool:
    if not name or name[0] in _DIGITS or not all(map(is_name_char, name)):
        _error(ctx, f"{text}: export: not a valid identifier", 1)
        return False
    return True


def _set_entry(ctx: BuiltinContext, entry: str, name: str) -> None:
    if not ctx.env.replace_matching(entry, name):
        ctx.env.append(entry)


def _spaces_after_quote(line: str) -> int:
    starts = [pos for pos in (line.find("'"), line.find('"')) if pos != -1]
    if not starts:
        return 0
    return line[min(starts) :].count(" ")


def _export_assignment(ctx: BuiltinContext, index: int, name: str) -> int:
    """Export the assignment starting at token ``index``; return the last index used."""
    token = ctx.tokens[index]
    if token.type in (TokenType.SINGLE_SPACED, TokenType.DOUBLE_SPACED):
        _set_entry(ctx, token.text, name)
        return index
    if _token_kind(ctx, index + 1) not in (TokenType.SINGLE, TokenType.DOUBLE):
        _set_entry(ctx, token.text, name)
        return index
    index += 1
    quoted = ctx.tokens[index].text
    entry = token.text + quoted
    if quoted == "" or quoted.startswith(" "):
        index += 1
        if _token_kind(ctx, index) == TokenType.WORD_JOINED:
            entry += ctx.tokens[index].text
    _set_entry(ctx, entry, name)
    return index


def _export_tokens(ctx: BuiltinContext) -> int:
    index = 1
    while index < len(ctx.tokens):
        text = ctx.tokens[index].text
        for pos, char in enumerate(text):
            if char == "=":
                name = text[:pos]
                if not _valid_identifier(ctx, name, text):
                    return 1
                index = _export_assignment(ctx, index, name)
                break
            if pos + 1 == len(text) and not _valid_identifier(ctx, text, text):
                return 1
        index += 1
    return 0


def _export_words(ctx: BuiltinContext, arg: str) -> None:
    for word in filter(None, arg.split(" ")):
        name = word.partition("=")[0]
        if _valid_identifier(ctx, name, word):
            _set_entry(ctx, word, name)


def export(instr: Instruction, ctx: BuiltinContext) -> int:
    """Set variables, or list them all when given no arguments."""
    if instr.arg is None:
        for line in ctx.env.declare_lines():
            _say(ctx, line + "\n")
        return 0
    if _spaces_after_quote(ctx.line):
        return _export_tokens(ctx)
    _export_words(ctx, instr.arg)
    return 0


# exit ---------------------------------------------------------------------


def exit_shell(instr: Instruction, ctx: BuiltinContext) -> int:
    """Print ``exit`` and raise ShellExit with the requested status."""
    _say(ctx, "exit\n")
    arg = instr.arg
    if arg is None:
        raise ShellExit(0)
    if any(c in "+-" for c in arg[1:]):
        _say(ctx, "exit: numeric argument required\n")
        raise ShellExit(2)
    if " " in arg:
        _say(ctx, "exit: too many arguments\n")
        raise ShellExit(1)
    value = _atoi(arg)
    if value == 0 or not check_number(arg):
        _say(ctx, "exit: numeric argument required\n")
        raise ShellExit(2)
    raise ShellExit(value & 0xFF)


_BUILTINS: dict[str, Callable[[Instruction, BuiltinContext], int]] = {
    "echo": echo,
    "exit": exit_shell,
    "cd": cd,
    "pwd": pwd,
    "env": env_cmd,
    "unset": unset,
    "export": export,
}


def run_builtin(instr: Instruction, ctx: BuiltinContext) -> int:
    """Run the builtin named by ``instr.cmd`` and return the shell's status."""
    if instr.cmd is None:
        return 0
    try:
        command = _BUILTINS[instr.cmd]
    except KeyError:
        raise ValueError(f"{instr.cmd}: not a builtin") from None
    ctx.status = 0
    result = command(instr, ctx)
    return ctx.status or result