"""File redirections and here-documents for the commands of a line."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import IO, Callable, Iterable, Iterator, Optional, TextIO, Union

from .parser import Instruction, RedirectType

HEREDOC_PROMPT = "> "
_FILE_MODE = 0o644
_WARNING = (
    "\nminishell: warning: here-document delimited by end-of-file (wanted '{}')\n"
)

LineSource = Union[TextIO, Iterable[str]]


class RedirectionError(Exception):
    """Raised when a redirection cannot be set up.

    ``message`` is what the shell prints; it is empty when a redirection
    has no target, which the shell rejects without a message.
    """

    status = 1

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


@dataclass
class Streams:
    """Where a command reads from and writes to after its redirections.

    ``stdin`` and ``stdout`` are open files, or None to keep the shell's
    own.  ``heredoc`` holds the text to feed as input when the last
    input redirection was a here-document.
    """

    stdin: Optional[IO[str]] = None
    stdout: Optional[IO[str]] = None
    heredoc: Optional[str] = None

    def use_input(self, file: IO[str]) -> None:
        """Read from ``file``, dropping any earlier input."""
        self._close_input()
        self.stdin = file

    def use_heredoc(self, body: str) -> None:
        """Read ``body``, dropping any earlier input."""
        self._close_input()
        self.heredoc = body

    def use_output(self, file: IO[str]) -> None:
        """Write to ``file``, closing any earlier output file."""
        if self.stdout is not None:
            self.stdout.close()
        self.stdout = file

    def _close_input(self) -> None:
        if self.stdin is not None:
            self.stdin.close()
        self.stdin = None
        self.heredoc = None

    def close(self) -> None:
        """Close every file opened for the command."""
        for file in (self.stdin, self.stdout):
            if file is not None:
                file.close()
        self.stdin = None
        self.stdout = None

    def __enter__(self) -> "Streams":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def is_heredoc_end(delimiter: str, line: Optional[str]) -> bool:
    """True if ``line`` is the delimiter followed by one more character."""
    if line is None:
        return False
    return len(line) - 1 == len(delimiter) and line.startswith(delimiter)


def _lines(source: LineSource) -> Iterator[str]:
    readline = getattr(source, "readline", None)
    if readline is not None:
        return iter(readline, "")
    return iter(source)


def read_heredoc(
    delimiter: str,
    source: LineSource,
    expand: Optional[Callable[[str], str]] = None,
    out: Optional[TextIO] = None,
) -> str:
    """Read lines from ``source`` up to ``delimiter`` and return their text.

    A prompt is written to ``out`` before each line.  Each kept line is
    passed through ``expand`` when given.  End of input ends the body
    with a warning.
    """
    if out is None:
        out = sys.stdout
    lines = _lines(source)
    body = []
    while True:
        out.write(HEREDOC_PROMPT)
        out.flush()
        line = next(lines, None)
        if line is None:
            out.write(_WARNING.format(delimiter))
            break
        if is_heredoc_end(delimiter, line):
            break
        body.append(expand(line) if expand is not None else line)
    return "".join(body)


def collect_heredocs(
    instructions: Iterable[Instruction],
    source: LineSource,
    expand: Optional[Callable[[str], str]] = None,
    out: Optional[TextIO] = None,
) -> None:
    """Read the body of every here-document, in order, into its redirection."""
    lines = _lines(source)
    for instr in instructions:
        for redirect in instr.redirections:
            if redirect.type == RedirectType.HEREDOC and redirect.target is not None:
                redirect.heredoc = read_heredoc(redirect.target, lines, expand, out)


def _open(path: str, flags: int, mode: str) -> IO[str]:
    try:
        fd = os.open(path, flags, _FILE_MODE)
    except OSError as exc:
        raise RedirectionError(f"{path}: {exc.strerror}") from exc
    return os.fdopen(fd, mode, encoding="utf-8")


def open_redirections(instr: Instruction) -> Streams:
    """Open the files of ``instr``'s redirections, in order.

    Every output file is created or truncated even when a later one
    wins.  Raises RedirectionError on the first failure, with every file
    opened so far closed.
    """
    streams = Streams()
    try:
        for redirect in instr.redirections:
            target = redirect.target
            if target is None:
                raise RedirectionError()
            if redirect.type == RedirectType.HEREDOC:
                streams.use_heredoc(redirect.heredoc or "")
            elif redirect.type == RedirectType.IN:
                streams.use_input(_open(target, os.O_RDONLY, "r"))
            elif redirect.type == RedirectType.OUT:
                flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
                streams.use_output(_open(target, flags, "w"))
            elif redirect.type == RedirectType.APPEND:
                flags = os.O_WRONLY | os.O_CREAT | os.O_APPEND
                streams.use_output(_open(target, flags, "a"))
    except BaseException:
        streams.close()
        raise
    return streams