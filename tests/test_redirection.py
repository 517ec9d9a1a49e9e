import io

import pytest

from minishell.parser import Instruction, Redirection, RedirectType
from minishell.redirection import (
    HEREDOC_PROMPT,
    RedirectionError,
    Streams,
    collect_heredocs,
    is_heredoc_end,
    open_redirections,
    read_heredoc,
)

WARNING_START = "minishell: warning: here-document delimited by end-of-file (wanted '"


def test_is_heredoc_end_matches_delimiter_with_newline():
    assert is_heredoc_end("EOF", "EOF\n") is True


def test_is_heredoc_end_rejects_other_lines():
    assert is_heredoc_end("EOF", "EOFX\n") is False
    assert is_heredoc_end("EOF", "EO\n") is False
    assert is_heredoc_end("EOF", "EOF") is False
    assert is_heredoc_end("EOF", None) is False


def test_read_heredoc_stops_at_delimiter():
    source = io.StringIO("hello\nworld\nEOF\nafter\n")
    out = io.StringIO()
    body = read_heredoc("EOF", source, None, out)
    assert body == "hello\nworld\n"
    assert source.readline() == "after\n"
    assert out.getvalue().count(HEREDOC_PROMPT) == 3


def test_read_heredoc_applies_expand():
    out = io.StringIO()
    body = read_heredoc("END", iter(["a\n", "b\n", "END\n"]), str.upper, out)
    assert body == "A\nB\n"


def test_read_heredoc_warns_at_end_of_input():
    out = io.StringIO()
    body = read_heredoc("STOP", iter(["line\n"]), None, out)
    assert body == "line\n"
    assert WARNING_START + "STOP')" in out.getvalue()


def test_read_heredoc_delimiter_without_newline_is_not_end():
    out = io.StringIO()
    body = read_heredoc("EOF", iter(["x\n", "EOF"]), None, out)
    assert body == "x\nEOF"
    assert WARNING_START in out.getvalue()


def test_collect_heredocs_fills_in_order():
    first = Instruction(
        cmd="cat",
        redirections=[Redirection(RedirectType.HEREDOC, "A")],
    )
    second = Instruction(
        cmd="cat",
        redirections=[
            Redirection(RedirectType.OUT, "ignored"),
            Redirection(RedirectType.HEREDOC, "B"),
        ],
    )
    lines = ["one\n", "A\n", "two\n", "three\n", "B\n"]
    collect_heredocs([first, second], lines, None, io.StringIO())
    assert first.redirections[0].heredoc == "one\n"
    assert second.redirections[1].heredoc == "two\nthree\n"
    assert second.redirections[0].heredoc is None


def test_output_redirection_truncates(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("old content")
    instr = Instruction(redirections=[Redirection(RedirectType.OUT, str(target))])
    with open_redirections(instr) as streams:
        streams.stdout.write("new")
    assert target.read_text() == "new"


def test_append_redirection_keeps_content(tmp_path):
    target = tmp_path / "log.txt"
    target.write_text("first\n")
    instr = Instruction(redirections=[Redirection(RedirectType.APPEND, str(target))])
    with open_redirections(instr) as streams:
        streams.stdout.write("second\n")
    assert target.read_text() == "first\nsecond\n"


def test_every_output_file_is_created_last_wins(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    instr = Instruction(
        redirections=[
            Redirection(RedirectType.OUT, str(a)),
            Redirection(RedirectType.OUT, str(b)),
        ]
    )
    with open_redirections(instr) as streams:
        streams.stdout.write("data")
    assert a.exists()
    assert a.read_text() == ""
    assert b.read_text() == "data"


def test_input_redirection_reads_file(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("content\n")
    instr = Instruction(redirections=[Redirection(RedirectType.IN, str(source))])
    with open_redirections(instr) as streams:
        assert streams.stdin.read() == "content\n"
        assert streams.heredoc is None


def test_missing_input_file_raises(tmp_path):
    missing = tmp_path / "nope"
    instr = Instruction(redirections=[Redirection(RedirectType.IN, str(missing))])
    with pytest.raises(RedirectionError) as info:
        open_redirections(instr)
    assert info.value.message.startswith(str(missing) + ": ")
    assert info.value.status == 1


def test_failure_after_output_still_created_file(tmp_path):
    out = tmp_path / "made"
    instr = Instruction(
        redirections=[
            Redirection(RedirectType.OUT, str(out)),
            Redirection(RedirectType.IN, str(tmp_path / "absent")),
        ]
    )
    with pytest.raises(RedirectionError):
        open_redirections(instr)
    assert out.exists()


def test_missing_target_raises():
    instr = Instruction(redirections=[Redirection(RedirectType.OUT, None)])
    with pytest.raises(RedirectionError) as info:
        open_redirections(instr)
    assert info.value.message == ""


def test_later_input_replaces_heredoc(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("file\n")
    instr = Instruction(
        redirections=[
            Redirection(RedirectType.HEREDOC, "EOF", heredoc="body\n"),
            Redirection(RedirectType.IN, str(source)),
        ]
    )
    with open_redirections(instr) as streams:
        assert streams.heredoc is None
        assert streams.stdin.read() == "file\n"


def test_later_heredoc_replaces_input(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("file\n")
    instr = Instruction(
        redirections=[
            Redirection(RedirectType.IN, str(source)),
            Redirection(RedirectType.HEREDOC, "EOF", heredoc="body\n"),
        ]
    )
    with open_redirections(instr) as streams:
        assert streams.stdin is None
        assert streams.heredoc == "body\n"


def test_streams_close_closes_files(tmp_path):
    target = tmp_path / "o"
    instr = Instruction(redirections=[Redirection(RedirectType.OUT, str(target))])
    streams = open_redirections(instr)
    file = streams.stdout
    streams.close()
    assert file.closed
    assert streams.stdout is None


def test_no_redirections_keeps_shell_streams():
    streams = open_redirections(Instruction(cmd="ls"))
    assert streams == Streams()