import pytest

from minishell.expand import expand_variables, lookup_env

ENTRIES = ["HOME=/home/user", "USER=alice", "PATH=/bin:/usr/bin"]


def test_lookup_env_found():
    assert lookup_env("HOME", ENTRIES) == "/home/user"
    assert lookup_env("PATH", ENTRIES) == "/bin:/usr/bin"


def test_lookup_env_missing():
    assert lookup_env("NOPE", ENTRIES) == ""
    assert lookup_env("HOME", []) == ""


def test_expand_simple_variable():
    assert expand_variables("$HOME/x", ENTRIES, 0) == "/home/user" + "/x"


def test_expand_inside_text():
    assert expand_variables("hi $USER!", ENTRIES, 0) == "hi alice!"


def test_expand_adjacent_variables():
    assert expand_variables("$USER$HOME", ENTRIES, 0) == "alice" + "/home/user"


def test_expand_missing_variable_is_empty():
    assert expand_variables("a$MISSING", ENTRIES, 0) == "a"


def test_expand_status():
    assert expand_variables("$?", ENTRIES, 42) == str(42)
    assert expand_variables("a$?b", ENTRIES, 127) == "a" + str(127) + "b"
    assert expand_variables("$?$?", ENTRIES, 7) == str(7) * 2


@pytest.mark.parametrize("text", ["$", "$ x", "$$", "cost $ 5 $HOME", "a$$HOME"])
def test_dollar_stops_expansion(text):
    assert expand_variables(text, ENTRIES, 0) == text


def test_stop_after_earlier_expansion():
    assert expand_variables("$USER $", ENTRIES, 0) == "alice $"


@pytest.mark.parametrize("text", ["", "plain text", "no vars here"])
def test_text_without_dollar_unchanged(text):
    assert expand_variables(text, ENTRIES, 3) == text


def test_expanded_value_is_rescanned():
    entries = ["A=$B", "B=value"]
    assert expand_variables("$A", entries, 0) == "value"


def test_entries_may_be_generator():
    assert expand_variables("$USER", iter(ENTRIES), 0) == "alice"