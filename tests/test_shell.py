import pytest

from xv6kit.constants import OpenFlag
from xv6kit.shell import (
    BackCmd,
    ExecCmd,
    ListCmd,
    PipeCmd,
    RedirCmd,
    ShellSyntaxError,
    parse_command,
    tokenize,
)

WRITE_MODE = int(OpenFlag.WRONLY | OpenFlag.CREATE)
READ_MODE = int(OpenFlag.RDONLY)


def test_tokenize_symbols_and_words():
    assert tokenize("a>>b|c") == [
        ("a", "a"),
        ("+", ">>"),
        ("a", "b"),
        ("|", "|"),
        ("a", "c"),
    ]


def test_tokenize_whitespace_and_parens():
    assert tokenize(" (x;y)&\t< z\n") == [
        ("(", "("),
        ("a", "x"),
        (";", ";"),
        ("a", "y"),
        (")", ")"),
        ("&", "&"),
        ("<", "<"),
        ("a", "z"),
    ]


def test_tokenize_stops_at_nul():
    assert tokenize("echo\0 hidden") == [("a", "echo")]


def test_simple_exec():
    assert parse_command("echo hello world\n") == ExecCmd(["echo", "hello", "world"])


def test_empty_line_is_empty_exec():
    assert parse_command("") == ExecCmd([])


def test_pipe_is_right_nested():
    assert parse_command("ls | grep x | wc") == PipeCmd(
        ExecCmd(["ls"]), PipeCmd(ExecCmd(["grep", "x"]), ExecCmd(["wc"]))
    )


def test_list():
    assert parse_command("a ; b") == ListCmd(ExecCmd(["a"]), ExecCmd(["b"]))


def test_background_repeated():
    assert parse_command("sleep & &") == BackCmd(BackCmd(ExecCmd(["sleep"])))


def test_background_then_list():
    assert parse_command("a & ; b") == ListCmd(BackCmd(ExecCmd(["a"])), ExecCmd(["b"]))


def test_background_followed_by_word_is_leftover():
    with pytest.raises(ShellSyntaxError, match="leftovers: b"):
        parse_command("a & b")


def test_redirections_wrap_in_order():
    assert parse_command("cat < in > out") == RedirCmd(
        RedirCmd(ExecCmd(["cat"]), "in", READ_MODE, 0), "out", WRITE_MODE, 1
    )


def test_append_is_same_as_write():
    assert parse_command("echo hi >> log") == parse_command("echo hi > log")


def test_redirection_before_command():
    assert parse_command("< in cat") == RedirCmd(ExecCmd(["cat"]), "in", READ_MODE, 0)


def test_block_with_redirection():
    assert parse_command("(a; b) > f") == RedirCmd(
        ListCmd(ExecCmd(["a"]), ExecCmd(["b"])), "f", WRITE_MODE, 1
    )


def test_missing_redirection_file():
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse_command("echo >")


def test_missing_close_paren():
    with pytest.raises(ShellSyntaxError, match="missing \\)"):
        parse_command("(a")


def test_leftovers():
    with pytest.raises(ShellSyntaxError, match="leftovers: \\)"):
        parse_command("a )")


def test_open_paren_inside_exec():
    with pytest.raises(ShellSyntaxError, match="^syntax$"):
        parse_command("a (")


def test_too_many_args():
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse_command(" ".join(["x"] * 10))


def test_nine_args_allowed():
    assert parse_command(" ".join(["x"] * 9)) == ExecCmd(["x"] * 9)