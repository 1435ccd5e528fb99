"""Parser for shell command lines: pipes, lists, background jobs and redirection."""

from dataclasses import dataclass, field

from .constants import OpenFlag

MAXARGS = 10
WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"

# Token kinds: single-character symbols stand for themselves, ">>" is
# reported as "+", and a word of ordinary characters as "a".
WORD = "a"
APPEND = "+"


class ShellSyntaxError(ValueError):
    """Raised for a command line the shell cannot parse."""


@dataclass
class ExecCmd:
    """A program to run with its arguments."""

    argv: list = field(default_factory=list)


@dataclass
class RedirCmd:
    """A command run with one file descriptor redirected to a file."""

    cmd: object
    file: str
    mode: int
    fd: int


@dataclass
class PipeCmd:
    """Two commands joined by a pipe."""

    left: object
    right: object


@dataclass
class ListCmd:
    """Two commands run one after the other."""

    left: object
    right: object


@dataclass
class BackCmd:
    """A command run in the background."""

    cmd: object


class _Scanner:
    def __init__(self, line):
        end = line.find("\0")
        self.text = line if end < 0 else line[:end]
        self.pos = 0

    @property
    def at_end(self):
        return self.pos >= len(self.text)

    @property
    def rest(self):
        return self.text[self.pos:]

    def skip_space(self):
        while not self.at_end and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def peek(self, toks):
        self.skip_space()
        return not self.at_end and self.text[self.pos] in toks

    def gettoken(self):
        """Return (kind, text) of the next token; kind is "" at the end."""
        self.skip_space()
        start = self.pos
        if self.at_end:
            kind = ""
        else:
            ch = self.text[self.pos]
            if ch in "|();&<":
                kind = ch
                self.pos += 1
            elif ch == ">":
                kind = ">"
                self.pos += 1
                if not self.at_end and self.text[self.pos] == ">":
                    kind = APPEND
                    self.pos += 1
            else:
                kind = WORD
                while (
                    not self.at_end
                    and self.text[self.pos] not in WHITESPACE
                    and self.text[self.pos] not in SYMBOLS
                ):
                    self.pos += 1
        token = (kind, self.text[start:self.pos])
        self.skip_space()
        return token


def tokenize(line):
    """Split a command line into (kind, text) tokens."""
    scanner = _Scanner(line)
    tokens = []
    while True:
        kind, text = scanner.gettoken()
        if not kind:
            return tokens
        tokens.append((kind, text))


def parse_command(line):
    """Parse a whole command line into a command tree."""
    scanner = _Scanner(line)
    cmd = _parse_line(scanner)
    scanner.skip_space()
    if not scanner.at_end:
        raise ShellSyntaxError(f"leftovers: {scanner.rest}")
    return cmd


def _parse_line(scanner):
    cmd = _parse_pipe(scanner)
    while scanner.peek("&"):
        scanner.gettoken()
        cmd = BackCmd(cmd)
    if scanner.peek(";"):
        scanner.gettoken()
        cmd = ListCmd(cmd, _parse_line(scanner))
    return cmd


def _parse_pipe(scanner):
    cmd = _parse_exec(scanner)
    if scanner.peek("|"):
        scanner.gettoken()
        cmd = PipeCmd(cmd, _parse_pipe(scanner))
    return cmd


def _parse_redirs(cmd, scanner):
    while scanner.peek("<>"):
        tok, _ = scanner.gettoken()
        kind, name = scanner.gettoken()
        if kind != WORD:
            raise ShellSyntaxError("missing file for redirection")
        if tok == "<":
            cmd = RedirCmd(cmd, name, int(OpenFlag.RDONLY), 0)
        else:
            cmd = RedirCmd(cmd, name, int(OpenFlag.WRONLY | OpenFlag.CREATE), 1)
    return cmd


def _parse_block(scanner):
    if not scanner.peek("("):
        raise ShellSyntaxError("parseblock")
    scanner.gettoken()
    cmd = _parse_line(scanner)
    if not scanner.peek(")"):
        raise ShellSyntaxError("syntax - missing )")
    scanner.gettoken()
    return _parse_redirs(cmd, scanner)


def _parse_exec(scanner):
    if scanner.peek("("):
        return _parse_block(scanner)
    command = ExecCmd()
    result = _parse_redirs(command, scanner)
    while not scanner.peek("|)&;"):
        kind, text = scanner.gettoken()
        if not kind:
            break
        if kind != WORD:
            raise ShellSyntaxError("syntax")
        command.argv.append(text)
        if len(command.argv) >= MAXARGS:
            raise ShellSyntaxError("too many args")
        result = _parse_redirs(result, scanner)
    return result