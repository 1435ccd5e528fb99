"""Count lines, words and bytes."""

import sys
from dataclasses import dataclass
from functools import partial

_WHITESPACE = frozenset(b" \r\t\n\v")
_CHUNK = 512


@dataclass(frozen=True)
class Counts:
    """Line, word and byte totals of one input."""

    lines: int = 0
    words: int = 0
    chars: int = 0

    def format(self, name):
        """The report line for this input."""
        return f"{self.lines} {self.words} {self.chars} {name}"


def count(stream):
    """Count lines, words and bytes read from a binary stream."""
    lines = words = chars = 0
    inword = False
    for chunk in iter(partial(stream.read, _CHUNK), b""):
        chars += len(chunk)
        lines += chunk.count(b"\n")
        for byte in chunk:
            if byte in _WHITESPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return Counts(lines, words, chars)


def main(argv=None):
    """Report counts for each named file, or for standard input."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        if not args:
            print(count(sys.stdin.buffer).format(""))
            return 0
        for name in args:
            try:
                stream = open(name, "rb")
            except OSError:
                print(f"wc: cannot open {name}")
                return 1
            with stream:
                print(count(stream).format(name))
    except OSError:
        print("wc: read error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())