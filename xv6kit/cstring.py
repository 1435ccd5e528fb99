"""NUL-terminated string and memory helpers over bytes."""

import re
from itertools import zip_longest

_DIGITS = re.compile(rb"[0-9]*")


def _bytes(s):
    if isinstance(s, str):
        return s.encode("latin-1")
    return bytes(s)


def _cstr(s):
    """The part of s before its first NUL byte."""
    data = _bytes(s)
    end = data.find(0)
    return data if end < 0 else data[:end]


def memcmp(a, b, n):
    """Compare the first n bytes; return the difference of the first mismatch."""
    a, b = _bytes(a), _bytes(b)
    if n < 0 or n > len(a) or n > len(b):
        raise ValueError("memcmp length exceeds buffer")
    for x, y in zip(a[:n], b[:n]):
        if x != y:
            return x - y
    return 0


def memmove(buf, dst, src, n):
    """Copy n bytes within buf from src to dst; overlapping ranges are safe."""
    if n < 0 or min(dst, src) < 0 or max(dst, src) + n > len(buf):
        raise ValueError("memmove range outside buffer")
    buf[dst:dst + n] = bytes(buf[src:src + n])
    return buf


def strncmp(p, q, n):
    """Compare at most n characters of two NUL-terminated strings."""
    for a, b in zip_longest(_bytes(p)[:n], _bytes(q)[:n], fillvalue=0):
        if a != b or a == 0:
            return a - b
    return 0


def strcmp(p, q):
    """Compare two NUL-terminated strings."""
    for a, b in zip_longest(_bytes(p), _bytes(q), fillvalue=0):
        if a != b or a == 0:
            return a - b
    return 0


def strncpy(src, n):
    """The n bytes strncpy writes: the string, then NUL padding, unterminated if too long."""
    if n <= 0:
        return b""
    text = _cstr(src)[:n]
    return text + bytes(n - len(text))


def safestrcpy(src, n):
    """The bytes safestrcpy writes into an n-byte buffer, always NUL-terminated."""
    if n <= 0:
        return b""
    return _cstr(src)[:n - 1] + b"\x00"


def strlen(s):
    """Length of a string up to its first NUL."""
    return len(_cstr(s))


def strchr(s, c):
    """Index of the first c in a NUL-terminated string, or None."""
    code = _bytes(c)[0] if isinstance(c, (str, bytes, bytearray)) else int(c)
    if code == 0:
        return None
    index = _cstr(s).find(code)
    return None if index < 0 else index


def atoi(s):
    """Value of the leading decimal digits; no sign or leading blanks allowed."""
    digits = _DIGITS.match(_bytes(s)).group()
    return int(digits) if digits else 0


def gets(stream, limit):
    """Read a line of at most limit-1 bytes, stopping after a newline or carriage return."""
    line = bytearray()
    while len(line) + 1 < limit:
        ch = stream.read(1)
        if not ch:
            break
        line += ch
        if ch in (b"\n", b"\r"):
            break
    return bytes(line)