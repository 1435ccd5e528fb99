import io

import pytest

from xv6kit.cstring import (
    atoi,
    gets,
    memcmp,
    memmove,
    safestrcpy,
    strchr,
    strcmp,
    strlen,
    strncmp,
    strncpy,
)


def test_memcmp_equal_and_sign():
    assert memcmp(b"abcd", b"abcd", 4) == 0
    assert memcmp(b"abcd", b"abce", 4) < 0
    assert memcmp(b"abce", b"abcd", 4) > 0
    assert memcmp(b"abcx", b"abcy", 3) == 0


def test_memcmp_length_too_long():
    with pytest.raises(ValueError):
        memcmp(b"ab", b"abc", 3)


def test_memmove_overlap_forward():
    buf = bytearray(b"abcdef")
    memmove(buf, 1, 0, 4)
    assert buf[1:5] == b"abcd"
    assert buf[:1] == b"a"
    assert buf[5:] == b"f"


def test_memmove_overlap_backward():
    buf = bytearray(b"abcdef")
    result = memmove(buf, 0, 2, 4)
    assert result is buf
    assert buf[:4] == b"cdef"


def test_memmove_out_of_range():
    with pytest.raises(ValueError):
        memmove(bytearray(4), 2, 0, 3)


def test_strncmp():
    assert strncmp(b"abc", b"abd", 2) == 0
    assert strncmp(b"abc", b"abd", 3) < 0
    assert strncmp(b"abc\0zz", b"abc\0yy", 6) == 0
    assert strncmp(b"ab", b"abc", 5) < 0
    assert strncmp(b"abc", b"xyz", 0) == 0


def test_strcmp():
    assert strcmp(b"hello", b"hello") == 0
    assert strcmp(b"hello", b"help") < 0
    assert strcmp(b"b", b"a") > 0
    assert strcmp(b"same\0one", b"same\0two") == 0


def test_strncpy_pads_with_nul():
    result = strncpy(b"hi", 5)
    assert result == b"hi" + bytes(3)


def test_strncpy_truncates_without_terminator():
    assert strncpy(b"hello", 3) == b"hel"


def test_safestrcpy_terminates():
    result = safestrcpy(b"hello", 3)
    assert result == b"he\x00"
    assert safestrcpy(b"hello", 0) == b""
    assert safestrcpy(b"hi", 10) == b"hi\x00"


def test_strlen_stops_at_nul():
    assert strlen(b"hello\0world") == len(b"hello")
    assert strlen(b"") == 0


def test_strchr():
    assert strchr(b"hello", b"l") == 2
    assert strchr(b"hello", ord("h")) == 0
    assert strchr(b"hel\0lo", b"o") is None
    assert strchr(b"hello", 0) is None


def test_atoi():
    assert atoi(b"123abc") == 123
    assert atoi("42") == 42
    assert atoi(b"-5") == 0
    assert atoi(b" 7") == 0


def test_gets_stops_at_newline():
    stream = io.BytesIO(b"line1\nline2")
    assert gets(stream, 100) == b"line1\n"
    assert gets(stream, 100) == b"line2"
    assert gets(stream, 100) == b""


def test_gets_stops_at_carriage_return():
    assert gets(io.BytesIO(b"ab\rcd"), 100) == b"ab\r"


def test_gets_respects_limit():
    line = gets(io.BytesIO(b"abcdefgh"), 4)
    assert line == b"abc"