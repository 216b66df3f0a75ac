"""Tests for PropertiesCodec."""

import pytest

from lazykv.codecs import PropertiesCodec
from lazykv.exceptions import CodecError


@pytest.fixture
def codec():
    return PropertiesCodec()


def test_encode_lines(codec):
    assert codec.encode({"a": "1", "greeting": "hello world"}) == b"a=1\ngreeting=hello world\n"


def test_decode_splits_on_first_equals(codec):
    assert codec.decode(b"url=http://x/?a=b\n") == {"url": "http://x/?a=b"}


def test_decode_skips_lines_without_equals(codec):
    assert codec.decode(b"just text\nkey=value\n\n") == {"key": "value"}


def test_decode_skips_comments(codec):
    assert codec.decode(b"# header\n! also a comment\nk=v\n") == {"k": "v"}


def test_decode_handles_crlf(codec):
    assert codec.decode(b"a=1\r\nb=2\r\n") == {"a": "1", "b": "2"}


def test_decode_strips_bom(codec):
    assert codec.decode("\ufeffa=1\n".encode()) == {"a": "1"}


def test_empty_value(codec):
    assert codec.decode(b"a=\n") == {"a": ""}
    assert codec.encode({"a": ""}) == b"a=\n"


def test_encode_rejects_non_string_value(codec):
    with pytest.raises(CodecError, match="must be a string"):
        codec.encode({"a": 1})


def test_encode_rejects_multiline_value(codec):
    with pytest.raises(CodecError, match="line breaks"):
        codec.encode({"a": "one\ntwo"})


@pytest.mark.parametrize("key", ["a=b", "a\nb", "#a", "!a"])
def test_validate_key_rejects(codec, key):
    with pytest.raises(CodecError):
        codec.validate_key(key)


def test_validate_key_accepts_plain_key(codec):
    codec.validate_key("app.title")
