from dataclasses import dataclass
from typing import Any

import pytest

from requestkit.codec import JsonCodec, charset_of, is_codec_content_type
from requestkit.errors import DecodeError


@dataclass
class Point:
    x: int
    y: int


@pytest.fixture
def codec():
    return JsonCodec()


def test_encode_is_compact(codec):
    assert codec.encode({"a": [1, "b"]}) == b'{"a":[1,"b"]}'
    assert codec.encode(Point(1, 2)) == b'{"x":1,"y":2}'


def test_decode_into_type(codec):
    assert codec.decode(b'{"x":1,"y":2}', Point) == Point(1, 2)
    assert codec.decode(b"[1,2]", list[int]) == [1, 2]
    assert codec.decode(b'{"k":null}', Any) == {"k": None}


def test_decode_failure(codec):
    with pytest.raises(DecodeError):
        codec.decode(b'{"x":"nope"}', Point)
    with pytest.raises(DecodeError):
        codec.decode(b"", Any)


@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("application/json", True),
        ("application/json; charset=utf-8", True),
        ("application/problem+json", True),
        ("application/xml", True),
        ("text/xml", True),
        ("application/atom+xml", True),
        ("application/graphql", False),
        ("text/plain", False),
        (None, False),
    ],
)
def test_codec_content_types(content_type, expected):
    assert is_codec_content_type(content_type) is expected


def test_charset_of():
    assert charset_of("text/plain; charset=ISO-8859-1") == "ISO-8859-1"
    assert charset_of('text/plain; Charset="utf-16"') == "utf-16"
    assert charset_of("text/plain") == "utf-8"
    assert charset_of(None) == "utf-8"
