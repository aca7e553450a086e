from dataclasses import dataclass
from unittest.mock import Mock

import pytest

from requestkit.codec import JsonCodec
from requestkit.errors import DecodeError, HttpClientError, HttpError
from requestkit.response import HttpResponse
from requestkit.transport import BufferedTransportResponse


@dataclass
class Foo:
    foo: str


def _response(status=200, content=b"", headers=(), translator=None):
    return HttpResponse(
        BufferedTransportResponse(status, content, tuple(headers)),
        JsonCodec(),
        translator,
    )


def test_headers_are_case_insensitive():
    response = _response(headers=[("Content-Type", "application/json")])

    assert response.headers().getall("content-type") == ["application/json"]
    assert response.headers().getall("CONTENT-TYPE") == ["application/json"]
    assert response.content_type() == "application/json"


def test_headers_are_multi_valued_across_casings_and_case_preserving():
    response = _response(
        headers=[("Set-Cookie", "a=1"), ("set-cookie", "b=2"), ("Server", "x")]
    )

    assert response.headers().getall("SET-COOKIE") == ["a=1", "b=2"]
    names = [name for name, _ in response.headers().items()]
    assert names == ["Set-Cookie", "set-cookie", "Server"]


def test_headers_are_read_once_and_cached():
    transport_response = Mock()
    transport_response.headers.return_value = [("Server", "x")]
    response = HttpResponse(transport_response, JsonCodec())

    assert response.headers() is response.headers()
    transport_response.headers.assert_called_once_with()


def test_headers_are_read_only():
    with pytest.raises(TypeError):
        _response().headers()["X"] = "y"  # type: ignore[index]


@pytest.mark.parametrize("status", [200, 204, 301, 304, 399])
def test_succeed_passes_200_to_399(status):
    response = _response(status)

    assert response.succeed() is response


@pytest.mark.parametrize("status", [100, 199, 400, 404, 500])
def test_succeed_raises_outside_range(status):
    with pytest.raises(HttpError) as excinfo:
        _response(status, b"nope").succeed()

    assert excinfo.value.code == status
    assert excinfo.value.content == b"nope"


def test_error_carries_headers():
    response = _response(404, b"{}", [("Content-Type", "application/json")])

    with pytest.raises(HttpError) as excinfo:
        response.succeed()

    assert excinfo.value.headers["content-type"] == "application/json"


def test_error_translator_is_applied():
    class NotFound(Exception):
        pass

    response = _response(404, translator=lambda error: NotFound(error.code))

    with pytest.raises(NotFound):
        response.as_bytes()


def test_as_type_decodes_success():
    assert _response(200, b'{"foo":"bar"}').as_type(Foo) == Foo("bar")


def test_as_family_checks_success_first():
    response = _response(500, b'{"foo":"bar"}')

    for call in (
        lambda: response.as_type(Foo),
        response.as_bytes,
        response.as_string,
        response.as_stream,
        response.as_json,
    ):
        with pytest.raises(HttpError):
            call()


def test_bad_json_on_200_is_decode_error_not_http_error():
    with pytest.raises(DecodeError) as excinfo:
        _response(200, b"not json").as_type(Foo)

    assert not isinstance(excinfo.value, HttpError)


def test_content_as_ignores_status():
    assert _response(400, b'{"foo":"bad"}').content_as(Foo) == Foo("bad")


def test_content_accessors():
    response = _response(404, "héllo".encode("utf-8"))

    assert response.content_bytes() == "héllo".encode("utf-8")
    assert response.content_string() == "héllo"
    assert response.content_stream().read() == "héllo".encode("utf-8")
    assert _response(200, b"ok").as_string() == "ok"
    assert _response(200, b"ok").as_stream().read() == b"ok"


def test_location_is_none_when_absent():
    assert _response().location() is None


def test_io_failures_are_wrapped():
    transport_response = Mock()
    transport_response.content_bytes.side_effect = OSError("reset")
    response = HttpResponse(transport_response, JsonCodec())

    with pytest.raises(HttpClientError, match="reset"):
        response.content_bytes()
