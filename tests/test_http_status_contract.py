# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
from unittest.mock import Mock, patch

import pytest

from requestkit.config import TransportConfig
from requestkit.errors import HttpError
from requestkit.requests_transport import RequestsTransport


def _mock_response(*, content: bytes = b"", status: int = 200, headers=None):
    response = Mock()
    response.content = content
    response.status_code = status
    response.headers = headers or {"Content-Type": "text/plain"}
    return response


def _fetch(url, status, content=b"", headers=None, follow=True):
    transport = RequestsTransport(TransportConfig(timeout_seconds=5.0))
    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(
            content=content, status=status, headers=headers
        )
        return transport.request(url).with_follow_redirects(follow).fetch()


def test_404_is_returned_not_raised_by_fetch():
    response = _fetch("http://example.com/missing", 404, b"not found")

    assert response.response_code() == 404
    assert response.content_bytes() == b"not found"


def test_404_raises_from_succeed_with_status_and_body():
    response = _fetch("http://example.com/missing", 404, b"not found")

    with pytest.raises(HttpError) as excinfo:
        response.succeed()

    assert excinfo.value.code == 404
    assert excinfo.value.content == b"not found"
    assert str(excinfo.value) == "404: not found"


def test_500_raises_from_as_bytes():
    response = _fetch("http://example.com/error", 500, b"server error")

    with pytest.raises(HttpError) as excinfo:
        response.as_bytes()

    assert excinfo.value.code == 500


def test_302_not_followed_passes_succeed():
    response = _fetch(
        "http://example.com/redirect",
        302,
        headers={"Location": "/destination"},
        follow=False,
    )

    assert response.succeed() is response
    assert response.location() == "/destination"
