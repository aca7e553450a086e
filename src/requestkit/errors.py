"""Error taxonomy for requestkit.

Everything raised while talking to a remote server derives from
``HttpClientError``. Body contract violations are programming errors and
derive from ``ValueError`` instead.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from multidict import CIMultiDict, CIMultiDictProxy

# Longest text/* message we allow; json and xml bodies are not restricted
MAX_TEXT_MESSAGE_LENGTH = 500


class HttpClientError(RuntimeError):
    """Unchecked I/O failure while sending or receiving a request."""


class RequestTimeoutError(HttpClientError):
    """Timeout-class failure. The only error a transport retries."""


class DecodeError(HttpClientError):
    """The codec could not encode or decode a payload."""


class BodyContractError(ValueError):
    """The request body and the request parameters cannot be combined."""


class UnsupportedPayloadError(BodyContractError):
    """The body object has no serialization for the resolved content type."""

    def __init__(self, body: Any, content_type: str | None) -> None:
        super().__init__(
            f"Don't know how to write body of type {type(body).__name__} "
            f"with content type {content_type}"
        )
        self.body_type = type(body)
        self.content_type = content_type


def _as_headers(
    headers: Mapping[str, Any] | Iterable[tuple[str, str]] | None,
) -> CIMultiDictProxy[str]:
    if isinstance(headers, CIMultiDictProxy):
        return headers
    return CIMultiDictProxy(CIMultiDict(headers or ()))


class HttpError(HttpClientError):
    """The remote side answered with a non-successful status code.

    Carries the full content of the response so callers can inspect it.
    """

    def __init__(
        self,
        code: int,
        headers: Mapping[str, Any] | Iterable[tuple[str, str]] | None = None,
        content: bytes | None = None,
    ) -> None:
        self.code = code
        self.headers = _as_headers(headers)
        self.content = content if content is not None else b""
        super().__init__(f"{code}: {summarize_body(self.headers, self.content)}")

    def content_string(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding)


def summarize_body(headers: CIMultiDictProxy[str], content: bytes) -> str:
    """Build a human readable message out of an error body."""
    content_type = headers.get("Content-Type")

    if content_type is None:
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError:
            return f"Body of {len(content)} bytes, not utf-8"
        return _chop(text, MAX_TEXT_MESSAGE_LENGTH)

    lowercase = content_type.lower()
    if lowercase.startswith("text"):
        return _chop(
            content.decode("utf-8", errors="replace"), MAX_TEXT_MESSAGE_LENGTH
        )
    if lowercase.startswith(("application/json", "application/xml")):
        return content.decode("utf-8", errors="replace")
    return f"Error body of type {content_type}, {len(content)} bytes"


def _chop(original: str, length: int) -> str:
    if len(original) > length:
        return original[: length - 1] + "…"
    return original
