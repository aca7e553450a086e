"""Response wrapper.

Because of the header cache, an ``HttpResponse`` is not thread safe;
keep it on the thread that fetched it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, BinaryIO, Callable

from multidict import CIMultiDict, CIMultiDictProxy

from .errors import HttpClientError, HttpError

if TYPE_CHECKING:
    from .codec import Codec
    from .transport import TransportResponse


def _wrap_io(call: Callable[[], Any]) -> Any:
    try:
        return call()
    except OSError as exc:
        raise HttpClientError(str(exc)) from exc


class HttpResponse:
    """The result of ``HttpRequest.fetch()``.

    The ``content_*`` accessors work whatever the status code; the ``as_*``
    family first calls ``succeed()``.
    """

    def __init__(
        self,
        transport_response: TransportResponse,
        codec: Codec,
        error_translator: Callable[[HttpError], Exception] | None = None,
    ) -> None:
        self.transport_response = transport_response
        self.codec = codec
        self._error_translator = error_translator
        self._cached_headers: CIMultiDictProxy[str] | None = None

    def __repr__(self) -> str:
        return f"HttpResponse({self.transport_response!r})"

    def response_code(self) -> int:
        return _wrap_io(self.transport_response.response_code)

    def headers(self) -> CIMultiDictProxy[str]:
        """Case insensitive, case preserving, read-only multi-valued headers.

        Use ``getall(name)`` for every value of a header.
        """
        if self._cached_headers is None:
            pairs = _wrap_io(self.transport_response.headers)
            self._cached_headers = CIMultiDictProxy(CIMultiDict(pairs))
        return self._cached_headers

    def location(self) -> str | None:
        return self.headers().get("Location")

    def content_type(self) -> str | None:
        return self.headers().get("Content-Type")

    def succeed(self) -> HttpResponse:
        """Raise unless the status code is in [200, 400).

        3xx codes pass: a redirect that was not followed is not a failure.

        Raises:
            HttpError: or whatever the request's error translator maps it to.
        """
        code = self.response_code()
        if code < 200 or code >= 400:
            error = HttpError(code, self.headers(), self.content_bytes())
            if self._error_translator is not None:
                raise self._error_translator(error)
            raise error
        return self

    def as_type(self, target: Any) -> Any:
        """Decode a successful response into ``target`` with the codec."""
        return self.succeed().content_as(target)

    def as_json(self) -> Any:
        """Decode a successful response into plain dicts, lists and scalars."""
        return self.as_type(Any)

    def as_stream(self) -> BinaryIO:
        return self.succeed().content_stream()

    def as_bytes(self) -> bytes:
        return self.succeed().content_bytes()

    def as_string(self, encoding: str = "utf-8") -> str:
        return self.as_bytes().decode(encoding)

    def content_stream(self) -> BinaryIO:
        """The body, whether success or error."""
        return _wrap_io(self.transport_response.content_stream)

    def content_bytes(self) -> bytes:
        """The body, whether success or error.

        Normally ``as_bytes()`` is what you want, it checks success first.
        """
        return _wrap_io(self.transport_response.content_bytes)

    def content_string(self, encoding: str = "utf-8") -> str:
        return self.content_bytes().decode(encoding)

    def content_as(self, target: Any) -> Any:
        """Decode the body whatever the status; handy for typed error bodies."""
        return self.codec.decode(self.content_bytes(), target)
