"""Immutable, fluent HTTP request definition.

Every ``with_*`` method returns a new ``HttpRequest``; the original is
never modified and can be reused as a template::

    api = RequestsTransport().request("https://api.example.com").with_retries(2)
    user = api.with_path("users").with_path("42").fetch().as_type(User)
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, BinaryIO, Callable, Mapping

from .codec import (
    JSON_CONTENT_TYPE,
    Codec,
    JsonCodec,
    charset_of,
    is_codec_content_type,
)
from .errors import (
    BodyContractError,
    HttpClientError,
    HttpError,
    UnsupportedPayloadError,
)
from .multipart import CONTENT_TYPE_PREFIX as MULTIPART_PREFIX
from .multipart import (
    CHUNK_SIZE,
    MultipartWriter,
    content_type_for,
    copy_stream,
    new_boundary,
)
from .params import (
    BinaryAttachment,
    Param,
    ParamValue,
    QueryParamValue,
    filter_in,
    filter_out,
    has_binary_attachments,
    normalize_value,
    strip,
)
from .query import build_query
from .response import HttpResponse

if TYPE_CHECKING:
    from .transport import Transport

logger = logging.getLogger(__name__)

FORM_URLENCODED_PREFIX = "application/x-www-form-urlencoded"
FORM_URLENCODED = FORM_URLENCODED_PREFIX + "; charset=utf-8"
MAX_LOGGED_BODY_LENGTH = 1000

Preflight = Callable[["HttpRequest"], "HttpRequest"]
Postflight = Callable[[HttpResponse], HttpResponse]
ErrorTranslator = Callable[[HttpError], Exception]


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


def _identity(value: Any) -> Any:
    return value


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


def _empty() -> Mapping[str, Any]:
    return MappingProxyType({})


@lru_cache(maxsize=None)
def default_transport() -> Transport:
    """Shared transport for requests created without one."""
    from .requests_transport import RequestsTransport

    return RequestsTransport()


class _BodySink:
    """Writes to the output and, when given, mirrors into a capture buffer."""

    def __init__(self, output: BinaryIO, capture: BinaryIO | None) -> None:
        self._output = output
        self._capture = capture
        self.written = 0

    def write(self, data: bytes) -> int:
        self._output.write(data)
        if self._capture is not None:
            self._capture.write(data)
        self.written += len(data)
        return len(data)


@dataclass(frozen=True)
class HttpRequest:
    """Immutable definition of a request.

    ``params`` values are normalized ``ParamValue`` objects; insertion order
    is kept and re-setting a name replaces the value in place.
    """

    method: str = HttpMethod.GET.value
    url: str | None = None
    params: Mapping[str, ParamValue] = field(default_factory=_empty)
    headers: Mapping[str, str] = field(default_factory=_empty)
    explicit_content_type: str | None = None
    body: Any = None
    timeout: int = 0
    retries: int = 0
    follow_redirects: bool = True
    preflight: Preflight = _identity
    postflight: Postflight = _identity
    transport: Transport | None = field(default=None, repr=False)
    codec: Codec = field(default_factory=JsonCodec, repr=False, compare=False)
    error_translator: ErrorTranslator = field(default=_identity, repr=False)
    boundary: str = field(
        init=False, default_factory=new_boundary, repr=False, compare=False
    )

    # bodies and params may hold unhashable values
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.timeout < 0:
            raise ValueError("timeout must be >= 0")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")

    # Mutators

    def with_method(self, method: str | HttpMethod) -> HttpRequest:
        if isinstance(method, HttpMethod):
            method = method.value
        return replace(self, method=method)

    def with_url(self, url: str) -> HttpRequest:
        """Replace the url wholesale."""
        return replace(self, url=url)

    def with_path(self, path: str) -> HttpRequest:
        """Append a path segment, keeping exactly one slash at the joint.

        If no url is set yet, the path becomes the url.
        """
        if self.url is None:
            return self.with_url(path)
        return self.with_url(self.url.rstrip("/") + "/" + path.lstrip("/"))

    def with_param(self, name: str, value: Any) -> HttpRequest:
        """Set, replace or (with ``None``) remove a parameter.

        ``value`` may be a string, a list or tuple of values (sent as repeated
        pairs), a ``BinaryAttachment`` or anything with a useful ``str()``.
        """
        if value is None:
            return self._without_param(name)
        return self._with_param_value(name, normalize_value(value))

    def with_params(self, *params: Param) -> HttpRequest:
        here = self
        for param in params:
            here = here.with_param(param.name, param.value)
        return here

    def with_query_param(self, name: str, value: Any) -> HttpRequest:
        """Like ``with_param`` but always sent in the query string.

        Useful when POSTing form data to an endpoint that also expects
        something (a signature, say) visible in the URL.
        """
        wrapped = QueryParamValue.of(value)
        if wrapped is None:
            return self._without_param(name)
        return self._with_param_value(name, wrapped)

    def with_param_json(self, name: str, value: Any) -> HttpRequest:
        """Set a parameter to the JSON text of ``value``."""
        if value is None:
            return self._without_param(name)
        return self.with_param(name, self.codec.encode(value).decode("utf-8"))

    def with_attachment(
        self, name: str, data: BinaryIO, content_type: str, filename: str
    ) -> HttpRequest:
        """Add a file upload; the request becomes a multipart POST."""
        attachment = BinaryAttachment(data, content_type, filename)
        return self.with_method(HttpMethod.POST)._with_param_value(name, attachment)

    def _with_param_value(self, name: str, value: ParamValue) -> HttpRequest:
        return replace(self, params=_frozen({**self.params, name: value}))

    def _without_param(self, name: str) -> HttpRequest:
        if name not in self.params:
            return self
        params = {key: value for key, value in self.params.items() if key != name}
        return replace(self, params=_frozen(params))

    def with_header(self, name: str, value: str | None) -> HttpRequest:
        """Set or replace a header; ``None`` removes it.

        ``Content-Type`` in any casing is stored as the explicit content type.
        """
        if name.lower() == "content-type":
            return self.with_content_type(value)
        if value is None:
            headers = {key: val for key, val in self.headers.items() if key != name}
        else:
            headers = {**self.headers, name: value}
        return replace(self, headers=_frozen(headers))

    def with_basic_auth(self, username: str, password: str) -> HttpRequest:
        # No standard charset for basic auth, utf-8 is the sane choice
        token = base64.b64encode(f"{username}:{password}".encode("utf-8"))
        return self.with_header("Authorization", "Basic " + token.decode("ascii"))

    def with_content_type(self, content_type: str | None) -> HttpRequest:
        return replace(self, explicit_content_type=content_type)

    def with_body(self, body: Any) -> HttpRequest:
        """Set the payload; without an explicit content type it is sent as JSON."""
        return replace(self, body=body)

    def with_timeout(self, timeout: int) -> HttpRequest:
        """Connect/read timeout in milliseconds, 0 for the transport default."""
        return replace(self, timeout=timeout)

    def with_retries(self, retries: int) -> HttpRequest:
        """How many times a timed out request is retried."""
        return replace(self, retries=retries)

    def with_follow_redirects(self, follow: bool) -> HttpRequest:
        return replace(self, follow_redirects=follow)

    def with_preflight(self, preflight: Preflight) -> HttpRequest:
        """Replace the function applied to the request right before dispatch."""
        return replace(self, preflight=preflight)

    def with_preflight_and_then(self, preflight: Preflight) -> HttpRequest:
        """Run ``preflight`` after whatever preflight is already set."""
        existing = self.preflight
        return self.with_preflight(lambda request: preflight(existing(request)))

    def with_postflight(self, postflight: Postflight) -> HttpRequest:
        return replace(self, postflight=postflight)

    def with_postflight_and_then(self, postflight: Postflight) -> HttpRequest:
        existing = self.postflight
        return self.with_postflight(lambda response: postflight(existing(response)))

    def with_transport(self, transport: Transport) -> HttpRequest:
        return replace(self, transport=transport)

    def with_codec(self, codec: Codec) -> HttpRequest:
        return replace(self, codec=codec)

    def with_error_translator(self, translator: ErrorTranslator) -> HttpRequest:
        return replace(self, error_translator=translator)

    # Resolution

    @property
    def is_post(self) -> bool:
        return self.method == HttpMethod.POST.value

    @property
    def content_type(self) -> str | None:
        """The content type to submit, or None when there is none (e.g. a GET)."""
        if self.explicit_content_type is not None:
            return self.explicit_content_type
        if self.body is not None:
            return JSON_CONTENT_TYPE
        if self.is_post:
            if has_binary_attachments(self.params):
                return content_type_for(self.boundary)
            return FORM_URLENCODED
        return None

    def _is_form_content_type(self) -> bool:
        content_type = self.content_type
        return content_type is not None and content_type.startswith(
            (FORM_URLENCODED_PREFIX, MULTIPART_PREFIX)
        )

    def query_params(self) -> dict[str, ParamValue]:
        """Params that belong in the query string, unwrapped."""
        if self._is_form_content_type():
            return filter_in(self.params)
        return {name: strip(value) for name, value in self.params.items()}

    def body_params(self) -> dict[str, ParamValue]:
        """Params that belong in a form body."""
        if self._is_form_content_type():
            return filter_out(self.params)
        return {}

    def to_url_string(self) -> str:
        """The complete url, including any query string."""
        if self.url is None:
            raise ValueError("url has not been set")
        query = build_query(self.query_params())
        if not query:
            return self.url
        separator = "&" if "?" in self.url else "?"
        return self.url + separator + query

    # Body

    def write_body(self, output: BinaryIO, capture: BinaryIO | None = None) -> int:
        """Write the body, if any, to ``output`` and return the bytes written.

        When ``capture`` is given, or this module's logger is enabled for
        DEBUG, the same bytes are mirrored into a capture buffer and logged.
        """
        if capture is None and logger.isEnabledFor(logging.DEBUG):
            capture = io.BytesIO()

        sink = _BodySink(output, capture)
        self._write_body(sink)

        if capture is not None and sink.written and logger.isEnabledFor(logging.DEBUG):
            captured = _captured_bytes(capture)
            # not necessarily utf-8, but the best guess available
            logger.debug(
                "Wrote body: %s",
                captured.decode("utf-8", errors="replace")[:MAX_LOGGED_BODY_LENGTH],
            )
        return sink.written

    def body_bytes(self) -> bytes:
        """The complete body as bytes. Consumes any attachment or stream."""
        output = io.BytesIO()
        self.write_body(output)
        return output.getvalue()

    def _write_body(self, sink: _BodySink) -> None:
        content_type = self.content_type
        body = self.body

        if content_type is not None and content_type.startswith(MULTIPART_PREFIX):
            self._check_no_body("multipart")
            boundary = _boundary_of(content_type) or self.boundary
            MultipartWriter(sink, boundary).write(self.body_params())
        elif content_type is not None and content_type.startswith(
            FORM_URLENCODED_PREFIX
        ):
            self._check_no_body("form urlencoded")
            sink.write(build_query(self.body_params()).encode("utf-8"))
        elif body is None:
            return
        elif isinstance(body, (bytes, bytearray, memoryview)):
            sink.write(bytes(body))
        elif hasattr(body, "read"):
            self._copy_body_stream(body, sink, charset_of(content_type))
        elif is_codec_content_type(content_type):
            sink.write(self.codec.encode(body))
        elif isinstance(body, str):
            sink.write(body.encode(charset_of(content_type)))
        else:
            raise UnsupportedPayloadError(body, content_type)

    def _check_no_body(self, kind: str) -> None:
        if self.body is not None:
            raise BodyContractError(
                f"Cannot send both a body and {kind} params; "
                "set an explicit content type or drop one of them"
            )

    @staticmethod
    def _copy_body_stream(stream: Any, sink: _BodySink, charset: str) -> None:
        if isinstance(stream, io.TextIOBase):
            for chunk in iter(lambda: stream.read(CHUNK_SIZE), ""):
                sink.write(chunk.encode(charset))
        else:
            copied = copy_stream(stream, sink)
            logger.debug("Copied %d bytes from body stream", copied)

    # Dispatch

    def fetch(self) -> HttpResponse:
        """Execute the request.

        The preflight runs first and the postflight last. Transport
        failures surface as ``HttpClientError``; status codes are not
        checked here (see ``HttpResponse.succeed``).
        """
        if self.url is None:
            raise ValueError("url must be set before fetch()")

        request = self.preflight(self)
        transport = request.transport or default_transport()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Fetching %r", request)
            logger.debug("%s %s", request.method, request.to_url_string())

        try:
            transport_response = transport.fetch(request)
        except OSError as exc:
            raise HttpClientError(str(exc)) from exc

        response = HttpResponse(
            transport_response, request.codec, request.error_translator
        )
        return request.postflight(response)


def _boundary_of(content_type: str) -> str | None:
    for part in content_type.split(";")[1:]:
        key, _, value = part.partition("=")
        if key.strip().lower() == "boundary" and value.strip():
            return value.strip().strip('"')
    return None


def _captured_bytes(capture: BinaryIO) -> bytes:
    getvalue = getattr(capture, "getvalue", None)
    if getvalue is not None:
        return getvalue()
    return b""
