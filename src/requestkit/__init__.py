"""Fluent, immutable HTTP requests over pluggable transports."""

from .codec import Codec, JsonCodec
from .config import TransportConfig
from .errors import (
    BodyContractError,
    DecodeError,
    HttpClientError,
    HttpError,
    RequestTimeoutError,
    UnsupportedPayloadError,
)
from .multipart import MultipartWriter
from .params import BinaryAttachment, Param
from .query import QueryBuilder, url_encode
from .request import HttpMethod, HttpRequest
from .requests_transport import RequestsTransport
from .response import HttpResponse
from .transport import BufferedTransportResponse, Transport, TransportResponse

__all__ = [
    "BinaryAttachment",
    "BodyContractError",
    "BufferedTransportResponse",
    "Codec",
    "DecodeError",
    "HttpClientError",
    "HttpError",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "JsonCodec",
    "MultipartWriter",
    "Param",
    "QueryBuilder",
    "RequestTimeoutError",
    "RequestsTransport",
    "Transport",
    "TransportConfig",
    "TransportResponse",
    "UnsupportedPayloadError",
    "url_encode",
]
