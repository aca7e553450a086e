"""Payload codecs used for request bodies and response decoding."""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError

from .errors import DecodeError

JSON_CONTENT_TYPE = "application/json"


class Codec(Protocol):
    """Encodes objects to bytes and decodes bytes to typed objects."""

    def encode(self, value: Any) -> bytes: ...

    def decode(self, data: bytes, target: Any = Any) -> Any: ...


class JsonCodec:
    """JSON codec backed by pydantic.

    Anything pydantic can serialize works as a body: dicts, lists,
    dataclasses, TypedDicts and models. ``decode`` validates into
    ``target`` which may be any type pydantic understands.
    """

    def encode(self, value: Any) -> bytes:
        try:
            return TypeAdapter(type(value)).dump_json(value)
        except (ValueError, TypeError) as exc:
            raise DecodeError(
                f"Cannot encode {type(value).__name__} as JSON: {exc}"
            ) from exc

    def decode(self, data: bytes, target: Any = Any) -> Any:
        try:
            return TypeAdapter(target).validate_json(data)
        except ValidationError as exc:
            raise DecodeError(f"Cannot decode JSON as {target}: {exc}") from exc


def is_codec_content_type(content_type: str | None) -> bool:
    """True for the JSON and XML families, including ``+json``/``+xml``."""
    if content_type is None:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return (
        media_type in ("application/json", "application/xml", "text/xml")
        or media_type.endswith(("+json", "+xml"))
    )


def charset_of(content_type: str | None, default: str = "utf-8") -> str:
    """The ``charset=`` parameter of a content type, or ``default``."""
    if not content_type:
        return default
    for part in content_type.split(";")[1:]:
        key, _, value = part.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return default
