"""multipart/form-data serialization.

Follows the HTML forms convention: every line ends with CRLF, header
values are quoted strings where only backslash and double quote are
escaped. Names are *not* percent-encoded here, unlike urlencoded bodies.
"""

from __future__ import annotations

import uuid
from typing import BinaryIO, Mapping, Protocol

from .params import BinaryAttachment, ParamValue, strip

CRLF = b"\r\n"
CONTENT_TYPE_PREFIX = "multipart/form-data"
BOUNDARY_PREFIX = "requestkit-boundary-"
CHUNK_SIZE = 8192


class Writable(Protocol):
    def write(self, data: bytes) -> object: ...


def new_boundary() -> str:
    return BOUNDARY_PREFIX + uuid.uuid4().hex


def content_type_for(boundary: str) -> str:
    return f"{CONTENT_TYPE_PREFIX}; boundary={boundary}"


def escape_quoted(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class MultipartWriter:
    """Writes a parameter mapping as multipart/form-data to ``out``.

    The boundary is random per writer unless one is supplied; callers that
    have already announced a content type must pass its boundary here.
    """

    def __init__(self, out: Writable, boundary: str | None = None) -> None:
        self._out = out
        self.boundary = boundary or new_boundary()

    @property
    def content_type(self) -> str:
        return content_type_for(self.boundary)

    def write(self, params: Mapping[str, ParamValue]) -> None:
        for name, value in params.items():
            value = strip(value)
            if isinstance(value, tuple):
                for item in value:
                    self._write_text_part(name, item)
            elif isinstance(value, BinaryAttachment):
                self._write_binary_part(name, value)
            else:
                self._write_text_part(name, value)

        self._println(f"--{self.boundary}--")

    def _write_text_part(self, name: str, value: str) -> None:
        self._println(f"--{self.boundary}")
        self._println(f'Content-Disposition: form-data; name="{escape_quoted(name)}"')
        self._println()
        self._println(value)

    def _write_binary_part(self, name: str, attachment: BinaryAttachment) -> None:
        self._println(f"--{self.boundary}")
        self._println(
            f'Content-Disposition: form-data; name="{escape_quoted(name)}"; '
            f'filename="{escape_quoted(attachment.filename)}"'
        )
        self._println(f"Content-Type: {attachment.content_type}")
        self._println()
        copy_stream(attachment.data, self._out)
        self._println()

    def _println(self, line: str = "") -> None:
        self._out.write(line.encode("utf-8") + CRLF)


def copy_stream(source: BinaryIO, out: Writable) -> int:
    copied = 0
    while True:
        chunk = source.read(CHUNK_SIZE)
        if not chunk:
            return copied
        out.write(chunk)
        copied += len(chunk)
