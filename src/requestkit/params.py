"""Parameter value types.

A parameter value is one of:

* ``str`` for a single value,
* ``tuple[str, ...]`` for an ordered list of values sharing one name,
* ``BinaryAttachment`` for a file upload,
* ``QueryParamValue`` wrapping a string or tuple, forcing it into
  the query string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, Iterable, Mapping, Union

from .errors import BodyContractError


@dataclass(frozen=True)
class BinaryAttachment:
    """A single-use binary upload.

    The stream is read exactly once, when the body is written. Closing it
    stays with whoever opened it.
    """

    data: BinaryIO
    content_type: str
    filename: str


@dataclass(frozen=True)
class QueryParamValue:
    """Marks a value as belonging in the query string, whatever the method."""

    value: str | tuple[str, ...]

    def __post_init__(self) -> None:
        if isinstance(self.value, BinaryAttachment):
            raise BodyContractError(
                "Binary attachments cannot be forced into the query string"
            )

    @classmethod
    def of(cls, value: Any) -> QueryParamValue | None:
        """Null-safe wrap; an already wrapped value is returned as-is."""
        if value is None:
            return None
        if isinstance(value, QueryParamValue):
            return value
        return cls(normalize_value(value))


ParamValue = Union[str, tuple[str, ...], BinaryAttachment, QueryParamValue]


def strip(value: ParamValue) -> str | tuple[str, ...] | BinaryAttachment:
    """Remove the query marker, if present."""
    if isinstance(value, QueryParamValue):
        return value.value
    return value


def normalize_value(value: Any) -> ParamValue:
    """Coerce a caller supplied value into a ParamValue."""
    if isinstance(value, (BinaryAttachment, QueryParamValue, str)):
        return value
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return str(value)


def filter_in(params: Mapping[str, ParamValue]) -> dict[str, ParamValue]:
    """Only the values wrapped in QueryParamValue, unwrapped."""
    return {
        name: value.value
        for name, value in params.items()
        if isinstance(value, QueryParamValue)
    }


def filter_out(params: Mapping[str, ParamValue]) -> dict[str, ParamValue]:
    """Everything not wrapped in QueryParamValue."""
    return {
        name: value
        for name, value in params.items()
        if not isinstance(value, QueryParamValue)
    }


def has_binary_attachments(params: Mapping[str, ParamValue]) -> bool:
    return any(isinstance(value, BinaryAttachment) for value in params.values())


@dataclass(frozen=True)
class Param:
    """A single name/value pair, for passing several params at once."""

    name: str
    value: Any

    @classmethod
    def attachment(
        cls, name: str, data: BinaryIO, content_type: str, filename: str
    ) -> Param:
        return cls(name, BinaryAttachment(data, content_type, filename))

    @staticmethod
    def concat(base: Iterable[Param], *params: Param) -> tuple[Param, ...]:
        """Make a new tuple with the extra parameters tacked on."""
        return (*base, *params)

    def __str__(self) -> str:
        return f"[{self.name}={self.value}]"
