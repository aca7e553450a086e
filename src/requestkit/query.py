"""Query string construction.

Components are encoded with ``quote_plus`` in UTF-8: spaces become ``+``
and everything outside ``[A-Za-z0-9_.~-]`` is percent-encoded. The same
rules apply to query strings and to urlencoded form bodies.
"""

from __future__ import annotations

from typing import Mapping
from urllib.parse import quote_plus

from .errors import BodyContractError
from .params import BinaryAttachment, ParamValue, strip


def url_encode(value: str) -> str:
    return quote_plus(value, encoding="utf-8")


class QueryBuilder:
    """Accumulates ``key=value`` pairs joined by ``&``."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def add(self, key: str, value: ParamValue) -> QueryBuilder:
        """Add one parameter; a tuple value adds one pair per element."""
        value = strip(value)
        if isinstance(value, BinaryAttachment):
            raise BodyContractError(
                f"Binary attachment '{key}' cannot be sent in a query string"
            )
        if isinstance(value, tuple):
            for item in value:
                self._add(key, item)
        else:
            self._add(key, value)
        return self

    def add_all(self, params: Mapping[str, ParamValue]) -> QueryBuilder:
        for key, value in params.items():
            self.add(key, value)
        return self

    def _add(self, key: str, value: str) -> None:
        self._parts.append(f"{url_encode(key)}={url_encode(value)}")

    def __str__(self) -> str:
        return "&".join(self._parts)


def build_query(params: Mapping[str, ParamValue]) -> str:
    """Empty string for an empty mapping, never a bare ``?``."""
    return str(QueryBuilder().add_all(params))
