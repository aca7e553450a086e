"""Transport contract.

A transport physically sends an ``HttpRequest`` and hands back a
``TransportResponse``. The retry loop lives here so every backend gets
the same policy: ``retries + 1`` sequential attempts, retrying only on
``RequestTimeoutError``, reusing the body bytes resolved once up front.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO, Protocol, Sequence

from .errors import RequestTimeoutError

if TYPE_CHECKING:
    from .request import HttpRequest

logger = logging.getLogger(__name__)

HeaderPairs = Sequence[tuple[str, str]]


class TransportResponse(Protocol):
    """What a transport hands back. Accessors may be called repeatedly."""

    def response_code(self) -> int: ...

    def content_stream(self) -> BinaryIO: ...

    def content_bytes(self) -> bytes: ...

    def headers(self) -> HeaderPairs: ...


@dataclass(frozen=True)
class BufferedTransportResponse:
    """A fully read response held in memory."""

    status_code: int
    content: bytes = b""
    header_pairs: tuple[tuple[str, str], ...] = ()

    def response_code(self) -> int:
        return self.status_code

    def content_stream(self) -> BinaryIO:
        return io.BytesIO(self.content)

    def content_bytes(self) -> bytes:
        return self.content

    def headers(self) -> HeaderPairs:
        return self.header_pairs


class Transport(ABC):
    """Base class for every backend."""

    def request(self, url: str | None = None) -> HttpRequest:
        """Start a new request bound to this transport."""
        from .request import HttpRequest

        return HttpRequest(url=url, transport=self)

    def fetch(self, request: HttpRequest) -> TransportResponse:
        """Send ``request``, retrying timeouts up to ``request.retries`` times."""
        body = request.body_bytes()
        attempts = 0
        while True:
            attempts += 1
            try:
                return self.send(request, body)
            except RequestTimeoutError:
                if attempts > request.retries:
                    raise
                logger.warning(
                    "Timeout error, retrying (attempt %d of %d)",
                    attempts + 1,
                    request.retries + 1,
                )
                self._sleep_between_attempts(attempts)

    def _sleep_between_attempts(self, attempt: int) -> None:
        """Hook for backoff between attempts; no delay by default."""

    @abstractmethod
    def send(self, request: HttpRequest, body: bytes) -> TransportResponse:
        """Make exactly one physical attempt.

        Raises:
            RequestTimeoutError: for timeouts, which the caller may retry.
            HttpClientError: for any other I/O failure.
        """
