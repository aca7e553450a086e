"""Transport backed by a ``requests.Session``."""

from __future__ import annotations

from time import sleep
from typing import TYPE_CHECKING

import requests
from urllib3 import HTTPHeaderDict

from .config import TransportConfig
from .errors import HttpClientError, RequestTimeoutError
from .transport import BufferedTransportResponse, Transport

if TYPE_CHECKING:
    from .request import HttpRequest


class RequestsTransport(Transport):
    """Blocking transport; one physical attempt per ``send``.

    Responses are read fully into memory, so the content accessors can be
    called any number of times.
    """

    def __init__(self, config: TransportConfig | None = None) -> None:
        """Create a new RequestsTransport.

        Args:
            config: Session settings; defaults to ``TransportConfig()``.
        """
        self._config = config or TransportConfig()
        self._session = requests.Session()
        if self._config.user_agent:
            self._session.headers["User-Agent"] = self._config.user_agent
        self._session.headers.update(self._config.default_headers)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> RequestsTransport:
        return self

    def __exit__(self, *_args: object) -> None:
        self.close()

    def _get_timeout(
        self, request: HttpRequest
    ) -> float | tuple[float, float] | None:
        """Resolve timeout preference; the request's own value wins."""
        if request.timeout > 0:
            return request.timeout / 1000.0
        return self._config.default_timeout()

    def _sleep_between_attempts(self, attempt: int) -> None:
        """Sleep between retry attempts using exponential backoff."""
        backoff_base = self._config.backoff_base_seconds
        if backoff_base <= 0:
            return
        sleep(backoff_base * (2 ** max(0, attempt - 1)))

    def _build_headers(self, request: HttpRequest) -> dict[str, str]:
        headers = dict(request.headers)
        content_type = request.content_type
        if content_type is not None:
            headers["Content-Type"] = content_type
        return headers

    def send(
        self, request: HttpRequest, body: bytes
    ) -> BufferedTransportResponse:
        try:
            response = self._session.request(
                request.method,
                request.to_url_string(),
                headers=self._build_headers(request),
                data=body or None,
                timeout=self._get_timeout(request),
                allow_redirects=request.follow_redirects,
                verify=self._config.verify_tls,
            )
            return BufferedTransportResponse(
                status_code=response.status_code,
                content=response.content,
                header_pairs=_header_pairs(response),
            )
        except requests.exceptions.Timeout as exc:
            raise RequestTimeoutError(str(exc)) from exc
        except requests.exceptions.RequestException as exc:
            raise HttpClientError(str(exc)) from exc


def _header_pairs(response: requests.Response) -> tuple[tuple[str, str], ...]:
    """One pair per header line; ``response.headers`` comma-joins repeats."""
    raw_headers = getattr(response.raw, "headers", None)
    if isinstance(raw_headers, HTTPHeaderDict):
        return tuple(raw_headers.items())
    return tuple(response.headers.items())
