"""Configuration for the bundled requests transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


def _no_headers() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True)
class TransportConfig:
    """Session-wide settings for ``RequestsTransport``.

    Timeouts here are in seconds and apply when a request does not set
    its own (millisecond) timeout. Retry counts are per request.
    """

    user_agent: str | None = None
    default_headers: Mapping[str, str] = field(default_factory=_no_headers)
    verify_tls: bool = True
    connect_timeout_seconds: float | None = None
    read_timeout_seconds: float | None = None
    backoff_base_seconds: float = 0.0
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.backoff_base_seconds < 0:
            raise ValueError("backoff_base_seconds must be >= 0")

        if (self.connect_timeout_seconds is None) != (
            self.read_timeout_seconds is None
        ):
            raise ValueError(
                "connect and read timeouts are set together or not at all"
            )
        for name in (
            "timeout_seconds",
            "connect_timeout_seconds",
            "read_timeout_seconds",
        ):
            seconds = getattr(self, name)
            if seconds is not None and seconds <= 0:
                raise ValueError(f"{name} must be positive, got {seconds}")

        # callers keep their dict; the session sees a read-only snapshot
        object.__setattr__(
            self, "default_headers", MappingProxyType(dict(self.default_headers))
        )

    def default_timeout(self) -> float | tuple[float, float] | None:
        """The requests-style timeout used when a request sets none."""
        if (
            self.connect_timeout_seconds is not None
            and self.read_timeout_seconds is not None
        ):
            return (self.connect_timeout_seconds, self.read_timeout_seconds)
        return self.timeout_seconds
