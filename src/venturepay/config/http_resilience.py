"""Settings for the outbound HTTP client used against payment provider APIs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

IDEMPOTENT_METHODS: Final[frozenset[str]] = frozenset({"DELETE", "GET", "HEAD", "OPTIONS", "PUT"})
TRANSIENT_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retries for transient provider failures; ``total=0`` disables them.

    A request is retried only when its method is in ``allowed_methods`` and it
    either raised one of ``retry_on_exceptions`` or came back with a status in
    ``status_forcelist``. ``total`` counts retries, not attempts.
    """

    total: int = 2
    backoff_factor: float = 0.5
    max_backoff_wait: float = 10.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = IDEMPOTENT_METHODS
    status_forcelist: frozenset[int] = TRANSIENT_STATUS_CODES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


def charge_safe_policy(*, total: int = 2, backoff_factor: float = 0.5) -> RetryPolicy:
    """Retry policy for POSTs that create payable resources.

    Only failures the provider never acted on are retried: a 429 (waiting out
    ``Retry-After``) and a connection that was never established. A timeout
    or 5xx after the request left may already have created a session.
    """

    return RetryPolicy(
        total=total,
        backoff_factor=backoff_factor,
        allowed_methods=frozenset({"POST"}),
        status_forcelist=frozenset({429}),
        retry_on_exceptions=(httpx.ConnectError, httpx.ConnectTimeout),
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
