"""Rate-limited, retrying ``httpx`` client for payment provider APIs."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from venturepay.config.http_resilience import (
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    charge_safe_policy,
)

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import AuthTypes, HeaderTypes, QueryParamTypes, URLTypes

__all__ = [
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "charge_safe_policy",
    "retry_after_seconds",
]

log = getLogger(__name__)


def retry_after_seconds(response: httpx.Response) -> float | None:
    """Delay requested by a ``Retry-After`` header, in seconds, if any."""

    value = response.headers.get("Retry-After")
    if value is None:
        return None
    value = value.strip()
    if value.isdigit():
        return float(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(0.0, (when - datetime.now(UTC)).total_seconds())


def _last_outcome(state: RetryCallState) -> httpx.Response:
    # Hand back the final response (or re-raise the final error) once retries run out.
    if state.outcome is None:
        raise RuntimeError("retry gave up before any attempt finished")
    return state.outcome.result()


class RequestOptions(TypedDict, total=False):
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    auth: AuthTypes | None


class ResilientClient:
    """Async client with one limiter and one connection pool per provider.

    Every attempt, retries included, waits on the limiter. Requests whose
    method is not allowed by the retry policy are sent exactly once.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.limiter: AsyncLimiter | None = None
        if config.ratelimit is not None:
            self.limiter = AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
        self._backoff = wait_exponential(
            multiplier=config.retry.backoff_factor,
            max=config.retry.max_backoff_wait,
        )
        self._client = httpx.AsyncClient(
            base_url=config.base_url or "",
            timeout=config.timeout_seconds,
            headers=dict(config.default_headers or {}),
            transport=transport,
            event_hooks={"response": [self._log_response]},
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        policy = self.config.retry
        method = method.upper()
        if policy.total <= 0 or method not in policy.allowed_methods:
            return await self._send(method, url, **kwargs)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.total + 1),
            wait=self._wait,
            retry=(
                retry_if_exception_type(policy.retry_on_exceptions)
                | retry_if_result(self._is_retryable)
            ),
            before_sleep=self._log_retry,
            retry_error_callback=_last_outcome,
        )
        return await retrying(self._send, method, url, **kwargs)

    async def _send(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        if self.limiter is None:
            return await self._client.request(method, url, **kwargs)
        async with self.limiter:
            return await self._client.request(method, url, **kwargs)

    def _is_retryable(self, response: httpx.Response) -> bool:
        return response.status_code in self.config.retry.status_forcelist

    def _wait(self, state: RetryCallState) -> float:
        policy = self.config.retry
        outcome = state.outcome
        if policy.respect_retry_after_header and outcome is not None and not outcome.failed:
            delay = retry_after_seconds(outcome.result())
            if delay is not None:
                return min(delay, policy.max_backoff_wait)
        return self._backoff(state)

    def _log_retry(self, state: RetryCallState) -> None:
        outcome = state.outcome
        if outcome is None:
            return
        reason = (
            repr(outcome.exception()) if outcome.failed else f"HTTP {outcome.result().status_code}"
        )
        delay = state.next_action.sleep if state.next_action is not None else 0.0
        log.warning(
            "%s: attempt %s failed (%s), retrying in %.2fs",
            self.config.name,
            state.attempt_number,
            reason,
            delay,
        )

    async def _log_response(self, response: httpx.Response) -> None:
        log.debug(
            "%s: %s %s -> %s",
            self.config.name,
            response.request.method,
            response.request.url,
            response.status_code,
        )
