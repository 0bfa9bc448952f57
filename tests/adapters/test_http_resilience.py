from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime

import httpx
import pytest

from venturepay.adapters.http_resilience import (
    ResilienceConfig,
    ResilientClient,
    RetryPolicy,
    retry_after_seconds,
)


def _resilient(transport: httpx.MockTransport, retry: RetryPolicy) -> ResilientClient:
    return ResilientClient(
        ResilienceConfig(name="test", base_url="https://api.test", retry=retry),
        transport=transport,
    )


def _counting(*statuses: int) -> tuple[httpx.MockTransport, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(statuses[min(len(seen), len(statuses)) - 1])

    return httpx.MockTransport(handler), seen


def test_idempotent_request_is_retried_on_transient_status() -> None:
    transport, seen = _counting(503, 200)

    async def fetch() -> httpx.Response:
        async with _resilient(transport, RetryPolicy(backoff_factor=0)) as client:
            return await client.request("GET", "/things")

    response = asyncio.run(fetch())

    assert response.status_code == 200
    assert len(seen) == 2


def test_post_is_sent_once_under_default_policy() -> None:
    transport, seen = _counting(503, 200)

    async def create() -> httpx.Response:
        async with _resilient(transport, RetryPolicy(backoff_factor=0)) as client:
            return await client.post("/things", json={})

    response = asyncio.run(create())

    assert response.status_code == 503
    assert len(seen) == 1


def test_zero_total_disables_retries() -> None:
    transport, seen = _counting(503, 200)

    async def fetch() -> httpx.Response:
        async with _resilient(transport, RetryPolicy(total=0)) as client:
            return await client.request("GET", "/things")

    assert asyncio.run(fetch()).status_code == 503
    assert len(seen) == 1


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("3", 3.0),
        (" 0 ", 0.0),
        ("soon", None),
    ],
)
def test_retry_after_seconds(header: str, expected: float | None) -> None:
    response = httpx.Response(429, headers={"Retry-After": header})

    assert retry_after_seconds(response) == expected


def test_retry_after_accepts_http_dates() -> None:
    later = datetime.now(UTC) + timedelta(seconds=30)
    response = httpx.Response(429, headers={"Retry-After": format_datetime(later, usegmt=True)})

    delay = retry_after_seconds(response)

    assert delay is not None
    assert 0 < delay <= 30


def test_missing_retry_after_is_none() -> None:
    assert retry_after_seconds(httpx.Response(429)) is None
