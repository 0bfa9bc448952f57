from __future__ import annotations

import asyncio
import base64
import json
from typing import TYPE_CHECKING

import httpx
import pytest

from venturepay.adapters.http_resilience import (
    RateLimit,
    ResilienceConfig,
    ResilientClient,
    RetryPolicy,
    charge_safe_policy,
)
from venturepay.adapters.paymongo import (
    PayMongoCheckoutClient,
    build_checkout_body,
    new_reference_number,
)
from venturepay.config.paymongo import PAYMONGO_BASE_URL, PayMongoConfig
from venturepay.domain.errors import CheckoutError
from venturepay.domain.ports.gateways import CheckoutRequest

if TYPE_CHECKING:
    from collections.abc import Callable


def _config(
    retry: RetryPolicy | None = None, ratelimit: RateLimit | None = None
) -> PayMongoConfig:
    return PayMongoConfig(
        secret_key="sk_test_123",
        resilience=ResilienceConfig(
            name="paymongo-test",
            base_url=PAYMONGO_BASE_URL,
            retry=retry or RetryPolicy(total=0),
            ratelimit=ratelimit,
        ),
    )


def _client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    config: PayMongoConfig | None = None,
    built: list[ResilientClient] | None = None,
) -> PayMongoCheckoutClient:
    transport = httpx.MockTransport(handler)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience, transport=transport)
        if built is not None:
            built.append(client)
        return client

    return PayMongoCheckoutClient(
        config=config or _config(),
        client_factory=factory,
        reference_factory=lambda: "vp-fixed",
    )


def _session_payload(reference_number: str | None = "vp-fixed") -> dict[str, object]:
    attributes: dict[str, object] = {"checkout_url": "https://checkout.paymongo.com/cs_1"}
    if reference_number is not None:
        attributes["reference_number"] = reference_number
    return {"data": {"id": "cs_1", "type": "checkout_session", "attributes": attributes}}


def test_build_checkout_body_carries_line_item_and_reference() -> None:
    body = build_checkout_body(
        CheckoutRequest(name="Gem Pack", amount=9900, quantity=2),
        config=_config(),
        reference_number="vp-1",
    )

    attributes = body["data"]["attributes"]
    assert attributes["line_items"] == [
        {"name": "Gem Pack", "quantity": 2, "amount": 9900, "currency": "PHP"}
    ]
    assert attributes["payment_method_types"] == ["gcash", "card"]
    assert attributes["reference_number"] == "vp-1"
    assert attributes["success_url"] == "https://paymongo.com"


def test_new_reference_numbers_are_unique() -> None:
    first = new_reference_number()

    assert first.startswith("vp-")
    assert first != new_reference_number()


def test_create_checkout_session_posts_with_basic_auth() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_session_payload())

    session = asyncio.run(
        _client(handler).create_checkout_session(CheckoutRequest(name="Gems", amount=5000))
    )

    assert session.session_id == "cs_1"
    assert session.checkout_url == "https://checkout.paymongo.com/cs_1"
    assert session.reference_id == "vp-fixed"

    (request,) = seen
    assert request.method == "POST"
    assert str(request.url) == f"{PAYMONGO_BASE_URL}/checkout_sessions"
    expected = base64.b64encode(b"sk_test_123:").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"
    sent = json.loads(request.content)
    assert sent["data"]["attributes"]["reference_number"] == "vp-fixed"


def test_missing_reference_in_response_falls_back_to_generated_one() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_session_payload(reference_number=None))

    session = asyncio.run(
        _client(handler).create_checkout_session(CheckoutRequest(name="Gems", amount=5000))
    )

    assert session.reference_id == "vp-fixed"


def test_provider_error_is_raised_with_status_and_body() -> None:
    error_body = {"errors": [{"code": "parameter_invalid", "detail": "amount is too low"}]}

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json=error_body)

    with pytest.raises(CheckoutError) as exc_info:
        asyncio.run(_client(handler).create_checkout_session(CheckoutRequest(name="x", amount=1)))

    assert exc_info.value.status_code == 400
    assert exc_info.value.payload == error_body


def test_transport_failure_is_raised_without_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CheckoutError) as exc_info:
        asyncio.run(
            _client(handler).create_checkout_session(CheckoutRequest(name="x", amount=5000))
        )

    assert exc_info.value.status_code is None


def test_unexpected_success_body_is_a_bad_gateway() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"id": "cs_1"}})

    with pytest.raises(CheckoutError) as exc_info:
        asyncio.run(
            _client(handler).create_checkout_session(CheckoutRequest(name="x", amount=5000))
        )

    assert exc_info.value.status_code == 502


def test_rate_limited_post_is_retried_after_retry_after() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if len(seen) == 1:
            return httpx.Response(429, headers={"Retry-After": "0"}, json={"errors": []})
        return httpx.Response(200, json=_session_payload())

    client = _client(handler, config=_config(charge_safe_policy(backoff_factor=0)))
    session = asyncio.run(client.create_checkout_session(CheckoutRequest(name="x", amount=5000)))

    assert session.session_id == "cs_1"
    assert len(seen) == 2
    assert seen[0].content == seen[1].content


def test_refused_connection_is_retried() -> None:
    attempts: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=_session_payload())

    client = _client(handler, config=_config(charge_safe_policy(backoff_factor=0)))
    session = asyncio.run(client.create_checkout_session(CheckoutRequest(name="x", amount=5000)))

    assert session.session_id == "cs_1"
    assert len(attempts) == 2


def test_server_error_on_checkout_is_not_retried() -> None:
    attempts: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(503, json={"errors": [{"code": "unavailable"}]})

    client = _client(handler, config=_config(charge_safe_policy(backoff_factor=0)))
    with pytest.raises(CheckoutError) as exc_info:
        asyncio.run(client.create_checkout_session(CheckoutRequest(name="x", amount=5000)))

    assert exc_info.value.status_code == 503
    assert len(attempts) == 1


def test_exhausted_rate_limit_retries_surface_the_last_429() -> None:
    attempts: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(429, headers={"Retry-After": "0"}, json={"errors": ["slow down"]})

    client = _client(handler, config=_config(charge_safe_policy(total=2, backoff_factor=0)))
    with pytest.raises(CheckoutError) as exc_info:
        asyncio.run(client.create_checkout_session(CheckoutRequest(name="x", amount=5000)))

    assert exc_info.value.status_code == 429
    assert exc_info.value.payload == {"errors": ["slow down"]}
    assert len(attempts) == 3


def test_calls_share_one_client_and_rate_limiter() -> None:
    built: list[ResilientClient] = []

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_session_payload())

    client = _client(
        handler,
        config=_config(ratelimit=RateLimit(max_calls=1, per_seconds=0.2)),
        built=built,
    )

    async def two_checkouts() -> float:
        loop = asyncio.get_running_loop()
        started = loop.time()
        await client.create_checkout_session(CheckoutRequest(name="x", amount=5000))
        await client.create_checkout_session(CheckoutRequest(name="y", amount=5000))
        elapsed = loop.time() - started
        await client.aclose()
        return elapsed

    elapsed = asyncio.run(two_checkouts())

    [http_client] = built
    assert http_client.limiter is not None
    assert http_client.is_closed
    assert elapsed >= 0.1


def test_closed_client_is_rebuilt_on_next_call() -> None:
    built: list[ResilientClient] = []

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_session_payload())

    client = _client(handler, built=built)

    async def checkout_close_checkout() -> None:
        await client.create_checkout_session(CheckoutRequest(name="x", amount=5000))
        await client.aclose()
        await client.create_checkout_session(CheckoutRequest(name="x", amount=5000))
        await client.aclose()

    asyncio.run(checkout_close_checkout())

    assert len(built) == 2
    assert all(http_client.is_closed for http_client in built)
