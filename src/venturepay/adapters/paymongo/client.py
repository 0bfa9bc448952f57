"""HTTP client for creating PayMongo checkout sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import httpx
from pydantic import ValidationError

from venturepay.adapters.http_resilience import ResilienceConfig, ResilientClient
from venturepay.config.paymongo import (
    DEFAULT_AMOUNT_CENTAVOS,
    DEFAULT_LINE_ITEM_NAME,
    PayMongoConfig,
    get_paymongo_config,
)
from venturepay.domain.errors import CheckoutError
from venturepay.domain.ports.gateways import CheckoutGateway, CheckoutRequest, CheckoutSession

from .schema import CheckoutSessionResponse

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)

CHECKOUT_SESSIONS_PATH = "/checkout_sessions"


def new_reference_number() -> str:
    return f"vp-{uuid4().hex[:20]}"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def build_checkout_body(
    request: CheckoutRequest,
    *,
    config: PayMongoConfig,
    reference_number: str,
) -> dict[str, Any]:
    return {
        "data": {
            "attributes": {
                "line_items": [
                    {
                        "name": request.name or DEFAULT_LINE_ITEM_NAME,
                        "quantity": request.quantity,
                        "amount": request.amount or DEFAULT_AMOUNT_CENTAVOS,
                        "currency": config.currency,
                    }
                ],
                "payment_method_types": list(config.payment_method_types),
                "success_url": config.success_url,
                "cancel_url": config.cancel_url,
                "reference_number": reference_number,
            }
        }
    }


def _decode(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError:
        return response.text


@dataclass(slots=True)
class PayMongoCheckoutClient:
    """``CheckoutGateway`` backed by the PayMongo REST API.

    One ``ResilientClient`` is built on first use and shared by every later
    call, so the rate limit and connection pool span requests. Call
    ``aclose()`` when the application shuts down.
    """

    config: PayMongoConfig = field(default_factory=get_paymongo_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    reference_factory: Callable[[], str] = field(default=new_reference_number)
    _http: ResilientClient | None = field(default=None, init=False, repr=False)

    def http_client(self) -> ResilientClient:
        if self._http is None or self._http.is_closed:
            self._http = self.client_factory(self.config.resilience)
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def create_checkout_session(self, request: CheckoutRequest) -> CheckoutSession:
        reference_number = self.reference_factory()
        body = build_checkout_body(request, config=self.config, reference_number=reference_number)

        try:
            response = await self.http_client().post(
                CHECKOUT_SESSIONS_PATH,
                json=body,
                auth=(self.config.secret_key, ""),
            )
        except httpx.HTTPError as exc:
            log.exception("PayMongo checkout request failed")
            raise CheckoutError(f"PayMongo request failed: {exc}") from exc

        payload = _decode(response)
        if response.status_code >= httpx.codes.BAD_REQUEST:
            log.error("PayMongo API error %s: %s", response.status_code, payload)
            raise CheckoutError(
                "PayMongo rejected the checkout session",
                status_code=response.status_code,
                payload=payload,
            )

        try:
            parsed = CheckoutSessionResponse.model_validate(payload)
        except ValidationError as exc:
            raise CheckoutError(
                "Unexpected PayMongo checkout response",
                status_code=httpx.codes.BAD_GATEWAY,
                payload=payload,
            ) from exc

        session = CheckoutSession(
            session_id=parsed.data.id,
            checkout_url=parsed.data.attributes.checkout_url,
            reference_number=parsed.data.attributes.reference_number or reference_number,
        )
        log.info(
            "Created PayMongo checkout session %s (reference %s)",
            session.session_id,
            session.reference_id,
        )
        return session


if TYPE_CHECKING:
    _gateway_check: CheckoutGateway = PayMongoCheckoutClient()
