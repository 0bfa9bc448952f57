"""FastAPI application: PayMongo checkout and webhooks, email verification."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from functools import cache
from logging import getLogger
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from venturepay import __version__
from venturepay.adapters.mail import SmtpVerificationSender
from venturepay.adapters.paymongo import PayMongoCheckoutClient
from venturepay.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyShopUnitOfWork,
    SqlAlchemyVerificationUnitOfWork,
)
from venturepay.app import ensure_started, handle_payment_webhook
from venturepay.config import get_fulfillment_config, get_verification_config
from venturepay.config.paymongo import (
    DEFAULT_AMOUNT_CENTAVOS,
    DEFAULT_CURRENCY,
    DEFAULT_LINE_ITEM_NAME,
)
from venturepay.domain.checkout import record_checkout_transaction
from venturepay.domain.errors import CheckoutError, DeliveryError, StoreUnavailableError
from venturepay.domain.model import VerificationResult, WebhookOutcome, utc_now
from venturepay.domain.ports.gateways import CheckoutRequest
from venturepay.domain.verification import issue_code, verify_code

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from venturepay.config import FulfillmentConfig, VerificationConfig
    from venturepay.domain.model import Clock
    from venturepay.domain.ports.gateways import CheckoutGateway, VerificationSender
    from venturepay.domain.ports.unit_of_work import ShopUnitOfWork, VerificationUnitOfWork

log = getLogger(__name__)

WEBHOOK_STATUS_CODES: dict[WebhookOutcome, int] = {
    WebhookOutcome.PROCESSED: 200,
    WebhookOutcome.MALFORMED: 400,
    WebhookOutcome.NOT_FOUND: 404,
}

VERIFICATION_RESPONSES: dict[VerificationResult, tuple[int, str]] = {
    VerificationResult.VERIFIED: (200, "Email verified!"),
    VerificationResult.NOT_FOUND: (400, "No code found."),
    VerificationResult.INVALID: (400, "Invalid code."),
    VerificationResult.EXPIRED: (400, "Code expired."),
    VerificationResult.TOO_MANY_ATTEMPTS: (429, "Too many attempts."),
}


class CheckoutBody(BaseModel):
    name: str | None = None
    amount: int | None = Field(default=None, gt=0)
    user_id: str | None = None
    offer_id: str | None = None
    quantity: int = Field(default=1, ge=1)


class SendVerificationBody(BaseModel):
    email: str | None = None
    user_id: str | None = None


class VerifyCodeBody(BaseModel):
    user_id: str | None = None
    code: str | int | None = None


def _store_unavailable(exc: StoreUnavailableError) -> JSONResponse:
    log.error("Store unavailable: %s", exc)
    return JSONResponse(status_code=500, content={"success": False, "error": "store unavailable"})


def create_app(
    *,
    shop_unit_of_work_factory: Callable[[], ShopUnitOfWork] | None = None,
    verification_unit_of_work_factory: Callable[[], VerificationUnitOfWork] | None = None,
    checkout_gateway: CheckoutGateway | None = None,
    verification_sender: VerificationSender | None = None,
    fulfillment_config: FulfillmentConfig | None = None,
    verification_config: VerificationConfig | None = None,
    clock: Clock = utc_now,
) -> FastAPI:
    """Build the HTTP application.

    Collaborators default to the SQLAlchemy store, the PayMongo REST API and
    SMTP; the external ones are only constructed (and their settings read) on
    first use.
    """

    uses_default_store = (
        shop_unit_of_work_factory is None or verification_unit_of_work_factory is None
    )
    shop_uow = shop_unit_of_work_factory or SqlAlchemyShopUnitOfWork
    verification_uow = verification_unit_of_work_factory or SqlAlchemyVerificationUnitOfWork

    @cache
    def paymongo() -> PayMongoCheckoutClient:
        return PayMongoCheckoutClient()

    def gateway() -> CheckoutGateway:
        return checkout_gateway or paymongo()

    @cache
    def sender() -> VerificationSender:
        return verification_sender or SmtpVerificationSender()

    @cache
    def rewards() -> FulfillmentConfig:
        return fulfillment_config or get_fulfillment_config()

    @cache
    def verification() -> VerificationConfig:
        return verification_config or get_verification_config()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if uses_default_store:
            ensure_started()
        try:
            yield
        finally:
            if paymongo.cache_info().currsize:
                await paymongo().aclose()

    app = FastAPI(title="venturepay", version=__version__, lifespan=lifespan)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/paymongo/webhook")
    async def paymongo_webhook(request: Request) -> JSONResponse:
        body = await request.body()
        try:
            payload: object = json.loads(body) if body else None
        except ValueError:
            payload = None

        try:
            result = await run_in_threadpool(
                handle_payment_webhook,
                payload,
                unit_of_work_factory=shop_uow,
                config=rewards(),
                clock=clock,
            )
        except StoreUnavailableError as exc:
            return _store_unavailable(exc)

        content: dict[str, Any] = {
            "success": result.outcome is WebhookOutcome.PROCESSED,
            "outcome": result.outcome.value,
            "reference_id": result.reference_id,
            "event_type": result.event_type,
            "status": result.status.value if result.status is not None else None,
            "matched": result.matched,
            "fulfilled": result.fulfilled,
            "skipped": result.skipped,
        }
        if result.detail:
            content["message"] = result.detail
        return JSONResponse(status_code=WEBHOOK_STATUS_CODES[result.outcome], content=content)

    @app.post("/api/paymongo/checkout")
    async def paymongo_checkout(body: CheckoutBody) -> JSONResponse:
        checkout_request = CheckoutRequest(
            name=body.name or DEFAULT_LINE_ITEM_NAME,
            amount=body.amount or DEFAULT_AMOUNT_CENTAVOS,
            quantity=body.quantity,
        )
        try:
            session = await gateway().create_checkout_session(checkout_request)
        except CheckoutError as exc:
            if exc.status_code is not None and exc.status_code >= 400:
                return JSONResponse(
                    status_code=exc.status_code,
                    content={"success": False, "error": exc.payload},
                )
            log.error("Checkout creation failed: %s", exc)
            return JSONResponse(status_code=500, content={"success": False, "message": str(exc)})

        try:
            await run_in_threadpool(
                record_checkout_transaction,
                session,
                checkout_request,
                unit_of_work_factory=shop_uow,
                user_id=body.user_id,
                offer_id=body.offer_id,
                currency=DEFAULT_CURRENCY,
                clock=clock,
            )
        except StoreUnavailableError as exc:
            return _store_unavailable(exc)

        return JSONResponse(
            content={
                "success": True,
                "checkout_url": session.checkout_url,
                "reference_id": session.reference_id,
            }
        )

    @app.post("/api/send-verification")
    async def send_verification(body: SendVerificationBody) -> JSONResponse:
        if not body.email or not body.user_id:
            return JSONResponse(status_code=400, content={"error": "Missing email or user_id"})
        try:
            await run_in_threadpool(
                issue_code,
                subject=body.user_id,
                email=body.email,
                sender=sender(),
                unit_of_work_factory=verification_uow,
                ttl=verification().ttl,
                clock=clock,
            )
        except DeliveryError:
            return JSONResponse(
                status_code=500, content={"success": False, "error": "Failed to send email."}
            )
        except StoreUnavailableError as exc:
            return _store_unavailable(exc)
        return JSONResponse(content={"success": True, "message": "Verification email sent."})

    @app.post("/api/verify-code")
    async def verify_verification_code(body: VerifyCodeBody) -> JSONResponse:
        if not body.user_id or body.code is None or not str(body.code).strip():
            return JSONResponse(
                status_code=400, content={"success": False, "message": "Missing user_id or code."}
            )
        try:
            result = await run_in_threadpool(
                verify_code,
                subject=body.user_id,
                code=str(body.code),
                unit_of_work_factory=verification_uow,
                max_attempts=verification().max_attempts,
                clock=clock,
            )
        except StoreUnavailableError as exc:
            return _store_unavailable(exc)
        status_code, message = VERIFICATION_RESPONSES[result]
        return JSONResponse(
            status_code=status_code,
            content={"success": result is VerificationResult.VERIFIED, "message": message},
        )

    return app
