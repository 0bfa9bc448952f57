"""Public interface for the PayMongo adapter."""

from __future__ import annotations

from .client import PayMongoCheckoutClient, build_checkout_body, new_reference_number
from .schema import CheckoutSessionResponse, WebhookEnvelope
from .translator import classify_event, parse_payment_event

__all__ = [
    "CheckoutSessionResponse",
    "PayMongoCheckoutClient",
    "WebhookEnvelope",
    "build_checkout_body",
    "classify_event",
    "new_reference_number",
    "parse_payment_event",
]
