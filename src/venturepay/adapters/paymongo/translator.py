"""Translate PayMongo webhook payloads into canonical payment events.

PayMongo has emitted several envelope shapes for equivalent outcomes
(session-level, payment-level, payment-intent-nested). Every lookup here is an
ordered tuple of attribute paths so a new shape is a one-line addition.
"""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final, cast

from pydantic import ValidationError

from venturepay.domain.errors import MalformedEventError
from venturepay.domain.model import PaymentEvent, PaymentOutcome

from .schema import WebhookEnvelope

if TYPE_CHECKING:
    from .schema import EventData

log = getLogger(__name__)

type AttributePath = tuple[str, ...]

# Paths are relative to the envelope's ``data`` member; first non-empty value wins.
REFERENCE_ID_PATHS: Final[tuple[AttributePath, ...]] = (
    ("attributes", "reference_number"),
    ("attributes", "data", "attributes", "reference_number"),
    ("attributes", "checkout_session_id"),
    ("attributes", "data", "id"),
    ("id",),
)

EVENT_TYPE_PATHS: Final[tuple[AttributePath, ...]] = (("attributes", "type"),)

PAYMENT_INTENT_STATUS_PATHS: Final[tuple[AttributePath, ...]] = (
    ("attributes", "payment_intent", "attributes", "status"),
    ("attributes", "payment_intent", "status"),
    ("attributes", "data", "attributes", "payment_intent", "attributes", "status"),
)

EVENT_TYPE_OUTCOMES: Final[Mapping[str, PaymentOutcome]] = {
    "checkout_session.payment.paid": PaymentOutcome.PAID,
    "payment.paid": PaymentOutcome.PAID,
    "link.payment.paid": PaymentOutcome.PAID,
    "payment.failed": PaymentOutcome.FAILED,
    "payment.refunded": PaymentOutcome.REFUNDED,
}

PAYMENT_INTENT_SUCCEEDED: Final[str] = "succeeded"


def _lookup(document: Mapping[str, Any], path: AttributePath) -> str | None:
    node: object = document
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = cast(Mapping[str, object], node).get(key)
    if isinstance(node, int) and not isinstance(node, bool):
        return str(node)
    if isinstance(node, str):
        return node.strip() or None
    return None


def first_present(document: Mapping[str, Any], paths: tuple[AttributePath, ...]) -> str | None:
    for path in paths:
        value = _lookup(document, path)
        if value is not None:
            return value
    return None


def _as_document(data: EventData) -> dict[str, Any]:
    return {"id": data.id, "attributes": data.attributes}


def classify_event(event_type: str | None, payment_intent_status: str | None) -> str:
    """Return the normalized outcome for an event type, falling back to the intent status."""

    if event_type is not None and event_type in EVENT_TYPE_OUTCOMES:
        return EVENT_TYPE_OUTCOMES[event_type].value
    status = (payment_intent_status or "").strip()
    if not status:
        return PaymentOutcome.UNKNOWN.value
    if status.lower() == PAYMENT_INTENT_SUCCEEDED:
        return PaymentOutcome.PAID.value
    return status


def parse_envelope(payload: object) -> WebhookEnvelope:
    if isinstance(payload, WebhookEnvelope):
        return payload
    if not isinstance(payload, Mapping):
        raise MalformedEventError("Webhook payload must be a JSON object")
    try:
        return WebhookEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise MalformedEventError(f"Webhook payload is missing event data: {exc}") from exc


def parse_payment_event(payload: object) -> PaymentEvent:
    """Normalize a raw PayMongo webhook body into a ``PaymentEvent``.

    Raises ``MalformedEventError`` when the envelope lacks ``data.attributes`` or
    no reference identifier can be extracted.
    """

    envelope = parse_envelope(payload)
    document = _as_document(envelope.data)

    reference_id = first_present(document, REFERENCE_ID_PATHS)
    if reference_id is None:
        raise MalformedEventError("Webhook payload carries no reference identifier")

    event_type = envelope.type or first_present(document, EVENT_TYPE_PATHS)
    raw_status = first_present(document, PAYMENT_INTENT_STATUS_PATHS)
    provider_status = classify_event(event_type, raw_status)

    if event_type is not None and event_type not in EVENT_TYPE_OUTCOMES:
        log.info(
            "Unrecognised event type %s for %s, payment intent status %s -> %s",
            event_type,
            reference_id,
            raw_status,
            provider_status,
        )

    return PaymentEvent(
        event_type=event_type,
        reference_id=reference_id,
        provider_status=provider_status,
        raw_status=raw_status,
    )
