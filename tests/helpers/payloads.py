"""Webhook bodies in the shapes PayMongo has been observed to send."""

from __future__ import annotations

from typing import Any


def simple_event(
    reference_id: str,
    event_type: str = "checkout_session.payment.paid",
    **attributes: Any,
) -> dict[str, Any]:
    return {"type": event_type, "data": {"id": reference_id, "attributes": dict(attributes)}}


def paymongo_event(
    *,
    event_type: str = "checkout_session.payment.paid",
    session_id: str = "cs_5d1c7a2b",
    reference_number: str | None = "vp-0123456789abcdef0123",
    intent_status: str | None = "succeeded",
) -> dict[str, Any]:
    """Real-world envelope: the resource sits under ``data.attributes.data``."""

    resource_attributes: dict[str, Any] = {"checkout_url": "https://checkout.paymongo.com/x"}
    if reference_number is not None:
        resource_attributes["reference_number"] = reference_number
    if intent_status is not None:
        resource_attributes["payment_intent"] = {
            "id": "pi_1",
            "type": "payment_intent",
            "attributes": {"status": intent_status},
        }
    return {
        "data": {
            "id": "evt_9a8b7c",
            "type": "event",
            "attributes": {
                "type": event_type,
                "livemode": False,
                "data": {
                    "id": session_id,
                    "type": "checkout_session",
                    "attributes": resource_attributes,
                },
            },
        }
    }
