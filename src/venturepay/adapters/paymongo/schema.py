"""Pydantic models describing the PayMongo payloads we consume."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _identifier(value: object) -> object:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _blank_to_none(value)


class PayMongoBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EventData(PayMongoBaseModel):
    """The ``data`` member of a webhook envelope; ``attributes`` must be present."""

    id: str | None = None
    attributes: dict[str, Any]

    _normalize_id = field_validator("id", mode="before")(_identifier)


def _type_tag(value: object) -> object:
    # Anything but a string is an unrecognised tag, not a malformed envelope.
    if not isinstance(value, str):
        return None
    return _blank_to_none(value)


class WebhookEnvelope(PayMongoBaseModel):
    type: str | None = None
    data: EventData

    _normalize_type = field_validator("type", mode="before")(_type_tag)


class CheckoutSessionAttributes(PayMongoBaseModel):
    checkout_url: str
    reference_number: str | None = None

    _normalize_reference = field_validator("reference_number", mode="before")(_blank_to_none)


class CheckoutSessionData(PayMongoBaseModel):
    id: str
    attributes: CheckoutSessionAttributes


class CheckoutSessionResponse(PayMongoBaseModel):
    data: CheckoutSessionData
