"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class TransactionStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    UNKNOWN = "unknown"


class PaymentOutcome(StrEnum):
    """Normalized provider outcomes recognised by the status reconciler."""

    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    UNKNOWN = "unknown"


class RewardCategory(StrEnum):
    """Closed set of reward kinds an item can grant."""

    GEM = "gem"
    HINT = "hint"
    STAMINA = "stamina"
    GENERIC = "generic"


class FulfillmentStatus(StrEnum):
    FULFILLED = "fulfilled"
    ALREADY_FULFILLED = "already_fulfilled"
    OFFER_NOT_FOUND = "offer_not_found"
    NOT_ELIGIBLE = "not_eligible"


class WebhookOutcome(StrEnum):
    PROCESSED = "processed"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"


class VerificationResult(StrEnum):
    VERIFIED = "verified"
    INVALID = "invalid"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
