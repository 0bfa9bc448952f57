"""Canonical payment event produced from heterogeneous provider payloads."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PaymentEvent:
    """Provider notification reduced to what reconciliation needs.

    ``provider_status`` is the normalized outcome: one of the ``PaymentOutcome``
    values, or a raw payment-intent status passed through verbatim.
    """

    event_type: str | None
    reference_id: str
    provider_status: str
    raw_status: str | None = None

    def __post_init__(self) -> None:
        if not self.reference_id:
            raise ValueError("PaymentEvent requires a non-empty reference id")
