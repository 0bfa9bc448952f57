"""Payment webhook handling: locate, reconcile and fulfill."""

from __future__ import annotations

from .fulfillment import (
    FulfillmentEngine,
    FulfillmentResult,
    Grant,
    GrantPlan,
    apply_grant,
    plan_grants,
)
from .locate import locate_transactions
from .processing import EventNormalizer, WebhookResult, process_payment_webhook
from .reconcile import apply_status, classify_outcome, should_fulfill

__all__ = [
    "EventNormalizer",
    "FulfillmentEngine",
    "FulfillmentResult",
    "Grant",
    "GrantPlan",
    "WebhookResult",
    "apply_grant",
    "apply_status",
    "classify_outcome",
    "locate_transactions",
    "plan_grants",
    "process_payment_webhook",
    "should_fulfill",
]
