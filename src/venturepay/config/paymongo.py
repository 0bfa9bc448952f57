"""PayMongo configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, charge_safe_policy

PAYMONGO_BASE_URL = "https://api.paymongo.com/v1"
PAYMONGO_TIMEOUT_SECONDS = 15.0
DEFAULT_REDIRECT_URL = "https://paymongo.com"
DEFAULT_CURRENCY = "PHP"
DEFAULT_LINE_ITEM_NAME = "GCash Purchase"
DEFAULT_AMOUNT_CENTAVOS = 5000
DEFAULT_PAYMENT_METHOD_TYPES = ("gcash", "card")


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="paymongo",
        base_url=PAYMONGO_BASE_URL,
        timeout_seconds=PAYMONGO_TIMEOUT_SECONDS,
        retry=charge_safe_policy(),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )


@dataclass(frozen=True)
class PayMongoConfig:
    """Holds PayMongo API configuration values."""

    secret_key: str
    success_url: str = DEFAULT_REDIRECT_URL
    cancel_url: str = DEFAULT_REDIRECT_URL
    currency: str = DEFAULT_CURRENCY
    payment_method_types: tuple[str, ...] = DEFAULT_PAYMENT_METHOD_TYPES
    resilience: ResilienceConfig = field(default_factory=_default_resilience)


def get_paymongo_config(*, resilience: ResilienceConfig | None = None) -> PayMongoConfig:
    values = require_env_vars(("PAYMONGO_SECRET_KEY",))
    return PayMongoConfig(
        secret_key=values["PAYMONGO_SECRET_KEY"],
        success_url=os.getenv("PAYMONGO_SUCCESS_URL") or DEFAULT_REDIRECT_URL,
        cancel_url=os.getenv("PAYMONGO_CANCEL_URL") or DEFAULT_REDIRECT_URL,
        resilience=resilience or _default_resilience(),
    )
