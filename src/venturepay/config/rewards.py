"""Reward fulfillment and verification defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import env_int

DEFAULT_MAX_HEARTS = 5
DEFAULT_VERIFICATION_TTL_SECONDS = 600
DEFAULT_VERIFICATION_MAX_ATTEMPTS = 5


@dataclass(frozen=True, slots=True)
class FulfillmentConfig:
    max_hearts: int = DEFAULT_MAX_HEARTS


@dataclass(frozen=True, slots=True)
class VerificationConfig:
    ttl_seconds: int = DEFAULT_VERIFICATION_TTL_SECONDS
    max_attempts: int = DEFAULT_VERIFICATION_MAX_ATTEMPTS

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)


def get_fulfillment_config() -> FulfillmentConfig:
    return FulfillmentConfig(max_hearts=env_int("VENTUREPAY_MAX_HEARTS", DEFAULT_MAX_HEARTS))


def get_verification_config() -> VerificationConfig:
    return VerificationConfig(
        ttl_seconds=env_int("VENTUREPAY_VERIFICATION_TTL", DEFAULT_VERIFICATION_TTL_SECONDS),
        max_attempts=env_int(
            "VENTUREPAY_VERIFICATION_MAX_ATTEMPTS", DEFAULT_VERIFICATION_MAX_ATTEMPTS
        ),
    )
