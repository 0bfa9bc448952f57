"""Application configuration helpers."""

from __future__ import annotations

from .env import env_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy, charge_safe_policy
from .logging import configure_logging
from .mail import MailConfig, get_mail_config
from .paymongo import PayMongoConfig, get_paymongo_config
from .rewards import (
    FulfillmentConfig,
    VerificationConfig,
    get_fulfillment_config,
    get_verification_config,
)
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "FulfillmentConfig",
    "MailConfig",
    "MissingConfigurationError",
    "PayMongoConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "VerificationConfig",
    "charge_safe_policy",
    "configure_logging",
    "env_int",
    "get_database_config",
    "get_database_uri",
    "get_fulfillment_config",
    "get_mail_config",
    "get_paymongo_config",
    "get_storage_config",
    "get_verification_config",
    "require_env_vars",
]
