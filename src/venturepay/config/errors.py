"""Errors raised while reading settings from the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but cannot be used."""


class MissingConfigurationError(ConfigurationError):
    """One or more required settings are unset or blank."""
