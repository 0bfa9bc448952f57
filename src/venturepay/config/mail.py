"""Outbound mail configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import env_int, require_env_vars

DEFAULT_SMTP_HOST = "smtp.gmail.com"
DEFAULT_SMTP_PORT = 587
DEFAULT_SENDER_NAME = "Game Support"


@dataclass(frozen=True, slots=True)
class MailConfig:
    user: str
    password: str
    host: str = DEFAULT_SMTP_HOST
    port: int = DEFAULT_SMTP_PORT
    sender_name: str = DEFAULT_SENDER_NAME

    @property
    def sender(self) -> str:
        return f'"{self.sender_name}" <{self.user}>'


def get_mail_config() -> MailConfig:
    values = require_env_vars(("SMTP_USER", "SMTP_PASSWORD"))
    return MailConfig(
        user=values["SMTP_USER"],
        password=values["SMTP_PASSWORD"],
        host=(os.getenv("SMTP_HOST") or "").strip() or DEFAULT_SMTP_HOST,
        port=env_int("SMTP_PORT", DEFAULT_SMTP_PORT),
    )
