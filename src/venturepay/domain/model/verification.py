"""Expiring verification codes shared by every server instance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class VerificationCode:
    subject: str
    email: str
    code_hash: str
    created_at: datetime
    expires_at: datetime
    attempts: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
