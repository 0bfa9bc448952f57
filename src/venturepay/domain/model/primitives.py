"""Domain primitives: scalar aliases and the clock."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

type UserId = str
type OfferId = str
type ItemId = str
type ReferenceId = str

type Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)
