"""Ports for outbound collaborators: the payment provider and mail delivery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class CheckoutRequest:
    name: str
    amount: int
    quantity: int = 1


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """Provider response for a created checkout session."""

    session_id: str
    checkout_url: str
    reference_number: str | None = None

    @property
    def reference_id(self) -> str:
        return self.reference_number or self.session_id


@runtime_checkable
class CheckoutGateway(Protocol):
    """Creates hosted checkout sessions at the payment provider."""

    async def create_checkout_session(self, request: CheckoutRequest) -> CheckoutSession: ...


@runtime_checkable
class VerificationSender(Protocol):
    """Delivers a verification code to an email address."""

    def send_code(self, email: str, code: str) -> None: ...
