"""Domain error taxonomy for webhook processing and checkout."""

from __future__ import annotations


class VenturePayError(RuntimeError):
    """Base class for expected, classified failures."""


class MalformedEventError(VenturePayError):
    """Payload cannot be turned into an actionable event; the provider must not retry."""


class TransactionNotFoundError(VenturePayError):
    """No transaction matches the reference id (yet); a later retry may succeed."""

    def __init__(self, reference_id: str) -> None:
        super().__init__(f"No transaction found for reference {reference_id!r}")
        self.reference_id = reference_id


class OfferNotFoundError(VenturePayError):
    def __init__(self, offer_id: str) -> None:
        super().__init__(f"Offer {offer_id!r} does not exist")
        self.offer_id = offer_id


class ItemNotFoundError(VenturePayError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item {item_id!r} does not exist")
        self.item_id = item_id


class StoreUnavailableError(VenturePayError):
    """Persistence failed; the whole request fails so the provider retries."""


class DuplicateGrantError(VenturePayError):
    """A reward category was already recorded as granted for this transaction."""


class CheckoutError(VenturePayError):
    """The payment provider rejected or failed a checkout-session request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: object | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class DeliveryError(VenturePayError):
    """A verification message could not be handed to the mail server."""
