"""Match payment events to recorded transactions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from venturepay.domain.errors import TransactionNotFoundError

if TYPE_CHECKING:
    from venturepay.domain.model import Transaction
    from venturepay.domain.ports.persistence import TransactionRepository

log = getLogger(__name__)


def locate_transactions(reference_id: str, repository: TransactionRepository) -> list[Transaction]:
    """Return every transaction recorded under ``reference_id``.

    Reference ids are unique, so more than one match is a data-integrity problem;
    it is logged and each match is still returned for independent processing.
    """

    matches = repository.find_by_reference(reference_id)
    if not matches:
        raise TransactionNotFoundError(reference_id)
    if len(matches) > 1:
        log.warning(
            "Reference %s matches %s transactions; processing each independently",
            reference_id,
            len(matches),
        )
    return matches
