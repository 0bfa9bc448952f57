"""SQLAlchemy adapter package for venturepay."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyFulfillmentRecordRepository,
    SqlAlchemyItemRepository,
    SqlAlchemyOfferRepository,
    SqlAlchemyPlayerInventoryRepository,
    SqlAlchemyPlayerUIStateRepository,
    SqlAlchemyTransactionRepository,
    SqlAlchemyVerificationCodeRepository,
)
from .unit_of_work import (
    SqlAlchemyShopUnitOfWork,
    SqlAlchemyVerificationUnitOfWork,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyFulfillmentRecordRepository",
    "SqlAlchemyItemRepository",
    "SqlAlchemyOfferRepository",
    "SqlAlchemyPlayerInventoryRepository",
    "SqlAlchemyPlayerUIStateRepository",
    "SqlAlchemyShopUnitOfWork",
    "SqlAlchemyTransactionRepository",
    "SqlAlchemyVerificationCodeRepository",
    "SqlAlchemyVerificationUnitOfWork",
    "mapper_registry",
    "shutdown",
    "startup",
    "start_mappers",
]
