"""Balance Ledger — owns a buyer's deposit balance: deposit, debit, reset.

Invariants:
    - Every mutation locks the account row (SELECT ... FOR UPDATE) before read-modify-write
    - Balance never goes below 0: debit refuses, the CHECK constraint backs it up
    - Every mutation is flushed before returning; the route owns commit
    - Only BUYER accounts have a ledger balance

Design Decisions:
    - Row lock plus version_id_col: the lock serializes writers on PostgreSQL, the
      version counter catches lost updates on backends that ignore FOR UPDATE (SQLite)
    - Ledger does NOT call db.commit(): one request, one transaction
"""

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vending.core.coins import validate_coins
from vending.core.domain_types import Cents, Role, UserId
from vending.core.enforce_ownership import assert_role
from vending.core.errors import (
    ErrorContext, InsufficientFundsError, ResourceNotFoundError,
)
from vending.infrastructure.database import flush_changes
from vending.models.user import User

logger = logging.getLogger(__name__)


class BalanceLedger:
    """Deposit balance operations for one request's transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def balance(self, buyer_id: UserId) -> Cents:
        """Current balance, read under the row lock."""
        buyer = await self._lock_buyer(buyer_id)
        return Cents(buyer.deposit)

    async def deposit(self, buyer_id: UserId, coins: Sequence[int]) -> Cents:
        """Credit the sum of coins. Coins are expected pre-validated."""
        validate_coins(coins)
        buyer = await self._lock_buyer(buyer_id)
        buyer.deposit = buyer.deposit + sum(coins)
        await flush_changes(self.db, "deposit")
        logger.info(
            "Deposit credited",
            extra={"user_id": str(buyer_id), "balance": buyer.deposit},
        )
        return Cents(buyer.deposit)

    async def debit(self, buyer_id: UserId, amount: Cents) -> Cents:
        """Subtract amount. Callers run the strict sufficiency check first."""
        if amount < 0:
            raise ValueError(f"debit amount must be >= 0, got {amount}")
        buyer = await self._lock_buyer(buyer_id)
        if buyer.deposit - amount < 0:
            raise InsufficientFundsError(
                buyer.deposit, amount, ErrorContext(user_id=str(buyer_id)),
            )
        buyer.deposit = buyer.deposit - amount
        await flush_changes(self.db, "debit")
        logger.info(
            "Balance debited",
            extra={"user_id": str(buyer_id), "balance": buyer.deposit},
        )
        return Cents(buyer.deposit)

    async def reset(self, buyer_id: UserId) -> None:
        """Zero the balance unconditionally."""
        buyer = await self._lock_buyer(buyer_id)
        buyer.deposit = 0
        await flush_changes(self.db, "reset")
        logger.info("Balance reset", extra={"user_id": str(buyer_id)})

    async def _lock_buyer(self, buyer_id: UserId) -> User:
        result = await self.db.execute(
            select(User)
            .where(User.id == buyer_id)
            .with_for_update()
            .execution_options(populate_existing=True),
        )
        buyer = result.scalar_one_or_none()
        if not buyer:
            raise ResourceNotFoundError(
                "User", str(buyer_id), ErrorContext(user_id=str(buyer_id)),
            )
        assert_role(buyer.role, Role.BUYER)
        return buyer
