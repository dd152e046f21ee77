"""Boundary Protocols — contracts between the purchase core and the ledgers.

Invariants:
    - PurchaseService depends on these Protocols, not on the concrete ledgers
    - Implementations own their rows; callers only see ids, ints and snapshots

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO, the pure planning rules they feed
      (core/enforce_purchase.py) are never async themselves
"""

from typing import Protocol, Sequence

from vending.core.domain_types import Cents, ProductId, ProductSnapshot, UserId


class BalanceLedgerLike(Protocol):
    """Contract for a buyer's deposit balance."""
    async def balance(self, buyer_id: UserId) -> Cents: ...
    async def deposit(self, buyer_id: UserId, coins: Sequence[int]) -> Cents: ...
    async def debit(self, buyer_id: UserId, amount: Cents) -> Cents: ...
    async def reset(self, buyer_id: UserId) -> None: ...


class StockLedgerLike(Protocol):
    """Contract for a product's available quantity."""
    async def read(
        self, product_id: ProductId, for_update: bool = False,
    ) -> ProductSnapshot: ...
    async def decrement(
        self, product_id: ProductId, quantity: int,
    ) -> ProductSnapshot: ...
