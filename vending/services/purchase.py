"""Purchase Orchestrator — sequences a buy request across the balance and stock ledgers.

Invariants:
    - Holds no state of its own: every number lives in a ledger
    - Any unresolved product aborts the whole request (ResourceNotFoundError)
    - Sufficiency is strict: balance must exceed each line cost
    - ATOMIC mode plans every line before the first mutation
    - PER_LINE mode checks and mutates line by line (inherited sequencing)
    - Change is computed from the buyer's balance AFTER all lines commit
    - Lock order is fixed: buyer row first, then distinct products sorted by id,
      whatever order the request lists them in

Design Decisions:
    - Depends on BalanceLedgerLike / StockLedgerLike protocols, so tests can drive it
      with in-memory fakes as well as the SQL-backed ledgers
    - PER_LINE still rolls back as a whole: the route commits only on success
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from vending.core.coins import CoinChange, calculate_change
from vending.core.domain_types import (
    Cents, ProductId, ProductSnapshot, PurchaseLine, PurchaseMode, UserId,
)
from vending.core.enforce_purchase import (
    check_sufficiency, line_cost, plan_purchase,
)
from vending.core.repository_protocols import BalanceLedgerLike, StockLedgerLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoughtProduct:
    """A fulfilled line: product as it stands after the purchase."""
    product: ProductSnapshot
    quantity: int
    cost: Cents


@dataclass
class PurchaseResult:
    bought_products: list[BoughtProduct] = field(default_factory=list)
    total_spent: Cents = Cents(0)
    changes: list[CoinChange] = field(default_factory=list)
    balance: Cents = Cents(0)


class PurchaseService:
    """Deposit, buy and reset for buyers."""

    def __init__(
        self,
        balances: BalanceLedgerLike,
        stock: StockLedgerLike,
        mode: PurchaseMode = PurchaseMode.ATOMIC,
        stock_guard: bool = True,
    ):
        self.balances = balances
        self.stock = stock
        self.mode = mode
        self.stock_guard = stock_guard

    async def deposit(self, buyer_id: UserId, coins: Sequence[int]) -> Cents:
        return await self.balances.deposit(buyer_id, coins)

    async def reset(self, buyer_id: UserId) -> None:
        await self.balances.reset(buyer_id)

    async def buy(
        self, buyer_id: UserId, lines: Sequence[PurchaseLine],
    ) -> PurchaseResult:
        """Buy every line or nothing. Returns bought products, total and change."""
        if self.mode == PurchaseMode.PER_LINE:
            bought = await self._buy_per_line(buyer_id, lines)
        else:
            bought = await self._buy_atomic(buyer_id, lines)

        balance = await self.balances.balance(buyer_id)
        result = PurchaseResult(
            bought_products=bought,
            total_spent=Cents(sum(b.cost for b in bought)),
            changes=calculate_change(balance),
            balance=balance,
        )
        logger.info(
            "Purchase committed",
            extra={
                "user_id": str(buyer_id),
                "total_spent": result.total_spent,
                "balance": balance,
            },
        )
        return result

    async def _lock_rows(
        self, buyer_id: UserId, lines: Sequence[PurchaseLine],
    ) -> tuple[Cents, dict[ProductId, ProductSnapshot]]:
        """Lock the buyer, then every distinct product in id order."""
        balance = await self.balances.balance(buyer_id)
        products = {}
        for product_id in sorted({line.product_id for line in lines}):
            products[product_id] = await self.stock.read(
                product_id, for_update=True,
            )
        return balance, products

    async def _buy_atomic(
        self, buyer_id: UserId, lines: Sequence[PurchaseLine],
    ) -> list[BoughtProduct]:
        """Resolve and plan every line, then apply debits and decrements."""
        balance, products = await self._lock_rows(buyer_id, lines)
        plan = plan_purchase(
            balance,
            [(products[line.product_id], line.amount) for line in lines],
            stock_guard=self.stock_guard,
            user_id=str(buyer_id),
        )
        logger.debug(
            "Purchase planned",
            extra={"user_id": str(buyer_id), "total_spent": plan.total_spent},
        )

        bought: list[BoughtProduct] = []
        for planned in plan.lines:
            await self.balances.debit(buyer_id, planned.cost)
            snapshot = await self.stock.decrement(
                planned.product.id, planned.amount,
            )
            bought.append(BoughtProduct(snapshot, planned.amount, planned.cost))
        return bought

    async def _buy_per_line(
        self, buyer_id: UserId, lines: Sequence[PurchaseLine],
    ) -> list[BoughtProduct]:
        """Check and commit each line before looking at the next one."""
        await self._lock_rows(buyer_id, lines)
        bought: list[BoughtProduct] = []
        for line in lines:
            # Rows are already locked; re-read for the running stock
            product = await self.stock.read(line.product_id)
            cost = line_cost(product, line.amount)
            check_sufficiency(
                await self.balances.balance(buyer_id), cost, str(buyer_id),
            )
            await self.balances.debit(buyer_id, cost)
            snapshot = await self.stock.decrement(product.id, line.amount)
            bought.append(BoughtProduct(snapshot, line.amount, cost))
        return bought
