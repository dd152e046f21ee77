"""Purchase Enforcement — pure sufficiency, stock and planning rules for buy requests.

Invariants:
    - Sufficiency is STRICT: balance must exceed the line cost (equality is rejected)
    - plan_purchase is PURE: replays every line against a running balance and running
      stock, raises on the first failing line, never mutates anything
    - Lines are evaluated in request order; the first failure wins

Design Decisions:
    - Strict `>` kept from the inherited behaviour: a buyer can never spend down to 0
    - Planning is separated from mutation so the atomic purchase mode can reject a
      request before any ledger is touched
"""

from dataclasses import dataclass, field

from vending.core.domain_types import Cents, ProductId, ProductSnapshot
from vending.core.errors import (
    ErrorContext, InsufficientFundsError, OutOfStockError,
)


@dataclass(frozen=True)
class PlannedLine:
    """A resolved line with its computed cost."""
    product: ProductSnapshot
    amount: int
    cost: Cents


@dataclass
class PurchasePlan:
    """Every line of a buy request, validated and costed."""
    lines: list[PlannedLine] = field(default_factory=list)

    @property
    def total_spent(self) -> Cents:
        return Cents(sum(line.cost for line in self.lines))


def line_cost(product: ProductSnapshot, amount: int) -> Cents:
    """Unit cost times requested quantity."""
    return Cents(product.cost * amount)


def check_sufficiency(balance: int, price: int, user_id: str | None = None) -> None:
    """Raise InsufficientFundsError unless balance > price."""
    if not balance > price:
        raise InsufficientFundsError(
            balance, price, ErrorContext(user_id=user_id),
        )


def check_stock(product: ProductSnapshot, available: int, requested: int) -> None:
    """Raise OutOfStockError when fewer units remain than requested."""
    if available < requested:
        raise OutOfStockError(
            available, requested, ErrorContext(product_id=str(product.id)),
        )


def plan_purchase(
    balance: int,
    resolved: list[tuple[ProductSnapshot, int]],
    stock_guard: bool = True,
    user_id: str | None = None,
) -> PurchasePlan:
    """Dry-run a buy request line by line. Pure — raises on the first failing line."""
    plan = PurchasePlan()
    running_balance = balance
    remaining_stock: dict[ProductId, int] = {}

    for product, amount in resolved:
        cost = line_cost(product, amount)
        check_sufficiency(running_balance, cost, user_id)

        if stock_guard:
            available = remaining_stock.get(product.id, product.amount)
            check_stock(product, available, amount)
            remaining_stock[product.id] = available - amount

        running_balance -= cost
        plan.lines.append(PlannedLine(product=product, amount=amount, cost=cost))

    return plan
