"""Purchase Orchestrator — buy/deposit/reset across both ledgers.

Invariants:
    - Buy debits the balance, decrements stock and returns change for the new balance
    - Strict sufficiency: a line cost equal to the balance is rejected
    - Unknown products abort the whole request
    - ATOMIC mode mutates nothing when any line fails
    - PER_LINE mode applies earlier lines before a later one fails (session-level)
"""

from uuid import uuid4

import pytest

from vending.core.coins import CoinChange
from vending.core.domain_types import (
    ProductId, ProductSnapshot, PurchaseLine, PurchaseMode, Role, UserId,
)
from vending.core.errors import (
    InsufficientFundsError, OutOfStockError, ResourceNotFoundError,
)
from vending.models.product import Product
from vending.models.user import User
from vending.services.balance_ledger import BalanceLedger
from vending.services.purchase import PurchaseService
from vending.services.stock_ledger import ProductStockLedger


def _service(db, mode=PurchaseMode.ATOMIC) -> PurchaseService:
    return PurchaseService(
        BalanceLedger(db), ProductStockLedger(db), mode=mode,
    )


# ─── SQL-backed ledgers ──────────────────────────────────────────

async def test_buy_debits_decrements_and_returns_change(
    test_db, buyer, seller, make_product, fetch,
):
    product = await make_product(seller, cost=5, amount=100)

    result = await _service(test_db).buy(
        buyer.id, [PurchaseLine(product.id, 10)],
    )
    await test_db.commit()

    assert result.total_spent == 50
    assert result.balance == 950
    assert result.changes == [CoinChange(100, 9), CoinChange(50, 1)]
    assert result.bought_products[0].quantity == 10
    assert result.bought_products[0].product.amount == 90
    assert (await fetch(User, buyer.id)).deposit == 950
    assert (await fetch(Product, product.id)).amount == 90


@pytest.mark.parametrize("mode", list(PurchaseMode))
async def test_buy_rejects_cost_equal_to_balance(
    test_db, make_user, seller, make_product, fetch, mode,
):
    poor_buyer = await make_user(Role.BUYER, deposit=100)
    product = await make_product(seller, cost=100, amount=5)
    buyer_id, product_id = poor_buyer.id, product.id

    with pytest.raises(InsufficientFundsError):
        await _service(test_db, mode).buy(
            buyer_id, [PurchaseLine(product_id, 1)],
        )
    await test_db.rollback()

    assert (await fetch(User, buyer_id)).deposit == 100
    assert (await fetch(Product, product_id)).amount == 5


async def test_buy_unknown_product(test_db, buyer):
    with pytest.raises(ResourceNotFoundError):
        await _service(test_db).buy(buyer.id, [PurchaseLine(uuid4(), 1)])


async def test_buy_unknown_product_after_valid_line_aborts_atomically(
    test_db, buyer, seller, make_product,
):
    product = await make_product(seller, cost=5, amount=100)
    with pytest.raises(ResourceNotFoundError):
        await _service(test_db).buy(
            buyer.id,
            [PurchaseLine(product.id, 1), PurchaseLine(uuid4(), 1)],
        )
    assert buyer.deposit == 1000
    assert product.amount == 100


async def test_atomic_mode_mutates_nothing_when_a_later_line_fails(
    test_db, buyer, seller, make_product,
):
    cheap = await make_product(seller, cost=100, amount=10, name="Chips")
    pricey = await make_product(seller, cost=950, amount=10, name="Watch")

    with pytest.raises(InsufficientFundsError):
        await _service(test_db).buy(
            buyer.id,
            [PurchaseLine(cheap.id, 1), PurchaseLine(pricey.id, 1)],
        )

    # Same session: nothing was applied before the plan failed
    assert buyer.deposit == 1000
    assert cheap.amount == 10


async def test_per_line_mode_applies_earlier_lines_until_rollback(
    test_db, buyer, seller, make_product, fetch,
):
    cheap = await make_product(seller, cost=100, amount=10, name="Chips")
    pricey = await make_product(seller, cost=950, amount=10, name="Watch")
    buyer_id, cheap_id = buyer.id, cheap.id

    with pytest.raises(InsufficientFundsError):
        await _service(test_db, PurchaseMode.PER_LINE).buy(
            buyer.id,
            [PurchaseLine(cheap.id, 1), PurchaseLine(pricey.id, 1)],
        )
    assert buyer.deposit == 900
    assert cheap.amount == 9

    # Rollback expires every instance; only the saved ids are safe to use
    await test_db.rollback()
    assert (await fetch(User, buyer_id)).deposit == 1000
    assert (await fetch(Product, cheap_id)).amount == 10


async def test_buy_multiple_lines(test_db, buyer, seller, make_product):
    cola = await make_product(seller, cost=35, amount=10, name="Cola")
    chips = await make_product(seller, cost=20, amount=10, name="Chips")

    result = await _service(test_db).buy(
        buyer.id, [PurchaseLine(cola.id, 2), PurchaseLine(chips.id, 3)],
    )

    assert result.total_spent == 130
    assert result.balance == 870
    assert result.changes == [
        CoinChange(100, 8), CoinChange(50, 1), CoinChange(20, 1),
    ]
    assert [b.cost for b in result.bought_products] == [70, 60]


async def test_buy_out_of_stock(test_db, buyer, seller, make_product):
    product = await make_product(seller, cost=5, amount=1)
    with pytest.raises(OutOfStockError):
        await _service(test_db).buy(buyer.id, [PurchaseLine(product.id, 2)])
    assert buyer.deposit == 1000


async def test_deposit_and_reset_delegate_to_balance_ledger(
    test_db, buyer, fetch,
):
    service = _service(test_db)
    assert await service.deposit(buyer.id, [5, 10, 20, 50, 100]) == 1185
    await service.reset(buyer.id)
    await test_db.commit()
    assert (await fetch(User, buyer.id)).deposit == 0


# ─── Protocol fakes ──────────────────────────────────────────────

class _FakeBalances:
    def __init__(self, balance: int, locks: list | None = None):
        self.value = balance
        self.log: list[tuple] = []
        self.locks = locks if locks is not None else []

    async def balance(self, buyer_id):
        self.locks.append("buyer")
        return self.value

    async def deposit(self, buyer_id, coins):
        self.value += sum(coins)
        return self.value

    async def debit(self, buyer_id, amount):
        self.log.append(("debit", amount))
        self.value -= amount
        return self.value

    async def reset(self, buyer_id):
        self.value = 0


class _FakeStock:
    def __init__(self, products: list[ProductSnapshot], locks: list | None = None):
        self.products = {p.id: p for p in products}
        self.log: list[tuple] = []
        self.locks = locks if locks is not None else []

    async def read(self, product_id, for_update=False):
        if for_update:
            self.locks.append(product_id)
        if product_id not in self.products:
            raise ResourceNotFoundError("Product", str(product_id))
        return self.products[product_id]

    async def decrement(self, product_id, quantity):
        self.log.append(("decrement", quantity))
        p = self.products[product_id]
        self.products[product_id] = ProductSnapshot(
            p.id, p.name, p.cost, p.amount - quantity, p.description, p.seller_id,
        )
        return self.products[product_id]


def _snapshot(cost: int, amount: int = 10) -> ProductSnapshot:
    return ProductSnapshot(
        ProductId(uuid4()), "Item", cost, amount, None, UserId(uuid4()),
    )


async def test_atomic_mode_never_touches_ledgers_on_failed_plan():
    a, b = _snapshot(cost=10), _snapshot(cost=500)
    balances, stock = _FakeBalances(400), _FakeStock([a, b])
    service = PurchaseService(balances, stock, mode=PurchaseMode.ATOMIC)

    with pytest.raises(InsufficientFundsError):
        await service.buy(
            UserId(uuid4()), [PurchaseLine(a.id, 1), PurchaseLine(b.id, 1)],
        )
    assert balances.log == []
    assert stock.log == []


async def test_per_line_mode_commits_first_line_before_failing():
    a, b = _snapshot(cost=10), _snapshot(cost=500)
    balances, stock = _FakeBalances(400), _FakeStock([a, b])
    service = PurchaseService(balances, stock, mode=PurchaseMode.PER_LINE)

    with pytest.raises(InsufficientFundsError):
        await service.buy(
            UserId(uuid4()), [PurchaseLine(a.id, 1), PurchaseLine(b.id, 1)],
        )
    assert balances.log == [("debit", 10)]
    assert stock.log == [("decrement", 1)]


async def test_empty_request_returns_change_for_whole_balance():
    service = PurchaseService(_FakeBalances(185), _FakeStock([]))
    result = await service.buy(UserId(uuid4()), [])
    assert result.total_spent == 0
    assert result.bought_products == []
    assert [c.coin for c in result.changes] == [100, 50, 20, 10, 5]


async def _lock_order(mode: PurchaseMode, products, order) -> list:
    locks: list = []
    service = PurchaseService(
        _FakeBalances(1000, locks), _FakeStock(products, locks), mode=mode,
    )
    await service.buy(
        UserId(uuid4()), [PurchaseLine(p.id, 1) for p in order],
    )
    return locks


@pytest.mark.parametrize("mode", list(PurchaseMode))
async def test_rows_lock_in_the_same_order_whatever_the_request_order(mode):
    a, b = _snapshot(cost=10), _snapshot(cost=20)
    first, second = sorted([a, b], key=lambda p: p.id)

    forward = await _lock_order(mode, [a, b], [a, b])
    backward = await _lock_order(mode, [a, b], [b, a])

    assert forward[:3] == ["buyer", first.id, second.id]
    assert backward[:3] == forward[:3]


async def test_repeated_product_is_locked_once():
    a = _snapshot(cost=10)
    locks = await _lock_order(PurchaseMode.ATOMIC, [a], [a, a])
    assert locks.count(a.id) == 1
