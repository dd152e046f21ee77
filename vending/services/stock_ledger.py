"""Product Stock Ledger — owns product cost and quantity, plus seller-side CRUD.

Invariants:
    - read/read_all return ProductSnapshot (detached value objects), never ORM rows
    - decrement locks the product row and, with the stock guard on, refuses to go below 0
    - update/delete run assert_owner BEFORE any mutation
    - update applies only non-None fields (partial update)
    - seller_id is never changed after create

Design Decisions:
    - stock_guard flag preserves the inherited unchecked decrement as an option;
      with it off the amount >= 0 CHECK constraint still refuses a negative row
    - Ledger does NOT call db.commit(): the route owns the transaction boundary
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vending.core.domain_types import (
    Cents, ProductId, ProductSnapshot, Role, UserId,
)
from vending.core.enforce_ownership import assert_owner, assert_role
from vending.core.enforce_purchase import check_stock
from vending.core.errors import ErrorContext, ResourceNotFoundError
from vending.infrastructure.database import flush_changes
from vending.models.product import Product
from vending.models.user import User

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "cost", "amount", "description")


def to_snapshot(product: Product) -> ProductSnapshot:
    return ProductSnapshot(
        id=ProductId(product.id),
        name=product.name,
        cost=Cents(product.cost),
        amount=product.amount,
        description=product.description,
        seller_id=UserId(product.seller_id),
    )


class ProductStockLedger:
    """Product persistence and stock mutation for one request's transaction."""

    def __init__(self, db: AsyncSession, stock_guard: bool = True):
        self.db = db
        self.stock_guard = stock_guard

    async def create(
        self,
        seller_id: UserId,
        name: str,
        cost: int,
        amount: int,
        description: str | None = None,
    ) -> ProductSnapshot:
        """List a new product owned by seller_id."""
        result = await self.db.execute(select(User).where(User.id == seller_id))
        seller = result.scalar_one_or_none()
        if not seller:
            raise ResourceNotFoundError("User", str(seller_id))
        assert_role(seller.role, Role.SELLER)

        product = Product(
            seller_id=seller_id, name=name, cost=cost,
            amount=amount, description=description,
        )
        self.db.add(product)
        await flush_changes(self.db, "create_product")
        logger.info(
            "Product created",
            extra={"product_id": str(product.id), "user_id": str(seller_id)},
        )
        return to_snapshot(product)

    async def read(
        self, product_id: ProductId, for_update: bool = False,
    ) -> ProductSnapshot:
        """Snapshot of one product. Raises ResourceNotFoundError."""
        product = await self._get(product_id, for_update)
        return to_snapshot(product)

    async def read_all(self) -> list[ProductSnapshot]:
        result = await self.db.execute(select(Product).order_by(Product.name))
        return [to_snapshot(p) for p in result.scalars().all()]

    async def decrement(
        self, product_id: ProductId, quantity: int,
    ) -> ProductSnapshot:
        """Remove quantity units from stock."""
        if quantity < 0:
            raise ValueError(f"quantity must be >= 0, got {quantity}")
        product = await self._get(product_id, for_update=True)
        if self.stock_guard:
            check_stock(to_snapshot(product), product.amount, quantity)
        product.amount = product.amount - quantity
        await flush_changes(self.db, "decrement_stock")
        logger.info(
            "Stock decremented",
            extra={"product_id": str(product_id), "quantity": quantity},
        )
        return to_snapshot(product)

    async def update(
        self, product_id: ProductId, seller_id: UserId, fields: dict[str, Any],
    ) -> ProductSnapshot:
        """Owner-only partial update."""
        product = await self._get(product_id, for_update=True)
        assert_owner(product.seller_id, seller_id)

        for name in UPDATABLE_FIELDS:
            value = fields.get(name)
            if value is not None:
                setattr(product, name, value)
        await flush_changes(self.db, "update_product")
        logger.info(
            "Product updated",
            extra={"product_id": str(product_id), "user_id": str(seller_id)},
        )
        return to_snapshot(product)

    async def delete(self, product_id: ProductId, seller_id: UserId) -> None:
        """Owner-only delete."""
        product = await self._get(product_id, for_update=True)
        assert_owner(product.seller_id, seller_id)
        await self.db.delete(product)
        await flush_changes(self.db, "delete_product")
        logger.info(
            "Product deleted",
            extra={"product_id": str(product_id), "user_id": str(seller_id)},
        )

    async def _get(self, product_id: ProductId, for_update: bool) -> Product:
        query = select(Product).where(Product.id == product_id)
        if for_update:
            query = query.with_for_update().execution_options(
                populate_existing=True,
            )
        result = await self.db.execute(query)
        product = result.scalar_one_or_none()
        if not product:
            raise ResourceNotFoundError(
                "Product", str(product_id),
                ErrorContext(product_id=str(product_id)),
            )
        return product
