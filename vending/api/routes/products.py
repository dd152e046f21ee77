"""Product Routes — seller CRUD and public-to-authenticated product listing.

Invariants:
    - Create/update/delete require the SELLER role; update/delete also require ownership
    - Listing and single reads need any authenticated account
    - Every mutation commits exactly once, after the ledger succeeded
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from vending.api.deps import get_current_user, get_stock_ledger, require_role
from vending.core.domain_types import ProductId, Role, UserId
from vending.infrastructure.database import commit_changes, get_db
from vending.models.user import User
from vending.schemas.product import (
    ProductCreationRequest, ProductCreationResponse,
    ProductResponse, ProductUpdateRequest,
)
from vending.services.stock_ledger import ProductStockLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/products", tags=["products"])


@router.post(
    "", response_model=ProductCreationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    body: ProductCreationRequest,
    seller: User = Depends(require_role(Role.SELLER)),
    ledger: ProductStockLedger = Depends(get_stock_ledger),
    db: AsyncSession = Depends(get_db),
):
    snapshot = await ledger.create(
        UserId(seller.id), body.name, body.cost, body.amount, body.description,
    )
    await commit_changes(db, "create_product")
    return ProductCreationResponse(product_id=snapshot.id)


@router.get("", response_model=list[ProductResponse])
async def list_products(
    _: User = Depends(get_current_user),
    ledger: ProductStockLedger = Depends(get_stock_ledger),
):
    return [ProductResponse.from_snapshot(s) for s in await ledger.read_all()]


@router.get("/{product_id}", response_model=ProductResponse)
async def read_product(
    product_id: UUID,
    _: User = Depends(get_current_user),
    ledger: ProductStockLedger = Depends(get_stock_ledger),
):
    return ProductResponse.from_snapshot(
        await ledger.read(ProductId(product_id)),
    )


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    body: ProductUpdateRequest,
    seller: User = Depends(require_role(Role.SELLER)),
    ledger: ProductStockLedger = Depends(get_stock_ledger),
    db: AsyncSession = Depends(get_db),
):
    """Partial update — only fields present in the body change."""
    snapshot = await ledger.update(
        ProductId(product_id), UserId(seller.id),
        body.model_dump(exclude_none=True),
    )
    await commit_changes(db, "update_product")
    return ProductResponse.from_snapshot(snapshot)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: UUID,
    seller: User = Depends(require_role(Role.SELLER)),
    ledger: ProductStockLedger = Depends(get_stock_ledger),
    db: AsyncSession = Depends(get_db),
):
    await ledger.delete(ProductId(product_id), UserId(seller.id))
    await commit_changes(db, "delete_product")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
