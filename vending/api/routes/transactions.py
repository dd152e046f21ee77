"""Transaction Routes — buyer deposit, buy and reset.

Invariants:
    - Every endpoint requires the BUYER role
    - Coins are validated by DepositRequest before the ledger sees them
    - A buy request commits once, after every line succeeded; any error rolls back all lines
"""

import logging

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from vending.api.deps import get_purchase_service, require_role
from vending.core.domain_types import ProductId, PurchaseLine, Role, UserId
from vending.infrastructure.database import commit_changes, get_db
from vending.models.user import User
from vending.schemas.product import ProductResponse
from vending.schemas.transaction import (
    BoughtProductResponse, BuyRequest, BuyResponse, CoinChangeResponse,
    DepositRequest, DepositResponse,
)
from vending.services.purchase import PurchaseResult, PurchaseService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


@router.post("/deposit", response_model=DepositResponse)
async def deposit(
    body: DepositRequest,
    buyer: User = Depends(require_role(Role.BUYER)),
    service: PurchaseService = Depends(get_purchase_service),
    db: AsyncSession = Depends(get_db),
):
    balance = await service.deposit(UserId(buyer.id), body.coins)
    await commit_changes(db, "deposit")
    return DepositResponse(current_balance=balance)


@router.post("/buy", response_model=BuyResponse)
async def buy(
    body: list[BuyRequest] = Body(min_length=1),
    buyer: User = Depends(require_role(Role.BUYER)),
    service: PurchaseService = Depends(get_purchase_service),
    db: AsyncSession = Depends(get_db),
):
    """Buy every requested line or none of them."""
    lines = [PurchaseLine(ProductId(b.product_id), b.amount) for b in body]
    result = await service.buy(UserId(buyer.id), lines)
    await commit_changes(db, "buy")
    return _to_buy_response(result)


@router.delete("/reset", status_code=status.HTTP_204_NO_CONTENT)
async def reset(
    buyer: User = Depends(require_role(Role.BUYER)),
    service: PurchaseService = Depends(get_purchase_service),
    db: AsyncSession = Depends(get_db),
):
    await service.reset(UserId(buyer.id))
    await commit_changes(db, "reset")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _to_buy_response(result: PurchaseResult) -> BuyResponse:
    return BuyResponse(
        bought_products=[
            BoughtProductResponse(
                product=ProductResponse.from_snapshot(b.product),
                quantity=b.quantity,
                cost=b.cost,
            )
            for b in result.bought_products
        ],
        total_spent=result.total_spent,
        changes=[CoinChangeResponse.from_change(c) for c in result.changes],
    )
