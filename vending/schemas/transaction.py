"""Transaction Schemas — deposit, buy and their responses.

Invariants:
    - DepositRequest.coins is non-empty and every coin is an accepted denomination
    - At most 1000 coins per deposit, so one request credits at most 100000 cents
    - BuyRequest.amount is strictly positive
    - A buy body is a non-empty list of BuyRequest

Design Decisions:
    - Coin validation reuses core.coins.validate_coins so the schema and the ledger
      agree on the denomination set
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from vending.core.coins import CoinChange, validate_coins
from vending.core.domain_types import MAX_QUANTITY
from vending.core.errors import InvalidCoinsError
from vending.schemas.product import ProductResponse


class DepositRequest(BaseModel):
    coins: list[int] = Field(min_length=1, max_length=1000)

    @field_validator("coins")
    @classmethod
    def check_denominations(cls, v: list[int]) -> list[int]:
        try:
            validate_coins(v)
        except InvalidCoinsError as e:
            raise ValueError(e.message)
        return v


class DepositResponse(BaseModel):
    current_balance: int


class BuyRequest(BaseModel):
    product_id: UUID
    amount: int = Field(gt=0, le=MAX_QUANTITY)


class CoinChangeResponse(BaseModel):
    coin: int
    count: int

    @classmethod
    def from_change(cls, change: CoinChange) -> "CoinChangeResponse":
        return cls(coin=change.coin, count=change.count)


class BoughtProductResponse(BaseModel):
    product: ProductResponse
    quantity: int
    cost: int


class BuyResponse(BaseModel):
    bought_products: list[BoughtProductResponse]
    total_spent: int
    changes: list[CoinChangeResponse]
