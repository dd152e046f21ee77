"""Product Schemas — creation, partial update and product responses.

Invariants:
    - cost and amount are non-negative integers (cents, units) that fit a 32-bit column
    - ProductUpdateRequest fields are all optional; None means "leave unchanged"
    - ProductUpdateRequest rejects a body with no fields at all
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from vending.core.domain_types import MAX_CENTS, MAX_QUANTITY, ProductSnapshot


class ProductCreationRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    cost: int = Field(ge=0, le=MAX_CENTS)
    amount: int = Field(ge=0, le=MAX_QUANTITY)
    description: str | None = Field(None, max_length=2000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class ProductCreationResponse(BaseModel):
    product_id: UUID


class ProductUpdateRequest(BaseModel):
    """Partial update — only supplied, non-null fields overwrite."""
    name: str | None = Field(None, min_length=1, max_length=255)
    cost: int | None = Field(None, ge=0, le=MAX_CENTS)
    amount: int | None = Field(None, ge=0, le=MAX_QUANTITY)
    description: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def require_any_field(self):
        if all(v is None for v in self.model_dump().values()):
            raise ValueError("update requires at least one field")
        return self


class ProductResponse(BaseModel):
    id: UUID
    name: str
    cost: int
    amount: int
    description: str | None = None
    seller_id: UUID

    @classmethod
    def from_snapshot(cls, snapshot: ProductSnapshot) -> "ProductResponse":
        return cls(
            id=snapshot.id,
            name=snapshot.name,
            cost=snapshot.cost,
            amount=snapshot.amount,
            description=snapshot.description,
            seller_id=snapshot.seller_id,
        )
