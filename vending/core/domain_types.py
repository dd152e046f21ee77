"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ProductId wrap UUIDs — never use bare UUID in domain logic
    - Cents is always an integer amount in the smallest currency unit
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the DB role column without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ProductId = NewType("ProductId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Cents = NewType("Cents", int)

# Columns are 32-bit INTEGER
MAX_CENTS = Cents(2**31 - 1)
MAX_QUANTITY = 2**31 - 1


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Account role — buyers deposit and buy, sellers manage owned products."""
    BUYER = "BUYER"
    SELLER = "SELLER"


class PurchaseMode(str, Enum):
    """How a multi-line purchase sequences its checks and mutations."""
    ATOMIC = "atomic"        # plan every line, then mutate
    PER_LINE = "per_line"    # check and mutate one line at a time


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class ProductSnapshot:
    """Immutable read of a product row, detached from the ORM session."""
    id: ProductId
    name: str
    cost: Cents
    amount: int
    description: str | None
    seller_id: UserId


@dataclass(frozen=True)
class PurchaseLine:
    """One (product, quantity) pair of a buy request."""
    product_id: ProductId
    amount: int
