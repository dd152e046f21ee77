"""ORM Models — SQLAlchemy declarative models for accounts and products.

Invariants:
    - All models inherit from Base (db/base.py)
    - Mutable numeric columns (deposit, amount) carry a version counter

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from vending.models.user import User  # noqa: F401
from vending.models.product import Product  # noqa: F401
