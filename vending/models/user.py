"""User ORM — persists buyer and seller accounts.

Invariants:
    - id is UUID primary key
    - username is unique
    - deposit is integer cents, never negative (CHECK constraint)
    - version increments on every UPDATE (optimistic concurrency)

Design Decisions:
    - Table named "users": "user" is reserved in PostgreSQL
    - role stored as its string value so the column reads the same in SQL and JSON
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Integer, Boolean, DateTime, Enum as SAEnum, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from vending.core.domain_types import Role
from vending.db.base import Base


class User(Base):
    """Account entity — role decides whether it deposits/buys or sells."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("deposit >= 0", name="ck_users_deposit_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    deposit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="user_role", native_enum=False, length=10),
        nullable=False,
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __mapper_args__ = {"version_id_col": version}
