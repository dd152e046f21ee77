"""Account Service — registration, login and token-to-account resolution.

Invariants:
    - New accounts start with deposit 0
    - Usernames are unique; duplicates raise DuplicateUsernameError
    - Login failure never reveals whether the username exists
    - Disabled accounts can neither log in nor use an existing token
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vending.core.domain_types import Role, UserId
from vending.core.errors import AuthenticationError, DuplicateUsernameError
from vending.infrastructure.database import flush_changes
from vending.infrastructure.security import (
    create_access_token, hash_password, verify_password,
)
from vending.models.user import User

logger = logging.getLogger(__name__)


class AccountService:
    """User lifecycle operations outside the balance ledger."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(
        self, username: str, password: str, role: Role, enabled: bool = True,
    ) -> UserId:
        if await self._by_username(username):
            raise DuplicateUsernameError(username)
        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role,
            enabled=enabled,
            deposit=0,
        )
        self.db.add(user)
        await flush_changes(self.db, "register")
        logger.info(
            f"Registered {role.value.lower()}", extra={"user_id": str(user.id)},
        )
        return UserId(user.id)

    async def login(self, username: str, password: str) -> str:
        """Verify credentials and issue a bearer token."""
        user = await self._by_username(username)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid username or password")
        if not user.enabled:
            raise AuthenticationError("Account is disabled")
        return create_access_token(user.id, user.role)

    async def authenticate(self, user_id: UUID) -> User:
        """Resolve a token subject to an enabled account."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise AuthenticationError("Token subject no longer exists")
        if not user.enabled:
            raise AuthenticationError("Account is disabled")
        return user

    async def _by_username(self, username: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.username == username),
        )
        return result.scalar_one_or_none()
