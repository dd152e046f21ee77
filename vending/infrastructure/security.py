"""Credentials — bcrypt password hashing and HS256 JWT issuance/verification.

Invariants:
    - Passwords are stored only as bcrypt hashes
    - Token subject is the user id; the roles claim lists the account role
    - decode_access_token raises AuthenticationError for any invalid or expired token

Design Decisions:
    - passlib CryptContext: scheme can be rotated later via deprecated="auto"
    - python-jose for JWT: handles exp validation on decode
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from vending.config import get_settings
from vending.core.domain_types import Role
from vending.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

ROLES_CLAIM_KEY = "roles"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: UUID, role: Role, expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed token for the user."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta or timedelta(minutes=settings.jwt_expiration_minutes)
    )
    claims: dict[str, Any] = {
        "sub": str(user_id),
        ROLES_CLAIM_KEY: [role.value],
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(
        claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry. Returns the claims."""
    settings = get_settings()
    try:
        claims = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationError("Invalid or expired token")
    if not claims.get("sub"):
        raise AuthenticationError("Token has no subject")
    return claims


def token_user_id(claims: dict[str, Any]) -> UUID:
    try:
        return UUID(claims["sub"])
    except (KeyError, ValueError):
        raise AuthenticationError("Token subject is not a user id")
