"""User Routes — registration, login and the caller's own account.

Invariants:
    - Registration and login are public; /me requires a bearer token
    - Passwords never appear in any response
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vending.api.deps import get_current_user
from vending.infrastructure.database import commit_changes, get_db
from vending.models.user import User
from vending.schemas.user import (
    LoginRequest, LoginResponse, RegistrationRequest,
    RegistrationResponse, UserResponse,
)
from vending.services.accounts import AccountService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post(
    "", response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegistrationRequest, db: AsyncSession = Depends(get_db),
):
    """Register a buyer or seller account."""
    user_id = await AccountService(db).register(
        body.username, body.password, body.role, body.enabled,
    )
    await commit_changes(db, "register")
    return RegistrationResponse(user_id=user_id)


@router.post("/logins", response_model=LoginResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Exchange credentials for a bearer token."""
    token = await AccountService(db).login(body.username, body.password)
    return LoginResponse(token=token)


@router.get("/me", response_model=UserResponse)
async def read_me(user: User = Depends(get_current_user)):
    return UserResponse(
        id=user.id,
        username=user.username,
        role=user.role,
        deposit=user.deposit,
        enabled=user.enabled,
    )
