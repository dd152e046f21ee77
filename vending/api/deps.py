"""Request Dependencies — bearer authentication, role gates and per-request services.

Invariants:
    - get_current_user always returns an enabled, existing account or raises 401
    - require_role raises AccessDeniedError (403) for the wrong role
    - Services are built per request on the request's AsyncSession

Design Decisions:
    - HTTPBearer(auto_error=False): a missing header becomes our AuthenticationError
      envelope instead of FastAPI's default 403 body
    - Role stays a tagged enum checked here, not a user subclass hierarchy
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from vending.config import get_settings
from vending.core.domain_types import Role
from vending.core.enforce_ownership import assert_role
from vending.core.errors import AuthenticationError
from vending.infrastructure.database import get_db
from vending.infrastructure.security import decode_access_token, token_user_id
from vending.models.user import User
from vending.services.accounts import AccountService
from vending.services.balance_ledger import BalanceLedger
from vending.services.purchase import PurchaseService
from vending.services.stock_ledger import ProductStockLedger

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    claims = decode_access_token(credentials.credentials)
    return await AccountService(db).authenticate(token_user_id(claims))


def require_role(*roles: Role):
    """Dependency factory: current user must hold one of roles."""

    async def _check(user: User = Depends(get_current_user)) -> User:
        assert_role(user.role, *roles)
        return user

    return _check


def get_stock_ledger(db: AsyncSession = Depends(get_db)) -> ProductStockLedger:
    return ProductStockLedger(db, stock_guard=get_settings().stock_guard_enabled)


def get_purchase_service(db: AsyncSession = Depends(get_db)) -> PurchaseService:
    settings = get_settings()
    return PurchaseService(
        BalanceLedger(db),
        ProductStockLedger(db, stock_guard=settings.stock_guard_enabled),
        mode=settings.purchase_mode,
        stock_guard=settings.stock_guard_enabled,
    )
