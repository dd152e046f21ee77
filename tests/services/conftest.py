"""Service test fixtures — async DB, seeded accounts and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test session factory
    - db_manager patched so the readiness probe sees the test engine
    - Seeded accounts get a placeholder password hash (no bcrypt cost per test)
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from vending.core.domain_types import Role
from vending.db.base import Base
from vending.infrastructure.database import get_db, DatabaseSessionManager
from vending.infrastructure.security import create_access_token
from vending.models.product import Product
from vending.models.user import User
import vending.infrastructure.database as db_module
import vending.models  # noqa: F401
from vending.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_db):
    """Factory: insert an account and return it."""
    counter = {"n": 0}

    async def _make(role: Role = Role.BUYER, deposit: int = 0, enabled: bool = True):
        counter["n"] += 1
        user = User(
            username=f"{role.value.lower()}{counter['n']}@example.com",
            password_hash="not-a-real-hash",
            role=role,
            deposit=deposit,
            enabled=enabled,
        )
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_product(test_db):
    """Factory: insert a product owned by seller and return it."""

    async def _make(seller: User, cost: int = 5, amount: int = 100, name: str = "Cola"):
        product = Product(
            seller_id=seller.id, name=name, cost=cost,
            amount=amount, description=f"{name} can",
        )
        test_db.add(product)
        await test_db.commit()
        await test_db.refresh(product)
        return product

    return _make


@pytest.fixture
async def buyer(make_user):
    return await make_user(Role.BUYER, deposit=1000)


@pytest.fixture
async def seller(make_user):
    return await make_user(Role.SELLER)


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers


@pytest.fixture
def fetch(test_session_factory):
    """Read a row through a fresh session, bypassing any stale identity map."""

    async def _fetch(model, pk):
        async with test_session_factory() as session:
            return await session.get(model, pk)

    return _fetch
