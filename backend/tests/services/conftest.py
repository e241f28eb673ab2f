"""Service test fixtures - async DB, seeded parties and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe and the sweep see the test DB
    - Seeded world: verified seller owning a verified business, verified buyer,
      an arbitrator, an admin and a verified outsider with no membership

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (row locks are no-ops here; the concurrency paths are covered by version checks)
    - Callers are built with Caller.from_role so service tests skip the HTTP layer
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from garante.db.base import Base
from garante.infrastructure.database import get_db, DatabaseSessionManager
from garante.models.business import Business, BusinessMember
from garante.models.user import User
import garante.infrastructure.database as db_module
from garante.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
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


# ─── Seeded parties ──────────────────────────────────────────────

async def _add_user(db, name, role="user", verified=True) -> User:
    user = User(
        name=name, email=f"{name}@garante.test", role=role, is_verified=verified,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def seller(test_db):
    return await _add_user(test_db, "seller")


@pytest.fixture
async def buyer(test_db):
    return await _add_user(test_db, "buyer")


@pytest.fixture
async def arbitrator(test_db):
    return await _add_user(test_db, "arbitrator", role="arbitrator")


@pytest.fixture
async def admin(test_db):
    return await _add_user(test_db, "admin", role="admin")


@pytest.fixture
async def outsider(test_db):
    """Verified user with no business membership."""
    return await _add_user(test_db, "outsider")


@pytest.fixture
async def business(test_db, seller):
    """Verified business owned by the seller, seller registered as owner member."""
    business = Business(
        name="Oficina Central", owner_id=seller.id, verification_status="verified",
    )
    test_db.add(business)
    await test_db.flush()
    test_db.add(BusinessMember(business_id=business.id, user_id=seller.id, role="owner"))
    await test_db.commit()
    await test_db.refresh(business)
    return business

