"""Service test fixtures — async DB, seeded marketplace data, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB sessions
    - db_manager patched so the readiness probe hits the test engine
    - Settings injected explicitly (no cached process settings leak between tests)

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FOR UPDATE is a no-op there,
      so lock behaviour itself is not exercised, only the surrounding logic
    - Seed rows are written directly (tests/services/seed.py)
"""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from account_market.config import Settings
from account_market.db.base import Base
from account_market.infrastructure.database import get_db, DatabaseSessionManager
import account_market.infrastructure.database as db_module
from account_market.main import app
from tests.services.seed import make_listing, make_transaction, make_user


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


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        platform_fee_rate=Decimal("0.05"),
        escrow_hold_hours=24,
        dispute_window_hours=24,
        credential_delivery_mode="on_demand",
        withdrawal_notes_policy="preserve",
    )


# ─── Fixtures ───────────────────────────────────────────────────

@pytest.fixture
async def buyer(test_db):
    return await make_user(test_db, "buyer@example.com", "buyer")


@pytest.fixture
async def seller(test_db):
    return await make_user(test_db, "seller@example.com", "seller")


@pytest.fixture
async def other_seller(test_db):
    return await make_user(test_db, "seller2@example.com", "seller")


@pytest.fixture
async def admin(test_db):
    return await make_user(test_db, "admin@example.com", "admin")


@pytest.fixture
async def listing(test_db, seller):
    return await make_listing(test_db, seller, "100.00", title="IG 10k")


@pytest.fixture
async def completed_txn(test_db, buyer, seller, listing):
    """A fresh completed purchase of `listing` (amount 100.00, fee 5.00)."""
    listing.status = "sold"
    await test_db.commit()
    return await make_transaction(test_db, buyer, seller, listing)
