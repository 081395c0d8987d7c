"""Pytest configuration and shared fixtures."""

import asyncio
import os
import tempfile
from datetime import date

# Point the application at a throwaway database before it is imported
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.mkdtemp(), 'crosssell_test.db')}",
)

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from crosssell.core.database import Base, get_async_session
from crosssell.database import models  # noqa: F401
from crosssell.main import app
from crosssell.schemas.opportunity import OpportunityRecord

AS_OF = date(2025, 1, 1)


def make_record(**overrides) -> OpportunityRecord:
    """Build an opportunity record with neutral defaults."""
    values = {
        "customer_name": "Jane Doe",
        "current_products": "Auto",
        "policy_count": 1,
        "current_premium": 1500.0,
        "tenure_years": 2.0,
        "ezpay_status": "No",
    }
    values.update(overrides)
    return OpportunityRecord(**values)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def as_of() -> date:
    """Fixed reference date for renewal timing.

    Returns:
        date: 2025-01-01
    """
    return AS_OF


@pytest.fixture
def upgrade_record() -> OpportunityRecord:
    """Monoline auto customer renewing in 10 days with strong payment history."""
    return make_record(
        customer_name="Upgrade Path",
        current_products="Auto",
        policy_count=1,
        current_premium=3500.0,
        tenure_years=6.0,
        renewal_date=date(2025, 1, 11),
        balance_due=0.0,
        ezpay_status="Yes",
    )


@pytest.fixture
def low_value_record() -> OpportunityRecord:
    """Bundled customer with a balance due and a distant renewal."""
    return make_record(
        customer_name="Low Value",
        current_products="Auto, Home",
        policy_count=3,
        current_premium=500.0,
        tenure_years=0.0,
        renewal_date=date(2025, 6, 1),
        balance_due=120.0,
        ezpay_status="No",
    )


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def db_session(db_url):
    """Async session on a fresh sqlite database with all tables created."""
    engine = create_async_engine(db_url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def test_client(db_url) -> TestClient:
    """FastAPI test client backed by a fresh sqlite database.

    Returns:
        TestClient: FastAPI test client instance
    """
    engine = create_async_engine(db_url, poolclass=NullPool)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_tables())
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    with TestClient(app) as client:
        yield client


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}
