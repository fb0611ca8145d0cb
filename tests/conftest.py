"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys
from decimal import Decimal

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Required configuration must exist before config.py is imported
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("AUTH_SECRET", "test_auth_secret_1234567890abcdef1234567890abcdef")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ORDER_PRICE_SOURCE", "server")
os.environ.setdefault("MOCK_PAYMENT_DELAY_SECONDS", "0")
os.environ.setdefault("MOCK_PAYMENT_SUCCESS_RATE", "0.9")

import config
from db import build_engine, build_session_maker
from models.base import Base
from models.product import Product, ProductDTO
from utils.identity import issue_token

SELLER_ID = "seller_1"
BUYER_ID = "buyer_1"
OTHER_BUYER_ID = "buyer_2"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    Create test database engine (file-backed SQLite per test).

    A file database lets several sessions run concurrently against the same
    data, which the locking tests rely on.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_maker(test_engine):
    return build_session_maker(test_engine)


@pytest_asyncio.fixture
async def test_session(test_session_maker):
    """Create test database session."""
    async with test_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def make_product(test_session_maker):
    """
    Insert a product in its own committed transaction.

    Usage:
        product = await make_product(name="Mug", price="12.50", stock=3)
    """

    async def _make_product(name: str = "Widget",
                            price: str = "10.00",
                            stock: int = 10,
                            user_id: str = SELLER_ID,
                            category: str | None = None,
                            description: str | None = None,
                            image: str | None = None) -> ProductDTO:
        async with test_session_maker() as session:
            product = Product(
                name=name,
                description=description or f"{name} description",
                price=Decimal(price),
                stock=stock,
                user_id=user_id,
                category=category,
                image=image,
            )
            session.add(product)
            await session.commit()
            return ProductDTO.model_validate(product, from_attributes=True)

    return _make_product


@pytest_asyncio.fixture
async def fetch_product(test_session_maker):
    """Read a product's current row in a fresh session."""

    async def _fetch_product(product_id: int) -> Product | None:
        async with test_session_maker() as session:
            return await session.get(Product, product_id)

    return _fetch_product


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


# ============================================================================
# Identity Fixtures
# ============================================================================

@pytest.fixture
def auth_headers():
    """Build Authorization headers for a user id."""

    def _auth_headers(user_id: str = BUYER_ID) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(user_id, config.AUTH_SECRET)}"}

    return _auth_headers
