"""
Pytest configuration and fixtures for catalog tests.

Service tests run against an in-memory SQLite database (aiosqlite) with
foreign keys enforced; route tests drive the ASGI app through httpx.
"""
import os
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import MagicMock

import pytest

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-signing-key-for-unit-tests-only"
os.environ["ADMIN_ACCESS_CODE"] = "open-sesame"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["COOKIE_SECURE"] = "false"
os.environ["S3_BUCKET"] = "product-images"

from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
import app.models  # noqa: F401
from app.models.product import Product
from app.models.category import Category
from app.models.stack import Stack, StackProduct

TEST_ADMIN_CODE = "open-sesame"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with get_db bound to the test database."""
    from app.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def admin_headers(client) -> dict:
    """Bearer header for a freshly logged-in admin session."""
    resp = await client.post("/api/admin/login", json={"code": TEST_ADMIN_CODE})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def mock_s3_client() -> MagicMock:
    client = MagicMock()
    client.delete_objects.return_value = {"Deleted": [], "Errors": []}
    return client


# ==================== Factories ====================

class CatalogFactory:
    """Inserts committed catalog rows directly, bypassing the services."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def product(self, title: str, gross="10.00", discount=None, active=True, images=None) -> Product:
        product = Product(title=title, is_active=active, images=images or [])
        product.apply_pricing(Decimal(gross), Decimal(discount) if discount is not None else None)
        self.db.add(product)
        await self.db.commit()
        return product

    async def category(self, title: str, active=True) -> Category:
        category = Category(title=title, is_active=active)
        self.db.add(category)
        await self.db.commit()
        return category

    async def stack(self, title: str, display_order: int, products=(), active=True) -> Stack:
        stack = Stack(title=title, display_order=display_order, is_active=active)
        self.db.add(stack)
        await self.db.flush()
        for position, product in enumerate(products, start=1):
            self.db.add(StackProduct(stack_id=stack.id, product_id=product.id, position=position))
        await self.db.commit()
        return stack


@pytest.fixture
def factory(db) -> CatalogFactory:
    return CatalogFactory(db)
