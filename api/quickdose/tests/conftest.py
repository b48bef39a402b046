"""Test fixtures and configuration for QuickDose API tests."""
from __future__ import annotations

import os

# Settings are read at import time by several modules; set them first.
os.environ["SECRET_KEY"] = "test-secret-key-that-is-at-least-32-chars-long"
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/0"
os.environ["CORS_ORIGINS"] = "http://localhost:5173"

import uuid
from collections.abc import AsyncIterator, Iterator
from contextlib import ExitStack, asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from quickdose.db.base import Base
from quickdose.db.models import InventoryItem, MedicalShop, Profile, User

ROUTE_MODULES = ["auth", "cart", "inventory", "medicines", "profiles", "shops"]


def pytest_configure(config):
    from quickdose.core.config import get_settings
    get_settings.cache_clear()


@pytest.fixture
async def async_engine():
    """Create an async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncIterator[AsyncSession]:
    """Create an async session for testing."""
    factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def mock_redis():
    """Mock Redis client for tests, backed by a dict."""
    store: dict[str, str] = {}

    async def _get(key):
        return store.get(key)

    async def _set(key, value, ex=None):
        store[key] = value
        return True

    async def _setex(key, ttl, value):
        store[key] = value
        return True

    async def _delete(key):
        return 1 if store.pop(key, None) is not None else 0

    async def _getdel(key):
        return store.pop(key, None)

    async def _exists(key):
        return 1 if key in store else 0

    mock = MagicMock()
    mock.store = store
    mock.get = AsyncMock(side_effect=_get)
    mock.set = AsyncMock(side_effect=_set)
    mock.setex = AsyncMock(side_effect=_setex)
    mock.delete = AsyncMock(side_effect=_delete)
    mock.getdel = AsyncMock(side_effect=_getdel)
    mock.exists = AsyncMock(side_effect=_exists)
    mock.ping = AsyncMock(return_value=True)
    mock.close = AsyncMock(return_value=None)
    return mock


@pytest.fixture(autouse=True)
def patch_redis(mock_redis) -> Iterator[None]:
    """Route every Redis access (auth, OTP, cache) to the in-memory mock."""
    async def mock_get_redis():
        return mock_redis

    with patch("quickdose.core.auth.get_redis_client", mock_get_redis):
        with patch("quickdose.services.cache._cache._redis", mock_redis):
            yield


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.execute = AsyncMock(return_value=MagicMock(scalar=MagicMock(return_value=1)))
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def client(mock_session) -> Iterator[TestClient]:
    """Create a test client with database sessions mocked out."""
    from quickdose.core.config import get_settings
    get_settings.cache_clear()

    @asynccontextmanager
    async def mock_get_session():
        yield mock_session

    @asynccontextmanager
    async def mock_transaction():
        yield mock_session

    from quickdose.main import app
    from quickdose.middleware import limiter
    from quickdose.services.cart import CartRegistry, get_cart_registry

    registry = CartRegistry()
    app.dependency_overrides[get_cart_registry] = lambda: registry
    limiter.reset()

    with ExitStack() as stack:
        for module in ROUTE_MODULES:
            stack.enter_context(patch(f"quickdose.routes.{module}.get_async_session", mock_get_session))
        stack.enter_context(patch("quickdose.routes.health.async_transaction", mock_transaction))
        with TestClient(app) as test_client:
            yield test_client

    app.dependency_overrides.clear()


def _token(user_type: str, user_id: uuid.UUID) -> str:
    from quickdose.core.auth import create_access_token
    return create_access_token(user_id, f"{user_type}@example.com", user_type)


@pytest.fixture
def buyer_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def seller_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def buyer_headers(buyer_id) -> dict[str, str]:
    return {"Authorization": f"Bearer {_token('buyer', buyer_id)}"}


@pytest.fixture
def seller_headers(seller_id) -> dict[str, str]:
    return {"Authorization": f"Bearer {_token('seller', seller_id)}"}


@pytest.fixture
def invalid_auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer invalid-token"}


@pytest.fixture
def sample_user() -> User:
    return User(
        id=uuid.uuid4(),
        email="buyer@example.com",
        password_hash="not-a-real-hash",
        user_type="buyer",
        created_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def sample_profile(sample_user) -> Profile:
    now = datetime.now(timezone.utc)
    return Profile(
        id=uuid.uuid4(),
        user_id=sample_user.id,
        user_type="buyer",
        display_name="Demo Buyer",
        phone="+91 9876543210",
        address="123 Demo Street",
        city=None,
        state=None,
        postal_code=None,
        latitude=None,
        longitude=None,
        avatar_url=None,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def sample_shop(seller_id) -> MedicalShop:
    return MedicalShop(
        id=uuid.uuid4(),
        owner_id=seller_id,
        shop_name="City Pharmacy",
        license_number="LIC200001",
        owner_name="Asha Verma",
        phone="+91 9876543212",
        email="city@example.com",
        address="12 Connaught Place",
        city="New Delhi",
        state="Delhi",
        postal_code="110001",
        latitude=28.6315,
        longitude=77.2167,
        operating_hours={"monday": {"open": "09:00", "close": "20:00", "closed": False}},
        services=["otc_medicines"],
        created_at=datetime.now(timezone.utc),
    )


async def _make_shop(session: AsyncSession, *, name: str, lat, lon, owner_email: str | None = None) -> MedicalShop:
    """Persist a seller and their shop."""
    owner = User(
        email=owner_email or f"{name.lower().replace(' ', '.')}@example.com",
        password_hash="x",
        user_type="seller",
    )
    session.add(owner)
    await session.flush()
    shop = MedicalShop(
        owner_id=owner.id,
        shop_name=name,
        license_number=f"LIC-{name[:3].upper()}",
        owner_name=f"{name} Owner",
        phone="+91 9000000000",
        address="1 Market Road",
        latitude=lat,
        longitude=lon,
    )
    session.add(shop)
    await session.commit()
    return shop


async def _make_item(session: AsyncSession, shop: MedicalShop, *, name: str, price: float, stock: int, category: str | None = None) -> InventoryItem:
    item = InventoryItem(shop_id=shop.id, name=name, price=price, stock=stock, category=category)
    session.add(item)
    await session.commit()
    return item


@pytest.fixture
def make_shop():
    return _make_shop


@pytest.fixture
def make_item():
    return _make_item
