"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database; the app's DB dependency
is overridden to use it. Environment is set before the app is imported.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.db.base import Base  # noqa: E402
from app.core.dependencies import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.modules.expenses.models import Expense  # noqa: E402,F401
from app.modules.users.models import User  # noqa: E402,F401

STRONG_PASSWORD = "Str0ng!Pass"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
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
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register_user(client, email="alice@example.com", password=STRONG_PASSWORD, **extra):
    payload = {
        "email": email,
        "password": password,
        "first_name": extra.get("first_name", "Alice"),
        "last_name": extra.get("last_name", "Smith"),
    }
    return await client.post("/api/auth/register", json=payload)


async def login_headers(client, email="alice@example.com", password=STRONG_PASSWORD):
    await register_user(client, email=email, password=password)
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


async def create_expense(client, headers, **overrides):
    payload = {
        "title": "Coffee",
        "amount": 4.50,
        "category": "food",
        "expense_date": "2024-01-10",
    }
    payload.update(overrides)
    response = await client.post("/api/expenses", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["expense"]


@pytest.fixture
async def alice(client):
    return await login_headers(client, "alice@example.com")


@pytest.fixture
async def bob(client):
    return await login_headers(client, "bob@example.com")
