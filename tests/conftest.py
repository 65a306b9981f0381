# tests/conftest.py

import os

# Settings are read at import time, so the environment must be ready first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-secret-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.security import create_access_token, get_password_hash  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.enums import UserRole  # noqa: E402
from app.models.user import User  # noqa: E402

PASSWORD = "Secret123!"
# Hash once, bcrypt is slow on purpose
PASSWORD_HASH = get_password_hash(PASSWORD)


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
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def _create_user(session_factory, email, role, first_name, last_name, active=True):
    async with session_factory() as session:
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            hashed_password=PASSWORD_HASH,
            role=role,
            is_active=active,
        )
        session.add(user)
        await session.commit()
        return user


@pytest.fixture
async def users(session_factory):
    """
    Staff accounts keyed by a short name:
    admin, manager (u1), surveyor (u2), support (u3), inactive.
    """
    return {
        "admin": await _create_user(
            session_factory, "admin@example.com", UserRole.ADMIN, "Anna", "Admin"
        ),
        "manager": await _create_user(
            session_factory, "manager@example.com", UserRole.MANAGER, "Mark", "Manager"
        ),
        "surveyor": await _create_user(
            session_factory, "surveyor@example.com", UserRole.SURVEYOR, "Sam", "Surveyor"
        ),
        "support": await _create_user(
            session_factory, "support@example.com", UserRole.SUPPORT, "Sue", "Support"
        ),
        "inactive": await _create_user(
            session_factory,
            "gone@example.com",
            UserRole.MANAGER,
            "Gil",
            "Gone",
            active=False,
        ),
    }


def _auth_headers(user: User) -> dict:
    token = create_access_token(subject=str(user.id), role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    """Bearer headers for a given user."""
    return _auth_headers


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def measurement_payload(users):
    return {
        "managerId": str(users["manager"].id),
        "receptionDate": "2025-03-01",
        "customerName": "Olga Petrova",
        "customerPhone": "+7 900 000-00-01",
        "customerAddress": "Lenina 1, apt. 5",
    }


@pytest.fixture
def contract_payload(users):
    return {
        "contractNumber": "D-2025-001",
        "contractDate": "2025-03-10",
        "managerId": str(users["manager"].id),
        "customerName": "Olga Petrova",
        "customerPhone": "+7 900 000-00-01",
        "totalAmount": "150000.00",
        "advanceAmount": "50000",
    }
