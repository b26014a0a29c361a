"""Pytest fixtures for testing"""

import os

# Keep the module-level engine off PostgreSQL during tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

import pytest
import pytest_asyncio
from decimal import Decimal
from typing import Callable, Dict
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from wallet_gateway.api.main import create_app
from wallet_gateway.domain.models import Role, SessionClaims
from wallet_gateway.infrastructure.database.models import Admin, Base, User
from wallet_gateway.infrastructure.database.session import build_engine, build_sessionmaker, get_db
from wallet_gateway.infrastructure.security.passwords import password_hasher
from wallet_gateway.infrastructure.security.tokens import SessionTokens

DEFAULT_PASSWORD = "correct-horse-battery"

# Hashing is deliberately slow; share one hash across fixtures
DEFAULT_PASSWORD_HASH = password_hasher.hash(DEFAULT_PASSWORD)


# Engine-level fixtures (async, one SQLite file per test)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'wallet.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_sessionmaker(db_engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_admin(db):
    """Insert an admin and return its code"""

    async def _make(code: str, role: Role = Role.STANDARD, is_active: bool = True) -> str:
        db.add(
            Admin(
                code=code,
                name=f"Admin {code}",
                password_hash=DEFAULT_PASSWORD_HASH,
                role=role.value,
                is_active=is_active,
            )
        )
        await db.commit()
        return code

    return _make


@pytest.fixture
def make_user(db):
    """Insert a user and return its email"""

    async def _make(email: str, admin_code: str, balance: Decimal = Decimal("0")) -> str:
        db.add(
            User(
                name=email.split("@")[0],
                email=email,
                balance=balance,
                admin_code=admin_code,
                state_code="12",
                township_code="034",
            )
        )
        await db.commit()
        return email

    return _make


@pytest.fixture
def balance_of(session_factory) -> Callable:
    """Read a balance through a fresh session"""

    async def _balance(email: str) -> Decimal:
        async with session_factory() as session:
            result = await session.execute(select(User.balance).where(User.email == email))
            balance = result.scalar_one()
            await session.commit()
            return balance

    return _balance


# HTTP fixtures (sync TestClient over a SQLite file)


@pytest.fixture
def api_db(tmp_path):
    """Schema on a file database shared by a sync seeding engine and the app"""
    path = tmp_path / "api.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    yield path, sync_engine
    sync_engine.dispose()


@pytest.fixture
def seed_admin(api_db) -> Callable:
    _, sync_engine = api_db

    def _seed(code: str, role: Role = Role.STANDARD, is_active: bool = True) -> str:
        with Session(sync_engine) as session:
            session.add(
                Admin(
                    code=code,
                    name=f"Admin {code}",
                    password_hash=DEFAULT_PASSWORD_HASH,
                    role=role.value,
                    is_active=is_active,
                )
            )
            session.commit()
        return code

    return _seed


@pytest.fixture
def client(api_db) -> TestClient:
    """Create FastAPI test client with test database"""
    path, _ = api_db
    engine = build_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    TestingSessionLocal = build_sessionmaker(engine)
    app = create_app()

    async def override_get_db():
        async with TestingSessionLocal() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Bearer headers carrying a session for the given admin"""

    def _headers(admin_code: str, role: Role = Role.STANDARD) -> Dict[str, str]:
        token = SessionTokens().issue(SessionClaims(admin_code=admin_code, role=role))
        return {"Authorization": f"Bearer {token}"}

    return _headers
