"""
Shared test fixtures for the NewWork test suite.

Each API test gets a fresh in-memory SQLite database (aiosqlite +
StaticPool) wired into the app through ``dependency_overrides``.
"""

import itertools
import os
import sys
from dataclasses import dataclass
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-suite-only"
os.environ.pop("ENHANCER_URL", None)

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_db
from app.core.security import create_access_token, get_password_hash
from app.db.base import Base
from app.main import app
from app.models.employee import EmployeeProfile
from app.models.user import User
from app.services.enhancer import FeedbackEnhancer, get_enhancer

PASSWORD = "password123"
_PASSWORD_HASH = get_password_hash(PASSWORD)
_counter = itertools.count(1)


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh database per test; the app's ``get_db`` is pointed at it."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ── Accounts ────────────────────────────────────────────────────────
@dataclass
class Account:
    id: int
    email: str
    role: str
    profile_id: int | None

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(self.id, role=self.role)}"}


@pytest.fixture
def make_account(session_factory):
    """Create a user (plus profile for managers / employees) directly in the DB."""

    async def _make(role: str = "employee", email: str | None = None, **profile) -> Account:
        n = next(_counter)
        async with session_factory() as session:
            user = User(
                email=email or f"{role}{n}@test.com",
                name=f"{role.title()} {n}",
                role=role,
                hashed_password=_PASSWORD_HASH,
            )
            session.add(user)
            await session.flush()
            profile_id = None
            if role in ("manager", "employee"):
                fields = {"position": "Engineer", "department": "Engineering"}
                fields.update(profile)
                record = EmployeeProfile(user_id=user.id, **fields)
                session.add(record)
                await session.flush()
                profile_id = record.id
            await session.commit()
            return Account(id=user.id, email=user.email, role=role, profile_id=profile_id)

    return _make


@pytest.fixture
async def manager(make_account) -> Account:
    return await make_account("manager")


@pytest.fixture
async def employee(make_account) -> Account:
    return await make_account("employee", salary=50000.0, phone="+1-555-0100", address="1 Main St")


@pytest.fixture
async def coworker(make_account) -> Account:
    return await make_account("coworker")


# ── Enhancer stub ───────────────────────────────────────────────────
class StubEnhancer(FeedbackEnhancer):
    def __init__(self, reply=None, error: Exception | None = None):
        super().__init__(url="http://enhancer.test/generate", token="t", timeout=1)
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    async def _request(self, payload):
        self.calls.append(payload)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def stub_enhancer():
    """Install a StubEnhancer; call with the reply (or error) to return."""

    def _install(reply=None, error: Exception | None = None) -> StubEnhancer:
        stub = StubEnhancer(reply=reply, error=error)
        app.dependency_overrides[get_enhancer] = lambda: stub
        return stub

    yield _install
    app.dependency_overrides.pop(get_enhancer, None)


@pytest.fixture
def stub_enhancer_cls():
    return StubEnhancer
