import os
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.future import select
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("CREATE_TABLES", "false")

from app.main import app
from app.db.session import get_db
from app.db.init_db import create_tables, drop_tables
from app.core.security import JWT_ALGORITHM, hash_password, issue_token
from app.core.config import settings
from app.core.enums import UserRole
from app.models.user import User


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


@pytest.fixture
async def test_engine():
    options = {}
    if TEST_DATABASE_URL.startswith("sqlite"):
        options = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}

    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **options)
    await create_tables(engine)

    yield engine

    await drop_tables(engine)
    await engine.dispose()


@pytest.fixture
async def setup_db(test_engine):
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    yield session_factory

    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(setup_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def create_user_factory(setup_db):
    async def _create_user(
        name="Test User",
        email=None,
        role=UserRole.DEVELOPER,
        password="secret123",
        deleted=False,
    ):
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            role=role,
            password_hash=hash_password(password),
        )
        if deleted:
            user.deleted_at = datetime.now(timezone.utc)

        async with setup_db() as session:
            session.add(user)
            await session.commit()
        return user

    return _create_user


@pytest.fixture
def token_factory(setup_db):
    async def _issue_token(user, expires_minutes=None):
        async with setup_db() as session:
            token = await issue_token(session, user, expires_minutes)
            await session.commit()
        return token

    return _issue_token


@pytest.fixture
def fetch_users(setup_db):
    """Read users straight from the store, soft-deleted rows included."""
    async def _fetch_users():
        async with setup_db() as session:
            res = await session.execute(select(User).order_by(User.id))
            return list(res.scalars().all())

    return _fetch_users


@pytest.fixture
async def auth_user(create_user_factory):
    return await create_user_factory(
        name="Admin",
        email="admin@example.com",
        role=UserRole.PROJECT_MANAGER,
    )


@pytest.fixture
async def auth_token(auth_user, token_factory):
    return await token_factory(auth_user)


@pytest.fixture
def auth_headers(auth_token):
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def expired_token(auth_user):
    from jose import jwt

    payload = {
        "sub": str(auth_user.id),
        "jti": "expired",
        "exp": datetime.now(timezone.utc) - timedelta(hours=1)  # Expired 1 hour ago
    }

    return jwt.encode(
        payload,
        settings.SECRET_KEY,
        algorithm=JWT_ALGORITHM
    )


@pytest.fixture
def user_record():
    def _user_record(name="Jane Doe", email=None, role=UserRole.DEVELOPER.value, password="123456", **overrides):
        record = {
            "name": name,
            "email": email or f"{name.lower().replace(' ', '.')}@example.com",
            "role": role,
            "password": password,
            "password_confirmation": password,
        }
        record.update(overrides)
        return record

    return _user_record


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "crud: marks tests related to CRUD operations"
    )
    config.addinivalue_line(
        "markers", "monitoring: marks tests related to health and metrics"
    )
