"""
Pytest fixtures for testing.

Provides:
- An isolated app per test (in-memory SQLite, in-memory rate limit counters)
- Async database session sharing the app's engine
- Factory fixture for users, roles and permissions
- Auth header helpers
"""

from typing import AsyncGenerator, Callable, Iterable
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.core.config import AuthSettings, DatabaseSettings, RateLimitSettings, Settings
from rbac_admin.core.security import PasswordHasher
from rbac_admin.main import create_app
from rbac_admin.models import Permission, PermissionType, Role, RolePermission, User, UserRole
from rbac_admin.models.database import init_db


# Test database URL (SQLite in-memory for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PASSWORD = "secret123"

ADMIN_PERMISSION_CODES = [
    "user:list", "user:create", "user:update", "user:delete",
    "role:list", "role:create", "role:update", "role:delete",
    "permission:list", "permission:create", "permission:update", "permission:delete",
]


def make_settings(**rate_limit_overrides) -> Settings:
    """Settings for an isolated test app."""
    return Settings(
        environment="testing",
        log_level="WARNING",
        log_format="text",
        database=DatabaseSettings(url=TEST_DATABASE_URL),
        auth=AuthSettings(secret_key="test-secret-key", bcrypt_rounds=4),
        rate_limit=RateLimitSettings(backend="memory", **rate_limit_overrides),
    )


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture(scope="function")
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Application with its tables created."""
    application = create_app(settings)
    container = application.state.container

    await init_db(container.engine)

    yield application

    await container.shutdown()


@pytest_asyncio.fixture(scope="function")
async def db(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """Session on the same in-memory database the app uses."""
    async with app.state.container.session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============ Factory Fixtures ============


class RbacFactory:
    """Creates committed users, roles and permissions."""

    def __init__(self, db: AsyncSession, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    async def _save(self, entity):
        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)
        return entity

    async def permission(
        self,
        code: str,
        *,
        name: str | None = None,
        type: PermissionType = PermissionType.API,
        parent_id: int = 0,
        sort_order: int = 0,
        status: int = 1,
    ) -> Permission:
        return await self._save(
            Permission(
                name=name or code,
                code=code,
                type=type,
                parent_id=parent_id,
                sort_order=sort_order,
                status=status,
            )
        )

    async def role(
        self,
        code: str,
        *,
        permissions: Iterable[Permission] = (),
        name: str | None = None,
        status: int = 1,
    ) -> Role:
        role = await self._save(Role(name=name or code, code=code, status=status))
        for permission in permissions:
            self.db.add(RolePermission(role_id=role.id, permission_id=permission.id))
        await self.db.commit()
        return role

    async def user(
        self,
        username: str | None = None,
        *,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        roles: Iterable[Role] = (),
        status: int = 1,
    ) -> User:
        username = username or f"user_{uuid4().hex[:8]}"
        user = await self._save(
            User(
                username=username,
                email=email or f"{username}@example.com",
                password_hash=self.hasher.hash(password),
                status=status,
            )
        )
        for role in roles:
            self.db.add(UserRole(user_id=user.id, role_id=role.id))
        await self.db.commit()
        return user


@pytest_asyncio.fixture
async def factory(app: FastAPI, db: AsyncSession) -> RbacFactory:
    """Fixture that provides RbacFactory."""
    return RbacFactory(db, app.state.container.password_hasher)


@pytest_asyncio.fixture
async def admin_user(factory: RbacFactory) -> User:
    """User holding super_admin with every management permission."""
    permissions = [await factory.permission(code) for code in ADMIN_PERMISSION_CODES]
    role = await factory.role("super_admin", permissions=permissions)
    return await factory.user("admin", email="admin@example.com", roles=[role])


@pytest_asyncio.fixture
async def test_user(factory: RbacFactory) -> User:
    """User without any role."""
    return await factory.user("plain", email="plain@example.com")


# ============ Auth Helpers ============


@pytest.fixture
def make_auth_headers(app: FastAPI) -> Callable[[User], dict[str, str]]:
    """Helper to get auth headers for any user."""

    def make(user: User) -> dict[str, str]:
        token = app.state.container.token_service.issue(user.id, user.username, user.email)
        return {"Authorization": f"Bearer {token}"}

    return make


@pytest.fixture
def admin_headers(admin_user: User, make_auth_headers) -> dict[str, str]:
    return make_auth_headers(admin_user)


@pytest.fixture
def auth_headers(test_user: User, make_auth_headers) -> dict[str, str]:
    return make_auth_headers(test_user)


# ============ Mock Implementations ============


class FakeClock:
    """Manually advanced clock for rate limit backends."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingRateLimitBackend:
    """Backend whose store is always unreachable."""

    def __init__(self):
        self.calls = 0

    async def _fail(self, *args, **kwargs):
        self.calls += 1
        raise ConnectionError("rate limit store unreachable")

    fixed_window = _fail
    sliding_window = _fail
    token_bucket = _fail

    async def close(self) -> None:
        pass


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def failing_backend() -> FailingRateLimitBackend:
    return FailingRateLimitBackend()
