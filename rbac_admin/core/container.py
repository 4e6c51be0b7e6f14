"""
Dependency injection container.
Centralizes all service instantiation and configuration.
"""

from typing import Any
from dataclasses import dataclass, field

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from rbac_admin.core.config import Settings
from rbac_admin.core.ratelimit.interfaces import RateLimitBackend
from rbac_admin.core.ratelimit.limiter import RateLimiter
from rbac_admin.core.security import PasswordHasher, TokenService
from rbac_admin.models.database import close_db, create_engine, create_session_factory, init_db

logger = structlog.get_logger()


@dataclass
class Container:
    """
    Dependency injection container.

    One instance per application, built in ``create_app`` and kept on
    ``app.state.container``. Request handlers reach it through the
    dependencies in ``rbac_admin.api.dependencies``.

    Example:
    ```python
    container = Container(settings)
    limiter = container.rate_limiter

    # Swap a component (tests)
    container.set("rate_limit_backend", FailingBackend())
    ```
    """

    settings: Settings
    _instances: dict[str, Any] = field(default_factory=dict)

    @property
    def engine(self) -> AsyncEngine:
        if "engine" not in self._instances:
            self._instances["engine"] = create_engine(self.settings.database)
        return self._instances["engine"]

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if "session_factory" not in self._instances:
            self._instances["session_factory"] = create_session_factory(self.engine)
        return self._instances["session_factory"]

    @property
    def password_hasher(self) -> PasswordHasher:
        if "password_hasher" not in self._instances:
            self._instances["password_hasher"] = PasswordHasher(
                rounds=self.settings.auth.bcrypt_rounds,
            )
        return self._instances["password_hasher"]

    @property
    def token_service(self) -> TokenService:
        if "token_service" not in self._instances:
            self._instances["token_service"] = TokenService(self.settings.auth)
        return self._instances["token_service"]

    @property
    def rate_limit_backend(self) -> RateLimitBackend:
        """Counter store selected by ``RATE_LIMIT_BACKEND``."""
        if "rate_limit_backend" not in self._instances:
            if self.settings.rate_limit.backend == "memory":
                from rbac_admin.core.ratelimit.memory import MemoryRateLimitBackend

                backend = MemoryRateLimitBackend()
            else:
                from rbac_admin.core.ratelimit.redis import RedisRateLimitBackend

                backend = RedisRateLimitBackend.from_settings(self.settings.redis)
            self._instances["rate_limit_backend"] = backend
        return self._instances["rate_limit_backend"]

    @property
    def rate_limiter(self) -> RateLimiter:
        # Not cached: a swapped backend must take effect immediately.
        return RateLimiter(
            self.rate_limit_backend,
            key_prefix=self.settings.rate_limit.key_prefix,
        )

    def get(self, name: str) -> Any:
        """Get any registered instance by name."""
        return self._instances.get(name)

    def set(self, name: str, instance: Any) -> None:
        """Set a custom instance."""
        self._instances[name] = instance

    async def initialize(self) -> None:
        """Async setup: optional schema creation."""
        if self.settings.database.create_tables:
            await init_db(self.engine)
            logger.info("Database tables created")

    async def shutdown(self) -> None:
        """Release connections."""
        backend = self._instances.get("rate_limit_backend")
        if backend is not None:
            await backend.close()
        if "engine" in self._instances:
            await close_db(self._instances["engine"])
