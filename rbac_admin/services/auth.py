"""
Authentication service.
"""

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.core.exceptions import Conflict, InvalidArgument, Unauthenticated
from rbac_admin.core.security import PasswordHasher, TokenService
from rbac_admin.models.base import Status
from rbac_admin.models.rbac import Permission, Role
from rbac_admin.models.user import User
from rbac_admin.repositories.user import UserRepository
from rbac_admin.schemas.auth import RegisterRequest
from rbac_admin.utils.timezone import utc_now

from .resolver import PermissionResolver

logger = structlog.get_logger()


@dataclass
class Profile:
    """A user together with its effective roles and permissions."""
    user: User
    roles: list[Role]
    permissions: list[Permission]


@dataclass
class LoginResult(Profile):
    token: str


class AuthService:
    """Login, registration and password changes."""

    def __init__(
        self,
        db: AsyncSession,
        hasher: PasswordHasher,
        tokens: TokenService,
    ):
        self.db = db
        self.hasher = hasher
        self.tokens = tokens
        self.users = UserRepository(db)
        self.resolver = PermissionResolver(db)

    def create_access_token(self, user: User) -> str:
        return self.tokens.issue(user.id, user.username, user.email)

    async def get_profile(self, user: User) -> Profile:
        return Profile(
            user=user,
            roles=await self.resolver.get_user_roles(user.id),
            permissions=await self.resolver.get_user_permissions(user.id),
        )

    async def login(
        self,
        email: str,
        password: str,
        client_ip: str | None = None,
    ) -> LoginResult:
        """
        Authenticate by email and password.

        Raises:
            Unauthenticated: unknown email, wrong password or disabled account
        """
        user = await self.users.get_by_email(email)

        if not user or not self.hasher.verify(password, user.password_hash):
            logger.warning("Login failed", email=email, client_ip=client_ip)
            raise Unauthenticated("Invalid email or password")

        if user.status != Status.ENABLED:
            logger.warning("Login rejected for disabled user", target_user_id=user.id)
            raise Unauthenticated("User is disabled")

        await self.users.update(user, last_login_at=utc_now(), last_login_ip=client_ip)

        profile = await self.get_profile(user)
        logger.info("User logged in", target_user_id=user.id, client_ip=client_ip)

        return LoginResult(
            user=profile.user,
            roles=profile.roles,
            permissions=profile.permissions,
            token=self.create_access_token(user),
        )

    async def register(self, data: RegisterRequest) -> tuple[User, str]:
        """Self-registration: an enabled user with no roles."""
        if await self.users.get_by_username(data.username):
            raise Conflict("Username already exists")
        if await self.users.get_by_email(data.email):
            raise Conflict("Email already exists")

        user = await self.users.create(
            username=data.username,
            email=data.email,
            password_hash=self.hasher.hash(data.password),
            real_name=data.real_name,
            phone=data.phone,
            status=Status.ENABLED,
        )
        logger.info("User registered", target_user_id=user.id, username=user.username)

        return user, self.create_access_token(user)

    async def change_password(
        self,
        user: User,
        old_password: str,
        new_password: str,
    ) -> None:
        """
        Raises:
            InvalidArgument: the current password does not match
        """
        if not self.hasher.verify(old_password, user.password_hash):
            raise InvalidArgument("Current password is incorrect")

        await self.users.update(user, password_hash=self.hasher.hash(new_password))
        logger.info("Password changed", target_user_id=user.id)

    async def logout(self, user: User) -> None:
        """
        Tokens are bearer-only and expire on their own; there is nothing to
        revoke server-side.
        """
        logger.info("User logged out", target_user_id=user.id)
