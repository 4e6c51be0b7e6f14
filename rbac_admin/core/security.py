"""
Password hashing and bearer token handling.
"""

from datetime import timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from rbac_admin.core.config import AuthSettings
from rbac_admin.core.exceptions import Unauthenticated
from rbac_admin.utils.timezone import utc_now


class PasswordHasher:
    """bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain: str, hashed: str) -> bool:
        if not hashed:
            return False
        return self._context.verify(plain, hashed)


class TokenService:
    """
    Issues and verifies signed access tokens.

    Tokens are HS256 JWTs carrying the user's id (``sub``), username and
    email, the configured issuer and an expiry. There is no revocation
    list: a token stays valid until it expires.
    """

    def __init__(self, settings: AuthSettings):
        self.secret_key = settings.secret_key
        self.algorithm = settings.algorithm
        self.issuer = settings.issuer
        self.expires_in = timedelta(minutes=settings.access_token_expire_minutes)

    def issue(
        self,
        user_id: int,
        username: str,
        email: str,
        expires_in: timedelta | None = None,
    ) -> str:
        """Create a signed access token for a user."""
        now = utc_now()
        payload = {
            "sub": str(user_id),
            "username": username,
            "email": email,
            "iss": self.issuer,
            "iat": now,
            "exp": now + (expires_in if expires_in is not None else self.expires_in),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature, issuer and expiry.

        Raises:
            Unauthenticated: "Token has expired" or "Invalid token"
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
            )
        except ExpiredSignatureError:
            raise Unauthenticated("Token has expired")
        except JWTError:
            raise Unauthenticated("Invalid token")

        if not str(payload.get("sub", "")).isdigit():
            raise Unauthenticated("Invalid token")
        return payload

    def peek_user_id(self, token: str | None) -> int | None:
        """
        Return the user id of a valid token without raising.

        Used where identity is only a hint (rate-limit keys) and the request
        has not been authenticated yet.
        """
        if not token:
            return None
        try:
            return int(self.decode(token)["sub"])
        except Unauthenticated:
            return None


def extract_bearer_token(authorization: str | None) -> str | None:
    """Strip the ``Bearer `` prefix from an Authorization header value."""
    if not authorization:
        return None
    token = authorization
    if token[:7].lower() == "bearer ":
        token = token[7:]
    token = token.strip()
    return token or None
