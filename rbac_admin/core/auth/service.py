"""
Authorization service - the per-request gate.

Decides whether an authenticated user's effective permission or role set
satisfies an endpoint's requirement. Required codes are OR-ed: holding any
one of them is enough.

Usage:
    authorizer = Authorizer(PermissionResolver(db))
    await authorizer.require_permission(user, ("user:update",))
"""

from typing import Iterable

import structlog

from rbac_admin.core.exceptions import PermissionDenied, Unauthenticated
from rbac_admin.models.user import User
from rbac_admin.services.resolver import PermissionResolver

from .interfaces import PolicyDecision

logger = structlog.get_logger()


def decide(required: Iterable[str], granted: set[str], kind: str) -> PolicyDecision:
    """Pure OR-decision over codes."""
    required = tuple(required)
    if any(code in granted for code in required):
        return PolicyDecision.allow()
    return PolicyDecision.deny(
        f"Missing required {kind}: {' or '.join(required)}",
        required=list(required),
    )


class Authorizer:
    """Permission and role gates backed by the resolver."""

    def __init__(self, resolver: PermissionResolver):
        self.resolver = resolver

    async def check_permission(self, user: User | None, codes: Iterable[str]) -> PolicyDecision:
        if user is None:
            raise Unauthenticated()
        granted = await self.resolver.get_user_permission_codes(user.id)
        return decide(codes, granted, "permission")

    async def check_role(self, user: User | None, codes: Iterable[str]) -> PolicyDecision:
        if user is None:
            raise Unauthenticated()
        granted = await self.resolver.get_user_role_codes(user.id)
        return decide(codes, granted, "role")

    async def require_permission(self, user: User | None, codes: Iterable[str]) -> None:
        """
        Raises:
            Unauthenticated: no resolved identity (fails closed)
            PermissionDenied: none of ``codes`` is granted
        """
        decision = await self.check_permission(user, codes)
        if not decision.allowed:
            logger.warning(
                "Permission denied",
                target_user_id=user.id,
                required=decision.metadata.get("required"),
            )
            raise PermissionDenied(decision.reason)

    async def require_role(self, user: User | None, codes: Iterable[str]) -> None:
        decision = await self.check_role(user, codes)
        if not decision.allowed:
            logger.warning(
                "Role denied",
                target_user_id=user.id,
                required=decision.metadata.get("required"),
            )
            raise PermissionDenied(decision.reason)
