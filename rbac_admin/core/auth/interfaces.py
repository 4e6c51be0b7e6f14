"""
Authorization decision type.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PolicyDecision:
    """
    Outcome of checking a user's grants against an endpoint's requirement.

    ``reason`` becomes the 403 message on denial; ``metadata`` carries the
    required codes for the audit log line.
    """

    allowed: bool
    reason: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def allow(cls) -> "PolicyDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str, **metadata: Any) -> "PolicyDecision":
        return cls(allowed=False, reason=reason, metadata=metadata)
