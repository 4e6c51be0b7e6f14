"""
Declarative base, the status flag and the timestamp columns.
"""

from datetime import datetime
from enum import IntEnum
from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from rbac_admin.utils.timezone import utc_now


class Base(DeclarativeBase):
    # Mapped[datetime] columns are timezone-aware unless declared otherwise
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class Status(IntEnum):
    """Enabled/disabled flag shared by users, roles and permissions."""

    DISABLED = 0
    ENABLED = 1


class TimestampMixin:
    """
    ``created_at`` / ``updated_at`` in UTC.

    Python-side defaults keep microsecond resolution so "newest first"
    listings are stable; the server defaults cover rows written by
    migrations.
    """

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now(),
        nullable=False,
    )
