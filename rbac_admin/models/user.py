"""
User model.
"""

from datetime import datetime
from sqlalchemy import String, Integer, SmallInteger, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, Status, TimestampMixin


class User(Base, TimestampMixin):
    """Administrator / operator account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile
    real_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Status
    status: Mapped[int] = mapped_column(
        SmallInteger,
        default=Status.ENABLED,
        nullable=False,
    )

    # Login tracking
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_login_ip: Mapped[str | None] = mapped_column(String(45), nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status == Status.ENABLED

    def __repr__(self) -> str:
        return f"<User {self.username}>"
