"""
Role, permission and association models.

Association rows are owned by both endpoints: the foreign keys cascade on
delete so neither a user/role pair nor a role/permission pair can outlive
the records it relates.
"""

from enum import Enum
from sqlalchemy import (
    String,
    Integer,
    SmallInteger,
    ForeignKey,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, Status, TimestampMixin


class PermissionType(str, Enum):
    """What a permission grants visibility of."""

    MENU = "menu"
    BUTTON = "button"
    API = "api"


class Role(Base, TimestampMixin):
    """Named bundle of permissions."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    code: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[int] = mapped_column(
        SmallInteger,
        default=Status.ENABLED,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Role {self.code}>"


class Permission(Base, TimestampMixin):
    """
    Single grantable capability.

    ``parent_id`` of 0 marks a root; the parent relation is kept acyclic by
    the service layer rather than a foreign key so roots need no sentinel row.
    """

    __tablename__ = "permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    code: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    type: Mapped[PermissionType] = mapped_column(
        SQLEnum(
            PermissionType,
            name="permission_type",
            native_enum=False,
            length=10,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    parent_id: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        index=True,
    )
    path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    method: Mapped[str | None] = mapped_column(String(10), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[int] = mapped_column(
        SmallInteger,
        default=Status.ENABLED,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Permission {self.code}>"


class UserRole(Base):
    """User to role assignment."""

    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_role"),
    )


class RolePermission(Base):
    """Role to permission grant."""

    __tablename__ = "role_permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission_id: Mapped[int] = mapped_column(
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "role_id",
            "permission_id",
            name="uq_role_permissions_role_permission",
        ),
    )
