# backend/secreports/apps/accounts/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from secreports.database import Base
from secreports.utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class UserRole(str, enum.Enum):
    """Roles used across the service.

    ADMIN bypasses every permission check. Every other role only gets what
    its UserPermission rows grant.
    """

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    DATA_ENTRY = "data_entry"
    REVIEWER = "reviewer"
    VIEWER = "viewer"


class PermissionModule(str, enum.Enum):
    REPORTS = "reports"
    EVENTS = "events"
    COORDINATIONS = "coordinations"
    MEMOS = "memos"
    MEETINGS = "meetings"
    USERS = "users"
    GOVERNORATES = "governorates"
    SETTINGS = "settings"


class PermissionAction(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"


# ---------------------------------------------------------------------------
# USER & PERMISSIONS
# ---------------------------------------------------------------------------


class User(Base):
    """
    Person who can sign in to the service.

    Users are never hard-deleted; disabling sets is_active = False and keeps
    every report, event and log entry pointing at them intact.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_role_active", "role", "is_active"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    username = Column(String(64), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(64), nullable=True)

    role = Column(
        Enum(UserRole, name="user_role_enum", native_enum=False),
        nullable=False,
        default=UserRole.VIEWER,
        index=True,
    )
    governorate_id = Column(
        String(36),
        ForeignKey("governorates.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc="Optional governorate the user works for.",
    )
    department = Column(String(128), nullable=False, default="")

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    token_revoked_at = Column(
        DateTime(timezone=True),
        nullable=True,
        doc="Tokens issued before this instant are rejected (logout / password change).",
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    governorate = relationship("Governorate", lazy="joined")
    permissions = relationship(
        "UserPermission",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="UserPermission.module",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role})>"


class UserPermission(Base):
    """
    One (module, actions) grant attached to a user, independent of role.
    """

    __tablename__ = "user_permissions"
    __table_args__ = (
        UniqueConstraint("user_id", "module", name="uq_user_permissions_user_module"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    module = Column(String(64), nullable=False)
    actions = Column(JSON, nullable=False, default=list)

    user = relationship("User", back_populates="permissions")

    def __repr__(self) -> str:
        return f"<UserPermission {self.module}:{','.join(self.actions or [])}>"
