from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from ...database import Base
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Department(str, enum.Enum):
    POLICE = "police"
    NATIONAL_SECURITY = "national_security"
    CIVIL_DEFENSE = "civil_defense"
    INTELLIGENCE = "intelligence"
    PREVENTIVE_SECURITY = "preventive_security"
    OTHER = "other"


class CoordinationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(str, enum.Enum):
    NORMAL = "normal"
    URGENT = "urgent"
    EMERGENCY = "emergency"


class Coordination(Base):
    """
    Request to move forces between two locations, with its approval trail.
    """

    __tablename__ = "coordinations"
    __table_args__ = (
        CheckConstraint("forces >= 1", name="ck_coordinations_forces"),
        CheckConstraint("vehicles >= 0 AND weapons >= 0", name="ck_coordinations_counts"),
        Index("ix_coordinations_status_date", "status", "request_date"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    request_number = Column(String(32), nullable=False, unique=True, index=True)

    request_date = Column(Date, nullable=False, index=True)
    request_time = Column(DateTime(timezone=True), nullable=False)
    approval_time = Column(DateTime(timezone=True), nullable=True)
    movement_time = Column(DateTime(timezone=True), nullable=False)
    return_time = Column(DateTime(timezone=True), nullable=True)

    governorate_id = Column(
        String(36),
        ForeignKey("governorates.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    from_location = Column(String(255), nullable=False)
    to_location = Column(String(255), nullable=False)
    route_details = Column(Text, nullable=True)

    department = Column(
        Enum(Department, name="coordination_department_enum", native_enum=False),
        nullable=False,
    )
    forces = Column(Integer, nullable=False)
    vehicles = Column(Integer, nullable=False, default=0)
    vehicle_types = Column(JSON, nullable=False, default=list)
    weapons = Column(Integer, nullable=False, default=0)
    weapon_types = Column(JSON, nullable=False, default=list)

    purpose = Column(Text, nullable=False)
    estimated_duration = Column(String(64), nullable=True)

    status = Column(
        Enum(CoordinationStatus, name="coordination_status_enum", native_enum=False),
        nullable=False,
        default=CoordinationStatus.PENDING,
        index=True,
    )
    priority = Column(
        Enum(Priority, name="coordination_priority_enum", native_enum=False),
        nullable=False,
        default=Priority.NORMAL,
    )
    rejection_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    approved_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    requested_by = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    governorate = relationship("Governorate", lazy="joined")

    def __repr__(self) -> str:
        return f"<Coordination {self.request_number} {self.status}>"
