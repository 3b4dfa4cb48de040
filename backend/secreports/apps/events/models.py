from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    Time,
    UniqueConstraint,
    and_,
)
from sqlalchemy.orm import foreign, relationship

from ...database import Base
from ...utils.identifiers import generate_uuid7
from ..attachments.models import Attachment, AttachmentOwner


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventType(str, enum.Enum):
    SECURITY_INCIDENT = "security_incident"
    ARREST = "arrest"
    CHECKPOINT = "checkpoint"
    RAID = "raid"
    CONFRONTATION = "confrontation"
    OTHER = "other"


class Severity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EventStatus(str, enum.Enum):
    ONGOING = "ongoing"
    RESOLVED = "resolved"
    MONITORING = "monitoring"

    @classmethod
    def _missing_(cls, value):
        # Older clients send "finished" for a resolved event.
        if isinstance(value, str) and value.strip().lower() == "finished":
            return cls.RESOLVED
        return None


class Event(Base):
    """
    Single incident recorded under a daily report.

    `report_id` and `event_number` never change after creation; the event
    number embeds the parent report's date and type code.
    """

    __tablename__ = "events"
    __table_args__ = (
        UniqueConstraint("report_id", "event_number", name="uq_events_report_number"),
        CheckConstraint("killed >= 0 AND injured >= 0 AND arrested >= 0", name="ck_events_casualties"),
        Index("ix_events_event_date", "event_date"),
        Index("ix_events_type_severity", "event_type", "severity"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    report_id = Column(
        String(36),
        ForeignKey("daily_reports.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    event_number = Column(String(32), nullable=False, index=True)

    governorate_id = Column(
        String(36),
        ForeignKey("governorates.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    region = Column(String(255), nullable=False)

    event_date = Column(Date, nullable=False)
    event_time = Column(Time, nullable=False)
    event_type = Column(
        Enum(EventType, name="event_type_enum", native_enum=False),
        nullable=False,
    )
    severity = Column(
        Enum(Severity, name="event_severity_enum", native_enum=False),
        nullable=False,
        default=Severity.MEDIUM,
    )
    status = Column(
        Enum(EventStatus, name="event_status_enum", native_enum=False),
        nullable=False,
        default=EventStatus.ONGOING,
        index=True,
    )

    description = Column(Text, nullable=False)
    involved_parties = Column(JSON, nullable=False, default=list)
    palestinian_intervention = Column(Text, nullable=True)
    israeli_response = Column(Text, nullable=True)
    results = Column(Text, nullable=True)

    killed = Column(Integer, nullable=False, default=0)
    injured = Column(Integer, nullable=False, default=0)
    arrested = Column(Integer, nullable=False, default=0)

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    created_by = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    report = relationship("DailyReport", back_populates="events", lazy="joined")
    governorate = relationship("Governorate", lazy="joined")
    attachments = relationship(
        "Attachment",
        primaryjoin=lambda: and_(
            foreign(Attachment.entity_id) == Event.id,
            Attachment.entity_type == AttachmentOwner.EVENT,
        ),
        viewonly=True,
        lazy="selectin",
        order_by="Attachment.uploaded_at",
    )

    @property
    def casualties(self) -> dict:
        return {
            "killed": self.killed or 0,
            "injured": self.injured or 0,
            "arrested": self.arrested or 0,
        }

    def __repr__(self) -> str:
        return f"<Event {self.event_number} report={self.report_id}>"
