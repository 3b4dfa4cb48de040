from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Index, JSON, String, Text, Time, and_
from sqlalchemy.orm import foreign, relationship

from ...database import Base
from ...utils.identifiers import generate_uuid7
from ..attachments.models import Attachment, AttachmentOwner


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MeetingCallType(str, enum.Enum):
    MEETING = "meeting"
    CALL = "call"


class MeetingCallStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


class MeetingCall(Base):
    """
    Meeting or phone call with the other side.

    `participants` holds [{"name", "position", "organization"}];
    `follow_up_actions` holds [{"action", "assigned_to", "due_date"}].
    """

    __tablename__ = "meeting_calls"
    __table_args__ = (
        Index("ix_meeting_calls_type_date", "type", "date"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    reference_number = Column(String(32), nullable=False, unique=True, index=True)
    type = Column(
        Enum(MeetingCallType, name="meeting_call_type_enum", native_enum=False),
        nullable=False,
    )
    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=False)
    duration = Column(String(64), nullable=True)
    location = Column(String(255), nullable=True)
    requested_by = Column(String(255), nullable=False)

    participants = Column(JSON, nullable=False, default=list)
    agenda = Column(Text, nullable=True)
    purpose = Column(Text, nullable=False)
    minutes = Column(Text, nullable=True)
    decisions = Column(JSON, nullable=False, default=list)
    follow_up_actions = Column(JSON, nullable=False, default=list)

    status = Column(
        Enum(MeetingCallStatus, name="meeting_call_status_enum", native_enum=False),
        nullable=False,
        default=MeetingCallStatus.SCHEDULED,
        index=True,
    )
    postponed_to = Column(DateTime(timezone=True), nullable=True)
    reason = Column(Text, nullable=True)

    created_by = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    attachments = relationship(
        "Attachment",
        primaryjoin=lambda: and_(
            foreign(Attachment.entity_id) == MeetingCall.id,
            Attachment.entity_type == AttachmentOwner.MEETING_CALL,
        ),
        viewonly=True,
        lazy="selectin",
        order_by="Attachment.uploaded_at",
    )

    def __repr__(self) -> str:
        return f"<MeetingCall {self.reference_number} {self.status}>"
