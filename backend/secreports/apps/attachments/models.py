from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String

from ...database import Base
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttachmentOwner(str, enum.Enum):
    REPORT = "report"
    EVENT = "event"
    MEETING_CALL = "meeting_call"
    MEMO_RELEASE = "memo_release"


class Attachment(Base):
    """
    File uploaded against a report, event, meeting/call or memo/release.

    Owners expose these through a view-only relationship filtered on
    `entity_type`; rows are only ever written through
    `secreports.apps.attachments.services`.
    """

    __tablename__ = "attachments"
    __table_args__ = (
        Index("ix_attachments_owner", "entity_type", "entity_id", "uploaded_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    entity_type = Column(
        Enum(AttachmentOwner, name="attachment_owner_enum", native_enum=False),
        nullable=False,
    )
    entity_id = Column(String(36), nullable=False)

    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    path = Column(String(1024), nullable=False)
    mimetype = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False, default=0)

    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    uploaded_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self) -> str:
        return f"<Attachment {self.entity_type}:{self.entity_id} {self.original_name}>"
