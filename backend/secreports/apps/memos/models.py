from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Index, String, Text, Time, and_
from sqlalchemy.orm import foreign, relationship

from ...database import Base
from ...utils.identifiers import generate_uuid7
from ..attachments.models import Attachment, AttachmentOwner


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoReleaseType(str, enum.Enum):
    MEMO = "memo"
    RELEASE = "release"


class MemoReleaseStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    RECEIVED = "received"
    PROCESSED = "processed"


class MemoRelease(Base):
    """
    Official memo, or release notice for a detained person.

    The person_* / detention_* / release_date columns are only filled for
    releases.
    """

    __tablename__ = "memo_releases"
    __table_args__ = (
        Index("ix_memo_releases_type_date", "type", "date"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    reference_number = Column(String(32), nullable=False, unique=True, index=True)
    type = Column(
        Enum(MemoReleaseType, name="memo_release_type_enum", native_enum=False),
        nullable=False,
    )
    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=False)
    location = Column(String(255), nullable=True)
    subject = Column(String(512), nullable=False)
    content = Column(Text, nullable=True)

    governorate_id = Column(
        String(36),
        ForeignKey("governorates.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    issued_to = Column(String(255), nullable=True)
    issued_by = Column(String(255), nullable=True)

    person_name = Column(String(255), nullable=True, index=True)
    person_id = Column(String(64), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    residence_place = Column(String(255), nullable=True)
    detention_date = Column(Date, nullable=True)
    release_date = Column(Date, nullable=True)
    detention_period = Column(String(64), nullable=True)
    detention_reason = Column(Text, nullable=True)

    status = Column(
        Enum(MemoReleaseStatus, name="memo_release_status_enum", native_enum=False),
        nullable=False,
        default=MemoReleaseStatus.DRAFT,
        index=True,
    )

    created_by = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    governorate = relationship("Governorate", lazy="joined")
    attachments = relationship(
        "Attachment",
        primaryjoin=lambda: and_(
            foreign(Attachment.entity_id) == MemoRelease.id,
            Attachment.entity_type == AttachmentOwner.MEMO_RELEASE,
        ),
        viewonly=True,
        lazy="selectin",
        order_by="Attachment.uploaded_at",
    )

    def __repr__(self) -> str:
        return f"<MemoRelease {self.reference_number} {self.status}>"
