from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    and_,
)
from sqlalchemy.orm import foreign, relationship

from ...database import Base
from ...utils.identifiers import generate_uuid7
from ..attachments.models import Attachment, AttachmentOwner


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportType(str, enum.Enum):
    MORNING = "morning"
    EVENING = "evening"


class ReportStatus(str, enum.Enum):
    DRAFT = "draft"
    COMPLETE = "complete"
    APPROVED = "approved"
    ARCHIVED = "archived"


report_governorates = Table(
    "report_governorates",
    Base.metadata,
    Column("report_id", String(36), ForeignKey("daily_reports.id", ondelete="CASCADE"), primary_key=True),
    Column("governorate_id", String(36), ForeignKey("governorates.id", ondelete="CASCADE"), primary_key=True),
)


class DailyReport(Base):
    """
    Morning or evening situation report that groups the day's events.

    `event_count` is recomputed from the events table whenever an event is
    added or removed, under a lock on this row.
    """

    __tablename__ = "daily_reports"
    __table_args__ = (
        Index("ix_daily_reports_date_type", "report_date", "report_type"),
        Index("ix_daily_reports_status_date", "status", "report_date"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    report_number = Column(String(32), nullable=False, unique=True, index=True)
    report_date = Column(DateTime(timezone=True), nullable=False, index=True)
    report_type = Column(
        Enum(ReportType, name="report_type_enum", native_enum=False),
        nullable=False,
    )
    status = Column(
        Enum(ReportStatus, name="report_status_enum", native_enum=False),
        nullable=False,
        default=ReportStatus.DRAFT,
    )
    summary = Column(Text, nullable=True)
    event_count = Column(Integer, nullable=False, default=0)

    created_by = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    approved_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    governorates = relationship(
        "Governorate",
        secondary=report_governorates,
        lazy="selectin",
        order_by="Governorate.name",
    )
    events = relationship(
        "Event",
        back_populates="report",
        passive_deletes=True,
    )
    attachments = relationship(
        "Attachment",
        primaryjoin=lambda: and_(
            foreign(Attachment.entity_id) == DailyReport.id,
            Attachment.entity_type == AttachmentOwner.REPORT,
        ),
        viewonly=True,
        lazy="selectin",
        order_by="Attachment.uploaded_at",
    )

    def __repr__(self) -> str:
        return f"<DailyReport {self.report_number} {self.status}>"
