from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, JSON, String, desc

from ...database import Base
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SystemLog(Base):
    """
    Append-only record of who did what, from where.
    """

    __tablename__ = "system_logs"
    __table_args__ = (
        Index("ix_system_logs_user_time", "user_id", desc("timestamp")),
        Index("ix_system_logs_module_action", "module", "action"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(64), nullable=False, index=True)
    module = Column(String(64), nullable=False, index=True)
    resource_id = Column(String(64), nullable=True, index=True)
    details = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    def __repr__(self) -> str:
        return f"<SystemLog id={self.id} {self.module}.{self.action} resource={self.resource_id}>"
