from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, JSON, String

from ...database import Base
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Governorate(Base):
    """
    Administrative area that events are located in.

    `regions` is an ordered list of place names. Events validate their region
    against it when written; later edits here never touch existing events.
    """

    __tablename__ = "governorates"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    name = Column(String(255), nullable=False, index=True)
    code = Column(String(16), nullable=False, unique=True, index=True)
    regions = Column(JSON, nullable=False, default=list)

    address = Column(String(255), nullable=False, default="")
    phone = Column(String(64), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")

    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def has_region(self, region: str) -> bool:
        return region in (self.regions or [])

    def __repr__(self) -> str:
        return f"<Governorate {self.code} {self.name}>"
