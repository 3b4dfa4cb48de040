from __future__ import annotations

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, field_validator

from ...schemas import CamelModel
from ..attachments.schemas import AttachmentRead
from ..governorates.schemas import GovernorateSummary
from .models import EventStatus, EventType, Severity


def _status_alias(value):
    if isinstance(value, str) and value.strip().lower() == "finished":
        return EventStatus.RESOLVED.value
    return value


class Casualties(CamelModel):
    killed: int = Field(default=0, ge=0)
    injured: int = Field(default=0, ge=0)
    arrested: int = Field(default=0, ge=0)


class EventCreate(CamelModel):
    report_id: str
    governorate_id: str
    region: str = Field(..., min_length=1)
    event_date: date
    event_time: time
    event_type: EventType
    severity: Severity = Severity.MEDIUM
    description: str = Field(..., min_length=1)
    involved_parties: List[str] = Field(default_factory=list)
    palestinian_intervention: Optional[str] = None
    israeli_response: Optional[str] = None
    results: Optional[str] = None
    casualties: Casualties = Field(default_factory=Casualties)
    status: EventStatus = EventStatus.ONGOING
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    _normalise_status = field_validator("status", mode="before")(_status_alias)

    @field_validator("description")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("region")
    @classmethod
    def _region_not_blank(cls, value: str) -> str:
        # Kept verbatim; it must match a governorate region exactly.
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class EventUpdate(CamelModel):
    """`reportId` and `eventNumber` are fixed at creation and not accepted here."""

    governorate_id: Optional[str] = None
    region: Optional[str] = None
    event_date: Optional[date] = None
    event_time: Optional[time] = None
    event_type: Optional[EventType] = None
    severity: Optional[Severity] = None
    description: Optional[str] = None
    involved_parties: Optional[List[str]] = None
    palestinian_intervention: Optional[str] = None
    israeli_response: Optional[str] = None
    results: Optional[str] = None
    casualties: Optional[Casualties] = None
    status: Optional[EventStatus] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    _normalise_status = field_validator("status", mode="before")(_status_alias)


class EventRead(CamelModel):
    id: str
    report_id: str
    event_number: str
    governorate_id: str
    governorate: Optional[GovernorateSummary] = None
    region: str
    event_date: date
    event_time: time
    event_type: EventType
    severity: Severity
    description: str
    involved_parties: List[str] = Field(default_factory=list)
    palestinian_intervention: Optional[str] = None
    israeli_response: Optional[str] = None
    results: Optional[str] = None
    casualties: Casualties
    status: EventStatus
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    attachments: List[AttachmentRead] = Field(default_factory=list)
    created_by: str
    created_at: datetime
    updated_at: datetime


class EventFilters(CamelModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    report_id: Optional[str] = None
    governorate: Optional[str] = None
    region: Optional[str] = None
    event_type: Optional[EventType] = None
    severity: Optional[Severity] = None
    status: Optional[EventStatus] = None

    _normalise_status = field_validator("status", mode="before")(_status_alias)
