from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ...schemas import CamelModel
from ..attachments.schemas import AttachmentRead
from .models import MeetingCallStatus, MeetingCallType


class Participant(CamelModel):
    name: str = Field(..., min_length=1)
    position: Optional[str] = None
    organization: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Participant name is required")
        return value


class FollowUpAction(CamelModel):
    action: str = Field(..., min_length=1)
    assigned_to: Optional[str] = None
    due_date: Optional[dt.date] = None


class MeetingCallBase(CamelModel):
    type: MeetingCallType
    date: dt.date
    time: dt.time
    duration: Optional[str] = None
    location: Optional[str] = None
    requested_by: str = Field(..., min_length=1)
    participants: List[Participant] = Field(..., min_length=1)
    agenda: Optional[str] = None
    purpose: str = Field(..., min_length=1)
    minutes: Optional[str] = None
    decisions: List[str] = Field(default_factory=list)
    follow_up_actions: List[FollowUpAction] = Field(default_factory=list)
    postponed_to: Optional[dt.datetime] = None
    reason: Optional[str] = None


class MeetingCallCreate(MeetingCallBase):
    status: MeetingCallStatus = MeetingCallStatus.SCHEDULED

    @model_validator(mode="after")
    def _location_for_meetings(self) -> "MeetingCallCreate":
        if self.type == MeetingCallType.MEETING and not (self.location or "").strip():
            raise ValueError("Location is required for meetings")
        return self


class MeetingCallUpdate(CamelModel):
    """`type` is fixed at creation; it is part of the reference number."""

    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    requested_by: Optional[str] = None
    participants: Optional[List[Participant]] = Field(default=None, min_length=1)
    agenda: Optional[str] = None
    purpose: Optional[str] = None
    minutes: Optional[str] = None
    decisions: Optional[List[str]] = None
    follow_up_actions: Optional[List[FollowUpAction]] = None
    status: Optional[MeetingCallStatus] = None
    postponed_to: Optional[dt.datetime] = None
    reason: Optional[str] = None


class MeetingCallRead(MeetingCallBase):
    id: str
    reference_number: str
    status: MeetingCallStatus
    attachments: List[AttachmentRead] = Field(default_factory=list)
    created_by: str
    created_at: dt.datetime
    updated_at: dt.datetime


class MeetingCallFilters(CamelModel):
    type: Optional[MeetingCallType] = None
    status: Optional[MeetingCallStatus] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
