from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import Field

from ...schemas import CamelModel
from ..attachments.schemas import AttachmentRead
from ..governorates.schemas import GovernorateSummary
from .models import MemoReleaseStatus, MemoReleaseType


class MemoReleaseBase(CamelModel):
    type: MemoReleaseType
    date: dt.date
    time: dt.time
    location: Optional[str] = None
    subject: str = Field(..., min_length=1)
    content: Optional[str] = None
    governorate_id: str
    issued_to: Optional[str] = None
    issued_by: Optional[str] = None

    person_name: Optional[str] = None
    person_id: Optional[str] = None
    date_of_birth: Optional[dt.date] = None
    residence_place: Optional[str] = None
    detention_date: Optional[dt.date] = None
    release_date: Optional[dt.date] = None
    detention_period: Optional[str] = None
    detention_reason: Optional[str] = None


class MemoReleaseCreate(MemoReleaseBase):
    status: MemoReleaseStatus = MemoReleaseStatus.DRAFT


class MemoReleaseUpdate(CamelModel):
    """`type` is fixed at creation; it is part of the reference number."""

    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    location: Optional[str] = None
    subject: Optional[str] = None
    content: Optional[str] = None
    governorate_id: Optional[str] = None
    issued_to: Optional[str] = None
    issued_by: Optional[str] = None
    person_name: Optional[str] = None
    person_id: Optional[str] = None
    date_of_birth: Optional[dt.date] = None
    residence_place: Optional[str] = None
    detention_date: Optional[dt.date] = None
    release_date: Optional[dt.date] = None
    detention_period: Optional[str] = None
    detention_reason: Optional[str] = None
    status: Optional[MemoReleaseStatus] = None


class MemoReleaseRead(MemoReleaseBase):
    id: str
    reference_number: str
    status: MemoReleaseStatus
    governorate: Optional[GovernorateSummary] = None
    attachments: List[AttachmentRead] = Field(default_factory=list)
    created_by: str
    created_at: dt.datetime
    updated_at: dt.datetime


class MemoReleaseFilters(CamelModel):
    type: Optional[MemoReleaseType] = None
    status: Optional[MemoReleaseStatus] = None
    governorate: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    search: Optional[str] = None
