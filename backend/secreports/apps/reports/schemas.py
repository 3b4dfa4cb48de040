from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from ...schemas import CamelModel
from ..attachments.schemas import AttachmentRead
from ..governorates.schemas import GovernorateSummary
from .models import ReportStatus, ReportType


class ReportCreate(CamelModel):
    report_date: datetime
    report_type: ReportType
    report_number: Optional[str] = Field(default=None, max_length=32)
    status: ReportStatus = ReportStatus.DRAFT
    summary: Optional[str] = None
    governorates: List[str] = Field(default_factory=list, description="Governorate ids")


class ReportUpdate(CamelModel):
    report_date: Optional[datetime] = None
    report_type: Optional[ReportType] = None
    status: Optional[ReportStatus] = None
    summary: Optional[str] = None
    governorates: Optional[List[str]] = None


class ReportRead(CamelModel):
    id: str
    report_number: str
    report_date: datetime
    report_type: ReportType
    status: ReportStatus
    summary: Optional[str] = None
    event_count: int
    governorates: List[GovernorateSummary] = Field(default_factory=list)
    attachments: List[AttachmentRead] = Field(default_factory=list)
    created_by: str
    approved_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ReportFilters(CamelModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    report_type: Optional[ReportType] = None
    status: Optional[ReportStatus] = None
    governorate: Optional[str] = None
