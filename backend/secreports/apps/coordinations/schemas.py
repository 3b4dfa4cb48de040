from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ...schemas import CamelModel
from ..governorates.schemas import GovernorateSummary
from .models import CoordinationStatus, Department, Priority


class CoordinationBase(CamelModel):
    request_date: date
    request_time: datetime
    movement_time: datetime
    return_time: Optional[datetime] = None
    governorate_id: str
    from_location: str = Field(..., min_length=1)
    to_location: str = Field(..., min_length=1)
    route_details: Optional[str] = None
    department: Department
    forces: int = Field(..., ge=1)
    vehicles: int = Field(default=0, ge=0)
    vehicle_types: List[str] = Field(default_factory=list)
    weapons: int = Field(default=0, ge=0)
    weapon_types: List[str] = Field(default_factory=list)
    purpose: str = Field(..., min_length=1)
    estimated_duration: Optional[str] = None
    priority: Priority = Priority.NORMAL
    notes: Optional[str] = None

    @field_validator("from_location", "to_location", "purpose")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class CoordinationCreate(CoordinationBase):
    pass


class CoordinationUpdate(CamelModel):
    request_date: Optional[date] = None
    request_time: Optional[datetime] = None
    movement_time: Optional[datetime] = None
    return_time: Optional[datetime] = None
    approval_time: Optional[datetime] = None
    governorate_id: Optional[str] = None
    from_location: Optional[str] = None
    to_location: Optional[str] = None
    route_details: Optional[str] = None
    department: Optional[Department] = None
    forces: Optional[int] = Field(default=None, ge=1)
    vehicles: Optional[int] = Field(default=None, ge=0)
    vehicle_types: Optional[List[str]] = None
    weapons: Optional[int] = Field(default=None, ge=0)
    weapon_types: Optional[List[str]] = None
    purpose: Optional[str] = None
    estimated_duration: Optional[str] = None
    status: Optional[CoordinationStatus] = None
    priority: Optional[Priority] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None


class CoordinationRead(CoordinationBase):
    id: str
    request_number: str
    approval_time: Optional[datetime] = None
    governorate: Optional[GovernorateSummary] = None
    status: CoordinationStatus
    rejection_reason: Optional[str] = None
    approved_by: Optional[str] = None
    requested_by: str
    created_at: datetime
    updated_at: datetime


class CoordinationFilters(CamelModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[CoordinationStatus] = None
    priority: Optional[Priority] = None
    department: Optional[Department] = None
    governorate: Optional[str] = None
