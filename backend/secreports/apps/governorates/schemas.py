from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ...schemas import CamelModel


class GovernorateBase(CamelModel):
    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=16)
    regions: List[str] = Field(default_factory=list)
    address: str = ""
    phone: str = ""
    email: str = ""

    @field_validator("name", "code")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class GovernorateCreate(GovernorateBase):
    pass


class GovernorateUpdate(CamelModel):
    name: Optional[str] = None
    code: Optional[str] = None
    regions: Optional[List[str]] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None


class GovernorateRead(GovernorateBase):
    id: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class GovernorateSummary(CamelModel):
    id: str
    name: str
    code: str


class RegionCreate(CamelModel):
    region: str
