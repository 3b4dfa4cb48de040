# backend/secreports/apps/accounts/schemas.py

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from ...schemas import CamelModel
from ..governorates.schemas import GovernorateSummary
from .models import PermissionAction, PermissionModule, UserRole

# ---------------------------------------------------------------------------
# PERMISSIONS
# ---------------------------------------------------------------------------


class PermissionGrant(CamelModel):
    module: PermissionModule
    actions: List[PermissionAction] = Field(default_factory=lambda: [PermissionAction.READ])


class PermissionsUpdate(CamelModel):
    permissions: List[PermissionGrant]


# ---------------------------------------------------------------------------
# USERS
# ---------------------------------------------------------------------------


class UserBase(CamelModel):
    full_name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    role: UserRole = UserRole.VIEWER
    governorate_id: Optional[str] = None
    department: str = ""


class UserCreate(UserBase):
    username: str = Field(..., min_length=3, max_length=64)
    password: str
    permissions: List[PermissionGrant] = Field(default_factory=list)

    @field_validator("username")
    @classmethod
    def _normalise_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username is required")
        return value


class UserUpdate(CamelModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    role: Optional[UserRole] = None
    governorate_id: Optional[str] = None
    department: Optional[str] = None
    permissions: Optional[List[PermissionGrant]] = None
    is_active: Optional[bool] = None


class UserRead(UserBase):
    id: str
    username: str
    governorate: Optional[GovernorateSummary] = None
    permissions: List[PermissionGrant] = Field(default_factory=list)
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserFilters(CamelModel):
    role: Optional[UserRole] = None
    governorate: Optional[str] = None
    is_active: Optional[bool] = None


# ---------------------------------------------------------------------------
# AUTH
# ---------------------------------------------------------------------------


class LoginRequest(CamelModel):
    username: str
    password: str


class RefreshRequest(CamelModel):
    refresh_token: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRead


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str


class PasswordReset(CamelModel):
    new_password: str
