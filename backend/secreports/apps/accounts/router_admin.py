# backend/secreports/apps/accounts/router_admin.py

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ...permissions import require_admin
from ...schemas import ApiResponse, ListResponse, PageParams, list_response, ok, page_params
from ..audit import services as audit_services
from ..audit.schemas import SystemLogRead
from . import models, schemas, services
from .models import UserRole

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=ListResponse[schemas.UserRead])
def list_users(
    role: Optional[UserRole] = Query(None),
    governorate: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_read_db),
    current_user: models.User = Depends(require_admin),
):
    filters = schemas.UserFilters(role=role, governorate=governorate, is_active=is_active)
    items, total = services.list_users(db, filters=filters, params=params)
    return list_response(items, schema=schemas.UserRead, total=total, params=params)


@router.get("/{user_id}", response_model=ApiResponse[schemas.UserRead])
def get_user(
    user_id: str,
    db: Session = Depends(get_read_db),
    current_user: models.User = Depends(require_admin),
):
    return ok(schemas.UserRead.model_validate(services.get_user(db, user_id)))


@router.put("/{user_id}", response_model=ApiResponse[schemas.UserRead])
def update_user(
    user_id: str,
    payload: schemas.UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    user = services.get_user(db, user_id)
    user = services.update_user(db, user, payload, actor=current_user, request=request)
    return ok(schemas.UserRead.model_validate(user), "User updated.")


@router.patch("/{user_id}/reset-password", response_model=ApiResponse[None])
def reset_password(
    user_id: str,
    payload: schemas.PasswordReset,
    request: Request,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    user = services.get_user(db, user_id)
    services.reset_password(db, user, payload.new_password, actor=current_user, request=request)
    return ok(message="Password reset.")


@router.patch("/{user_id}/permissions", response_model=ApiResponse[schemas.UserRead])
def update_permissions(
    user_id: str,
    payload: schemas.PermissionsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    user = services.get_user(db, user_id)
    user = services.set_permissions(db, user, payload.permissions, actor=current_user, request=request)
    return ok(schemas.UserRead.model_validate(user), "Permissions updated.")


@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    """Soft delete: the account is deactivated, never removed."""
    user = services.get_user(db, user_id)
    services.deactivate_user(db, user, actor=current_user, request=request)
    return ok(message="User deactivated.")


@router.get("/{user_id}/logs", response_model=ListResponse[SystemLogRead])
def user_logs(
    user_id: str,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_read_db),
    current_user: models.User = Depends(require_admin),
):
    services.get_user(db, user_id)
    items, total = audit_services.list_user_logs(
        db, user_id=user_id, skip=params.skip, limit=params.limit
    )
    return list_response(items, schema=SystemLogRead, total=total, params=params)
