# backend/secreports/apps/coordinations/router.py

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ...permissions import require_admin, require_permission
from ...schemas import ApiResponse, ListResponse, PageParams, list_response, ok, page_params
from ..accounts import models as account_models
from . import schemas, services
from .models import CoordinationStatus, Department, Priority

router = APIRouter(prefix="/coordinations", tags=["coordinations"])


@router.get("", response_model=ListResponse[schemas.CoordinationRead])
def list_coordinations(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    coordination_status: Optional[CoordinationStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    department: Optional[Department] = Query(None),
    governorate: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("coordinations", "read")),
):
    filters = schemas.CoordinationFilters(
        start_date=start_date,
        end_date=end_date,
        status=coordination_status,
        priority=priority,
        department=department,
        governorate=governorate,
    )
    items, total = services.list_coordinations(db, filters=filters, params=params)
    return list_response(items, schema=schemas.CoordinationRead, total=total, params=params)


@router.get("/{coordination_id}", response_model=ApiResponse[schemas.CoordinationRead])
def get_coordination(
    coordination_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("coordinations", "read")),
):
    coordination = services.get_coordination(db, coordination_id)
    return ok(schemas.CoordinationRead.model_validate(coordination))


@router.post(
    "",
    response_model=ApiResponse[schemas.CoordinationRead],
    status_code=status.HTTP_201_CREATED,
)
def create_coordination(
    payload: schemas.CoordinationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("coordinations", "create")),
):
    coordination = services.create_coordination(db, payload, actor=current_user, request=request)
    return ok(schemas.CoordinationRead.model_validate(coordination), "Coordination request created.")


@router.put("/{coordination_id}", response_model=ApiResponse[schemas.CoordinationRead])
def update_coordination(
    coordination_id: str,
    payload: schemas.CoordinationUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("coordinations", "update")),
):
    coordination = services.get_coordination(db, coordination_id)
    coordination = services.update_coordination(db, coordination, payload, actor=current_user, request=request)
    return ok(schemas.CoordinationRead.model_validate(coordination), "Coordination request updated.")


@router.delete("/{coordination_id}", response_model=ApiResponse[None])
def delete_coordination(
    coordination_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    coordination = services.get_coordination(db, coordination_id)
    services.delete_coordination(db, coordination, actor=current_user, request=request)
    return ok(message="Coordination request deleted.")
