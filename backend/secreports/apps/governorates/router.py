# backend/secreports/apps/governorates/router.py

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ...permissions import require_admin
from ...schemas import DEFAULT_LIMIT, ApiResponse, ListResponse, PageParams, list_response, ok
from ..accounts import models as account_models
from . import schemas, services

router = APIRouter(prefix="/governorates", tags=["governorates"])


# ---------------------------------------------------------------------------
# PUBLIC LOOKUPS
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=ListResponse[schemas.GovernorateRead],
    summary="List active governorates, sorted by name",
)
def list_governorates(db: Session = Depends(get_read_db)):
    items = services.list_governorates(db)
    # Unpaginated: everything comes back as a single page.
    params = PageParams(page=1, limit=len(items) or DEFAULT_LIMIT)
    return list_response(items, schema=schemas.GovernorateRead, total=len(items), params=params)


@router.get("/{governorate_id}", response_model=ApiResponse[schemas.GovernorateRead])
def get_governorate(governorate_id: str, db: Session = Depends(get_read_db)):
    governorate = services.get_governorate(db, governorate_id)
    return ok(schemas.GovernorateRead.model_validate(governorate))


@router.get("/{governorate_id}/regions", response_model=ApiResponse[List[str]])
def list_regions(governorate_id: str, db: Session = Depends(get_read_db)):
    governorate = services.get_governorate(db, governorate_id)
    return ok(list(governorate.regions or []))


# ---------------------------------------------------------------------------
# ADMIN
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ApiResponse[schemas.GovernorateRead],
    status_code=status.HTTP_201_CREATED,
)
def create_governorate(
    payload: schemas.GovernorateCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    governorate = services.create_governorate(db, payload, actor=current_user, request=request)
    return ok(schemas.GovernorateRead.model_validate(governorate), "Governorate created.")


@router.put("/{governorate_id}", response_model=ApiResponse[schemas.GovernorateRead])
def update_governorate(
    governorate_id: str,
    payload: schemas.GovernorateUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    governorate = services.get_governorate(db, governorate_id)
    governorate = services.update_governorate(db, governorate, payload, actor=current_user, request=request)
    return ok(schemas.GovernorateRead.model_validate(governorate), "Governorate updated.")


@router.delete("/{governorate_id}", response_model=ApiResponse[None])
def delete_governorate(
    governorate_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    """Soft delete: the governorate stays referenced by its events."""
    governorate = services.get_governorate(db, governorate_id)
    services.deactivate_governorate(db, governorate, actor=current_user, request=request)
    return ok(message="Governorate deactivated.")


@router.post(
    "/{governorate_id}/regions",
    response_model=ApiResponse[schemas.GovernorateRead],
)
def add_region(
    governorate_id: str,
    payload: schemas.RegionCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    governorate = services.get_governorate(db, governorate_id)
    governorate = services.add_region(db, governorate, payload.region, actor=current_user, request=request)
    return ok(schemas.GovernorateRead.model_validate(governorate), "Region added.")


@router.delete(
    "/{governorate_id}/regions/{region}",
    response_model=ApiResponse[schemas.GovernorateRead],
)
def remove_region(
    governorate_id: str,
    region: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    governorate = services.get_governorate(db, governorate_id)
    governorate = services.remove_region(db, governorate, region, actor=current_user, request=request)
    return ok(schemas.GovernorateRead.model_validate(governorate), "Region removed.")
