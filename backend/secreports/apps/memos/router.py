# backend/secreports/apps/memos/router.py

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from ...database import get_db, get_read_db
from ...permissions import require_admin, require_permission
from ...schemas import ApiResponse, ListResponse, PageParams, list_response, ok, page_params
from ...storage import attachment_upload
from ..accounts import models as account_models
from ..attachments import services as attachment_services
from ..attachments.models import AttachmentOwner
from ..attachments.schemas import AttachmentRead
from . import schemas, services
from .models import MemoReleaseStatus, MemoReleaseType

router = APIRouter(prefix="/memos", tags=["memos"])


@router.get("", response_model=ListResponse[schemas.MemoReleaseRead])
def list_memo_releases(
    kind: Optional[MemoReleaseType] = Query(None, alias="type"),
    memo_status: Optional[MemoReleaseStatus] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    governorate: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("memos", "read")),
):
    filters = schemas.MemoReleaseFilters(
        type=kind,
        status=memo_status,
        start_date=start_date,
        end_date=end_date,
        governorate=governorate,
        search=search,
    )
    items, total = services.list_memo_releases(db, filters=filters, params=params)
    return list_response(items, schema=schemas.MemoReleaseRead, total=total, params=params)


@router.get("/{memo_release_id}", response_model=ApiResponse[schemas.MemoReleaseRead])
def get_memo_release(
    memo_release_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("memos", "read")),
):
    return ok(schemas.MemoReleaseRead.model_validate(services.get_memo_release(db, memo_release_id)))


@router.post(
    "",
    response_model=ApiResponse[schemas.MemoReleaseRead],
    status_code=status.HTTP_201_CREATED,
)
def create_memo_release(
    payload: schemas.MemoReleaseCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("memos", "create")),
):
    item = services.create_memo_release(db, payload, actor=current_user, request=request)
    return ok(schemas.MemoReleaseRead.model_validate(item), "Memo/release created.")


@router.put("/{memo_release_id}", response_model=ApiResponse[schemas.MemoReleaseRead])
def update_memo_release(
    memo_release_id: str,
    payload: schemas.MemoReleaseUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("memos", "update")),
):
    item = services.get_memo_release(db, memo_release_id)
    item = services.update_memo_release(db, item, payload, actor=current_user, request=request)
    return ok(schemas.MemoReleaseRead.model_validate(item), "Memo/release updated.")


@router.delete("/{memo_release_id}", response_model=ApiResponse[None])
def delete_memo_release(
    memo_release_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    item = services.get_memo_release(db, memo_release_id)
    services.delete_memo_release(db, item, actor=current_user, request=request)
    return ok(message="Memo/release deleted.")


@router.post(
    "/{memo_release_id}/attachments",
    response_model=ApiResponse[AttachmentRead],
    status_code=status.HTTP_201_CREATED,
)
def add_memo_release_attachment(
    memo_release_id: str,
    request: Request,
    upload: UploadFile = Depends(attachment_upload),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("memos", "update")),
):
    item = services.get_memo_release(db, memo_release_id)
    attachment = attachment_services.add_attachment(
        db,
        entity_type=AttachmentOwner.MEMO_RELEASE,
        entity_id=item.id,
        upload=upload,
        actor=current_user,
        module=services.MODULE,
        request=request,
    )
    return ok(AttachmentRead.model_validate(attachment), "Attachment added.")


@router.delete("/{memo_release_id}/attachments/{attachment_id}", response_model=ApiResponse[None])
def remove_memo_release_attachment(
    memo_release_id: str,
    attachment_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("memos", "update")),
):
    item = services.get_memo_release(db, memo_release_id)
    attachment_services.remove_attachment(
        db,
        entity_type=AttachmentOwner.MEMO_RELEASE,
        entity_id=item.id,
        attachment_id=attachment_id,
        actor=current_user,
        module=services.MODULE,
        request=request,
    )
    return ok(message="Attachment removed.")
