# backend/secreports/apps/meetings/router.py

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
from .models import MeetingCallStatus, MeetingCallType

router = APIRouter(prefix="/meetings", tags=["meetings"])


@router.get("", response_model=ListResponse[schemas.MeetingCallRead])
def list_meeting_calls(
    kind: Optional[MeetingCallType] = Query(None, alias="type"),
    meeting_status: Optional[MeetingCallStatus] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("meetings", "read")),
):
    filters = schemas.MeetingCallFilters(
        type=kind,
        status=meeting_status,
        start_date=start_date,
        end_date=end_date,
    )
    items, total = services.list_meeting_calls(db, filters=filters, params=params)
    return list_response(items, schema=schemas.MeetingCallRead, total=total, params=params)


@router.get("/{meeting_call_id}", response_model=ApiResponse[schemas.MeetingCallRead])
def get_meeting_call(
    meeting_call_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("meetings", "read")),
):
    return ok(schemas.MeetingCallRead.model_validate(services.get_meeting_call(db, meeting_call_id)))


@router.post(
    "",
    response_model=ApiResponse[schemas.MeetingCallRead],
    status_code=status.HTTP_201_CREATED,
)
def create_meeting_call(
    payload: schemas.MeetingCallCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("meetings", "create")),
):
    item = services.create_meeting_call(db, payload, actor=current_user, request=request)
    return ok(schemas.MeetingCallRead.model_validate(item), "Meeting/call recorded.")


@router.put("/{meeting_call_id}", response_model=ApiResponse[schemas.MeetingCallRead])
def update_meeting_call(
    meeting_call_id: str,
    payload: schemas.MeetingCallUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("meetings", "update")),
):
    item = services.get_meeting_call(db, meeting_call_id)
    item = services.update_meeting_call(db, item, payload, actor=current_user, request=request)
    return ok(schemas.MeetingCallRead.model_validate(item), "Meeting/call updated.")


@router.delete("/{meeting_call_id}", response_model=ApiResponse[None])
def delete_meeting_call(
    meeting_call_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    item = services.get_meeting_call(db, meeting_call_id)
    services.delete_meeting_call(db, item, actor=current_user, request=request)
    return ok(message="Meeting/call deleted.")


@router.post(
    "/{meeting_call_id}/attachments",
    response_model=ApiResponse[AttachmentRead],
    status_code=status.HTTP_201_CREATED,
)
def add_meeting_call_attachment(
    meeting_call_id: str,
    request: Request,
    upload: UploadFile = Depends(attachment_upload),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("meetings", "update")),
):
    item = services.get_meeting_call(db, meeting_call_id)
    attachment = attachment_services.add_attachment(
        db,
        entity_type=AttachmentOwner.MEETING_CALL,
        entity_id=item.id,
        upload=upload,
        actor=current_user,
        module=services.MODULE,
        request=request,
    )
    return ok(AttachmentRead.model_validate(attachment), "Attachment added.")


@router.delete("/{meeting_call_id}/attachments/{attachment_id}", response_model=ApiResponse[None])
def remove_meeting_call_attachment(
    meeting_call_id: str,
    attachment_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("meetings", "update")),
):
    item = services.get_meeting_call(db, meeting_call_id)
    attachment_services.remove_attachment(
        db,
        entity_type=AttachmentOwner.MEETING_CALL,
        entity_id=item.id,
        attachment_id=attachment_id,
        actor=current_user,
        module=services.MODULE,
        request=request,
    )
    return ok(message="Attachment removed.")
