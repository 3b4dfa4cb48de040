# backend/secreports/apps/events/router.py

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from ...database import get_db, get_read_db
from ...permissions import require_permission
from ...schemas import ApiResponse, ListResponse, PageParams, list_response, ok, page_params
from ...storage import attachment_upload
from ..accounts import models as account_models
from ..attachments import services as attachment_services
from ..attachments.models import AttachmentOwner
from ..attachments.schemas import AttachmentRead
from . import schemas, services
from .models import EventType, Severity

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=ListResponse[schemas.EventRead])
def list_events(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    report_id: Optional[str] = Query(None, alias="reportId"),
    governorate: Optional[str] = Query(None),
    region: Optional[str] = Query(None),
    event_type: Optional[EventType] = Query(None, alias="eventType"),
    severity: Optional[Severity] = Query(None),
    event_status: Optional[str] = Query(None, alias="status"),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("events", "read")),
):
    filters = schemas.EventFilters(
        start_date=start_date,
        end_date=end_date,
        report_id=report_id,
        governorate=governorate,
        region=region,
        event_type=event_type,
        severity=severity,
        status=event_status,
    )
    items, total = services.list_events(db, filters=filters, params=params)
    return list_response(items, schema=schemas.EventRead, total=total, params=params)


@router.get("/by-governorate/{governorate_id}", response_model=ListResponse[schemas.EventRead])
def list_events_by_governorate(
    governorate_id: str,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("events", "read")),
):
    items, total = services.list_events_by_governorate(db, governorate_id, params=params)
    return list_response(items, schema=schemas.EventRead, total=total, params=params)


@router.get("/{event_id}", response_model=ApiResponse[schemas.EventRead])
def get_event(
    event_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("events", "read")),
):
    return ok(schemas.EventRead.model_validate(services.get_event(db, event_id)))


@router.post(
    "",
    response_model=ApiResponse[schemas.EventRead],
    status_code=status.HTTP_201_CREATED,
)
def create_event(
    payload: schemas.EventCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("events", "create")),
):
    event = services.create_event(db, payload, actor=current_user, request=request)
    return ok(schemas.EventRead.model_validate(event), "Event created.")


@router.put("/{event_id}", response_model=ApiResponse[schemas.EventRead])
def update_event(
    event_id: str,
    payload: schemas.EventUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("events", "update")),
):
    event = services.get_event(db, event_id)
    event = services.update_event(db, event, payload, actor=current_user, request=request)
    return ok(schemas.EventRead.model_validate(event), "Event updated.")


@router.delete("/{event_id}", response_model=ApiResponse[None])
def delete_event(
    event_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("events", "delete")),
):
    services.delete_event(db, event_id, actor=current_user, request=request)
    return ok(message="Event deleted.")


@router.post(
    "/{event_id}/attachments",
    response_model=ApiResponse[AttachmentRead],
    status_code=status.HTTP_201_CREATED,
)
def add_event_attachment(
    event_id: str,
    request: Request,
    upload: UploadFile = Depends(attachment_upload),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("events", "update")),
):
    event = services.get_event(db, event_id)
    attachment = attachment_services.add_attachment(
        db,
        entity_type=AttachmentOwner.EVENT,
        entity_id=event.id,
        upload=upload,
        actor=current_user,
        module=services.MODULE,
        request=request,
    )
    return ok(AttachmentRead.model_validate(attachment), "Attachment added.")


@router.delete("/{event_id}/attachments/{attachment_id}", response_model=ApiResponse[None])
def remove_event_attachment(
    event_id: str,
    attachment_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("events", "update")),
):
    event = services.get_event(db, event_id)
    attachment_services.remove_attachment(
        db,
        entity_type=AttachmentOwner.EVENT,
        entity_id=event.id,
        attachment_id=attachment_id,
        actor=current_user,
        module=services.MODULE,
        request=request,
    )
    return ok(message="Attachment removed.")
