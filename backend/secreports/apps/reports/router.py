# backend/secreports/apps/reports/router.py

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from ...database import get_db, get_read_db
from ...permissions import require_permission, require_roles
from ...schemas import ApiResponse, ListResponse, PageParams, list_response, ok, page_params
from ...storage import attachment_upload
from ..accounts import models as account_models
from ..accounts.models import UserRole
from ..attachments import services as attachment_services
from ..attachments.models import AttachmentOwner
from ..attachments.schemas import AttachmentRead
from ..events.schemas import EventRead
from . import schemas, services
from .models import ReportStatus, ReportType

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=ListResponse[schemas.ReportRead])
def list_reports(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    report_type: Optional[ReportType] = Query(None, alias="reportType"),
    report_status: Optional[ReportStatus] = Query(None, alias="status"),
    governorate: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("reports", "read")),
):
    filters = schemas.ReportFilters(
        start_date=start_date,
        end_date=end_date,
        report_type=report_type,
        status=report_status,
        governorate=governorate,
    )
    items, total = services.list_reports(db, filters=filters, params=params)
    return list_response(items, schema=schemas.ReportRead, total=total, params=params)


@router.get("/{report_id}", response_model=ApiResponse[schemas.ReportRead])
def get_report(
    report_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("reports", "read")),
):
    return ok(schemas.ReportRead.model_validate(services.get_report(db, report_id)))


@router.post(
    "",
    response_model=ApiResponse[schemas.ReportRead],
    status_code=status.HTTP_201_CREATED,
)
def create_report(
    payload: schemas.ReportCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("reports", "create")),
):
    report = services.create_report(db, payload, actor=current_user, request=request)
    return ok(schemas.ReportRead.model_validate(report), "Daily report created.")


@router.put("/{report_id}", response_model=ApiResponse[schemas.ReportRead])
def update_report(
    report_id: str,
    payload: schemas.ReportUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("reports", "update")),
):
    report = services.get_report(db, report_id)
    report = services.update_report(db, report, payload, actor=current_user, request=request)
    return ok(schemas.ReportRead.model_validate(report), "Daily report updated.")


@router.delete("/{report_id}", response_model=ApiResponse[None])
def delete_report(
    report_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(UserRole.SUPERVISOR)),
):
    services.delete_report(db, report_id, actor=current_user, request=request)
    return ok(message="Daily report deleted.")


@router.patch("/{report_id}/archive", response_model=ApiResponse[schemas.ReportRead])
def archive_report(
    report_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("reports", "update")),
):
    report = services.get_report(db, report_id)
    report = services.archive_report(db, report, actor=current_user, request=request)
    return ok(schemas.ReportRead.model_validate(report), "Daily report archived.")


@router.get("/{report_id}/events", response_model=ListResponse[EventRead])
def list_report_events(
    report_id: str,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_permission("reports", "read")),
):
    report = services.get_report(db, report_id)
    items, total = services.list_report_events(db, report, params=params)
    return list_response(items, schema=EventRead, total=total, params=params)


# ---------------------------------------------------------------------------
# ATTACHMENTS
# ---------------------------------------------------------------------------


@router.post(
    "/{report_id}/attachments",
    response_model=ApiResponse[AttachmentRead],
    status_code=status.HTTP_201_CREATED,
)
def add_report_attachment(
    report_id: str,
    request: Request,
    upload: UploadFile = Depends(attachment_upload),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("reports", "update")),
):
    report = services.get_report(db, report_id)
    attachment = attachment_services.add_attachment(
        db,
        entity_type=AttachmentOwner.REPORT,
        entity_id=report.id,
        upload=upload,
        actor=current_user,
        module=services.MODULE,
        request=request,
    )
    return ok(AttachmentRead.model_validate(attachment), "Attachment added.")


@router.delete("/{report_id}/attachments/{attachment_id}", response_model=ApiResponse[None])
def remove_report_attachment(
    report_id: str,
    attachment_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_permission("reports", "update")),
):
    report = services.get_report(db, report_id)
    attachment_services.remove_attachment(
        db,
        entity_type=AttachmentOwner.REPORT,
        entity_id=report.id,
        attachment_id=attachment_id,
        actor=current_user,
        module=services.MODULE,
        request=request,
    )
    return ok(message="Attachment removed.")
