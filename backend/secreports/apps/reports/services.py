from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import List, Optional, Sequence, Tuple

from fastapi import Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from ... import numbering, storage
from ...errors import Conflict, NotFound, PermissionDenied, ValidationFailed
from ...permissions import authorize
from ...schemas import PageParams
from ..accounts import models as account_models
from ..attachments import services as attachment_services
from ..attachments.models import AttachmentOwner
from ..audit import services as audit_services
from ..events import models as event_models
from ..governorates import models as governorate_models
from ..workflow import apply_transition
from . import schemas
from .models import DailyReport, ReportStatus

logger = logging.getLogger(__name__)

MODULE = "reports"


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_report(db: Session, report_id: str) -> DailyReport:
    report = db.get(DailyReport, report_id)
    if report is None:
        raise NotFound("Daily report not found.")
    return report


def lock_report(db: Session, report_id: str) -> DailyReport:
    """
    Load a report with a row lock held until the caller's commit/rollback.
    Serialises everything that rewrites `event_count`.
    """
    report = (
        db.query(DailyReport)
        .filter(DailyReport.id == report_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if report is None:
        raise NotFound("Daily report not found.")
    return report


def recount_events(db: Session, report: DailyReport) -> int:
    """Set `event_count` from the event rows visible in this transaction."""
    report.event_count = (
        db.query(func.count(event_models.Event.id))
        .filter(event_models.Event.report_id == report.id)
        .scalar()
    ) or 0
    return report.event_count


def list_reports(
    db: Session,
    *,
    filters: schemas.ReportFilters,
    params: PageParams,
) -> Tuple[List[DailyReport], int]:
    query = db.query(DailyReport)

    if filters.start_date:
        query = query.filter(DailyReport.report_date >= datetime.combine(filters.start_date, time.min))
    if filters.end_date:
        query = query.filter(
            DailyReport.report_date < datetime.combine(filters.end_date + timedelta(days=1), time.min)
        )
    if filters.report_type:
        query = query.filter(DailyReport.report_type == filters.report_type)
    if filters.status:
        query = query.filter(DailyReport.status == filters.status)
    if filters.governorate:
        query = query.filter(
            DailyReport.governorates.any(governorate_models.Governorate.id == filters.governorate)
        )

    total = query.count()
    items = (
        query.order_by(DailyReport.report_date.desc(), DailyReport.created_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return items, total


def list_report_events(
    db: Session,
    report: DailyReport,
    *,
    params: PageParams,
) -> Tuple[List[event_models.Event], int]:
    query = db.query(event_models.Event).filter(event_models.Event.report_id == report.id)
    total = query.count()
    items = (
        query.order_by(event_models.Event.event_date.asc(), event_models.Event.event_time.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return items, total


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _resolve_governorates(db: Session, ids: Sequence[str]) -> List[governorate_models.Governorate]:
    unique_ids = list(dict.fromkeys(ids))
    if not unique_ids:
        return []
    found = (
        db.query(governorate_models.Governorate)
        .filter(governorate_models.Governorate.id.in_(unique_ids))
        .all()
    )
    missing = set(unique_ids) - {g.id for g in found}
    if missing:
        raise ValidationFailed.for_field(
            "governorates", f"Unknown governorate id(s): {', '.join(sorted(missing))}."
        )
    return found


def _ensure_unique_slot(db: Session, report_date, report_type, *, exclude_id: Optional[str] = None) -> None:
    query = db.query(DailyReport.id).filter(
        DailyReport.report_date == report_date,
        DailyReport.report_type == report_type,
    )
    if exclude_id:
        query = query.filter(DailyReport.id != exclude_id)
    if query.first() is not None:
        raise Conflict(
            "A report with the same date and type already exists.",
            field="reportDate",
        )


def _ensure_number_free(db: Session, report_number: str) -> None:
    exists = db.query(DailyReport.id).filter(DailyReport.report_number == report_number).first()
    if exists is not None:
        raise Conflict("This report number is already in use.", field="reportNumber")


def _check_supplied_number(report_number: str, report_type) -> None:
    """Events derive their numbers from the parent, so the shape must parse."""
    _, type_code = numbering.parse_report_number(report_number)
    if type_code != numbering.report_type_code(report_type):
        raise ValidationFailed.for_field(
            "reportNumber",
            f"Report number {report_number!r} does not match the report type.",
        )


def _check_status_change(
    db: Session,
    report: DailyReport,
    *,
    from_state: ReportStatus,
    to_state: ReportStatus,
    actor: account_models.User,
) -> None:
    if to_state == from_state:
        return
    if to_state == ReportStatus.APPROVED:
        if not authorize(actor, MODULE, "approve"):
            raise PermissionDenied("You do not have permission to approve reports.")
        report.approved_by = actor.id
    apply_transition(
        db,
        entity_type="daily_report",
        from_state=from_state,
        to_state=to_state,
        before_obj={"status": from_state.value},
        after_obj=report,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def create_report(
    db: Session,
    data: schemas.ReportCreate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> DailyReport:
    governorates = _resolve_governorates(db, data.governorates)
    _ensure_unique_slot(db, data.report_date, data.report_type)
    supplied_number = (data.report_number or "").strip()
    if supplied_number:
        _check_supplied_number(supplied_number, data.report_type)

    report = DailyReport(
        report_date=data.report_date,
        report_type=data.report_type,
        status=ReportStatus.DRAFT,
        summary=data.summary,
        event_count=0,
        created_by=actor.id,
    )
    report.governorates = governorates
    _check_status_change(db, report, from_state=ReportStatus.DRAFT, to_state=data.status, actor=actor)
    report.status = data.status

    if supplied_number:
        _ensure_number_free(db, supplied_number)
        report.report_number = supplied_number
    else:
        report.report_number = numbering.report_number(db, data.report_date, data.report_type)

    try:
        db.add(report)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(report)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="create",
        module=MODULE,
        resource_id=report.id,
        details={"reportNumber": report.report_number},
        request=request,
    )
    return report


def update_report(
    db: Session,
    report: DailyReport,
    data: schemas.ReportUpdate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> DailyReport:
    changes = data.model_dump(exclude_unset=True)

    new_date = changes.get("report_date") or report.report_date
    new_type = changes.get("report_type") or report.report_type
    if "report_date" in changes or "report_type" in changes:
        _ensure_unique_slot(db, new_date, new_type, exclude_id=report.id)

    if changes.get("governorates") is not None:
        report.governorates = _resolve_governorates(db, changes["governorates"])

    new_status = changes.get("status")
    action = "update"
    if new_status is not None and new_status != report.status:
        _check_status_change(db, report, from_state=report.status, to_state=new_status, actor=actor)
        report.status = new_status
        if new_status == ReportStatus.APPROVED:
            action = "approve"
        elif new_status == ReportStatus.ARCHIVED:
            action = "archive"

    report.report_date = new_date
    report.report_type = new_type
    if "summary" in changes:
        report.summary = changes["summary"]

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(report)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action=action,
        module=MODULE,
        resource_id=report.id,
        details={"fields": sorted(changes)},
        request=request,
    )
    return report


def archive_report(
    db: Session,
    report: DailyReport,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> DailyReport:
    """Archive from any state; events under the report are left as they are."""
    if report.status == ReportStatus.ARCHIVED:
        raise Conflict("Report is already archived.", field="status")

    apply_transition(
        db,
        entity_type="daily_report",
        from_state=report.status,
        to_state=ReportStatus.ARCHIVED,
        before_obj={"status": report.status.value},
        after_obj=report,
    )
    report.status = ReportStatus.ARCHIVED
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(report)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="archive",
        module=MODULE,
        resource_id=report.id,
        request=request,
    )
    return report


def delete_report(
    db: Session,
    report_id: str,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> None:
    """
    Hard delete, refused while the report still has events.
    """
    report = lock_report(db, report_id)
    if recount_events(db, report) > 0:
        db.rollback()
        raise Conflict(
            "Cannot delete a report that still has events; delete or move its events first.",
            field="eventCount",
        )

    report_number = report.report_number
    try:
        paths = attachment_services.delete_owner_attachments(
            db, entity_type=AttachmentOwner.REPORT, entity_id=report.id
        )
        db.delete(report)
        db.commit()
    except Exception:
        db.rollback()
        raise

    for path in paths:
        storage.delete_stored_file(path)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="delete",
        module=MODULE,
        resource_id=report_id,
        details={"reportNumber": report_number},
        request=request,
    )
