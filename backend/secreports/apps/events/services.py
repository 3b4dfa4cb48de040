from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from fastapi import Request
from sqlalchemy.orm import Session

from ... import numbering, storage
from ...errors import NotFound, ValidationFailed
from ...schemas import PageParams
from ..accounts import models as account_models
from ..attachments import services as attachment_services
from ..attachments.models import AttachmentOwner
from ..audit import services as audit_services
from ..governorates import models as governorate_models
from ..reports import services as report_services
from . import schemas
from .models import Event

logger = logging.getLogger(__name__)

MODULE = "events"


def get_event(db: Session, event_id: str) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found.")
    return event


def _get_governorate(db: Session, governorate_id: str) -> governorate_models.Governorate:
    governorate = db.get(governorate_models.Governorate, governorate_id)
    if governorate is None:
        raise NotFound("Governorate not found.")
    return governorate


def _check_region(governorate: governorate_models.Governorate, region: str) -> str:
    """The region must be an exact member of the governorate's regions."""
    if not governorate.has_region(region):
        raise ValidationFailed.for_field(
            "region", f'Region "{region}" does not belong to governorate {governorate.name}.'
        )
    return region


def list_events(
    db: Session,
    *,
    filters: schemas.EventFilters,
    params: PageParams,
) -> Tuple[List[Event], int]:
    query = db.query(Event)

    if filters.start_date:
        query = query.filter(Event.event_date >= filters.start_date)
    if filters.end_date:
        query = query.filter(Event.event_date <= filters.end_date)
    if filters.report_id:
        query = query.filter(Event.report_id == filters.report_id)
    if filters.governorate:
        query = query.filter(Event.governorate_id == filters.governorate)
    if filters.region:
        query = query.filter(Event.region.ilike(f"%{filters.region.strip()}%"))
    if filters.event_type:
        query = query.filter(Event.event_type == filters.event_type)
    if filters.severity:
        query = query.filter(Event.severity == filters.severity)
    if filters.status:
        query = query.filter(Event.status == filters.status)

    total = query.count()
    items = (
        query.order_by(Event.event_date.desc(), Event.event_time.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return items, total


def list_events_by_governorate(
    db: Session,
    governorate_id: str,
    *,
    params: PageParams,
) -> Tuple[List[Event], int]:
    _get_governorate(db, governorate_id)
    return list_events(db, filters=schemas.EventFilters(governorate=governorate_id), params=params)


def create_event(
    db: Session,
    data: schemas.EventCreate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> Event:
    """
    Insert an event under its report and bring the report's `event_count`
    in line, all in one transaction holding the report row lock.
    """
    try:
        report = report_services.lock_report(db, data.report_id)
        governorate = _get_governorate(db, data.governorate_id)
        region = _check_region(governorate, data.region)

        event = Event(
            report_id=report.id,
            event_number=numbering.event_number(db, report),
            governorate_id=governorate.id,
            region=region,
            event_date=data.event_date,
            event_time=data.event_time,
            event_type=data.event_type,
            severity=data.severity,
            description=data.description,
            involved_parties=list(data.involved_parties),
            palestinian_intervention=data.palestinian_intervention,
            israeli_response=data.israeli_response,
            results=data.results,
            killed=data.casualties.killed,
            injured=data.casualties.injured,
            arrested=data.casualties.arrested,
            status=data.status,
            latitude=data.latitude,
            longitude=data.longitude,
            created_by=actor.id,
        )
        db.add(event)
        db.flush()
        report_services.recount_events(db, report)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="create",
        module=MODULE,
        resource_id=event.id,
        details={"eventNumber": event.event_number, "reportId": event.report_id},
        request=request,
    )
    return event


def update_event(
    db: Session,
    event: Event,
    data: schemas.EventUpdate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> Event:
    changes = data.model_dump(exclude_unset=True)

    if "governorate_id" in changes or "region" in changes:
        governorate_id = changes.get("governorate_id") or event.governorate_id
        governorate = _get_governorate(db, governorate_id)
        event.region = _check_region(governorate, changes.get("region") or event.region)
        event.governorate_id = governorate.id
        changes.pop("governorate_id", None)
        changes.pop("region", None)

    casualties = changes.pop("casualties", None)
    if casualties is not None:
        event.killed = casualties["killed"]
        event.injured = casualties["injured"]
        event.arrested = casualties["arrested"]

    for field, value in changes.items():
        if value is None and field in {"event_date", "event_time", "event_type", "severity", "status", "description"}:
            continue
        setattr(event, field, value)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=MODULE,
        resource_id=event.id,
        details={"fields": sorted(data.model_dump(exclude_unset=True))},
        request=request,
    )
    return event


def delete_event(
    db: Session,
    event_id: str,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> None:
    event = get_event(db, event_id)
    event_number = event.event_number
    try:
        report = report_services.lock_report(db, event.report_id)
        paths = attachment_services.delete_owner_attachments(
            db, entity_type=AttachmentOwner.EVENT, entity_id=event.id
        )
        db.delete(event)
        db.flush()
        report_services.recount_events(db, report)
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
        resource_id=event_id,
        details={"eventNumber": event_number},
        request=request,
    )
