from __future__ import annotations

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
from . import schemas
from .models import MeetingCall, MeetingCallType

MODULE = "meetings"

_REQUIRED_FIELDS = {"date", "time", "requested_by", "participants", "purpose", "status"}
_JSON_FIELDS = {"participants", "follow_up_actions"}


def get_meeting_call(db: Session, meeting_call_id: str) -> MeetingCall:
    item = db.get(MeetingCall, meeting_call_id)
    if item is None:
        raise NotFound("Meeting or call not found.")
    return item


def list_meeting_calls(
    db: Session,
    *,
    filters: schemas.MeetingCallFilters,
    params: PageParams,
) -> Tuple[List[MeetingCall], int]:
    query = db.query(MeetingCall)
    if filters.type:
        query = query.filter(MeetingCall.type == filters.type)
    if filters.status:
        query = query.filter(MeetingCall.status == filters.status)
    if filters.start_date:
        query = query.filter(MeetingCall.date >= filters.start_date)
    if filters.end_date:
        query = query.filter(MeetingCall.date <= filters.end_date)

    total = query.count()
    items = (
        query.order_by(MeetingCall.date.desc(), MeetingCall.time.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return items, total


def create_meeting_call(
    db: Session,
    data: schemas.MeetingCallCreate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> MeetingCall:
    fields = data.model_dump()
    fields.update(data.model_dump(mode="json", include=_JSON_FIELDS))
    item = MeetingCall(**fields, created_by=actor.id)
    try:
        item.reference_number = numbering.meeting_call_number(db, data.type, data.date)
        db.add(item)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(item)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="create",
        module=MODULE,
        resource_id=item.id,
        details={"referenceNumber": item.reference_number},
        request=request,
    )
    return item


def update_meeting_call(
    db: Session,
    item: MeetingCall,
    data: schemas.MeetingCallUpdate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> MeetingCall:
    changes = data.model_dump(exclude_unset=True)
    json_changes = data.model_dump(mode="json", exclude_unset=True)

    for field, value in changes.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        if field in _JSON_FIELDS:
            value = json_changes[field]
        setattr(item, field, value)

    if item.type == MeetingCallType.MEETING and not (item.location or "").strip():
        raise ValidationFailed.for_field("location", "Location is required for meetings.")

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(item)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=MODULE,
        resource_id=item.id,
        details={"fields": sorted(changes)},
        request=request,
    )
    return item


def delete_meeting_call(
    db: Session,
    item: MeetingCall,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> None:
    item_id = item.id
    reference_number = item.reference_number
    try:
        paths = attachment_services.delete_owner_attachments(
            db, entity_type=AttachmentOwner.MEETING_CALL, entity_id=item_id
        )
        db.delete(item)
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
        resource_id=item_id,
        details={"referenceNumber": reference_number},
        request=request,
    )
