from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from fastapi import Request
from sqlalchemy.orm import Session

from ... import numbering
from ...errors import NotFound, PermissionDenied
from ...permissions import authorize
from ...schemas import PageParams
from ..accounts import models as account_models
from ..audit import services as audit_services
from ..governorates import models as governorate_models
from ..workflow import apply_transition
from . import schemas
from .models import Coordination, CoordinationStatus

MODULE = "coordinations"

# Entering these states is a decision and needs the approve permission.
_DECISION_STATES = {CoordinationStatus.APPROVED, CoordinationStatus.REJECTED}

_REQUIRED_FIELDS = {
    "request_date",
    "request_time",
    "movement_time",
    "governorate_id",
    "from_location",
    "to_location",
    "department",
    "forces",
    "purpose",
    "priority",
}


def _ensure_governorate(db: Session, governorate_id: str) -> None:
    if db.get(governorate_models.Governorate, governorate_id) is None:
        raise NotFound("Governorate not found.")


def get_coordination(db: Session, coordination_id: str) -> Coordination:
    coordination = db.get(Coordination, coordination_id)
    if coordination is None:
        raise NotFound("Coordination request not found.")
    return coordination


def list_coordinations(
    db: Session,
    *,
    filters: schemas.CoordinationFilters,
    params: PageParams,
) -> Tuple[List[Coordination], int]:
    query = db.query(Coordination)
    if filters.start_date:
        query = query.filter(Coordination.request_date >= filters.start_date)
    if filters.end_date:
        query = query.filter(Coordination.request_date <= filters.end_date)
    if filters.status:
        query = query.filter(Coordination.status == filters.status)
    if filters.priority:
        query = query.filter(Coordination.priority == filters.priority)
    if filters.department:
        query = query.filter(Coordination.department == filters.department)
    if filters.governorate:
        query = query.filter(Coordination.governorate_id == filters.governorate)

    total = query.count()
    items = (
        query.order_by(Coordination.request_date.desc(), Coordination.request_time.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return items, total


def create_coordination(
    db: Session,
    data: schemas.CoordinationCreate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> Coordination:
    _ensure_governorate(db, data.governorate_id)

    coordination = Coordination(
        **data.model_dump(),
        status=CoordinationStatus.PENDING,
        requested_by=actor.id,
    )
    try:
        coordination.request_number = numbering.coordination_number(db, data.request_date)
        db.add(coordination)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(coordination)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="create",
        module=MODULE,
        resource_id=coordination.id,
        details={"requestNumber": coordination.request_number},
        request=request,
    )
    return coordination


def update_coordination(
    db: Session,
    coordination: Coordination,
    data: schemas.CoordinationUpdate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> Coordination:
    changes = data.model_dump(exclude_unset=True)
    new_status = changes.pop("status", None)

    if changes.get("governorate_id"):
        _ensure_governorate(db, changes["governorate_id"])

    for field, value in changes.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(coordination, field, value)

    action = "update"
    if new_status is not None and new_status != coordination.status:
        if new_status in _DECISION_STATES:
            if not authorize(actor, MODULE, "approve"):
                raise PermissionDenied("You do not have permission to approve or reject coordination requests.")
        if new_status == CoordinationStatus.APPROVED:
            coordination.approved_by = actor.id
            if coordination.approval_time is None:
                coordination.approval_time = datetime.now(timezone.utc)
        apply_transition(
            db,
            entity_type="coordination",
            from_state=coordination.status,
            to_state=new_status,
            before_obj={"status": coordination.status.value},
            after_obj=coordination,
        )
        coordination.status = new_status
        if new_status == CoordinationStatus.APPROVED:
            action = "approve"
        elif new_status == CoordinationStatus.REJECTED:
            action = "reject"

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(coordination)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action=action,
        module=MODULE,
        resource_id=coordination.id,
        details={"fields": sorted(data.model_dump(exclude_unset=True))},
        request=request,
    )
    return coordination


def delete_coordination(
    db: Session,
    coordination: Coordination,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> None:
    coordination_id = coordination.id
    request_number = coordination.request_number
    db.delete(coordination)
    db.commit()

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="delete",
        module=MODULE,
        resource_id=coordination_id,
        details={"requestNumber": request_number},
        request=request,
    )
