from __future__ import annotations

from typing import List, Optional, Tuple

from fastapi import Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ... import numbering, storage
from ...errors import NotFound, ValidationFailed
from ...schemas import PageParams
from ..accounts import models as account_models
from ..attachments import services as attachment_services
from ..attachments.models import AttachmentOwner
from ..audit import services as audit_services
from ..governorates import models as governorate_models
from . import schemas
from .models import MemoRelease, MemoReleaseType

MODULE = "memos"

_REQUIRED_FIELDS = {"date", "time", "subject", "governorate_id", "status"}

_RELEASE_FIELDS = (
    ("person_name", "personName", "Person name is required for releases."),
    ("residence_place", "residencePlace", "Place of residence is required for releases."),
    ("detention_date", "detentionDate", "Detention date is required for releases."),
)


def _check_release_fields(item: MemoRelease) -> None:
    if item.type != MemoReleaseType.RELEASE:
        return
    errors = []
    for attr, field, message in _RELEASE_FIELDS:
        value = getattr(item, attr)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append({"field": field, "message": message})
    if errors:
        raise ValidationFailed("Release details are incomplete.", errors=errors)


def _ensure_governorate(db: Session, governorate_id: str) -> None:
    if db.get(governorate_models.Governorate, governorate_id) is None:
        raise NotFound("Governorate not found.")


def get_memo_release(db: Session, memo_release_id: str) -> MemoRelease:
    item = db.get(MemoRelease, memo_release_id)
    if item is None:
        raise NotFound("Memo or release not found.")
    return item


def list_memo_releases(
    db: Session,
    *,
    filters: schemas.MemoReleaseFilters,
    params: PageParams,
) -> Tuple[List[MemoRelease], int]:
    query = db.query(MemoRelease)
    if filters.type:
        query = query.filter(MemoRelease.type == filters.type)
    if filters.status:
        query = query.filter(MemoRelease.status == filters.status)
    if filters.governorate:
        query = query.filter(MemoRelease.governorate_id == filters.governorate)
    if filters.start_date:
        query = query.filter(MemoRelease.date >= filters.start_date)
    if filters.end_date:
        query = query.filter(MemoRelease.date <= filters.end_date)
    if filters.search:
        term = f"%{filters.search.strip()}%"
        query = query.filter(or_(MemoRelease.subject.ilike(term), MemoRelease.person_name.ilike(term)))

    total = query.count()
    items = (
        query.order_by(MemoRelease.date.desc(), MemoRelease.time.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return items, total


def create_memo_release(
    db: Session,
    data: schemas.MemoReleaseCreate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> MemoRelease:
    _ensure_governorate(db, data.governorate_id)
    item = MemoRelease(**data.model_dump(), created_by=actor.id)
    _check_release_fields(item)

    try:
        item.reference_number = numbering.memo_release_number(db, data.type, data.date)
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


def update_memo_release(
    db: Session,
    item: MemoRelease,
    data: schemas.MemoReleaseUpdate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> MemoRelease:
    changes = data.model_dump(exclude_unset=True)
    if changes.get("governorate_id"):
        _ensure_governorate(db, changes["governorate_id"])

    for field, value in changes.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(item, field, value)
    _check_release_fields(item)

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


def delete_memo_release(
    db: Session,
    item: MemoRelease,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> None:
    item_id = item.id
    reference_number = item.reference_number
    try:
        paths = attachment_services.delete_owner_attachments(
            db, entity_type=AttachmentOwner.MEMO_RELEASE, entity_id=item_id
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
