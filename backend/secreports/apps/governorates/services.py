from __future__ import annotations

from typing import Iterable, List, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from ...errors import Conflict, NotFound, ValidationFailed
from ..accounts import models as account_models
from ..audit import services as audit_services
from . import models, schemas

MODULE = "governorates"


def _normalise_code(value: str) -> str:
    return value.strip().upper()


def _clean_regions(regions: Iterable[str]) -> List[str]:
    cleaned: List[str] = []
    for region in regions:
        region = (region or "").strip()
        if region and region not in cleaned:
            cleaned.append(region)
    return cleaned


def list_governorates(db: Session, *, include_inactive: bool = False) -> List[models.Governorate]:
    query = db.query(models.Governorate)
    if not include_inactive:
        query = query.filter(models.Governorate.is_active.is_(True))
    return query.order_by(models.Governorate.name.asc()).all()


def get_governorate(db: Session, governorate_id: str) -> models.Governorate:
    governorate = db.get(models.Governorate, governorate_id)
    if governorate is None:
        raise NotFound("Governorate not found.")
    return governorate


def _ensure_code_free(db: Session, code: str, *, exclude_id: Optional[str] = None) -> None:
    query = db.query(models.Governorate).filter(models.Governorate.code == code)
    if exclude_id:
        query = query.filter(models.Governorate.id != exclude_id)
    if query.first() is not None:
        raise Conflict("A governorate with this code already exists.", field="code")


def create_governorate(
    db: Session,
    data: schemas.GovernorateCreate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> models.Governorate:
    code = _normalise_code(data.code)
    _ensure_code_free(db, code)

    governorate = models.Governorate(
        name=data.name,
        code=code,
        regions=_clean_regions(data.regions),
        address=data.address,
        phone=data.phone,
        email=data.email,
        is_active=True,
    )
    db.add(governorate)
    db.commit()
    db.refresh(governorate)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="create",
        module=MODULE,
        resource_id=governorate.id,
        details={"code": governorate.code},
        request=request,
    )
    return governorate


def update_governorate(
    db: Session,
    governorate: models.Governorate,
    data: schemas.GovernorateUpdate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> models.Governorate:
    changes = data.model_dump(exclude_unset=True)

    if changes.get("code") is not None:
        changes["code"] = _normalise_code(changes["code"])
        _ensure_code_free(db, changes["code"], exclude_id=governorate.id)
    if "regions" in changes and changes["regions"] is not None:
        changes["regions"] = _clean_regions(changes["regions"])
    if "name" in changes and not (changes["name"] or "").strip():
        raise ValidationFailed.for_field("name", "Governorate name is required.")

    for field, value in changes.items():
        if value is None and field in {"name", "code", "regions", "is_active"}:
            continue
        setattr(governorate, field, value)

    db.commit()
    db.refresh(governorate)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=MODULE,
        resource_id=governorate.id,
        details={"fields": sorted(changes)},
        request=request,
    )
    return governorate


def deactivate_governorate(
    db: Session,
    governorate: models.Governorate,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> models.Governorate:
    governorate.is_active = False
    db.commit()
    db.refresh(governorate)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="delete",
        module=MODULE,
        resource_id=governorate.id,
        request=request,
    )
    return governorate


def add_region(
    db: Session,
    governorate: models.Governorate,
    region: str,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> models.Governorate:
    region = (region or "").strip()
    if not region:
        raise ValidationFailed.for_field("region", "Region name is required.")
    if governorate.has_region(region):
        raise ValidationFailed.for_field("region", "Region already exists in this governorate.")

    # New list so the JSON column registers the change.
    governorate.regions = [*(governorate.regions or []), region]
    db.commit()
    db.refresh(governorate)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=MODULE,
        resource_id=governorate.id,
        details={"regionAdded": region},
        request=request,
    )
    return governorate


def remove_region(
    db: Session,
    governorate: models.Governorate,
    region: str,
    *,
    actor: account_models.User,
    request: Optional[Request] = None,
) -> models.Governorate:
    if not governorate.has_region(region):
        raise NotFound("Region not found in this governorate.")

    governorate.regions = [r for r in governorate.regions if r != region]
    db.commit()
    db.refresh(governorate)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=MODULE,
        resource_id=governorate.id,
        details={"regionRemoved": region},
        request=request,
    )
    return governorate
