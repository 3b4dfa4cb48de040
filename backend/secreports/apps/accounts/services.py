# backend/secreports/apps/accounts/services.py

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from fastapi import Request
from sqlalchemy.orm import Session

from ...errors import AuthenticationFailed, Conflict, NotFound, ValidationFailed
from ...schemas import PageParams
from ...security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    get_password_hash,
    resolve_token_user,
    verify_password,
)
from ..audit import services as audit_services
from ..governorates import models as governorate_models
from . import models, schemas

logger = logging.getLogger(__name__)

MODULE = "users"

MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Password policy
# ---------------------------------------------------------------------------


def _validate_password_strength(password: str, *, field: str = "password") -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed.for_field(
            field, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_user(db: Session, user_id: str) -> models.User:
    user = db.get(models.User, user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


def get_user_by_username(db: Session, username: str) -> Optional[models.User]:
    return (
        db.query(models.User)
        .filter(models.User.username == (username or "").strip())
        .first()
    )


def list_users(
    db: Session,
    *,
    filters: schemas.UserFilters,
    params: PageParams,
) -> Tuple[List[models.User], int]:
    query = db.query(models.User)
    if filters.role:
        query = query.filter(models.User.role == filters.role)
    if filters.governorate:
        query = query.filter(models.User.governorate_id == filters.governorate)
    if filters.is_active is not None:
        query = query.filter(models.User.is_active.is_(filters.is_active))

    total = query.count()
    items = (
        query.order_by(models.User.created_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return items, total


def _ensure_governorate(db: Session, governorate_id: Optional[str]) -> None:
    if governorate_id and db.get(governorate_models.Governorate, governorate_id) is None:
        raise ValidationFailed.for_field("governorateId", "Governorate not found.")


# ---------------------------------------------------------------------------
# Permissions
# ---------------------------------------------------------------------------


def _merge_grants(grants: Sequence[schemas.PermissionGrant]) -> Dict[str, List[str]]:
    merged: Dict[str, List[str]] = {}
    for grant in grants:
        actions = merged.setdefault(grant.module.value, [])
        for action in grant.actions:
            if action.value not in actions:
                actions.append(action.value)
    return merged


def _apply_permissions(user: models.User, grants: Sequence[schemas.PermissionGrant]) -> None:
    """
    Rewrite the user's grants in place: existing module rows are updated,
    new modules added, missing ones dropped.
    """
    wanted = _merge_grants(grants)
    existing = {p.module: p for p in user.permissions}

    for module, permission in existing.items():
        if module not in wanted:
            user.permissions.remove(permission)
        else:
            permission.actions = wanted[module]

    for module, actions in wanted.items():
        if module not in existing:
            user.permissions.append(models.UserPermission(module=module, actions=actions))


def set_permissions(
    db: Session,
    user: models.User,
    grants: Sequence[schemas.PermissionGrant],
    *,
    actor: models.User,
    request: Optional[Request] = None,
) -> models.User:
    _apply_permissions(user, grants)
    db.commit()
    db.refresh(user)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=MODULE,
        resource_id=user.id,
        details={"permissions": _merge_grants(grants)},
        request=request,
    )
    return user


# ---------------------------------------------------------------------------
# User commands
# ---------------------------------------------------------------------------


def create_user(
    db: Session,
    data: schemas.UserCreate,
    *,
    actor: Optional[models.User] = None,
    request: Optional[Request] = None,
) -> models.User:
    if get_user_by_username(db, data.username) is not None:
        raise Conflict("Username is already taken.", field="username")
    _validate_password_strength(data.password)
    _ensure_governorate(db, data.governorate_id)

    user = models.User(
        username=data.username,
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name.strip(),
        email=str(data.email).lower() if data.email else None,
        phone_number=data.phone_number,
        role=data.role,
        governorate_id=data.governorate_id,
        department=data.department,
        is_active=True,
    )
    _apply_permissions(user, data.permissions)
    db.add(user)
    db.commit()
    db.refresh(user)

    audit_services.log_action(
        db,
        user_id=actor.id if actor else None,
        action="create",
        module=MODULE,
        resource_id=user.id,
        details={"username": user.username, "role": user.role.value},
        request=request,
    )
    return user


def update_user(
    db: Session,
    user: models.User,
    data: schemas.UserUpdate,
    *,
    actor: models.User,
    request: Optional[Request] = None,
) -> models.User:
    changes = data.model_dump(exclude_unset=True)

    if "governorate_id" in changes:
        _ensure_governorate(db, changes["governorate_id"])
    if changes.get("full_name") is not None and not changes["full_name"].strip():
        raise ValidationFailed.for_field("fullName", "Full name is required.")

    permissions = changes.pop("permissions", None)
    if permissions is not None:
        _apply_permissions(user, data.permissions or [])

    for field, value in changes.items():
        if value is None and field in {"full_name", "role", "is_active", "department"}:
            continue
        if field == "email" and value is not None:
            value = str(value).lower()
        setattr(user, field, value)

    if changes.get("is_active") is False:
        # Disabled accounts keep no live sessions.
        user.token_revoked_at = _utcnow()

    db.commit()
    db.refresh(user)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=MODULE,
        resource_id=user.id,
        details={"fields": sorted(data.model_dump(exclude_unset=True))},
        request=request,
    )
    return user


def deactivate_user(
    db: Session,
    user: models.User,
    *,
    actor: models.User,
    request: Optional[Request] = None,
) -> models.User:
    """Soft delete: the account stays referenced by everything it created."""
    user.is_active = False
    user.token_revoked_at = _utcnow()
    db.commit()
    db.refresh(user)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="delete",
        module=MODULE,
        resource_id=user.id,
        request=request,
    )
    return user


def reset_password(
    db: Session,
    user: models.User,
    new_password: str,
    *,
    actor: models.User,
    request: Optional[Request] = None,
) -> models.User:
    _validate_password_strength(new_password, field="newPassword")
    user.hashed_password = get_password_hash(new_password)
    user.token_revoked_at = _utcnow()
    db.commit()
    db.refresh(user)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=MODULE,
        resource_id=user.id,
        details={"passwordReset": True},
        request=request,
    )
    return user


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


def authenticate_user(
    db: Session,
    *,
    login_req: schemas.LoginRequest,
    request: Optional[Request] = None,
) -> models.User:
    """
    Username + password login. Unknown users, wrong passwords and disabled
    accounts all fail the same way.
    """
    user = get_user_by_username(db, login_req.username)
    if user is None or not verify_password(login_req.password, user.hashed_password):
        ip_address, _ = audit_services.request_origin(request)
        logger.info("Failed login for %r from %s", login_req.username, ip_address)
        raise AuthenticationFailed("Invalid username or password.")
    if not user.is_active:
        raise AuthenticationFailed("User account is disabled.")

    user.last_login_at = _utcnow()
    db.commit()
    db.refresh(user)

    audit_services.log_action(
        db,
        user_id=user.id,
        action="login",
        module="auth",
        resource_id=user.id,
        request=request,
    )
    return user


def issue_tokens_for_user(user: models.User) -> schemas.TokenPair:
    return schemas.TokenPair(
        access_token=create_access_token(user),
        refresh_token=create_refresh_token(user),
        expires_in=int(ACCESS_TOKEN_EXPIRE_MINUTES * 60),
        user=schemas.UserRead.model_validate(user),
    )


def refresh_tokens(db: Session, refresh_token: str) -> schemas.TokenPair:
    user = resolve_token_user(db, refresh_token, expected_type=REFRESH_TOKEN_TYPE)
    if not user.is_active:
        raise AuthenticationFailed("User account is disabled.")
    return issue_tokens_for_user(user)


def change_password(
    db: Session,
    user: models.User,
    data: schemas.ChangePasswordRequest,
    *,
    request: Optional[Request] = None,
) -> models.User:
    if not verify_password(data.current_password, user.hashed_password):
        raise ValidationFailed.for_field("currentPassword", "Current password is incorrect.")
    _validate_password_strength(data.new_password, field="newPassword")

    user.hashed_password = get_password_hash(data.new_password)
    user.token_revoked_at = _utcnow()
    db.commit()
    db.refresh(user)

    audit_services.log_action(
        db,
        user_id=user.id,
        action="update",
        module=MODULE,
        resource_id=user.id,
        details={"passwordChanged": True},
        request=request,
    )
    return user


def logout(db: Session, user: models.User, *, request: Optional[Request] = None) -> None:
    user.token_revoked_at = _utcnow()
    db.commit()

    audit_services.log_action(
        db,
        user_id=user.id,
        action="logout",
        module="auth",
        resource_id=user.id,
        request=request,
    )
