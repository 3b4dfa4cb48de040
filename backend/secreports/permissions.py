# backend/secreports/permissions.py
"""
Who may do what.

Every route gate goes through `authorize` (module/action permissions) or
`role_allowed` (role lists). Admin is the wildcard; inactive users are
always refused. Nothing here logs.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Set, Union

from fastapi import Depends

from .errors import PermissionDenied
from .security import get_current_active_user
from secreports.apps.accounts import models as account_models
from secreports.apps.accounts.models import PermissionAction, PermissionModule, UserRole

WILDCARD = "*"

Capabilities = Dict[str, Set[str]]


def _value(item) -> str:
    return getattr(item, "value", item)


def capabilities(user: account_models.User) -> Capabilities:
    """
    Admin maps to every action on every module; any other role maps to the
    union of its permission rows.
    """
    if user.role == UserRole.ADMIN:
        return {WILDCARD: {WILDCARD}}

    caps: Capabilities = {}
    for grant in user.permissions or []:
        caps.setdefault(grant.module, set()).update(grant.actions or [])
    return caps


def authorize(
    user: account_models.User,
    module: Union[PermissionModule, str],
    action: Union[PermissionAction, str],
) -> bool:
    if not getattr(user, "is_active", False):
        return False

    module_key = _value(module)
    action_key = _value(action)
    caps = capabilities(user)
    for key in (module_key, WILDCARD):
        granted = caps.get(key, set())
        if action_key in granted or WILDCARD in granted:
            return True
    return False


def role_allowed(
    user: account_models.User,
    allowed_roles: Iterable[Union[UserRole, str]],
) -> bool:
    if not getattr(user, "is_active", False):
        return False

    roles = {UserRole(_value(r)) for r in allowed_roles}
    if not roles or user.role == UserRole.ADMIN:
        return True
    return user.role in roles


# ---------------------------------------------------------------------------
# FASTAPI DEPENDENCIES
# ---------------------------------------------------------------------------


def require_permission(
    module: Union[PermissionModule, str],
    action: Union[PermissionAction, str],
) -> Callable[[account_models.User], account_models.User]:
    """
    Dependency factory gating a route on one module/action pair.

    Usage:
        @router.post("/", ...)
        def create_report(
            current_user: User = Depends(require_permission("reports", "create")),
        ):
            ...
    """
    # Fail at import time on typos instead of at request time.
    PermissionModule(_value(module))
    PermissionAction(_value(action))

    def dependency(
        current_user: account_models.User = Depends(get_current_active_user),
    ) -> account_models.User:
        if not authorize(current_user, module, action):
            raise PermissionDenied("You do not have permission to perform this action.")
        return current_user

    return dependency


def require_roles(
    *allowed_roles: Union[UserRole, str],
) -> Callable[[account_models.User], account_models.User]:
    """
    Dependency factory to enforce that the current user has one of the given roles.

    - ADMIN always passes, even if not explicitly listed in `allowed_roles`.
    - Otherwise, the user's `role` must be in the allowed set.
    """
    normalised_roles: Set[UserRole] = set()
    for r in allowed_roles:
        try:
            normalised_roles.add(UserRole(_value(r)))
        except ValueError:
            raise ValueError(f"Unknown role {r!r} passed to require_roles()")

    def dependency(
        current_user: account_models.User = Depends(get_current_active_user),
    ) -> account_models.User:
        if not role_allowed(current_user, normalised_roles):
            raise PermissionDenied("Access denied. Insufficient permissions.")
        return current_user

    return dependency


require_admin = require_roles(UserRole.ADMIN)
