from __future__ import annotations

import pytest

from conftest import create_user
from secreports.apps.accounts.models import UserRole
from secreports.errors import PermissionDenied
from secreports.permissions import (
    authorize,
    capabilities,
    require_permission,
    require_roles,
    role_allowed,
)


def test_admin_holds_every_capability(db_session, admin):
    assert capabilities(admin) == {"*": {"*"}}
    assert authorize(admin, "reports", "approve")
    assert authorize(admin, "users", "delete")


def test_grants_are_unioned_per_module(db_session):
    user = create_user(
        db_session,
        username="clerk",
        grants={"reports": ["read", "create"], "events": ["read"]},
    )

    assert capabilities(user) == {"reports": {"read", "create"}, "events": {"read"}}
    assert authorize(user, "reports", "create")
    assert not authorize(user, "reports", "approve")
    assert not authorize(user, "coordinations", "read")


def test_module_wildcard_covers_all_actions(db_session):
    user = create_user(db_session, username="lead", grants={"events": ["*"]})

    assert authorize(user, "events", "delete")
    assert not authorize(user, "reports", "read")


def test_inactive_user_is_never_authorized(db_session):
    user = create_user(
        db_session,
        username="gone",
        role=UserRole.ADMIN,
        is_active=False,
    )

    assert not authorize(user, "reports", "read")
    assert not role_allowed(user, [])


def test_role_allowed():
    class _User:
        is_active = True
        role = UserRole.REVIEWER

    assert role_allowed(_User(), [])
    assert role_allowed(_User(), [UserRole.REVIEWER, "supervisor"])
    assert not role_allowed(_User(), ["supervisor"])


def test_require_permission_dependency(db_session):
    viewer = create_user(db_session, username="viewer", role=UserRole.VIEWER, grants={"reports": ["read"]})
    check_read = require_permission("reports", "read")
    check_delete = require_permission("reports", "delete")

    assert check_read(current_user=viewer) is viewer
    with pytest.raises(PermissionDenied):
        check_delete(current_user=viewer)


def test_require_roles_rejects_unknown_role_at_definition():
    with pytest.raises(ValueError):
        require_roles("pilot")


def test_require_permission_rejects_unknown_module_at_definition():
    with pytest.raises(ValueError):
        require_permission("payroll", "read")


def test_require_roles_lets_admin_through(db_session, admin):
    supervisor_only = require_roles(UserRole.SUPERVISOR)
    clerk = create_user(db_session, username="clerk")

    assert supervisor_only(current_user=admin) is admin
    with pytest.raises(PermissionDenied):
        supervisor_only(current_user=clerk)
