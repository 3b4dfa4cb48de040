from __future__ import annotations

import pytest

from conftest import create_governorate, create_user, make_request
from secreports import security
from secreports.apps.accounts import router_admin, router_public
from secreports.apps.accounts import schemas as account_schemas
from secreports.apps.accounts import services as account_services
from secreports.apps.accounts.models import UserRole
from secreports.apps.audit import models as audit_models
from secreports.errors import AuthenticationFailed, Conflict, ValidationFailed
from secreports.schemas import PageParams


def _login(db_session, username: str, password: str):
    return account_services.authenticate_user(
        db_session,
        login_req=account_schemas.LoginRequest(username=username, password=password),
        request=make_request(),
    )


def _logs(db_session, action: str):
    return (
        db_session.query(audit_models.SystemLog)
        .filter(audit_models.SystemLog.action == action)
        .all()
    )


def test_register_creates_user_with_grants(db_session, admin):
    governorate = create_governorate(db_session)
    payload = account_schemas.UserCreate(
        username="  clerk  ",
        password="secret123",
        fullName="Data Clerk",
        role="data_entry",
        governorateId=governorate.id,
        permissions=[
            {"module": "reports", "actions": ["read", "create"]},
            {"module": "reports", "actions": ["update"]},
        ],
    )

    result = router_public.register(payload, request=make_request(), db=db_session, current_user=admin)

    user = account_services.get_user_by_username(db_session, "clerk")
    assert result.success is True
    assert result.data.username == "clerk"
    assert user.role == UserRole.DATA_ENTRY
    assert security.verify_password("secret123", user.hashed_password)
    assert [(p.module, p.actions) for p in user.permissions] == [("reports", ["read", "create", "update"])]
    assert _logs(db_session, "create")[0].resource_id == user.id


def test_register_rejects_duplicate_username(db_session, admin):
    create_user(db_session, username="clerk")

    with pytest.raises(Conflict) as exc:
        account_services.create_user(
            db_session,
            account_schemas.UserCreate(username="clerk", password="secret123", fullName="Other"),
            actor=admin,
        )
    assert exc.value.errors == [{"field": "username", "message": "Username is already taken."}]


def test_register_rejects_short_password(db_session, admin):
    with pytest.raises(ValidationFailed):
        account_services.create_user(
            db_session,
            account_schemas.UserCreate(username="clerk", password="abc", fullName="Clerk"),
            actor=admin,
        )


def test_login_stamps_last_login_and_audits(db_session):
    create_user(db_session, username="clerk", password="secret123")

    user = _login(db_session, "clerk", "secret123")

    assert user.last_login_at is not None
    entry = _logs(db_session, "login")[0]
    assert entry.user_id == user.id
    assert entry.ip_address == "127.0.0.1"
    assert entry.user_agent == "pytest"


@pytest.mark.parametrize("username,password", [("clerk", "wrong-pass"), ("nobody", "secret123")])
def test_login_rejects_bad_credentials(db_session, username, password):
    create_user(db_session, username="clerk", password="secret123")

    with pytest.raises(AuthenticationFailed) as exc:
        _login(db_session, username, password)
    assert exc.value.status_code == 401


def test_login_rejects_disabled_account(db_session):
    create_user(db_session, username="gone", password="secret123", is_active=False)

    with pytest.raises(AuthenticationFailed) as exc:
        _login(db_session, "gone", "secret123")
    assert exc.value.message == "User account is disabled."


def test_refresh_issues_new_pair(db_session):
    user = create_user(db_session, username="clerk")
    pair = account_services.issue_tokens_for_user(user)

    refreshed = account_services.refresh_tokens(db_session, pair.refresh_token)

    assert refreshed.user.id == user.id
    assert security.decode_token(refreshed.access_token, expected_type="access")["sub"] == user.id
    with pytest.raises(AuthenticationFailed):
        account_services.refresh_tokens(db_session, pair.access_token)


def test_logout_revokes_outstanding_tokens(db_session):
    user = create_user(db_session, username="clerk")
    token = security.create_access_token(user)

    router_public.logout(request=make_request(), db=db_session, current_user=user)

    with pytest.raises(AuthenticationFailed):
        security.resolve_token_user(db_session, token, expected_type="access")
    assert _logs(db_session, "logout")[0].user_id == user.id


def test_change_password_checks_current_password(db_session):
    user = create_user(db_session, username="clerk", password="secret123")

    with pytest.raises(ValidationFailed) as exc:
        account_services.change_password(
            db_session,
            user,
            account_schemas.ChangePasswordRequest(currentPassword="nope", newPassword="another123"),
        )
    assert exc.value.errors[0]["field"] == "currentPassword"

    account_services.change_password(
        db_session,
        user,
        account_schemas.ChangePasswordRequest(currentPassword="secret123", newPassword="another123"),
    )
    assert security.verify_password("another123", user.hashed_password)
    assert user.token_revoked_at is not None


def test_admin_reset_password_revokes_tokens(db_session, admin):
    user = create_user(db_session, username="clerk")
    token = security.create_access_token(user)

    router_admin.reset_password(
        user.id,
        account_schemas.PasswordReset(newPassword="fresh-pass"),
        request=make_request(),
        db=db_session,
        current_user=admin,
    )

    assert security.verify_password("fresh-pass", user.hashed_password)
    with pytest.raises(AuthenticationFailed):
        security.resolve_token_user(db_session, token, expected_type="access")


def test_permissions_are_rewritten_in_place(db_session, admin):
    user = create_user(
        db_session,
        username="clerk",
        grants={"reports": ["read"], "events": ["read", "create"]},
    )
    reports_row_id = next(p.id for p in user.permissions if p.module == "reports")

    account_services.set_permissions(
        db_session,
        user,
        [
            account_schemas.PermissionGrant(module="reports", actions=["read", "update"]),
            account_schemas.PermissionGrant(module="meetings", actions=["read"]),
        ],
        actor=admin,
    )

    grants = {p.module: p for p in user.permissions}
    assert set(grants) == {"reports", "meetings"}
    assert grants["reports"].id == reports_row_id
    assert grants["reports"].actions == ["read", "update"]


def test_deactivate_is_a_soft_delete(db_session, admin):
    user = create_user(db_session, username="clerk")

    router_admin.delete_user(user.id, request=make_request(), db=db_session, current_user=admin)

    db_session.refresh(user)
    assert user.is_active is False
    assert user.token_revoked_at is not None


def test_list_users_filters(db_session, admin):
    governorate = create_governorate(db_session)
    clerk = create_user(db_session, username="clerk")
    clerk.governorate_id = governorate.id
    create_user(db_session, username="viewer", role=UserRole.VIEWER, is_active=False)
    db_session.commit()

    params = PageParams(page=1, limit=20)
    by_role, _ = account_services.list_users(
        db_session, filters=account_schemas.UserFilters(role="viewer"), params=params
    )
    active, _ = account_services.list_users(
        db_session, filters=account_schemas.UserFilters(isActive=True), params=params
    )
    local, total = account_services.list_users(
        db_session, filters=account_schemas.UserFilters(governorate=governorate.id), params=params
    )

    assert [u.username for u in by_role] == ["viewer"]
    assert {u.username for u in active} == {"admin", "clerk"}
    assert total == 1 and local[0].id == clerk.id


def test_user_logs_are_paginated(db_session, admin):
    user = create_user(db_session, username="clerk", password="secret123")
    for _ in range(3):
        _login(db_session, "clerk", "secret123")

    result = router_admin.user_logs(user.id, params=PageParams(page=2, limit=2), db=db_session, current_user=admin)

    assert result.total == 3
    assert result.count == 1
    assert result.pagination.current_page == 2
    assert result.pagination.total_pages == 2
