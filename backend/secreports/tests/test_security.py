from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
import pytest
from jose import jwt

from conftest import create_user
from secreports import security
from secreports.errors import AuthenticationFailed


def test_password_hash_is_argon2_and_verifies():
    hashed = security.get_password_hash("s3cret-pass")

    assert hashed.startswith("$argon2")
    assert security.verify_password("s3cret-pass", hashed)
    assert not security.verify_password("wrong", hashed)


def test_legacy_bcrypt_hashes_still_verify():
    legacy = bcrypt.hashpw(b"old-password", bcrypt.gensalt()).decode("utf-8")

    assert security.verify_password("old-password", legacy)
    assert not security.verify_password("new-password", legacy)


def test_access_token_claims(db_session, admin):
    token = security.create_access_token(admin)
    payload = security.decode_token(token, expected_type=security.ACCESS_TOKEN_TYPE)

    assert payload["sub"] == admin.id
    assert payload["username"] == "admin"
    assert payload["role"] == "admin"
    assert payload["typ"] == "access"


def test_refresh_token_is_not_an_access_token(db_session, admin):
    refresh = security.create_refresh_token(admin)

    with pytest.raises(AuthenticationFailed):
        security.decode_token(refresh, expected_type=security.ACCESS_TOKEN_TYPE)


def test_expired_token_is_rejected(db_session, admin):
    token = security.create_access_token(admin, expires_delta=timedelta(seconds=-5))

    with pytest.raises(AuthenticationFailed):
        security.resolve_token_user(db_session, token, expected_type=security.ACCESS_TOKEN_TYPE)


def test_token_signed_with_other_key_is_rejected(db_session, admin):
    token = jwt.encode({"sub": admin.id, "typ": "access"}, "not-the-key", algorithm="HS256")

    with pytest.raises(AuthenticationFailed):
        security.resolve_token_user(db_session, token, expected_type=security.ACCESS_TOKEN_TYPE)


def test_tokens_issued_before_revocation_are_rejected(db_session):
    user = create_user(db_session, username="clerk")
    token = security.create_access_token(user)

    user.token_revoked_at = datetime.now(timezone.utc) + timedelta(seconds=1)
    db_session.commit()

    with pytest.raises(AuthenticationFailed):
        security.resolve_token_user(db_session, token, expected_type=security.ACCESS_TOKEN_TYPE)


def test_disabled_user_fails_active_check(db_session):
    user = create_user(db_session, username="gone", is_active=False)

    with pytest.raises(AuthenticationFailed) as exc:
        security.get_current_active_user(current_user=user)
    assert exc.value.status_code == 401
