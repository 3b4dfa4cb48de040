# backend/secreports/security.py

"""
Security helpers for the reports service.

Responsibilities:
- Password hashing and verification
- JWT access / refresh token creation and decoding
- FastAPI dependencies for the current (active) user

Permission checks live in `secreports.permissions`.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHash
import bcrypt

from .database import get_db
from .errors import AuthenticationFailed
from secreports.apps.accounts import models as account_models

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

# In production, ALWAYS override these via environment variables.
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

try:
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")
    )
except ValueError:
    ACCESS_TOKEN_EXPIRE_MINUTES = 1440

try:
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
except ValueError:
    REFRESH_TOKEN_EXPIRE_DAYS = 7

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Used by FastAPI's OAuth2 docs / OpenAPI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


# ---------------------------------------------------------------------------
# PASSWORD HASHING
# ---------------------------------------------------------------------------

# Argon2id (argon2-cffi) password hasher.
_pwd_hasher = PasswordHasher(
    time_cost=int(os.getenv("ARGON2_TIME_COST", "3")),
    memory_cost=int(os.getenv("ARGON2_MEMORY_COST", "65536")),  # KiB (64MB)
    parallelism=int(os.getenv("ARGON2_PARALLELISM", "2")),
    hash_len=int(os.getenv("ARGON2_HASH_LEN", "32")),
    salt_len=int(os.getenv("ARGON2_SALT_LEN", "16")),
)


def _is_argon2_hash(hashed_password: str) -> bool:
    return isinstance(hashed_password, str) and hashed_password.startswith("$argon2")


def _is_bcrypt_hash(hashed_password: str) -> bool:
    return isinstance(hashed_password, str) and hashed_password.startswith(("$2a$", "$2b$", "$2y$"))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if the plain password matches the hash."""
    if not plain_password or not hashed_password:
        return False

    if _is_argon2_hash(hashed_password):
        try:
            return _pwd_hasher.verify(hashed_password, plain_password)
        except (VerifyMismatchError, VerificationError, InvalidHash):
            return False

    # Accounts imported from the old system still carry bcrypt hashes
    if _is_bcrypt_hash(hashed_password):
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            return False

    return False


def get_password_hash(password: str) -> str:
    """Hash a password for storing in the database (Argon2id)."""
    return _pwd_hasher.hash(password)


# ---------------------------------------------------------------------------
# JWT TOKENS
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    issued_at = _utcnow()
    to_encode = dict(claims)
    # Fractional iat so a token issued right after a revocation is not
    # mistaken for one issued before it.
    to_encode.update({"iat": issued_at.timestamp(), "exp": issued_at + expires_delta})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def _role_value(user: account_models.User) -> str:
    return user.role.value if hasattr(user.role, "value") else str(user.role)


def create_access_token(
    user: account_models.User,
    *,
    expires_delta: Optional[timedelta] = None,
) -> str:
    return _encode(
        {
            "sub": str(user.id),
            "username": user.username,
            "role": _role_value(user),
            "typ": ACCESS_TOKEN_TYPE,
        },
        expires_delta if expires_delta is not None else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(
    user: account_models.User,
    *,
    expires_delta: Optional[timedelta] = None,
) -> str:
    return _encode(
        {"sub": str(user.id), "typ": REFRESH_TOKEN_TYPE},
        expires_delta if expires_delta is not None else timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str, *, expected_type: str) -> Dict[str, Any]:
    """
    Verify signature, expiry and token type. Raises AuthenticationFailed.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationFailed("Invalid or expired token.")
    if payload.get("typ") != expected_type or not payload.get("sub"):
        raise AuthenticationFailed("Invalid or expired token.")
    return payload


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def is_token_revoked(user: account_models.User, payload: Dict[str, Any]) -> bool:
    revoked_at = getattr(user, "token_revoked_at", None)
    if revoked_at is None:
        return False
    try:
        issued_at = float(payload.get("iat"))
    except (TypeError, ValueError):
        return True
    return issued_at < _as_aware(revoked_at).timestamp()


# ---------------------------------------------------------------------------
# USER LOOKUP HELPERS
# ---------------------------------------------------------------------------


def get_user_by_id(
    db: Session,
    user_id: Union[str, int],
) -> Optional[account_models.User]:
    """
    Minimal helper to load a user by ID.
    """
    if user_id is None:
        return None

    normalised_id = str(user_id).strip()

    return (
        db.query(account_models.User)
        .filter(account_models.User.id == normalised_id)
        .first()
    )


def resolve_token_user(db: Session, token: str, *, expected_type: str) -> account_models.User:
    payload = decode_token(token, expected_type=expected_type)
    user = get_user_by_id(db, payload["sub"])
    if user is None or is_token_revoked(user, payload):
        raise AuthenticationFailed("Invalid or expired token.")
    return user


# ---------------------------------------------------------------------------
# FASTAPI DEPENDENCIES
# ---------------------------------------------------------------------------


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> account_models.User:
    """
    Decode the bearer access token and return the corresponding User.

    Refresh tokens, revoked tokens and unknown users are rejected with 401.
    """
    return resolve_token_user(db, token, expected_type=ACCESS_TOKEN_TYPE)


def get_current_active_user(
    current_user: account_models.User = Depends(get_current_user),
) -> account_models.User:
    """
    Ensure the current user is active.

    Disabled users hold no valid session: 401, same as a bad token.
    """
    if not getattr(current_user, "is_active", False):
        raise AuthenticationFailed("User account is disabled.")
    return current_user
