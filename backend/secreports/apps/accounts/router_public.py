# backend/secreports/apps/accounts/router_public.py

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ...database import get_db
from ...permissions import require_admin
from ...schemas import ApiResponse, ok
from ...security import get_current_active_user
from . import models, schemas, services

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# LOGIN / TOKENS
# ---------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=ApiResponse[schemas.TokenPair],
    summary="Login with username and password",
)
def login(
    payload: schemas.LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Returns an access/refresh token pair plus the user profile.

    Unknown usernames, wrong passwords and disabled accounts answer 401.
    """
    user = services.authenticate_user(db, login_req=payload, request=request)
    return ok(services.issue_tokens_for_user(user), "Login successful.")


@router.post("/refresh-token", response_model=ApiResponse[schemas.TokenPair])
def refresh_token(payload: schemas.RefreshRequest, db: Session = Depends(get_db)):
    return ok(services.refresh_tokens(db, payload.refresh_token))


# ---------------------------------------------------------------------------
# REGISTRATION (admin)
# ---------------------------------------------------------------------------


@router.post(
    "/register",
    response_model=ApiResponse[schemas.UserRead],
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: schemas.UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    user = services.create_user(db, payload, actor=current_user, request=request)
    return ok(schemas.UserRead.model_validate(user), "User created.")


# ---------------------------------------------------------------------------
# SELF SERVICE
# ---------------------------------------------------------------------------


@router.get("/me", response_model=ApiResponse[schemas.UserRead])
def read_me(current_user: models.User = Depends(get_current_active_user)):
    return ok(schemas.UserRead.model_validate(current_user))


@router.post("/change-password", response_model=ApiResponse[None])
def change_password(
    payload: schemas.ChangePasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    services.change_password(db, current_user, payload, request=request)
    return ok(message="Password changed. Please log in again.")


@router.post("/logout", response_model=ApiResponse[None])
def logout(
    request: Request,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    services.logout(db, current_user, request=request)
    return ok(message="Logged out.")
