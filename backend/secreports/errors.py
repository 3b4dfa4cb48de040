# backend/secreports/errors.py
"""
Domain errors and the handlers that turn them into the JSON envelope.

Services raise these; routers let them propagate. `register_exception_handlers`
wires them (plus FastAPI / SQLAlchemy errors) into the application so every
failure leaves the API as:

    {"success": false, "message": "...", "errors": [...], "code": "..."}
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


def is_development() -> bool:
    return os.getenv("APP_ENV", "production").strip().lower() == "development"


# ---------------------------------------------------------------------------
# ERROR TYPES
# ---------------------------------------------------------------------------


class AppError(Exception):
    """Base class for errors that map onto a fixed HTTP status."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        errors: Optional[List[Dict[str, Any]]] = None,
        code: Optional[str] = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        self.code = code
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input data."

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls(message, errors=[{"field": field, "message": message}])


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class AuthenticationFailed(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials."


class PermissionDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action."


class Conflict(AppError):
    """
    Duplicate unique keys and state conflicts.

    Reported as 400 with the offending field surfaced in `errors`.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The request conflicts with existing data."

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None) -> None:
        errors = [{"field": field, "message": message or self.default_message}] if field else None
        super().__init__(message, errors=errors, code="CONFLICT")
        self.field = field


class UploadRejected(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "File upload failed."


# ---------------------------------------------------------------------------
# ENVELOPE HELPERS
# ---------------------------------------------------------------------------


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def error_body(
    message: str,
    *,
    errors: Optional[List[Dict[str, Any]]] = None,
    code: Optional[str] = None,
    error: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if code:
        body["code"] = code
    if error:
        body["error"] = error
    return body


_UNIQUE_FIELD_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: [\w]+\.(\w+)"),          # sqlite
    re.compile(r"Key \((?:\w+, )*(\w+)\)=\("),                       # postgres
)


def _integrity_field(exc: IntegrityError) -> Optional[str]:
    message = str(getattr(exc, "orig", exc))
    for pattern in _UNIQUE_FIELD_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


# ---------------------------------------------------------------------------
# HANDLERS
# ---------------------------------------------------------------------------


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.info(
        "%s %s -> %s %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
        extra={"client_ip": _client_ip(request)},
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationFailed) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, errors=exc.errors, code=exc.code),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed."
    errors = exc.detail if isinstance(exc.detail, list) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(detail, errors=errors),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request, exc: Union[RequestValidationError, ValidationError]
) -> JSONResponse:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or None, "message": err.get("msg")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid input data.", errors=errors),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    field = _integrity_field(exc)
    message = (
        f'The value supplied for "{field}" already exists.'
        if field
        else "The request conflicts with existing data."
    )
    logger.info("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    errors = [{"field": field, "message": message}] if field else None
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message, errors=errors, code="CONFLICT"),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        extra={"client_ip": _client_ip(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "Internal server error.",
            error=str(exc) if is_development() else None,
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
