from __future__ import annotations

import asyncio
import json

import pytest
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.requests import Request

from secreports import errors


def _request(path: str = "/api/reports") -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": path,
            "headers": [],
            "query_string": b"",
            "scheme": "http",
            "server": ("testserver", 80),
            "client": ("10.0.0.7", 5000),
        }
    )


def _run(handler, exc):
    response = asyncio.run(handler(_request(), exc))
    return response.status_code, json.loads(response.body), response.headers


@pytest.mark.parametrize(
    "exc, status_code",
    [
        (errors.ValidationFailed.for_field("reportDate", "Report date is required."), 400),
        (errors.NotFound("Report not found."), 404),
        (errors.AuthenticationFailed(), 401),
        (errors.PermissionDenied(), 403),
        (errors.Conflict("Report number already exists.", field="reportNumber"), 400),
    ],
)
def test_app_errors_map_to_status(exc, status_code):
    code, body, _ = _run(errors.app_error_handler, exc)

    assert code == status_code
    assert body["success"] is False
    assert body["message"] == exc.message


def test_field_errors_and_code_are_included():
    _, body, _ = _run(
        errors.app_error_handler,
        errors.Conflict("Report number already exists.", field="reportNumber"),
    )
    assert body["code"] == "CONFLICT"
    assert body["errors"] == [{"field": "reportNumber", "message": "Report number already exists."}]


def test_authentication_failure_sets_challenge_header():
    _, body, headers = _run(errors.app_error_handler, errors.AuthenticationFailed("Token has expired."))
    assert headers["www-authenticate"] == "Bearer"
    assert "errors" not in body


def test_request_validation_flattens_locations():
    exc = RequestValidationError(
        [
            {"loc": ("body", "governorateId"), "msg": "Field required", "type": "missing"},
            {"loc": ("query", "page"), "msg": "Input should be greater than 0", "type": "greater_than"},
        ]
    )
    code, body, _ = _run(errors.request_validation_handler, exc)

    assert code == 400
    assert body["message"] == "Invalid input data."
    assert body["errors"] == [
        {"field": "governorateId", "message": "Field required"},
        {"field": "page", "message": "Input should be greater than 0"},
    ]


def test_unique_violation_names_the_column():
    exc = IntegrityError(
        "INSERT INTO governorates ...",
        {},
        Exception("UNIQUE constraint failed: governorates.code"),
    )
    code, body, _ = _run(errors.integrity_error_handler, exc)

    assert code == 400
    assert body["code"] == "CONFLICT"
    assert body["errors"][0]["field"] == "code"


def test_unhandled_error_hides_detail_outside_development(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    code, body, _ = _run(errors.unhandled_error_handler, RuntimeError("db exploded"))
    assert code == 500
    assert body == {"success": False, "message": "Internal server error."}

    monkeypatch.setenv("APP_ENV", "development")
    _, body, _ = _run(errors.unhandled_error_handler, RuntimeError("db exploded"))
    assert body["error"] == "db exploded"
