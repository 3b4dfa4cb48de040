from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import create_governorate, create_user
from secreports.apps.accounts.models import UserRole
from secreports.database import get_db, get_read_db
from secreports.main import _allowed_origins, app

ALL_REPORT_ACTIONS = {"reports": ["read", "create", "update", "delete", "approve"]}


@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_read_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _login(client, username: str, password: str = "secret123"):
    return client.post("/auth/login", json={"username": username, "password": password})


def _auth_headers(client, username: str) -> dict:
    response = _login(client, username)
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['accessToken']}"}


def _create_report(client, headers, report_type: str = "morning"):
    response = client.post(
        "/reports",
        json={"reportDate": "2025-05-04T08:00:00", "reportType": report_type},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_login_returns_camel_case_tokens(client, db_session, admin):
    response = _login(client, "admin")

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["data"]["tokenType"] == "bearer"
    assert body["data"]["user"]["username"] == "admin"
    assert "refreshToken" in body["data"]


def test_disabled_user_cannot_login(client, db_session):
    create_user(db_session, username="retired", is_active=False)

    response = _login(client, "retired")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "User account is disabled."}
    assert response.headers["www-authenticate"] == "Bearer"


def test_wrong_password_is_unauthorized(client, admin):
    response = _login(client, "admin", "not-the-password")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_missing_token_is_unauthorized(client):
    response = client.get("/reports")

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_missing_permission_is_forbidden(client, db_session):
    create_user(db_session, username="viewer", role=UserRole.VIEWER)

    response = client.get("/reports", headers=_auth_headers(client, "viewer"))

    assert response.status_code == 403
    assert response.json()["success"] is False


def test_list_envelope_is_paginated(client, admin):
    headers = _auth_headers(client, "admin")
    _create_report(client, headers, "morning")
    _create_report(client, headers, "evening")

    response = client.get("/reports", params={"limit": 1}, headers=headers)

    body = response.json()
    assert response.status_code == 200
    assert body["count"] == 1
    assert body["total"] == 2
    assert body["pagination"] == {"currentPage": 1, "totalPages": 2}
    assert body["data"][0]["reportNumber"].startswith("REP-20250504-")
    assert body["data"][0]["eventCount"] == 0


def test_invalid_body_is_a_field_error(client, admin):
    response = client.post(
        "/reports",
        json={"reportDate": "2025-05-04T08:00:00"},
        headers=_auth_headers(client, "admin"),
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "reportType"


def test_report_delete_needs_supervisor_role(client, db_session, admin):
    create_user(db_session, username="clerk", grants=ALL_REPORT_ACTIONS)
    create_user(db_session, username="chief", role=UserRole.SUPERVISOR)
    report = _create_report(client, _auth_headers(client, "admin"))

    denied = client.delete(f"/reports/{report['id']}", headers=_auth_headers(client, "clerk"))
    assert denied.status_code == 403

    allowed = client.delete(f"/reports/{report['id']}", headers=_auth_headers(client, "chief"))
    assert allowed.status_code == 200
    assert allowed.json()["success"] is True

    gone = client.get(f"/reports/{report['id']}", headers=_auth_headers(client, "admin"))
    assert gone.status_code == 404


def test_public_governorate_list_has_counts(client, db_session):
    create_governorate(db_session, code="NAB", name="نابلس")
    create_governorate(db_session, code="JEN", name="جنين", regions=("جنين",))

    response = client.get("/governorates")

    body = response.json()
    assert response.status_code == 200
    assert body["count"] == 2
    assert body["total"] == 2
    assert [g["code"] for g in body["data"]] == ["JEN", "NAB"]


def test_cors_origins_default_and_override(monkeypatch):
    monkeypatch.delenv("CORS_ALLOWED_ORIGINS", raising=False)
    assert _allowed_origins() == ["http://localhost:3000", "http://localhost:3001"]

    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://reports.example.ps, ,http://localhost:8080")
    assert _allowed_origins() == ["https://reports.example.ps", "http://localhost:8080"]
