from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import create_governorate, create_user, make_request
from secreports import numbering
from secreports.apps.accounts.models import UserRole
from secreports.apps.audit import models as audit_models
from secreports.apps.events import schemas as event_schemas
from secreports.apps.events import services as event_services
from secreports.apps.reports import router as report_router
from secreports.apps.reports import schemas as report_schemas
from secreports.apps.reports import services as report_services
from secreports.apps.reports.models import DailyReport, ReportStatus
from secreports.apps.workflow import TransitionError
from secreports.errors import Conflict, NotFound, PermissionDenied, ValidationFailed
from secreports.schemas import PageParams

MORNING = datetime(2025, 5, 4, 8, 0)


def _create_report(db_session, actor, **overrides):
    payload = {"reportDate": MORNING, "reportType": "morning"}
    payload.update(overrides)
    return report_services.create_report(
        db_session, report_schemas.ReportCreate(**payload), actor=actor, request=make_request()
    )


def _create_event(db_session, actor, report, governorate):
    return event_services.create_event(
        db_session,
        event_schemas.EventCreate(
            reportId=report.id,
            governorateId=governorate.id,
            region="بيتا",
            eventDate=date(2025, 5, 4),
            eventTime="07:30",
            eventType="checkpoint",
            description="Flying checkpoint at the village entrance",
        ),
        actor=actor,
    )


def test_create_report_assigns_number_and_governorates(db_session, admin, governorate):
    report = _create_report(db_session, admin, governorates=[governorate.id])

    assert report.report_number == "REP-20250504-M-001"
    assert report.status == ReportStatus.DRAFT
    assert report.event_count == 0
    assert [g.code for g in report.governorates] == ["NAB"]
    assert report.created_by == admin.id


def test_supplied_report_number_is_kept_unless_taken(db_session, admin):
    report = _create_report(db_session, admin, reportNumber="REP-20250504-M-777")
    assert report.report_number == "REP-20250504-M-777"

    with pytest.raises(Conflict) as exc:
        _create_report(
            db_session,
            admin,
            reportDate=datetime(2025, 5, 5, 8, 0),
            reportNumber="REP-20250504-M-777",
        )
    assert exc.value.field == "reportNumber"


@pytest.mark.parametrize(
    "report_number, report_type",
    [
        ("DR-2025-17", "morning"),
        ("REP-2025-05-04-M-1", "morning"),
        ("REP-20250504-E-001", "morning"),
        ("REP-20250504-M-001", "evening"),
    ],
)
def test_supplied_report_number_must_fit_the_event_scheme(db_session, admin, report_number, report_type):
    with pytest.raises(ValidationFailed) as exc:
        _create_report(db_session, admin, reportType=report_type, reportNumber=report_number)

    assert exc.value.errors[0]["field"] == "reportNumber"
    assert db_session.query(DailyReport).count() == 0
    assert db_session.query(numbering.ReferenceCounter).count() == 0


def test_events_number_under_a_supplied_report_number(db_session, admin, governorate):
    report = _create_report(db_session, admin, reportNumber="REP-20250504-M-777")

    event = _create_event(db_session, admin, report, governorate)

    assert event.event_number == "EVT-20250504-M-001"
    db_session.expire(report)
    assert [e.id for e in report.events] == [event.id]


def test_same_date_and_type_is_a_duplicate(db_session, admin):
    _create_report(db_session, admin)

    with pytest.raises(Conflict) as exc:
        _create_report(db_session, admin)
    assert exc.value.field == "reportDate"

    evening = _create_report(db_session, admin, reportType="evening")
    assert evening.report_number == "REP-20250504-E-001"


def test_unknown_governorate_fails_before_numbering(db_session, admin):
    with pytest.raises(ValidationFailed) as exc:
        _create_report(db_session, admin, governorates=["missing-id"])

    assert exc.value.errors[0]["field"] == "governorates"
    assert db_session.query(numbering.ReferenceCounter).count() == 0


def test_report_cannot_be_created_already_approved(db_session, admin):
    with pytest.raises(TransitionError) as exc:
        _create_report(db_session, admin, status="approved")
    assert exc.value.code == "INVALID_TRANSITION"


def test_approval_needs_the_approve_grant(db_session):
    clerk = create_user(
        db_session,
        username="clerk",
        role=UserRole.SUPERVISOR,
        grants={"reports": ["read", "create", "update"]},
    )
    chief = create_user(
        db_session,
        username="chief",
        role=UserRole.SUPERVISOR,
        grants={"reports": ["read", "update", "approve"]},
    )
    report = _create_report(db_session, clerk, status="complete")

    with pytest.raises(PermissionDenied):
        report_services.update_report(
            db_session, report, report_schemas.ReportUpdate(status="approved"), actor=clerk
        )

    db_session.rollback()
    report = report_services.get_report(db_session, report.id)
    report = report_services.update_report(
        db_session, report, report_schemas.ReportUpdate(status="approved"), actor=chief
    )

    assert report.status == ReportStatus.APPROVED
    assert report.approved_by == chief.id
    entry = (
        db_session.query(audit_models.SystemLog)
        .filter(audit_models.SystemLog.action == "approve")
        .one()
    )
    assert entry.resource_id == report.id


def test_archive_once(db_session, admin):
    report = _create_report(db_session, admin, status="complete")

    report_router.archive_report(report.id, request=make_request(), db=db_session, current_user=admin)
    assert report_services.get_report(db_session, report.id).status == ReportStatus.ARCHIVED

    with pytest.raises(Conflict):
        report_services.archive_report(db_session, report, actor=admin)


def test_archived_report_cannot_return_to_draft(db_session, admin):
    report = _create_report(db_session, admin)
    report_services.archive_report(db_session, report, actor=admin)

    with pytest.raises(TransitionError):
        report_services.update_report(
            db_session, report, report_schemas.ReportUpdate(status="draft"), actor=admin
        )


def test_report_with_events_cannot_be_deleted(db_session, admin, governorate):
    report = _create_report(db_session, admin)
    event = _create_event(db_session, admin, report, governorate)

    with pytest.raises(Conflict) as exc:
        report_services.delete_report(db_session, report.id, actor=admin)
    assert exc.value.field == "eventCount"

    event_services.delete_event(db_session, event.id, actor=admin)
    report_services.delete_report(db_session, report.id, actor=admin)

    with pytest.raises(NotFound):
        report_services.get_report(db_session, report.id)


def test_list_reports_filters(db_session, admin):
    north = create_governorate(db_session, code="JEN", name="جنين", regions=["جنين"])
    south = create_governorate(db_session, code="HEB", name="الخليل", regions=["الخليل"])
    _create_report(db_session, admin, governorates=[north.id])
    _create_report(db_session, admin, reportType="evening", governorates=[south.id])
    _create_report(db_session, admin, reportDate=datetime(2025, 5, 6, 8, 0))

    params = PageParams(page=1, limit=20)
    by_day, total = report_services.list_reports(
        db_session,
        filters=report_schemas.ReportFilters(startDate=date(2025, 5, 4), endDate=date(2025, 5, 4)),
        params=params,
    )
    by_governorate, _ = report_services.list_reports(
        db_session, filters=report_schemas.ReportFilters(governorate=south.id), params=params
    )
    evenings, _ = report_services.list_reports(
        db_session, filters=report_schemas.ReportFilters(reportType="evening"), params=params
    )

    assert total == 2
    assert {r.report_number for r in by_day} == {"REP-20250504-M-001", "REP-20250504-E-001"}
    assert [r.report_number for r in by_governorate] == ["REP-20250504-E-001"]
    assert [r.report_number for r in evenings] == ["REP-20250504-E-001"]


def test_report_events_route(db_session, admin, governorate):
    report = _create_report(db_session, admin)
    _create_event(db_session, admin, report, governorate)

    result = report_router.list_report_events(
        report.id, params=PageParams(page=1, limit=20), db=db_session, current_user=admin
    )

    assert result.total == 1
    assert result.data[0].event_number == "EVT-20250504-M-001"
