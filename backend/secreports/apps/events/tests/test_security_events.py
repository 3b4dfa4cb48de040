from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import create_governorate, make_request
from secreports import numbering
from secreports.apps.events import router as event_router
from secreports.apps.events import schemas as event_schemas
from secreports.apps.events import services as event_services
from secreports.apps.events.models import Event, EventStatus
from secreports.apps.governorates import services as governorate_services
from secreports.apps.reports import schemas as report_schemas
from secreports.apps.reports import services as report_services
from secreports.errors import NotFound, ValidationFailed
from secreports.schemas import PageParams


@pytest.fixture()
def report(db_session, admin):
    return report_services.create_report(
        db_session,
        report_schemas.ReportCreate(reportDate=datetime(2025, 5, 4, 18, 0), reportType="evening"),
        actor=admin,
    )


def _payload(report, governorate, **overrides) -> event_schemas.EventCreate:
    data = {
        "reportId": report.id,
        "governorateId": governorate.id,
        "region": "حوارة",
        "eventDate": "2025-05-04",
        "eventTime": "16:45",
        "eventType": "raid",
        "severity": "high",
        "description": "Night raid on the old town",
        "involvedParties": ["army"],
        "casualties": {"killed": 0, "injured": 2, "arrested": 3},
    }
    data.update(overrides)
    return event_schemas.EventCreate(**data)


def test_events_are_numbered_under_their_report(db_session, admin, governorate, report):
    first = event_services.create_event(db_session, _payload(report, governorate), actor=admin)
    second = event_services.create_event(db_session, _payload(report, governorate), actor=admin)

    assert first.event_number == "EVT-20250504-E-001"
    assert second.event_number == "EVT-20250504-E-002"
    assert report_services.get_report(db_session, report.id).event_count == 2
    assert first.casualties == {"killed": 0, "injured": 2, "arrested": 3}


def test_event_count_follows_deletes_and_numbers_are_not_reused(db_session, admin, governorate, report):
    first = event_services.create_event(db_session, _payload(report, governorate), actor=admin)
    event_services.create_event(db_session, _payload(report, governorate), actor=admin)

    event_router.delete_event(first.id, request=make_request(), db=db_session, current_user=admin)
    assert report_services.get_report(db_session, report.id).event_count == 1

    third = event_services.create_event(db_session, _payload(report, governorate), actor=admin)
    assert third.event_number == "EVT-20250504-E-003"
    assert report_services.get_report(db_session, report.id).event_count == 2


def test_region_outside_governorate_leaves_nothing_behind(db_session, admin, governorate, report):
    with pytest.raises(ValidationFailed) as exc:
        event_services.create_event(
            db_session, _payload(report, governorate, region="أريحا"), actor=admin
        )

    assert exc.value.errors[0]["field"] == "region"
    assert db_session.query(Event).count() == 0
    assert report_services.get_report(db_session, report.id).event_count == 0
    assert (
        db_session.query(numbering.ReferenceCounter)
        .filter(numbering.ReferenceCounter.scope_key == f"EVT:{report.id}")
        .first()
        is None
    )


@pytest.mark.parametrize("region", [" حوارة ", "حوارة\n", "HAWARA"])
def test_region_must_match_exactly(db_session, admin, governorate, report, region):
    with pytest.raises(ValidationFailed) as exc:
        event_services.create_event(db_session, _payload(report, governorate, region=region), actor=admin)

    assert exc.value.errors[0]["field"] == "region"
    assert db_session.query(Event).count() == 0


def test_unknown_report_or_governorate_is_not_found(db_session, admin, governorate, report):
    with pytest.raises(NotFound):
        event_services.create_event(db_session, _payload(report, governorate, reportId="nope"), actor=admin)
    with pytest.raises(NotFound):
        event_services.create_event(db_session, _payload(report, governorate, governorateId="nope"), actor=admin)


def test_removing_a_region_keeps_existing_events_valid(db_session, admin, governorate, report):
    event = event_services.create_event(db_session, _payload(report, governorate), actor=admin)
    governorate_services.remove_region(db_session, governorate, "حوارة", actor=admin)

    updated = event_services.update_event(
        db_session,
        event,
        event_schemas.EventUpdate(description="Raid ended before dawn", status="finished"),
        actor=admin,
    )

    assert updated.region == "حوارة"
    assert updated.status == EventStatus.RESOLVED
    assert event_schemas.EventRead.model_validate(updated).region == "حوارة"


def test_moving_an_event_revalidates_the_region(db_session, admin, governorate, report):
    other = create_governorate(db_session, code="JEN", name="جنين", regions=["جنين", "قباطية"])
    event = event_services.create_event(db_session, _payload(report, governorate), actor=admin)

    with pytest.raises(ValidationFailed):
        event_services.update_event(
            db_session, event, event_schemas.EventUpdate(governorateId=other.id), actor=admin
        )

    db_session.rollback()
    event = event_services.get_event(db_session, event.id)
    moved = event_services.update_event(
        db_session,
        event,
        event_schemas.EventUpdate(governorateId=other.id, region="قباطية"),
        actor=admin,
    )
    assert moved.governorate_id == other.id
    assert moved.region == "قباطية"


def test_casualties_update(db_session, admin, governorate, report):
    event = event_services.create_event(db_session, _payload(report, governorate), actor=admin)

    event_services.update_event(
        db_session,
        event,
        event_schemas.EventUpdate(casualties={"killed": 1, "injured": 4, "arrested": 0}),
        actor=admin,
    )

    assert event.casualties == {"killed": 1, "injured": 4, "arrested": 0}


def test_negative_casualties_are_rejected():
    with pytest.raises(ValueError):
        event_schemas.Casualties(killed=-1)


def test_list_events_filters(db_session, admin, governorate, report):
    event_services.create_event(db_session, _payload(report, governorate), actor=admin)
    event_services.create_event(
        db_session,
        _payload(report, governorate, region="بيتا", severity="low", status="finished", eventDate="2025-05-03"),
        actor=admin,
    )

    params = PageParams(page=1, limit=20)
    resolved, _ = event_services.list_events(
        db_session, filters=event_schemas.EventFilters(status="finished"), params=params
    )
    partial_region, _ = event_services.list_events(
        db_session, filters=event_schemas.EventFilters(region="بيت"), params=params
    )
    recent, total = event_services.list_events(
        db_session, filters=event_schemas.EventFilters(startDate=date(2025, 5, 4)), params=params
    )
    by_governorate, _ = event_services.list_events_by_governorate(db_session, governorate.id, params=params)

    assert [e.region for e in resolved] == ["بيتا"]
    assert [e.region for e in partial_region] == ["بيتا"]
    assert total == 1 and recent[0].region == "حوارة"
    assert len(by_governorate) == 2
