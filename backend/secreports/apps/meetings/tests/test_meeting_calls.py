from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from conftest import make_request
from secreports.apps.meetings import schemas as meeting_schemas
from secreports.apps.meetings import services as meeting_services
from secreports.apps.meetings.models import MeetingCallStatus, MeetingCallType
from secreports.errors import NotFound, ValidationFailed
from secreports.schemas import PageParams


def _payload(**overrides):
    data = {
        "type": "meeting",
        "date": "2025-05-04",
        "time": "10:30",
        "location": "مقر المحافظة",
        "requestedBy": "Governor's office",
        "participants": [{"name": "Samer", "position": "Director"}],
        "purpose": "Weekly security review",
    }
    data.update(overrides)
    return data


def _create(db_session, actor, **overrides):
    return meeting_services.create_meeting_call(
        db_session,
        meeting_schemas.MeetingCallCreate(**_payload(**overrides)),
        actor=actor,
        request=make_request(),
    )


def test_meeting_requires_location():
    with pytest.raises(ValidationError) as exc:
        meeting_schemas.MeetingCallCreate(**_payload(location="  "))
    assert "Location is required for meetings" in str(exc.value)


def test_meeting_requires_a_participant():
    with pytest.raises(ValidationError):
        meeting_schemas.MeetingCallCreate(**_payload(participants=[]))


def test_meetings_and_calls_have_separate_series(db_session, admin):
    meeting = _create(db_session, admin)
    call = _create(db_session, admin, type="call", location=None)
    second_meeting = _create(db_session, admin, time="14:00")

    assert meeting.reference_number == "MTG-20250504-001"
    assert second_meeting.reference_number == "MTG-20250504-002"
    assert call.reference_number == "CALL-20250504-001"
    assert call.type == MeetingCallType.CALL
    assert meeting.status == MeetingCallStatus.SCHEDULED
    assert meeting.participants[0]["name"] == "Samer"


def test_follow_up_actions_are_stored_as_json(db_session, admin):
    item = _create(
        db_session,
        admin,
        followUpActions=[{"action": "Send minutes", "assignedTo": "Secretary", "dueDate": "2025-05-06"}],
        decisions=["Increase patrols"],
    )

    assert item.follow_up_actions == [
        {"action": "Send minutes", "assigned_to": "Secretary", "due_date": "2025-05-06"}
    ]
    assert item.decisions == ["Increase patrols"]


def test_update_keeps_location_on_meetings(db_session, admin):
    item = _create(db_session, admin)

    with pytest.raises(ValidationFailed) as exc:
        meeting_services.update_meeting_call(
            db_session, item, meeting_schemas.MeetingCallUpdate(location=""), actor=admin
        )
    assert exc.value.errors[0]["field"] == "location"
    db_session.rollback()

    updated = meeting_services.update_meeting_call(
        db_session,
        item,
        meeting_schemas.MeetingCallUpdate(status="postponed", postponedTo="2025-05-10T10:00:00", reason="Governor travelling"),
        actor=admin,
    )
    assert updated.status == MeetingCallStatus.POSTPONED
    assert updated.reason == "Governor travelling"


def test_list_filters_and_delete(db_session, admin):
    meeting = _create(db_session, admin)
    call = _create(db_session, admin, type="call", location=None, date="2025-05-06")

    items, total = meeting_services.list_meeting_calls(
        db_session,
        filters=meeting_schemas.MeetingCallFilters(type="call"),
        params=PageParams(page=1, limit=20),
    )
    assert total == 1 and items[0].id == call.id

    meeting_services.delete_meeting_call(db_session, meeting, actor=admin)
    with pytest.raises(NotFound):
        meeting_services.get_meeting_call(db_session, meeting.id)
    assert meeting_services.list_meeting_calls(
        db_session,
        filters=meeting_schemas.MeetingCallFilters(startDate=date(2025, 5, 1)),
        params=PageParams(page=1, limit=20),
    )[1] == 1
