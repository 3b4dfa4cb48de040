from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import create_user
from secreports import numbering
from secreports.apps.reports import models as report_models
from secreports.errors import ValidationFailed


def test_report_numbers_run_per_day_and_type(db_session):
    day = date(2025, 5, 4)

    numbers = [numbering.report_number(db_session, day, "morning") for _ in range(3)]
    db_session.commit()

    assert numbers == [
        "REP-20250504-M-001",
        "REP-20250504-M-002",
        "REP-20250504-M-003",
    ]
    assert numbering.report_number(db_session, day, report_models.ReportType.EVENING) == "REP-20250504-E-001"
    assert numbering.report_number(db_session, date(2025, 5, 5), "morning") == "REP-20250505-M-001"


def test_counter_starts_after_numbers_already_in_use(db_session):
    user = create_user(db_session, username="clerk")
    db_session.add(
        report_models.DailyReport(
            report_number="REP-20250504-M-001",
            report_date=datetime(2025, 5, 4),
            report_type=report_models.ReportType.MORNING,
            created_by=user.id,
        )
    )
    db_session.commit()

    assert numbering.report_number(db_session, date(2025, 5, 4), "morning") == "REP-20250504-M-002"


def test_sequence_grows_past_three_digits(db_session):
    db_session.add(numbering.ReferenceCounter(scope_key="COORD:20250504", last_value=999))
    db_session.commit()

    assert numbering.coordination_number(db_session, date(2025, 5, 4)) == "COORD-20250504-1000"


def test_meeting_and_memo_prefixes_follow_kind(db_session):
    day = date(2025, 5, 4)

    assert numbering.meeting_call_number(db_session, "meeting", day) == "MTG-20250504-001"
    assert numbering.meeting_call_number(db_session, "call", day) == "CALL-20250504-001"
    assert numbering.meeting_call_number(db_session, "call", day) == "CALL-20250504-002"
    assert numbering.memo_release_number(db_session, "memo", day) == "MEMO-20250504-001"
    assert numbering.memo_release_number(db_session, "release", day) == "REL-20250504-001"


def test_format_reference_pads_to_three_digits():
    assert numbering.format_reference("EVT", "20250504", 7, "E") == "EVT-20250504-E-007"
    assert numbering.format_reference("COORD", "20250504", 42) == "COORD-20250504-042"


def test_parse_report_number():
    assert numbering.parse_report_number("REP-20250504-E-012") == ("20250504", "E")

    with pytest.raises(ValidationFailed) as exc:
        numbering.parse_report_number("legacy-42")
    assert exc.value.errors[0]["field"] == "reportNumber"


def test_unknown_report_type_is_rejected(db_session):
    with pytest.raises(ValidationFailed):
        numbering.report_number(db_session, date(2025, 5, 4), "night")
