# backend/secreports/numbering.py
"""
Human-readable reference numbers.

Format: <PREFIX>-<YYYYMMDD>-[<TYPECODE>-]<SEQ>, SEQ zero-padded to three
digits (it simply grows to four or more digits past 999).

    REP-20250504-M-001      daily report, per (day, report type)
    EVT-20250504-M-001      event, per parent report
    COORD-20250504-001      coordination request, per day
    MTG-20250504-001        meeting / CALL-... call, per (day, kind)
    MEMO-20250504-001       memo / REL-... release, per (day, kind)

Sequences come from one counter row per scope in `reference_counters`,
bumped with a single UPDATE inside the caller's transaction. If the caller
rolls back, the counter rolls back with it.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Callable, Optional, Tuple, Union

from sqlalchemy import Column, Integer, String, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .database import Base
from .errors import ValidationFailed
from .utils.identifiers import generate_uuid7

logger = logging.getLogger(__name__)

REPORT_TYPE_CODES = {"morning": "M", "evening": "E"}

_REPORT_NUMBER_RE = re.compile(r"^REP-(\d{8})-([A-Z])-(\d{3,})$")

_MAX_ATTEMPTS = 3


class ReferenceCounter(Base):
    __tablename__ = "reference_counters"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    scope_key = Column(String(128), nullable=False, unique=True, index=True)
    last_value = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<ReferenceCounter {self.scope_key}={self.last_value}>"


# ---------------------------------------------------------------------------
# COUNTER
# ---------------------------------------------------------------------------


def next_sequence(
    db: Session,
    scope_key: str,
    *,
    seed: Optional[Callable[[], int]] = None,
) -> int:
    """
    Return the next value for `scope_key`.

    The first call for a scope creates the counter row inside a savepoint,
    starting from `seed()` (the number of rows already numbered in that
    scope). A concurrent creator losing the insert race falls back to the
    UPDATE path.
    """
    for _ in range(_MAX_ATTEMPTS):
        result = db.execute(
            update(ReferenceCounter)
            .where(ReferenceCounter.scope_key == scope_key)
            .values(last_value=ReferenceCounter.last_value + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            return db.execute(
                select(ReferenceCounter.last_value).where(ReferenceCounter.scope_key == scope_key)
            ).scalar_one()

        start = int(seed()) if seed is not None else 0
        try:
            with db.begin_nested():
                db.add(ReferenceCounter(scope_key=scope_key, last_value=start + 1))
                db.flush()
        except IntegrityError:
            logger.info("Counter row for %s created concurrently; retrying", scope_key)
            continue
        return start + 1

    raise RuntimeError(f"Could not allocate a sequence number for {scope_key!r}")


def format_reference(prefix: str, day: str, seq: int, type_code: Optional[str] = None) -> str:
    parts = [prefix, day]
    if type_code:
        parts.append(type_code)
    parts.append(f"{seq:03d}")
    return "-".join(parts)


def _day(value: Union[date, datetime]) -> str:
    return value.strftime("%Y%m%d")


def _prefix_count(db: Session, column, prefix: str) -> Callable[[], int]:
    def seed() -> int:
        return db.execute(
            select(func.count()).where(column.like(f"{prefix}%"))
        ).scalar_one()

    return seed


def _enum_value(value) -> str:
    return getattr(value, "value", value)


# ---------------------------------------------------------------------------
# PER-ENTITY NUMBERS
# ---------------------------------------------------------------------------


def report_type_code(report_type) -> str:
    try:
        return REPORT_TYPE_CODES[_enum_value(report_type)]
    except KeyError:
        raise ValidationFailed.for_field("reportType", "Report type must be morning or evening.")


def report_number(db: Session, report_date: Union[date, datetime], report_type) -> str:
    from .apps.reports.models import DailyReport

    day = _day(report_date)
    code = report_type_code(report_type)
    seq = next_sequence(
        db,
        f"REP:{day}:{code}",
        seed=_prefix_count(db, DailyReport.report_number, f"REP-{day}-{code}-"),
    )
    return format_reference("REP", day, seq, code)


def parse_report_number(value: Optional[str]) -> Tuple[str, str]:
    """(YYYYMMDD, type code) embedded in a report number."""
    match = _REPORT_NUMBER_RE.match(value or "")
    if not match:
        raise ValidationFailed.for_field(
            "reportNumber", f"Malformed report number {value!r}."
        )
    return match.group(1), match.group(2)


def event_number(db: Session, report) -> str:
    from .apps.events.models import Event

    day, code = parse_report_number(report.report_number)

    def seed() -> int:
        return db.execute(
            select(func.count()).where(Event.report_id == report.id)
        ).scalar_one()

    seq = next_sequence(db, f"EVT:{report.id}", seed=seed)
    return format_reference("EVT", day, seq, code)


def coordination_number(db: Session, request_date: Union[date, datetime]) -> str:
    from .apps.coordinations.models import Coordination

    day = _day(request_date)
    seq = next_sequence(
        db,
        f"COORD:{day}",
        seed=_prefix_count(db, Coordination.request_number, f"COORD-{day}-"),
    )
    return format_reference("COORD", day, seq)


MEETING_CALL_PREFIXES = {"meeting": "MTG", "call": "CALL"}
MEMO_RELEASE_PREFIXES = {"memo": "MEMO", "release": "REL"}


def meeting_call_number(db: Session, kind, on: Union[date, datetime]) -> str:
    from .apps.meetings.models import MeetingCall

    prefix = MEETING_CALL_PREFIXES[_enum_value(kind)]
    day = _day(on)
    seq = next_sequence(
        db,
        f"{prefix}:{day}",
        seed=_prefix_count(db, MeetingCall.reference_number, f"{prefix}-{day}-"),
    )
    return format_reference(prefix, day, seq)


def memo_release_number(db: Session, kind, on: Union[date, datetime]) -> str:
    from .apps.memos.models import MemoRelease

    prefix = MEMO_RELEASE_PREFIXES[_enum_value(kind)]
    day = _day(on)
    seq = next_sequence(
        db,
        f"{prefix}:{day}",
        seed=_prefix_count(db, MemoRelease.reference_number, f"{prefix}-{day}-"),
    )
    return format_reference(prefix, day, seq)
