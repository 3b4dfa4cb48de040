from __future__ import annotations

from types import SimpleNamespace

import pytest

from secreports.apps.workflow import TransitionError, WORKFLOWS, apply_transition


def _move(entity_type, from_state, to_state, after_obj=None):
    apply_transition(
        None,
        entity_type=entity_type,
        from_state=from_state,
        to_state=to_state,
        before_obj={"status": from_state},
        after_obj=after_obj or SimpleNamespace(),
    )


@pytest.mark.parametrize(
    "from_state, to_state",
    [
        ("draft", "complete"),
        ("draft", "archived"),
        ("complete", "draft"),
        ("complete", "archived"),
        ("approved", "archived"),
    ],
)
def test_daily_report_moves(from_state, to_state):
    _move("daily_report", from_state, to_state)


@pytest.mark.parametrize(
    "from_state, to_state",
    [
        ("draft", "approved"),
        ("approved", "draft"),
        ("archived", "draft"),
        ("archived", "complete"),
    ],
)
def test_daily_report_rejects_unlisted_moves(from_state, to_state):
    with pytest.raises(TransitionError) as exc:
        _move("daily_report", from_state, to_state)
    assert exc.value.code == "INVALID_TRANSITION"
    assert exc.value.errors[0]["field"] == "status"


def test_same_state_is_a_no_op():
    _move("daily_report", "archived", "archived")
    _move("unknown", "x", "x")


def test_approval_needs_a_recorded_approver():
    with pytest.raises(TransitionError) as exc:
        _move("daily_report", "complete", "approved", SimpleNamespace(approved_by=None))
    assert exc.value.code == "MISSING_REQUIREMENTS"
    assert exc.value.detail == [{"field": "approvedBy", "message": "approver required"}]

    _move("daily_report", "complete", "approved", SimpleNamespace(approved_by="user-1"))


def test_rejection_reason_is_checked_on_dicts_too():
    with pytest.raises(TransitionError):
        _move("coordination", "pending", "rejected", {"rejection_reason": "   "})
    _move("coordination", "pending", "rejected", {"rejection_reason": "Road closed"})


def test_terminal_coordination_states_have_no_exits():
    for state in ("rejected", "completed", "cancelled"):
        assert WORKFLOWS["coordination"]["transitions"][state] == {}


def test_enum_states_are_accepted():
    from secreports.apps.coordinations.models import CoordinationStatus

    _move("coordination", CoordinationStatus.APPROVED, CoordinationStatus.COMPLETED)


def test_unknown_workflow_is_rejected():
    with pytest.raises(TransitionError) as exc:
        _move("invoice", "open", "paid")
    assert exc.value.errors[0]["field"] == "entityType"
