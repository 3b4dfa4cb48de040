from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from ...errors import ValidationFailed
from .registry import WORKFLOWS


class TransitionError(ValidationFailed):
    """Status change not allowed, or its requirements are not met."""

    def __init__(self, code: str, detail: List[Dict[str, str]]) -> None:
        message = detail[0]["message"] if detail else "Invalid status transition."
        super().__init__(message, errors=detail, code=code)
        self.detail = detail


def _state(value: Any) -> str:
    return getattr(value, "value", value)


def apply_transition(
    db: Session,
    *,
    entity_type: str,
    from_state: Any,
    to_state: Any,
    before_obj: Any,
    after_obj: Any,
) -> None:
    """
    Check that `from_state -> to_state` is a registered transition for
    `entity_type` and that all its guards pass. Raises TransitionError.

    Staying in the same state is always allowed.
    """
    from_state = _state(from_state)
    to_state = _state(to_state)
    if from_state == to_state:
        return

    workflow = WORKFLOWS.get(entity_type)
    if not workflow:
        raise TransitionError(
            code="INVALID_TRANSITION",
            detail=[{"field": "entityType", "message": f"No workflow registered for {entity_type}"}],
        )

    allowed = workflow["transitions"].get(from_state, {})
    guards = allowed.get(to_state)
    if guards is None:
        raise TransitionError(
            code="INVALID_TRANSITION",
            detail=[{"field": "status", "message": f"Cannot change status from {from_state} to {to_state}"}],
        )

    failures: List[Dict[str, str]] = []
    for guard in guards:
        failures.extend(
            guard(
                db,
                before_obj=before_obj,
                after_obj=after_obj,
                from_state=from_state,
                to_state=to_state,
            )
        )

    if failures:
        raise TransitionError(code="MISSING_REQUIREMENTS", detail=failures)
