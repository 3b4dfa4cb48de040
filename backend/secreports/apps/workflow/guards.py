from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy.orm import Session

GuardResult = List[Dict[str, str]]


def _get_value(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def guard_approver_recorded(
    db: Session,
    *,
    before_obj: Any,
    after_obj: Any,
    from_state: str,
    to_state: str,
) -> GuardResult:
    if not _get_value(after_obj, "approved_by"):
        return [{"field": "approvedBy", "message": "approver required"}]
    return []


def guard_rejection_reason(
    db: Session,
    *,
    before_obj: Any,
    after_obj: Any,
    from_state: str,
    to_state: str,
) -> GuardResult:
    reason = _get_value(after_obj, "rejection_reason")
    if not reason or not str(reason).strip():
        return [{"field": "rejectionReason", "message": "Rejection reason is required when rejecting a request."}]
    return []
