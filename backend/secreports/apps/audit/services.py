from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from fastapi import Request
from sqlalchemy.orm import Session

from . import models

logger = logging.getLogger(__name__)

_ACTIONS = frozenset(
    {
        "create",
        "update",
        "delete",
        "archive",
        "approve",
        "reject",
        "login",
        "logout",
        "export",
        "import",
        "other",
    }
)


def request_origin(request: Optional[Request]) -> Tuple[Optional[str], Optional[str]]:
    """(ip_address, user_agent) for a request, or (None, None) outside HTTP."""
    if request is None:
        return None, None
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


def log_action(
    db: Session,
    *,
    user_id: Optional[str],
    action: str,
    module: str,
    resource_id: Optional[str] = None,
    details: Optional[dict] = None,
    request: Optional[Request] = None,
    critical: bool = False,
) -> Optional[models.SystemLog]:
    """
    Append one audit entry and commit it.

    Call only after the audited operation has been committed.
    - For critical actions, raise on failure.
    - For everything else, log a warning and continue; the audited operation
      stays committed.
    """
    if action not in _ACTIONS:
        action = "other"
    ip_address, user_agent = request_origin(request)
    try:
        entry = models.SystemLog(
            user_id=user_id,
            action=action,
            module=module,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.add(entry)
        db.commit()
        return entry
    except Exception:
        db.rollback()
        logger.warning(
            "Failed to write audit log entry",
            extra={
                "user_id": user_id,
                "module": module,
                "resource_id": resource_id,
                "action": action,
                "critical": critical,
            },
        )
        if critical:
            raise
        return None


def list_user_logs(
    db: Session,
    *,
    user_id: str,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[models.SystemLog], int]:
    query = db.query(models.SystemLog).filter(models.SystemLog.user_id == user_id)
    total = query.count()
    items = (
        query.order_by(models.SystemLog.timestamp.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return items, total
