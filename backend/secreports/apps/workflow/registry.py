from __future__ import annotations

from .guards import guard_approver_recorded, guard_rejection_reason

WORKFLOWS = {
    "daily_report": {
        "transitions": {
            "draft": {
                "complete": [],
                "archived": [],
            },
            "complete": {
                "draft": [],
                "approved": [guard_approver_recorded],
                "archived": [],
            },
            "approved": {
                "archived": [],
            },
            "archived": {},
        }
    },
    "coordination": {
        "transitions": {
            "pending": {
                "approved": [guard_approver_recorded],
                "rejected": [guard_rejection_reason],
                "cancelled": [],
            },
            "approved": {
                "completed": [],
                "cancelled": [],
            },
            "rejected": {},
            "completed": {},
            "cancelled": {},
        }
    },
}
