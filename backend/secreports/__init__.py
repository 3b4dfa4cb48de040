# backend/secreports/__init__.py
"""
Import ORM models from each app so that:

- Alembic and Base.metadata.create_all() see all tables.
- The package exposes a clear surface.

The actual model classes are kept in secreports/apps/*/models.py.
"""

from .apps.governorates import models as governorate_models    # governorates + regions
from .apps.accounts import models as accounts_models            # users + permission grants
from .apps.audit import models as audit_models                  # system log
from .apps.reports import models as report_models               # daily reports
from .apps.events import models as event_models                 # security events
from .apps.coordinations import models as coordination_models   # movement coordinations
from .apps.meetings import models as meeting_models             # meetings + calls
from .apps.memos import models as memo_models                   # memos + releases
from .apps.attachments import models as attachment_models       # uploaded files
from . import numbering                                          # reference counters

__all__ = [
    "governorate_models",
    "accounts_models",
    "audit_models",
    "report_models",
    "event_models",
    "coordination_models",
    "meeting_models",
    "memo_models",
    "attachment_models",
    "numbering",
]
