# backend/secreports/apps/accounts/__init__.py
"""
Accounts app

Responsible for:
- User accounts, roles and per-module permission grants
- Public auth endpoints (login, token refresh)
- Authenticated self-service (me, change password, logout)
- Admin endpoints (register and manage users, read their activity log)

Other apps should depend on these models (through `secreports.permissions`)
for anything related to "who is allowed to do what".
"""

from . import models, schemas, services  # noqa: F401

__all__ = ["models", "schemas", "services"]
