#!/usr/bin/env python3
# backend/secreports/scripts/grant_permission.py
"""
Add one action on one module to every user account.

    python -m secreports.scripts.grant_permission reports read
"""

import argparse
from typing import Optional

from sqlalchemy.orm import Session

from secreports.database import SessionLocal
from secreports.apps.accounts.models import PermissionAction, PermissionModule, User, UserPermission


def grant_to_all(
    db: Session,
    module: PermissionModule,
    action: PermissionAction,
    *,
    username: Optional[str] = None,
    dry_run: bool = False,
) -> int:
    """Returns the number of users that gained the action."""
    query = db.query(User)
    if username:
        query = query.filter(User.username == username)

    updated = 0
    for user in query.all():
        grant = next((p for p in user.permissions if p.module == module.value), None)
        if grant is None:
            user.permissions.append(UserPermission(module=module.value, actions=[action.value]))
        elif action.value in (grant.actions or []):
            continue
        else:
            # JSON columns only notice reassignment.
            grant.actions = list(grant.actions or []) + [action.value]
        updated += 1
        print(f"{'Would grant' if dry_run else 'Granted'} {module.value}:{action.value} to {user.username}")

    if dry_run:
        db.rollback()
    else:
        db.commit()
    return updated


def main() -> None:
    parser = argparse.ArgumentParser(description="Grant a module action to every user.")
    parser.add_argument("module", choices=[m.value for m in PermissionModule])
    parser.add_argument("action", choices=[a.value for a in PermissionAction])
    parser.add_argument("--username", help="Restrict to a single user.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show which users would be updated without writing changes.",
    )
    args = parser.parse_args()

    db = SessionLocal()
    try:
        updated = grant_to_all(
            db,
            PermissionModule(args.module),
            PermissionAction(args.action),
            username=args.username,
            dry_run=args.dry_run,
        )
        print(f"{updated} user(s) updated.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
