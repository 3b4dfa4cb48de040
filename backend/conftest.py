from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.requests import Request

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"

from secreports.database import Base  # noqa: E402
from secreports import numbering  # noqa: E402
from secreports.apps.accounts import models as account_models  # noqa: E402
from secreports.apps.attachments import models as attachment_models  # noqa: E402
from secreports.apps.audit import models as audit_models  # noqa: E402
from secreports.apps.coordinations import models as coordination_models  # noqa: E402
from secreports.apps.events import models as event_models  # noqa: E402
from secreports.apps.governorates import models as governorate_models  # noqa: E402
from secreports.apps.meetings import models as meeting_models  # noqa: E402
from secreports.apps.memos import models as memo_models  # noqa: E402
from secreports.apps.reports import models as report_models  # noqa: E402
from secreports.security import get_password_hash  # noqa: E402


@pytest.fixture()
def db_session():
    # One shared connection so TestClient worker threads see the same database.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(
        bind=engine,
        tables=[
            governorate_models.Governorate.__table__,
            account_models.User.__table__,
            account_models.UserPermission.__table__,
            audit_models.SystemLog.__table__,
            numbering.ReferenceCounter.__table__,
            report_models.DailyReport.__table__,
            report_models.report_governorates,
            event_models.Event.__table__,
            coordination_models.Coordination.__table__,
            meeting_models.MeetingCall.__table__,
            memo_models.MemoRelease.__table__,
            attachment_models.Attachment.__table__,
        ],
    )
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


def make_request() -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/",
            "headers": [(b"user-agent", b"pytest")],
            "query_string": b"",
            "client": ("127.0.0.1", 1234),
        }
    )


def create_user(
    db_session,
    *,
    username: str,
    role: account_models.UserRole = account_models.UserRole.DATA_ENTRY,
    password: str = "secret123",
    grants: dict | None = None,
    is_active: bool = True,
) -> account_models.User:
    user = account_models.User(
        username=username,
        hashed_password=get_password_hash(password),
        full_name=username.title(),
        role=role,
        is_active=is_active,
    )
    for module, actions in (grants or {}).items():
        user.permissions.append(account_models.UserPermission(module=module, actions=list(actions)))
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def create_governorate(
    db_session,
    *,
    code: str = "NAB",
    name: str = "نابلس",
    regions=("نابلس", "بيتا", "حوارة"),
) -> governorate_models.Governorate:
    governorate = governorate_models.Governorate(name=name, code=code, regions=list(regions))
    db_session.add(governorate)
    db_session.commit()
    db_session.refresh(governorate)
    return governorate


@pytest.fixture()
def admin(db_session):
    return create_user(db_session, username="admin", role=account_models.UserRole.ADMIN)


@pytest.fixture()
def governorate(db_session):
    return create_governorate(db_session)
