"""initial schema

Revision ID: a0b1c2d3e4f5
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "a0b1c2d3e4f5"
down_revision = None
branch_labels = None
depends_on = None


def _enum(name: str, *members: str) -> sa.Enum:
    return sa.Enum(*members, name=name, native_enum=False)


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "governorates",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=16), nullable=False),
        sa.Column("regions", sa.JSON(), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_governorates_name", "governorates", ["name"])
    op.create_index("ix_governorates_code", "governorates", ["code"], unique=True)
    op.create_index("ix_governorates_is_active", "governorates", ["is_active"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone_number", sa.String(length=64), nullable=True),
        sa.Column(
            "role",
            _enum("user_role_enum", "ADMIN", "SUPERVISOR", "DATA_ENTRY", "REVIEWER", "VIEWER"),
            nullable=False,
        ),
        sa.Column(
            "governorate_id",
            sa.String(length=36),
            sa.ForeignKey("governorates.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("department", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("token_revoked_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_governorate_id", "users", ["governorate_id"])
    op.create_index("ix_users_is_active", "users", ["is_active"])
    op.create_index("idx_users_role_active", "users", ["role", "is_active"])

    op.create_table(
        "user_permissions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("module", sa.String(length=64), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.UniqueConstraint("user_id", "module", name="uq_user_permissions_user_module"),
    )
    op.create_index("ix_user_permissions_user_id", "user_permissions", ["user_id"])

    op.create_table(
        "system_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("module", sa.String(length=64), nullable=False),
        sa.Column("resource_id", sa.String(length=64), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_system_logs_id", "system_logs", ["id"])
    op.create_index("ix_system_logs_user_id", "system_logs", ["user_id"])
    op.create_index("ix_system_logs_action", "system_logs", ["action"])
    op.create_index("ix_system_logs_module", "system_logs", ["module"])
    op.create_index("ix_system_logs_resource_id", "system_logs", ["resource_id"])
    op.create_index("ix_system_logs_timestamp", "system_logs", ["timestamp"])
    op.create_index("ix_system_logs_user_time", "system_logs", ["user_id", sa.text("timestamp DESC")])
    op.create_index("ix_system_logs_module_action", "system_logs", ["module", "action"])

    op.create_table(
        "reference_counters",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("scope_key", sa.String(length=128), nullable=False),
        sa.Column("last_value", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_reference_counters_scope_key", "reference_counters", ["scope_key"], unique=True)

    op.create_table(
        "daily_reports",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("report_number", sa.String(length=32), nullable=False),
        sa.Column("report_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("report_type", _enum("report_type_enum", "MORNING", "EVENING"), nullable=False),
        sa.Column(
            "status",
            _enum("report_status_enum", "DRAFT", "COMPLETE", "APPROVED", "ARCHIVED"),
            nullable=False,
        ),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("event_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("approved_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_daily_reports_report_number", "daily_reports", ["report_number"], unique=True)
    op.create_index("ix_daily_reports_report_date", "daily_reports", ["report_date"])
    op.create_index("ix_daily_reports_created_by", "daily_reports", ["created_by"])
    op.create_index("ix_daily_reports_date_type", "daily_reports", ["report_date", "report_type"])
    op.create_index("ix_daily_reports_status_date", "daily_reports", ["status", "report_date"])

    op.create_table(
        "report_governorates",
        sa.Column(
            "report_id",
            sa.String(length=36),
            sa.ForeignKey("daily_reports.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "governorate_id",
            sa.String(length=36),
            sa.ForeignKey("governorates.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("report_id", sa.String(length=36), sa.ForeignKey("daily_reports.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("event_number", sa.String(length=32), nullable=False),
        sa.Column(
            "governorate_id",
            sa.String(length=36),
            sa.ForeignKey("governorates.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("region", sa.String(length=255), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("event_time", sa.Time(), nullable=False),
        sa.Column(
            "event_type",
            _enum("event_type_enum", "SECURITY_INCIDENT", "ARREST", "CHECKPOINT", "RAID", "CONFRONTATION", "OTHER"),
            nullable=False,
        ),
        sa.Column("severity", _enum("event_severity_enum", "LOW", "MEDIUM", "HIGH", "CRITICAL"), nullable=False),
        sa.Column("status", _enum("event_status_enum", "ONGOING", "RESOLVED", "MONITORING"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("involved_parties", sa.JSON(), nullable=False),
        sa.Column("palestinian_intervention", sa.Text(), nullable=True),
        sa.Column("israeli_response", sa.Text(), nullable=True),
        sa.Column("results", sa.Text(), nullable=True),
        sa.Column("killed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("injured", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("arrested", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("report_id", "event_number", name="uq_events_report_number"),
        sa.CheckConstraint("killed >= 0 AND injured >= 0 AND arrested >= 0", name="ck_events_casualties"),
    )
    op.create_index("ix_events_report_id", "events", ["report_id"])
    op.create_index("ix_events_event_number", "events", ["event_number"])
    op.create_index("ix_events_governorate_id", "events", ["governorate_id"])
    op.create_index("ix_events_status", "events", ["status"])
    op.create_index("ix_events_created_by", "events", ["created_by"])
    op.create_index("ix_events_event_date", "events", ["event_date"])
    op.create_index("ix_events_type_severity", "events", ["event_type", "severity"])

    op.create_table(
        "coordinations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("request_number", sa.String(length=32), nullable=False),
        sa.Column("request_date", sa.Date(), nullable=False),
        sa.Column("request_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("approval_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("movement_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("return_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "governorate_id",
            sa.String(length=36),
            sa.ForeignKey("governorates.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("from_location", sa.String(length=255), nullable=False),
        sa.Column("to_location", sa.String(length=255), nullable=False),
        sa.Column("route_details", sa.Text(), nullable=True),
        sa.Column(
            "department",
            _enum(
                "coordination_department_enum",
                "POLICE",
                "NATIONAL_SECURITY",
                "CIVIL_DEFENSE",
                "INTELLIGENCE",
                "PREVENTIVE_SECURITY",
                "OTHER",
            ),
            nullable=False,
        ),
        sa.Column("forces", sa.Integer(), nullable=False),
        sa.Column("vehicles", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("vehicle_types", sa.JSON(), nullable=False),
        sa.Column("weapons", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("weapon_types", sa.JSON(), nullable=False),
        sa.Column("purpose", sa.Text(), nullable=False),
        sa.Column("estimated_duration", sa.String(length=64), nullable=True),
        sa.Column(
            "status",
            _enum("coordination_status_enum", "PENDING", "APPROVED", "REJECTED", "COMPLETED", "CANCELLED"),
            nullable=False,
        ),
        sa.Column("priority", _enum("coordination_priority_enum", "NORMAL", "URGENT", "EMERGENCY"), nullable=False),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("approved_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("requested_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("forces >= 1", name="ck_coordinations_forces"),
        sa.CheckConstraint("vehicles >= 0 AND weapons >= 0", name="ck_coordinations_counts"),
    )
    op.create_index("ix_coordinations_request_number", "coordinations", ["request_number"], unique=True)
    op.create_index("ix_coordinations_request_date", "coordinations", ["request_date"])
    op.create_index("ix_coordinations_governorate_id", "coordinations", ["governorate_id"])
    op.create_index("ix_coordinations_status", "coordinations", ["status"])
    op.create_index("ix_coordinations_requested_by", "coordinations", ["requested_by"])
    op.create_index("ix_coordinations_status_date", "coordinations", ["status", "request_date"])

    op.create_table(
        "meeting_calls",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("reference_number", sa.String(length=32), nullable=False),
        sa.Column("type", _enum("meeting_call_type_enum", "MEETING", "CALL"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.Time(), nullable=False),
        sa.Column("duration", sa.String(length=64), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("requested_by", sa.String(length=255), nullable=False),
        sa.Column("participants", sa.JSON(), nullable=False),
        sa.Column("agenda", sa.Text(), nullable=True),
        sa.Column("purpose", sa.Text(), nullable=False),
        sa.Column("minutes", sa.Text(), nullable=True),
        sa.Column("decisions", sa.JSON(), nullable=False),
        sa.Column("follow_up_actions", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            _enum("meeting_call_status_enum", "SCHEDULED", "COMPLETED", "POSTPONED", "CANCELLED"),
            nullable=False,
        ),
        sa.Column("postponed_to", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_meeting_calls_reference_number", "meeting_calls", ["reference_number"], unique=True)
    op.create_index("ix_meeting_calls_date", "meeting_calls", ["date"])
    op.create_index("ix_meeting_calls_status", "meeting_calls", ["status"])
    op.create_index("ix_meeting_calls_type_date", "meeting_calls", ["type", "date"])

    op.create_table(
        "memo_releases",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("reference_number", sa.String(length=32), nullable=False),
        sa.Column("type", _enum("memo_release_type_enum", "MEMO", "RELEASE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.Time(), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("subject", sa.String(length=512), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column(
            "governorate_id",
            sa.String(length=36),
            sa.ForeignKey("governorates.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("issued_to", sa.String(length=255), nullable=True),
        sa.Column("issued_by", sa.String(length=255), nullable=True),
        sa.Column("person_name", sa.String(length=255), nullable=True),
        sa.Column("person_id", sa.String(length=64), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("residence_place", sa.String(length=255), nullable=True),
        sa.Column("detention_date", sa.Date(), nullable=True),
        sa.Column("release_date", sa.Date(), nullable=True),
        sa.Column("detention_period", sa.String(length=64), nullable=True),
        sa.Column("detention_reason", sa.Text(), nullable=True),
        sa.Column(
            "status",
            _enum("memo_release_status_enum", "DRAFT", "SENT", "RECEIVED", "PROCESSED"),
            nullable=False,
        ),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_memo_releases_reference_number", "memo_releases", ["reference_number"], unique=True)
    op.create_index("ix_memo_releases_date", "memo_releases", ["date"])
    op.create_index("ix_memo_releases_governorate_id", "memo_releases", ["governorate_id"])
    op.create_index("ix_memo_releases_person_name", "memo_releases", ["person_name"])
    op.create_index("ix_memo_releases_status", "memo_releases", ["status"])
    op.create_index("ix_memo_releases_type_date", "memo_releases", ["type", "date"])

    op.create_table(
        "attachments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "entity_type",
            _enum("attachment_owner_enum", "REPORT", "EVENT", "MEETING_CALL", "MEMO_RELEASE"),
            nullable=False,
        ),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("path", sa.String(length=1024), nullable=False),
        sa.Column("mimetype", sa.String(length=255), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("uploaded_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_attachments_owner", "attachments", ["entity_type", "entity_id", "uploaded_at"])


def downgrade() -> None:
    op.drop_index("ix_attachments_owner", table_name="attachments")
    op.drop_table("attachments")
    op.drop_table("memo_releases")
    op.drop_table("meeting_calls")
    op.drop_table("coordinations")
    op.drop_table("events")
    op.drop_table("report_governorates")
    op.drop_table("daily_reports")
    op.drop_table("reference_counters")
    op.drop_table("system_logs")
    op.drop_table("user_permissions")
    op.drop_table("users")
    op.drop_table("governorates")
