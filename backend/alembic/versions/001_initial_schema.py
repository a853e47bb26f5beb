"""Initial schema — churches, campuses, users, memberships, roles, notifications, pathways.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

FKs into churches.id from users, church_members and campuses are
DEFERRABLE INITIALLY DEFERRED: the organization id rewrite changes the parent
key first and repoints the children before COMMIT.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_DEFERRED = {"deferrable": True, "initially": "DEFERRED"}


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "churches",
        sa.Column("id", sa.String(40), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("email", sa.String(254), nullable=True),
        sa.Column("website", sa.String(300), nullable=True),
        sa.Column("observes_church_membership", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("subscription_status", sa.String(20), nullable=False, server_default="trial"),
        sa.Column("trial_ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_method", sa.String(40), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "campuses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "church_id", sa.String(40),
            sa.ForeignKey("churches.id", ondelete="CASCADE", **_DEFERRED),
            nullable=False, index=True,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("email", sa.String(254), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("church_id", "name", name="uq_campus_church_name"),
    )

    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(254), nullable=False, unique=True, index=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("zip_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="MEMBER"),
        sa.Column(
            "organization_id", sa.String(40),
            sa.ForeignKey("churches.id", ondelete="SET NULL", **_DEFERRED),
            nullable=True, index=True,
        ),
        sa.Column("organization_name", sa.String(200), nullable=True),
        sa.Column(
            "campus_id", UUID(as_uuid=True),
            sa.ForeignKey("campuses.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("login_attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("onboarding_completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("has_multiple_campuses", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("theme_preference", sa.String(10), nullable=False, server_default="light"),
        sa.Column("ai_chat_visible", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "church_members",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column(
            "church_id", sa.String(40),
            sa.ForeignKey("churches.id", ondelete="CASCADE", **_DEFERRED),
            nullable=False, index=True,
        ),
        sa.Column(
            "campus_id", UUID(as_uuid=True),
            sa.ForeignKey("campuses.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("role", sa.String(20), nullable=False, server_default="MEMBER"),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "church_id", name="uq_member_user_church"),
    )

    op.create_table(
        "custom_roles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "church_id", sa.String(40),
            sa.ForeignKey("churches.id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_system_role", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("name", "church_id", name="uq_role_name_church"),
    )

    op.create_table(
        "role_permissions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "role_id", UUID(as_uuid=True),
            sa.ForeignKey("custom_roles.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("resource", sa.String(100), nullable=False),
        sa.Column("can_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("can_create", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("can_update", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("can_delete", sa.Boolean, nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("link", sa.String(500), nullable=True),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "pathways",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "church_id", sa.String(40),
            sa.ForeignKey("churches.id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column(
            "campus_id", UUID(as_uuid=True),
            sa.ForeignKey("campuses.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "pathway_steps",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "pathway_id", UUID(as_uuid=True),
            sa.ForeignKey("pathways.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("order", sa.Integer, nullable=False),
        sa.Column("is_required", sa.Boolean, nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "pathway_progress",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column(
            "pathway_id", UUID(as_uuid=True),
            sa.ForeignKey("pathways.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("current_step", sa.Integer, nullable=False, server_default="1"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "pathway_id", name="uq_progress_user_pathway"),
    )

    op.create_table(
        "step_completions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "progress_id", UUID(as_uuid=True),
            sa.ForeignKey("pathway_progress.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column(
            "step_id", UUID(as_uuid=True),
            sa.ForeignKey("pathway_steps.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("progress_id", "step_id", name="uq_completion_progress_step"),
    )


def downgrade() -> None:
    for table in (
        "step_completions", "pathway_progress", "pathway_steps", "pathways",
        "notifications", "role_permissions", "custom_roles", "church_members",
        "users", "campuses", "churches",
    ):
        op.drop_table(table)
