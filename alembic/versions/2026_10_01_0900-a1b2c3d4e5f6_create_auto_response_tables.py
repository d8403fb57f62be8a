"""create auto-response tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-01 09:00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create settings, style profile, config, queue, log and cache tables."""
    op.create_table(
        "app_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(length=128), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_app_settings_key", "app_settings", ["key"], unique=True)

    op.create_table(
        "style_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=128), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("system_prompt", sa.Text(), nullable=False),
        sa.Column("temperature", sa.Float(), nullable=False),
        sa.Column("max_tokens", sa.Integer(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "auto_response_config",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("chat_jid", sa.String(length=256), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("style_profile_id", sa.Integer(), nullable=True),
        sa.Column("require_approval", sa.Boolean(), nullable=False),
        sa.Column("max_daily_responses", sa.Integer(), nullable=True),
        sa.Column("daily_response_count", sa.Integer(), nullable=False),
        sa.Column("daily_count_reset_at", sa.DateTime(), nullable=True),
        sa.Column("context_window_messages", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["style_profile_id"], ["style_profiles.id"], ondelete="SET NULL"
        ),
    )
    op.create_index(
        "ix_auto_response_config_chat_jid",
        "auto_response_config",
        ["chat_jid"],
        unique=True,
    )

    op.create_table(
        "approval_queue",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("chat_jid", sa.String(length=256), nullable=False),
        sa.Column("trigger_message_id", sa.String(length=256), nullable=False),
        sa.Column("proposed_response", sa.Text(), nullable=False),
        sa.Column("style_profile_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["style_profile_id"], ["style_profiles.id"], ondelete="SET NULL"
        ),
    )
    op.create_index(
        "ix_approval_queue_chat_status", "approval_queue", ["chat_jid", "status"]
    )
    op.create_index(
        "ix_approval_queue_status_created", "approval_queue", ["status", "created_at"]
    )

    op.create_table(
        "auto_response_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("chat_jid", sa.String(length=256), nullable=False),
        sa.Column("trigger_message_id", sa.String(length=256), nullable=False),
        sa.Column("response_message_id", sa.String(length=256), nullable=True),
        sa.Column("style_profile_id", sa.Integer(), nullable=True),
        sa.Column("prompt_tokens", sa.Integer(), nullable=False),
        sa.Column("completion_tokens", sa.Integer(), nullable=False),
        sa.Column("cost_usd", sa.Float(), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["style_profile_id"], ["style_profiles.id"], ondelete="SET NULL"
        ),
    )
    op.create_index(
        "ix_auto_response_log_chat_approved",
        "auto_response_log",
        ["chat_jid", "approved"],
    )

    op.create_table(
        "analysis_cache",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("namespace", sa.String(length=64), nullable=False),
        sa.Column("cache_key", sa.String(length=512), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("namespace", "cache_key", name="uq_analysis_cache_key"),
    )


def downgrade() -> None:
    """Drop all auto-response tables."""
    op.drop_table("analysis_cache")
    op.drop_index("ix_auto_response_log_chat_approved", table_name="auto_response_log")
    op.drop_table("auto_response_log")
    op.drop_index("ix_approval_queue_status_created", table_name="approval_queue")
    op.drop_index("ix_approval_queue_chat_status", table_name="approval_queue")
    op.drop_table("approval_queue")
    op.drop_index(
        "ix_auto_response_config_chat_jid", table_name="auto_response_config"
    )
    op.drop_table("auto_response_config")
    op.drop_table("style_profiles")
    op.drop_index("ix_app_settings_key", table_name="app_settings")
    op.drop_table("app_settings")
