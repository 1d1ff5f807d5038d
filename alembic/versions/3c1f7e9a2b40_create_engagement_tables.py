"""Create engagement tables (missions, XP ledger, challenges, streaks, audit)

Revision ID: 3c1f7e9a2b40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3c1f7e9a2b40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_PROGRESS_STATUS = sa.Enum(
    "IN_PROGRESS", "COMPLETE", "CLAIMED",
    name="progress_status", native_enum=False, length=20,
)
_CHALLENGE_STATUS = sa.Enum(
    "UPCOMING", "ACTIVE", "VOTING", "COMPLETED",
    name="challenge_status", native_enum=False, length=20,
)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now())


def upgrade() -> None:
    """Create every table the engagement engine owns or reads."""
    # --- Mission progress ------------------------------------------------
    op.create_table(
        "mission_progress",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("mission_id", sa.String(64), nullable=False),
        sa.Column("status", _PROGRESS_STATUS, nullable=False),
        sa.Column("current", sa.Integer(), nullable=False),
        sa.Column("target", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _created_at("updated_at"),
        sa.UniqueConstraint("user_id", "mission_id", name="uq_mission_progress_user_mission"),
    )
    op.create_index("ix_mission_progress_user", "mission_progress", ["user_id"])

    op.create_table(
        "mission_activity",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("mission_id", sa.String(64), nullable=False),
        sa.Column("activity", sa.String(64), nullable=False),
        sa.Column("signal_id", sa.String(128), nullable=True),
        sa.Column("amount", sa.Integer(), nullable=False),
        _created_at("recorded_at"),
        sa.UniqueConstraint(
            "user_id", "mission_id", "signal_id", name="uq_mission_activity_signal",
        ),
    )

    # --- XP ledger ---------------------------------------------------------
    op.create_table(
        "xp_ledger",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(128), nullable=False),
        _created_at(),
    )
    op.create_index("ix_xp_ledger_user_created", "xp_ledger", ["user_id", "created_at"])

    # --- Challenges ----------------------------------------------------------
    op.create_table(
        "challenges",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("slug", sa.String(120), nullable=False, unique=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("status", _CHALLENGE_STATUS, nullable=False),
        sa.Column("voting_ends_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_table(
        "challenge_entries",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("challenge_id", sa.String(64), sa.ForeignKey("challenges.id"), nullable=False),
        sa.Column("author_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.UniqueConstraint("challenge_id", "author_id", name="uq_challenge_entry_author"),
    )
    op.create_table(
        "challenge_votes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "entry_id", sa.String(64), sa.ForeignKey("challenge_entries.id"), nullable=False,
        ),
        sa.Column("voter_id", sa.String(64), nullable=False),
        _created_at(),
        sa.UniqueConstraint("entry_id", "voter_id", name="uq_challenge_vote_entry_voter"),
    )

    # --- Streaks -------------------------------------------------------------
    op.create_table(
        "user_streaks",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("current_streak", sa.Integer(), nullable=False),
        sa.Column("longest_streak", sa.Integer(), nullable=False),
        sa.Column("last_active_date", sa.Date(), nullable=True),
        sa.Column("total_days_active", sa.Integer(), nullable=False),
        _created_at("updated_at"),
    )

    # --- Audit ---------------------------------------------------------------
    op.create_table(
        "admin_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("actor_id", sa.String(64), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("target_table", sa.String(50), nullable=False),
        sa.Column("target_id", sa.String(100), nullable=True),
        sa.Column("before_snapshot", postgresql.JSONB(), nullable=True),
        sa.Column("after_snapshot", postgresql.JSONB(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        _created_at("timestamp"),
    )
    op.create_index("ix_admin_log_actor_time", "admin_log", ["actor_id", "timestamp"])
    op.create_index(
        "ix_admin_log_target", "admin_log", ["target_table", "target_id", "timestamp"],
    )


def downgrade() -> None:
    """Drop every engagement table (votes before entries before challenges)."""
    op.drop_index("ix_admin_log_target", table_name="admin_log")
    op.drop_index("ix_admin_log_actor_time", table_name="admin_log")
    op.drop_table("admin_log")
    op.drop_table("user_streaks")
    op.drop_table("challenge_votes")
    op.drop_table("challenge_entries")
    op.drop_table("challenges")
    op.drop_index("ix_xp_ledger_user_created", table_name="xp_ledger")
    op.drop_table("xp_ledger")
    op.drop_table("mission_activity")
    op.drop_index("ix_mission_progress_user", table_name="mission_progress")
    op.drop_table("mission_progress")
