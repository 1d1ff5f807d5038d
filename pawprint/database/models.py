"""
pawprint.database.models — SQLAlchemy 2.0 Data Models
======================================================

Tables:
- mission_progress   — Per-user, per-mission completion state
- mission_activity   — Journal of applied activity signals (replay guard)
- xp_ledger          — Append-only XP grants; the only source of total XP
- challenges         — Community challenges (owned by admin CRUD)
- challenge_entries  — Submissions eligible for voting (owned by admin CRUD)
- challenge_votes    — One vote per (entry, voter)
- user_streaks       — Daily check-in streaks
- admin_log          — Append-only audit trail

User ids are opaque strings issued by the identity provider; there is no
users table here.
"""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    true,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Pawprint ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ProgressStatus(enum.StrEnum):
    """Mission progress states.  Transitions only move forward."""
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETE = "COMPLETE"
    CLAIMED = "CLAIMED"


class ChallengeStatus(enum.StrEnum):
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    VOTING = "VOTING"
    COMPLETED = "COMPLETED"


class AdminActionType(enum.StrEnum):
    """Categories of admin mutations recorded in admin_log."""
    DELETE = "DELETE"
    MANUAL_AWARD = "MANUAL_AWARD"


# ---------------------------------------------------------------------------
# MissionProgress — one row per (user, mission), created lazily
# ---------------------------------------------------------------------------
class MissionProgress(Base):
    __tablename__ = "mission_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    mission_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[ProgressStatus] = mapped_column(
        Enum(ProgressStatus, name="progress_status", native_enum=False, length=20),
        nullable=False,
        default=ProgressStatus.IN_PROGRESS,
    )
    current: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    target: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("user_id", "mission_id", name="uq_mission_progress_user_mission"),
        Index("ix_mission_progress_user", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<MissionProgress user={self.user_id!r} mission={self.mission_id!r} "
            f"status={self.status} {self.current}/{self.target}>"
        )


# ---------------------------------------------------------------------------
# MissionActivity — applied signals; the unique key makes replays no-ops
# ---------------------------------------------------------------------------
class MissionActivity(Base):
    __tablename__ = "mission_activity"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    mission_id: Mapped[str] = mapped_column(String(64), nullable=False)
    activity: Mapped[str] = mapped_column(String(64), nullable=False)
    signal_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        # NULL signal ids never collide, so anonymous signals always apply.
        UniqueConstraint(
            "user_id", "mission_id", "signal_id", name="uq_mission_activity_signal",
        ),
    )


# ---------------------------------------------------------------------------
# XPLedgerEntry — append-only; never updated or deleted
# ---------------------------------------------------------------------------
class XPLedgerEntry(Base):
    __tablename__ = "xp_ledger"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_xp_ledger_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<XPLedgerEntry user={self.user_id!r} amount={self.amount} reason={self.reason!r}>"


# ---------------------------------------------------------------------------
# Challenges — read-only to the engine
# ---------------------------------------------------------------------------
class Challenge(Base):
    __tablename__ = "challenges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[ChallengeStatus] = mapped_column(
        Enum(ChallengeStatus, name="challenge_status", native_enum=False, length=20),
        nullable=False,
        default=ChallengeStatus.UPCOMING,
    )
    voting_ends_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    entries: Mapped[list[ChallengeEntry]] = relationship(back_populates="challenge")

    def __repr__(self) -> str:
        return f"<Challenge id={self.id!r} status={self.status}>"


class ChallengeEntry(Base):
    __tablename__ = "challenge_entries"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    challenge_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("challenges.id"), nullable=False
    )
    author_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Moderation flag owned by the external admin CRUD; hidden entries are
    # left off the leaderboard.
    is_approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    challenge: Mapped[Challenge] = relationship(back_populates="entries")

    __table_args__ = (
        UniqueConstraint("challenge_id", "author_id", name="uq_challenge_entry_author"),
    )

    def __repr__(self) -> str:
        return f"<ChallengeEntry id={self.id!r} challenge={self.challenge_id!r}>"


# ---------------------------------------------------------------------------
# ChallengeVote — unique (entry, voter); no ON DELETE CASCADE, the admin
# deletion path removes votes explicitly before the entry
# ---------------------------------------------------------------------------
class ChallengeVote(Base):
    __tablename__ = "challenge_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("challenge_entries.id"), nullable=False
    )
    voter_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("entry_id", "voter_id", name="uq_challenge_vote_entry_voter"),
    )

    def __repr__(self) -> str:
        return f"<ChallengeVote entry={self.entry_id!r} voter={self.voter_id!r}>"


# ---------------------------------------------------------------------------
# UserStreak — daily check-in streaks
# ---------------------------------------------------------------------------
class UserStreak(Base):
    __tablename__ = "user_streaks"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_active_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_days_active: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<UserStreak user={self.user_id!r} current={self.current_streak}>"


# ---------------------------------------------------------------------------
# AdminLog — append-only audit trail
# ---------------------------------------------------------------------------
class AdminLog(Base):
    __tablename__ = "admin_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    actor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_table: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    before_snapshot: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    after_snapshot: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_admin_log_actor_time", "actor_id", "timestamp"),
        Index("ix_admin_log_target", "target_table", "target_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<AdminLog id={self.id} actor={self.actor_id} action={self.action_type}>"
