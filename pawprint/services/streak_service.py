"""
pawprint.services.streak_service — Daily Check-in Streaks
==========================================================

A member "checks in" once per calendar day.  Consecutive days extend the
streak, a missed day resets it to 1, and repeat check-ins on the same day
change nothing.

Each new active day also emits a ``daily_check_in`` activity signal with
the id ``checkin:<date>`` so streak missions progress; replaying the same
day's check-in can never double-count toward them.

The streak row is updated with a conditional UPDATE keyed on the
``last_active_date`` we read, so two simultaneous check-ins on the same day
cannot both extend the streak.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import Engine, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pawprint.database.models import UserStreak
from pawprint.engine.catalog import MissionCatalog
from pawprint.engine.events import CHECK_IN_ACTIVITY, ActivitySignal
from pawprint.services import progress_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreakUpdate:
    current_streak: int
    longest_streak: int
    is_new_day: bool
    streak_maintained: bool

    def to_dict(self) -> dict:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "is_new_day": self.is_new_day,
            "streak_maintained": self.streak_maintained,
        }


@dataclass(frozen=True, slots=True)
class StreakView:
    current_streak: int
    longest_streak: int
    last_active_date: date | None
    total_days_active: int
    is_at_risk: bool

    def to_dict(self) -> dict:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_active_date": (
                self.last_active_date.isoformat() if self.last_active_date else None
            ),
            "total_days_active": self.total_days_active,
            "is_at_risk": self.is_at_risk,
        }


def _today() -> date:
    return datetime.now(UTC).date()


def _ensure_row(session: Session, user_id: str) -> None:
    if session.get(UserStreak, user_id) is not None:
        return
    try:
        with session.begin_nested():   # SAVEPOINT
            session.add(UserStreak(user_id=user_id))
            session.flush()
    except IntegrityError:
        logger.debug("Streak row for %s created concurrently", user_id)


def _advance_streak(session: Session, user_id: str, today: date) -> StreakUpdate:
    streak = session.get(UserStreak, user_id)
    last = streak.last_active_date

    if last == today:
        return StreakUpdate(
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            is_new_day=False,
            streak_maintained=True,
        )

    maintained = last is None or last == today - timedelta(days=1)
    new_current = streak.current_streak + 1 if last is not None and maintained else 1
    new_longest = max(new_current, streak.longest_streak)

    last_guard = (
        UserStreak.last_active_date.is_(None)
        if last is None
        else UserStreak.last_active_date == last
    )
    result = session.execute(
        update(UserStreak)
        .where(UserStreak.user_id == user_id, last_guard)
        .values(
            current_streak=new_current,
            longest_streak=new_longest,
            last_active_date=today,
            total_days_active=UserStreak.total_days_active + 1,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        # A concurrent check-in already moved the streak; report its state.
        session.expire_all()
        streak = session.get(UserStreak, user_id)
        return StreakUpdate(
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            is_new_day=False,
            streak_maintained=True,
        )

    return StreakUpdate(
        current_streak=new_current,
        longest_streak=new_longest,
        is_new_day=True,
        streak_maintained=maintained,
    )


def check_in(
    engine: Engine,
    catalog: MissionCatalog,
    user_id: str,
    today: date | None = None,
) -> StreakUpdate:
    """Record today's activity for *user_id* and return the streak state.

    The streak update and the check-in signal commit together.
    """
    today = today or _today()

    with Session(engine) as session:
        _ensure_row(session, user_id)
        outcome = _advance_streak(session, user_id, today)
        if outcome.is_new_day:
            progress_service.track_in(
                session,
                catalog,
                user_id,
                ActivitySignal(
                    activity=CHECK_IN_ACTIVITY,
                    signal_id=f"checkin:{today.isoformat()}",
                ),
            )
        session.commit()

    if outcome.is_new_day:
        logger.info("Streak for %s is now %d day(s)", user_id, outcome.current_streak)
    return outcome


def get_streak(engine: Engine, user_id: str, today: date | None = None) -> StreakView:
    """Current streak state; a streak is at risk when today has no check-in yet."""
    today = today or _today()

    with Session(engine) as session:
        streak = session.get(UserStreak, user_id)
        if streak is None:
            return StreakView(
                current_streak=0,
                longest_streak=0,
                last_active_date=None,
                total_days_active=0,
                is_at_risk=False,
            )

        current = streak.current_streak
        # A gap of more than one day means the streak is already broken.
        if streak.last_active_date is not None and streak.last_active_date < today - timedelta(days=1):
            current = 0

        return StreakView(
            current_streak=current,
            longest_streak=streak.longest_streak,
            last_active_date=streak.last_active_date,
            total_days_active=streak.total_days_active,
            is_at_risk=current > 0 and streak.last_active_date != today,
        )
