"""
pawprint.services.progress_service — Mission Progress Tracker
==============================================================

Applies activity signals to per-user mission progress.

Every write is guarded by the store, not by a prior read:

* The progress row is created lazily with an INSERT inside a SAVEPOINT; a
  concurrent creator trips the (user_id, mission_id) unique constraint and
  we simply use the row it created.
* Replay protection is the (user_id, mission_id, signal_id) unique key on
  ``mission_activity``.  A duplicate signal rolls back its SAVEPOINT and
  leaves progress untouched.
* The advance is one conditional UPDATE guarded by
  ``status = 'IN_PROGRESS'`` that caps ``current`` at ``target`` and flips
  the status in the same statement, so progress only ever moves forward.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import DateTime, Engine, case, literal, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pawprint.constants import MAX_AMOUNT
from pawprint.database.models import MissionActivity, MissionProgress, ProgressStatus
from pawprint.engine.catalog import Mission, MissionCatalog
from pawprint.engine.errors import InvalidActivity
from pawprint.engine.events import ActivitySignal

logger = logging.getLogger(__name__)

_STATUS_TYPE = MissionProgress.__table__.c.status.type


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ProgressView:
    """Detached snapshot of one (user, mission) progress row."""

    user_id: str
    mission_id: str
    status: ProgressStatus
    current: int
    target: int
    completed_at: datetime | None = None
    claimed_at: datetime | None = None

    @classmethod
    def from_row(cls, row: MissionProgress) -> ProgressView:
        return cls(
            user_id=row.user_id,
            mission_id=row.mission_id,
            status=ProgressStatus(row.status),
            current=row.current,
            target=row.target,
            completed_at=row.completed_at,
            claimed_at=row.claimed_at,
        )

    @classmethod
    def default(cls, user_id: str, mission: Mission) -> ProgressView:
        """Implicit progress for a mission the user has not touched yet."""
        return cls(
            user_id=user_id,
            mission_id=mission.id,
            status=ProgressStatus.IN_PROGRESS,
            current=0,
            target=mission.criteria.target,
        )

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "current": self.current,
            "target": self.target,
            "is_completed": self.status != ProgressStatus.IN_PROGRESS,
            "is_claimed": self.status == ProgressStatus.CLAIMED,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "claimed_at": self.claimed_at.isoformat() if self.claimed_at else None,
        }


@dataclass(frozen=True, slots=True)
class MissionView:
    mission: Mission
    progress: ProgressView

    def to_dict(self) -> dict:
        return {"mission": self.mission.to_dict(), "progress": self.progress.to_dict()}


# ---------------------------------------------------------------------------
# Internal helpers (run inside the caller's transaction)
# ---------------------------------------------------------------------------
def _load_row(session: Session, user_id: str, mission_id: str) -> MissionProgress | None:
    return session.scalar(
        select(MissionProgress).where(
            MissionProgress.user_id == user_id,
            MissionProgress.mission_id == mission_id,
        )
    )


def _ensure_row(session: Session, user_id: str, mission: Mission) -> None:
    """Create the progress row if missing, tolerating a concurrent creator."""
    exists = session.scalar(
        select(MissionProgress.id).where(
            MissionProgress.user_id == user_id,
            MissionProgress.mission_id == mission.id,
        )
    )
    if exists is not None:
        return

    try:
        with session.begin_nested():   # SAVEPOINT
            session.add(MissionProgress(
                user_id=user_id,
                mission_id=mission.id,
                status=ProgressStatus.IN_PROGRESS,
                current=0,
                target=mission.criteria.target,
            ))
            session.flush()
    except IntegrityError:
        # Another request created the row between our read and insert.
        # The SAVEPOINT was rolled back; the outer txn is still alive.
        logger.debug("Progress row %s/%s created concurrently", user_id, mission.id)


def _journal_signal(
    session: Session, user_id: str, mission: Mission, signal: ActivitySignal
) -> bool:
    """Record *signal* against *mission*.  Returns False for a replay."""
    activity = MissionActivity(
        user_id=user_id,
        mission_id=mission.id,
        activity=signal.activity,
        signal_id=signal.signal_id,
        amount=signal.amount,
    )
    if signal.signal_id is None:
        session.add(activity)
        return True

    try:
        with session.begin_nested():   # SAVEPOINT
            session.add(activity)
            session.flush()
    except IntegrityError:
        return False
    return True


def _advance(session: Session, user_id: str, mission: Mission, amount: int) -> bool:
    """Conditionally advance an IN_PROGRESS row.  Returns True on completion."""
    now = datetime.now(UTC)
    # Compared as a remainder so current + amount is only computed below target.
    reached = MissionProgress.target - MissionProgress.current <= amount

    result = session.execute(
        update(MissionProgress)
        .where(
            MissionProgress.user_id == user_id,
            MissionProgress.mission_id == mission.id,
            MissionProgress.status == ProgressStatus.IN_PROGRESS,
        )
        .values(
            current=case(
                (reached, MissionProgress.target),
                else_=MissionProgress.current + amount,
            ),
            status=case(
                (reached, literal(ProgressStatus.COMPLETE, _STATUS_TYPE)),
                else_=literal(ProgressStatus.IN_PROGRESS, _STATUS_TYPE),
            ),
            completed_at=case(
                (reached, literal(now, DateTime(timezone=True))),
                else_=MissionProgress.completed_at,
            ),
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False

    status = session.scalar(
        select(MissionProgress.status).where(
            MissionProgress.user_id == user_id,
            MissionProgress.mission_id == mission.id,
        )
    )
    return status == ProgressStatus.COMPLETE


def _validate_signal(mission: Mission, signal: ActivitySignal) -> None:
    if signal.activity != mission.criteria.activity:
        raise InvalidActivity(
            f"Mission {mission.id!r} counts {mission.criteria.activity!r}, "
            f"not {signal.activity!r}"
        )
    if isinstance(signal.amount, bool) or not isinstance(signal.amount, int) or signal.amount <= 0:
        raise InvalidActivity(f"Activity amount must be a positive integer, got {signal.amount!r}")
    if signal.amount > MAX_AMOUNT:
        raise InvalidActivity(f"Activity amount must be at most {MAX_AMOUNT}, got {signal.amount}")


def _apply(session: Session, user_id: str, mission: Mission, signal: ActivitySignal) -> ProgressView:
    _ensure_row(session, user_id, mission)

    if not _journal_signal(session, user_id, mission, signal):
        logger.debug(
            "Replayed signal %s for %s/%s ignored", signal.signal_id, user_id, mission.id,
        )
    elif _advance(session, user_id, mission, signal.amount):
        logger.info("Mission %s complete for %s", mission.id, user_id)

    session.expire_all()
    row = _load_row(session, user_id, mission.id)
    return ProgressView.from_row(row)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def record_activity(
    engine: Engine,
    catalog: MissionCatalog,
    user_id: str,
    mission_id: str,
    signal: ActivitySignal,
) -> ProgressView:
    """Apply one activity signal to (user_id, mission_id).

    Completes the mission when its criteria are met.  Replaying a signal
    with the same ``signal_id`` returns the current progress unchanged.

    Raises
    ------
    MissionNotFound
        If *mission_id* is not in the catalog.
    InvalidActivity
        If the signal does not count toward this mission.
    """
    mission = catalog.require(mission_id)
    _validate_signal(mission, signal)

    with Session(engine) as session:
        view = _apply(session, user_id, mission, signal)
        session.commit()
        return view


def track_in(
    session: Session,
    catalog: MissionCatalog,
    user_id: str,
    signal: ActivitySignal,
) -> list[ProgressView]:
    """Fan *signal* out inside the caller's transaction (no commit)."""
    missions = catalog.for_activity(signal.activity)
    for mission in missions:
        _validate_signal(mission, signal)
    return [_apply(session, user_id, mission, signal) for mission in missions]


def track_activity(
    engine: Engine,
    catalog: MissionCatalog,
    user_id: str,
    signal: ActivitySignal,
) -> list[ProgressView]:
    """Fan one signal out to every mission counting its activity.

    All affected missions advance in a single transaction.  An activity no
    mission counts is accepted and changes nothing.
    """
    if not catalog.for_activity(signal.activity):
        return []

    with Session(engine) as session:
        views = track_in(session, catalog, user_id, signal)
        session.commit()
        return views


def get_progress(engine: Engine, catalog: MissionCatalog, user_id: str) -> list[MissionView]:
    """Every catalog mission paired with the user's progress.

    Missions the user never touched get an implicit IN_PROGRESS default;
    this is a read-only projection and never inserts rows.
    """
    with Session(engine) as session:
        rows = session.scalars(
            select(MissionProgress).where(MissionProgress.user_id == user_id)
        ).all()
        by_mission = {row.mission_id: ProgressView.from_row(row) for row in rows}

    return [
        MissionView(
            mission=mission,
            progress=by_mission.get(mission.id) or ProgressView.default(user_id, mission),
        )
        for mission in catalog.all()
    ]


def get_mission_progress(
    engine: Engine, catalog: MissionCatalog, user_id: str, mission_id: str
) -> ProgressView:
    """Progress for a single mission (implicit default if untouched)."""
    mission = catalog.require(mission_id)
    with Session(engine) as session:
        row = _load_row(session, user_id, mission_id)
        if row is None:
            return ProgressView.default(user_id, mission)
        return ProgressView.from_row(row)
