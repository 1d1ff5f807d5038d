"""
pawprint.services.claim_service — Reward Claim Processor
=========================================================

Turns a COMPLETE mission into CLAIMED and grants its XP, at most once per
(user, mission), no matter how many identical requests race.

The transition is a compare-and-set executed by the store::

    UPDATE mission_progress
       SET status = 'CLAIMED', claimed_at = now()
     WHERE user_id = :user AND mission_id = :mission AND status = 'COMPLETE'

Only the request whose UPDATE changed a row may append the ledger entry,
and it does so in the same transaction, so the status flip and the grant
commit together or not at all.  Every other request changes zero rows and
is told why by reading the row inside the same transaction.

A retried claim whose first attempt timed out is safe: it either finds the
row CLAIMED (``AlreadyClaimed``, no second grant) or still COMPLETE (the
first attempt rolled back and this one proceeds).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import Engine, select, update
from sqlalchemy.orm import Session

from pawprint.constants import level_for_xp
from pawprint.database.models import MissionProgress, ProgressStatus
from pawprint.engine.catalog import MissionCatalog
from pawprint.engine.errors import AlreadyClaimed, MissionNotFound, NotYetEligible
from pawprint.services import xp_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClaimResult:
    mission_id: str
    xp_granted: int
    new_total_xp: int
    new_level: int
    ledger_entry_id: int

    def to_dict(self) -> dict:
        return {
            "success": True,
            "mission_id": self.mission_id,
            "xp_granted": self.xp_granted,
            "new_total_xp": self.new_total_xp,
            "new_level": self.new_level,
        }


def _classify_failure(session: Session, user_id: str, mission_id: str) -> Exception:
    """Explain why the conditional transition changed no row."""
    status = session.scalar(
        select(MissionProgress.status).where(
            MissionProgress.user_id == user_id,
            MissionProgress.mission_id == mission_id,
        )
    )
    if status is None:
        return MissionNotFound(f"No progress on mission {mission_id!r}")
    if status == ProgressStatus.CLAIMED:
        return AlreadyClaimed(f"Mission {mission_id!r} has already been claimed")
    return NotYetEligible(f"Mission {mission_id!r} is not complete yet")


def claim(
    engine: Engine,
    catalog: MissionCatalog,
    user_id: str,
    mission_id: str,
) -> ClaimResult:
    """Claim the XP reward of a completed mission.

    Raises
    ------
    MissionNotFound
        Unknown mission, or the user has no progress on it.
    NotYetEligible
        The mission is still in progress.
    AlreadyClaimed
        The reward was already granted (including by a concurrent request).
    """
    mission = catalog.require(mission_id)

    now = datetime.now(UTC)
    with Session(engine) as session:
        result = session.execute(
            update(MissionProgress)
            .where(
                MissionProgress.user_id == user_id,
                MissionProgress.mission_id == mission.id,
                MissionProgress.status == ProgressStatus.COMPLETE,
            )
            .values(
                status=ProgressStatus.CLAIMED,
                claimed_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            failure = _classify_failure(session, user_id, mission.id)
            session.rollback()
            if isinstance(failure, AlreadyClaimed):
                logger.warning("Duplicate claim of %s by %s rejected", mission.id, user_id)
            raise failure

        entry_id = xp_service.grant(session, user_id, mission.xp_reward, reason=mission.id).id
        new_total = xp_service.total_xp_in(session, user_id)
        session.commit()

    logger.info(
        "Mission %s claimed by %s: +%d XP (total %d)",
        mission.id, user_id, mission.xp_reward, new_total,
    )
    return ClaimResult(
        mission_id=mission.id,
        xp_granted=mission.xp_reward,
        new_total_xp=new_total,
        new_level=level_for_xp(new_total),
        ledger_entry_id=entry_id,
    )
