"""
pawprint.services.admin_service — Audited Admin Mutations
==========================================================

Privileged operations invoked by the admin API only.  Role checks happen
at that boundary; nothing here inspects who the caller is beyond recording
``actor_id`` in the audit trail.

Every write follows the pattern:
  1. Begin transaction
  2. Read "before" snapshot
  3. Apply change
  4. Write admin_log with before/after JSONB
  5. Commit
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy import Engine, delete, select
from sqlalchemy.orm import Session

from pawprint.database.models import (
    AdminActionType,
    AdminLog,
    ChallengeEntry,
    ChallengeVote,
)
from pawprint.services import xp_service

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Generic audit helpers
# ---------------------------------------------------------------------------
def _row_to_dict(obj: Any) -> dict | None:
    """Convert a SQLAlchemy model instance to a JSON-serializable dict."""
    if obj is None:
        return None
    result = {}
    for col in obj.__table__.columns:
        val = getattr(obj, col.key, None)
        if isinstance(val, (datetime, date)):
            val = val.isoformat()
        result[col.name] = val
    return result


def _log_admin_action(
    session: Session,
    *,
    actor_id: str,
    action_type: str,
    target_table: str,
    target_id: str | None,
    before: dict | None,
    after: dict | None,
    reason: str | None = None,
) -> None:
    """Insert a row into admin_log within the current transaction."""
    session.add(AdminLog(
        actor_id=actor_id,
        action_type=action_type,
        target_table=target_table,
        target_id=target_id,
        before_snapshot=before,
        after_snapshot=after,
        reason=reason,
    ))


# ---------------------------------------------------------------------------
# Challenge entries
# ---------------------------------------------------------------------------
def delete_entry(
    engine: Engine,
    entry_id: str,
    *,
    actor_id: str,
    reason: str | None = None,
) -> bool:
    """Delete a challenge entry and its votes in one audited transaction.

    Votes reference the entry, so they are removed first.  Returns
    ``False`` if the entry does not exist.
    """
    with Session(engine) as session:
        entry = session.get(ChallengeEntry, entry_id)
        if entry is None:
            return False

        before = _row_to_dict(entry)
        removed = session.execute(
            delete(ChallengeVote).where(ChallengeVote.entry_id == entry_id)
        ).rowcount
        session.delete(entry)
        _log_admin_action(
            session,
            actor_id=actor_id,
            action_type=AdminActionType.DELETE.value,
            target_table="challenge_entries",
            target_id=entry_id,
            before=before,
            after={"votes_removed": removed},
            reason=reason,
        )
        session.commit()

    logger.info("Admin %s deleted entry %s (%d votes removed)", actor_id, entry_id, removed)
    return True


# ---------------------------------------------------------------------------
# Manual XP awards
# ---------------------------------------------------------------------------
def award_manual(
    engine: Engine,
    *,
    user_id: str,
    amount: int,
    actor_id: str,
    reason: str = "",
) -> int:
    """Grant XP by hand (support tooling).  Returns the new total XP.

    The ledger entry and its audit row commit together.
    """
    with Session(engine) as session:
        entry = xp_service.grant(session, user_id, amount, reason=f"manual:{actor_id}")
        _log_admin_action(
            session,
            actor_id=actor_id,
            action_type=AdminActionType.MANUAL_AWARD.value,
            target_table="xp_ledger",
            target_id=str(entry.id),
            before=None,
            after=_row_to_dict(entry),
            reason=reason or None,
        )
        total = xp_service.total_xp_in(session, user_id)
        session.commit()

    logger.info("Admin %s awarded %d XP to %s", actor_id, amount, user_id)
    return total


def get_audit_log(engine: Engine, *, limit: int = 50) -> list[dict]:
    """Most recent admin actions first."""
    with Session(engine) as session:
        rows = session.scalars(
            select(AdminLog).order_by(AdminLog.timestamp.desc(), AdminLog.id.desc()).limit(limit)
        ).all()
        return [_row_to_dict(row) for row in rows]
