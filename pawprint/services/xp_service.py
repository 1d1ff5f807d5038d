"""
pawprint.services.xp_service — Append-Only XP Ledger
=====================================================

The ledger is the only record of XP.  A member's total is always
``SUM(amount)`` over their entries and their level is derived from that
total through :data:`pawprint.constants.LEVEL_THRESHOLDS`.  Nothing caches
either value, so there is nothing that can drift from the ledger.

:func:`grant` runs inside the caller's session so that the claim processor
can commit the status flip and the grant in one transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from pawprint.constants import MAX_AMOUNT, level_for_xp, level_progress
from pawprint.database.models import XPLedgerEntry
from pawprint.engine.errors import InvalidAmount, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class XPSummary:
    total_xp: int
    level: int
    current_level_xp: int
    next_level_xp: int
    progress: float

    def to_dict(self) -> dict:
        return {
            "total_xp": self.total_xp,
            "level": self.level,
            "current_level_xp": self.current_level_xp,
            "next_level_xp": self.next_level_xp,
            "progress": self.progress,
        }


def _validate_amount(amount: object) -> int:
    # bool is an int subclass; True is not a meaningful XP amount.
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmount(f"XP amount must be a positive integer, got {amount!r}")
    if amount > MAX_AMOUNT:
        raise InvalidAmount(f"XP amount must be at most {MAX_AMOUNT}, got {amount}")
    return amount


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def grant(session: Session, user_id: str, amount: int, reason: str) -> XPLedgerEntry:
    """Append a ledger entry inside the caller's transaction.

    The entry is flushed (so it has an id) but not committed.  Prior
    entries are never touched.
    """
    amount = _validate_amount(amount)
    if not reason or not reason.strip():
        raise ValidationError("XP grants require a reason")

    entry = XPLedgerEntry(user_id=user_id, amount=amount, reason=reason)
    session.add(entry)
    session.flush()
    return entry


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def total_xp_in(session: Session, user_id: str) -> int:
    """Sum of the user's ledger entries as seen by *session*."""
    total = session.scalar(
        select(func.coalesce(func.sum(XPLedgerEntry.amount), 0))
        .where(XPLedgerEntry.user_id == user_id)
    )
    return int(total or 0)


def total_xp(engine: Engine, user_id: str) -> int:
    """Sum of all ledger entries for *user_id*; zero if none exist."""
    with Session(engine) as session:
        return total_xp_in(session, user_id)


def level(engine: Engine, user_id: str) -> int:
    """Level derived purely from :func:`total_xp`."""
    return level_for_xp(total_xp(engine, user_id))


def xp_summary(engine: Engine, user_id: str) -> XPSummary:
    """Total XP, level, and progress through the current level band."""
    total = total_xp(engine, user_id)
    info = level_progress(total)
    return XPSummary(
        total_xp=total,
        level=int(info["level"]),
        current_level_xp=int(info["current_level_xp"]),
        next_level_xp=int(info["next_level_xp"]),
        progress=float(info["progress"]),
    )


def xp_history(engine: Engine, user_id: str, limit: int = 50) -> list[dict]:
    """Most recent ledger entries first."""
    with Session(engine) as session:
        rows = session.scalars(
            select(XPLedgerEntry)
            .where(XPLedgerEntry.user_id == user_id)
            .order_by(XPLedgerEntry.created_at.desc(), XPLedgerEntry.id.desc())
            .limit(limit)
        ).all()
        return [
            {
                "id": row.id,
                "amount": row.amount,
                "reason": row.reason,
                "created_at": row.created_at.isoformat() if row.created_at else None,
            }
            for row in rows
        ]
