"""
pawprint.engine.events — ActivitySignal
========================================

The event envelope fed to the progress tracker.  Request handlers normalize
whatever the member did (watched a video, posted to the feed, checked in)
into an :class:`ActivitySignal` before calling the tracker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

__all__ = ["ActivitySignal", "CHECK_IN_ACTIVITY"]

# Activity key emitted by the streak tracker on each new active day.
CHECK_IN_ACTIVITY = "daily_check_in"


@dataclass(frozen=True, slots=True)
class ActivitySignal:
    """One unit of member activity.

    ``signal_id`` is the natural key of the source event (e.g. a comment
    id).  Replaying a signal with the same id toward the same mission is a
    no-op.  Signals without an id always apply.
    """

    activity: str
    signal_id: str | None = None
    amount: int = 1
    metadata: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
