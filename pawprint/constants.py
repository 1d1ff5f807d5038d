"""
pawprint.constants — Shared Constants & Leveling Table
=======================================================

Single source of truth for the level thresholds.  Import from here instead
of duplicating in services and API responses.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Leveling table — THE single canonical implementation
# ---------------------------------------------------------------------------
# Cumulative XP required to *reach* each level: level n needs
# LEVEL_THRESHOLDS[n - 1].  Must stay strictly increasing.
LEVEL_THRESHOLDS: tuple[int, ...] = (
    0, 100, 250, 500, 1000, 1750, 2750, 4000, 5500, 7500, 10000,
    13000, 16500, 20500, 25000, 30000, 36000, 43000, 51000, 60000,
)

MAX_LEVEL = len(LEVEL_THRESHOLDS)


def level_for_xp(total_xp: int) -> int:
    """Level reached with *total_xp*.

    Monotonic and deterministic: more XP never yields a lower level.
    Negative totals cannot occur (the ledger only holds positive grants)
    but are clamped to level 1 all the same.
    """
    level = 1
    for index, required in enumerate(LEVEL_THRESHOLDS):
        if total_xp >= required:
            level = index + 1
        else:
            break
    return level


def xp_for_level(level: int) -> int:
    """Cumulative XP required to reach *level* (clamped to ``1..MAX_LEVEL``)."""
    level = max(1, min(level, MAX_LEVEL))
    return LEVEL_THRESHOLDS[level - 1]


def level_progress(total_xp: int) -> dict[str, int | float]:
    """Level plus the bounds of the current level band.

    ``progress`` is the percentage of the band already earned, capped at
    100.  At the maximum level the band is closed and progress is 100.
    """
    level = level_for_xp(total_xp)
    current_level_xp = xp_for_level(level)
    if level >= MAX_LEVEL:
        return {
            "level": level,
            "current_level_xp": current_level_xp,
            "next_level_xp": current_level_xp,
            "progress": 100.0,
        }

    next_level_xp = xp_for_level(level + 1)
    span = next_level_xp - current_level_xp
    progress = (total_xp - current_level_xp) / span * 100
    return {
        "level": level,
        "current_level_xp": current_level_xp,
        "next_level_xp": next_level_xp,
        "progress": round(min(progress, 100.0), 2),
    }


# ---------------------------------------------------------------------------
# Amount bounds
# ---------------------------------------------------------------------------
# Largest XP grant or activity amount accepted.  Amounts are stored in
# 32-bit INTEGER columns on every supported backend.
MAX_AMOUNT = 2**31 - 1
