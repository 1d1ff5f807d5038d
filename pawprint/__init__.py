"""
Pawprint — Engagement Engine for a Community Photo Site
========================================================
Tracks mission progress from member activity, pays out mission rewards
into an append-only XP ledger exactly once, and tallies challenge votes
with one vote per member per entry.  Every rule that must hold under
concurrent requests is enforced by the database, not by the process.

Package layout::

    pawprint/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Level thresholds + level math
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helper
    │   └── models.py      # All ORM models
    ├── engine/
    │   ├── catalog.py     # Read-only mission catalog (missions.yaml)
    │   ├── events.py      # ActivitySignal dataclass
    │   └── errors.py      # Failure taxonomy
    ├── services/
    │   ├── progress_service.py  # Activity → mission progress
    │   ├── claim_service.py     # COMPLETE → CLAIMED + XP grant
    │   ├── xp_service.py        # XP ledger, totals, levels
    │   ├── vote_service.py      # Challenge votes + tallies
    │   ├── streak_service.py    # Daily check-in streaks
    │   └── admin_service.py     # Audit-logged admin mutations
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine, catalog and JWT identity dependencies
        ├── errors.py      # Failure → HTTP response mapping
        └── routes/        # Member + admin REST endpoints
"""

__version__ = "0.1.0"
