"""
pawprint.engine.errors — Engagement Failure Taxonomy
=====================================================

Every expected failure of the engagement engine is an
:class:`EngagementError` subclass.  Each class carries:

* ``kind``   — the taxonomy bucket (``not_found``, ``conflict``,
  ``validation``) that the API maps to an HTTP status.
* ``code``   — a stable machine-readable identifier returned to clients.

Conflicts (``AlreadyClaimed``, ``AlreadyVoted``) are the normal outcome of
a lost race, not an internal error.  Store failures (``OperationalError``)
are *not* wrapped here; they propagate unchanged so callers can retry.
"""

from __future__ import annotations

__all__ = [
    "AlreadyClaimed",
    "AlreadyVoted",
    "CatalogError",
    "ClaimFailure",
    "ConflictError",
    "EngagementError",
    "EntryNotFound",
    "InvalidActivity",
    "InvalidAmount",
    "MissionNotFound",
    "NotFoundError",
    "NotYetEligible",
    "SelfVoteForbidden",
    "ValidationError",
    "VotingClosed",
]


class EngagementError(Exception):
    """Base class for expected engagement failures."""

    kind: str = "internal"
    code: str = "engagement_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class NotFoundError(EngagementError):
    kind = "not_found"
    code = "not_found"


class ConflictError(EngagementError):
    kind = "conflict"
    code = "conflict"


class ValidationError(EngagementError):
    kind = "validation"
    code = "validation_error"


class ClaimFailure(EngagementError):
    """Marker for the three outcomes of a claim that granted nothing."""


# ---------------------------------------------------------------------------
# Missions & claims
# ---------------------------------------------------------------------------
class MissionNotFound(NotFoundError, ClaimFailure):
    code = "mission_not_found"


class NotYetEligible(ConflictError, ClaimFailure):
    code = "not_yet_eligible"


class AlreadyClaimed(ConflictError, ClaimFailure):
    code = "already_claimed"


class InvalidActivity(ValidationError):
    code = "invalid_activity"


# ---------------------------------------------------------------------------
# XP ledger
# ---------------------------------------------------------------------------
class InvalidAmount(ValidationError):
    code = "invalid_amount"


# ---------------------------------------------------------------------------
# Challenge votes
# ---------------------------------------------------------------------------
class EntryNotFound(NotFoundError):
    code = "entry_not_found"


class AlreadyVoted(ConflictError):
    code = "already_voted"


class VotingClosed(ConflictError):
    code = "voting_closed"


class SelfVoteForbidden(ValidationError):
    code = "self_vote_forbidden"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
class CatalogError(ValueError):
    """Raised when a mission catalog file is malformed."""
