"""
pawprint.services.vote_service — Challenge Vote Tally
======================================================

One vote per (entry, voter), enforced by the ``uq_challenge_vote_entry_voter``
unique constraint rather than by looking for an existing vote first.  Two
simultaneous votes from the same voter both reach the INSERT; the store
accepts one and raises :class:`IntegrityError` for the other, which we
report as :class:`AlreadyVoted`.

Tallies are always ``COUNT(*)`` over vote rows.  There is no counter
column to drift.

Challenges and entries are owned by the admin CRUD; this module only reads
them to validate vote targets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import Engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pawprint.database.models import (
    Challenge,
    ChallengeEntry,
    ChallengeStatus,
    ChallengeVote,
)
from pawprint.engine.errors import (
    AlreadyVoted,
    EntryNotFound,
    SelfVoteForbidden,
    VotingClosed,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VoteResult:
    vote_id: int
    entry_id: str
    voter_id: str
    tally: int

    def to_dict(self) -> dict:
        return {
            "vote_id": self.vote_id,
            "entry_id": self.entry_id,
            "tally": self.tally,
        }


@dataclass(frozen=True, slots=True)
class LeaderboardRow:
    rank: int
    entry_id: str
    author_id: str
    title: str | None
    votes: int

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "entry_id": self.entry_id,
            "author_id": self.author_id,
            "title": self.title,
            "votes": self.votes,
        }


def _count_votes(session: Session, entry_id: str) -> int:
    return session.scalar(
        select(func.count()).select_from(ChallengeVote).where(ChallengeVote.entry_id == entry_id)
    ) or 0


def _voting_open(challenge: Challenge, now: datetime) -> bool:
    """True while *challenge* is in VOTING and its deadline, if any, is ahead."""
    if challenge.status != ChallengeStatus.VOTING:
        return False
    ends = challenge.voting_ends_at
    if ends is None:
        return True
    # SQLite hands back naive datetimes; stored values are UTC.
    if ends.tzinfo is None:
        ends = ends.replace(tzinfo=UTC)
    return now < ends


def vote(engine: Engine, entry_id: str, voter_id: str) -> VoteResult:
    """Cast *voter_id*'s vote for *entry_id* and return the new tally.

    Raises
    ------
    EntryNotFound
        The entry does not exist (or was deleted mid-request).
    VotingClosed
        The entry's challenge is not in its voting phase, or its
        ``voting_ends_at`` deadline has passed.
    SelfVoteForbidden
        The voter authored the entry.
    AlreadyVoted
        The voter already has a vote on this entry.
    """
    with Session(engine) as session:
        entry = session.get(ChallengeEntry, entry_id)
        if entry is None:
            raise EntryNotFound(f"Entry {entry_id!r} does not exist")
        if not _voting_open(entry.challenge, datetime.now(UTC)):
            raise VotingClosed(f"Voting is not open for challenge {entry.challenge_id!r}")
        if entry.author_id == voter_id:
            raise SelfVoteForbidden("You cannot vote for your own entry")

        ballot = ChallengeVote(entry_id=entry_id, voter_id=voter_id)
        session.add(ballot)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise _classify_conflict(session, entry_id, voter_id) from None

        vote_id = ballot.id
        tally = _count_votes(session, entry_id)

    logger.info("Vote %d: %s → entry %s (tally %d)", vote_id, voter_id, entry_id, tally)
    return VoteResult(vote_id=vote_id, entry_id=entry_id, voter_id=voter_id, tally=tally)


def _classify_conflict(session: Session, entry_id: str, voter_id: str) -> Exception:
    """Name the constraint that rejected the INSERT."""
    existing = session.scalar(
        select(ChallengeVote.id).where(
            ChallengeVote.entry_id == entry_id,
            ChallengeVote.voter_id == voter_id,
        )
    )
    if existing is not None:
        logger.warning("Duplicate vote by %s on entry %s rejected", voter_id, entry_id)
        return AlreadyVoted("You have already voted for this entry")
    if session.get(ChallengeEntry, entry_id) is None:
        return EntryNotFound(f"Entry {entry_id!r} was removed")
    return AlreadyVoted("You have already voted for this entry")


def tally(engine: Engine, entry_id: str) -> int:
    """Number of votes on *entry_id*, counted from the vote rows."""
    with Session(engine) as session:
        if session.get(ChallengeEntry, entry_id) is None:
            raise EntryNotFound(f"Entry {entry_id!r} does not exist")
        return _count_votes(session, entry_id)


def has_voted(engine: Engine, entry_id: str, voter_id: str) -> bool:
    with Session(engine) as session:
        return session.scalar(
            select(ChallengeVote.id).where(
                ChallengeVote.entry_id == entry_id,
                ChallengeVote.voter_id == voter_id,
            )
        ) is not None


def leaderboard(engine: Engine, challenge_id: str, limit: int = 10) -> list[LeaderboardRow]:
    """Approved entries of a challenge ranked by vote count, ties by submission order."""
    votes = func.count(ChallengeVote.id).label("votes")
    with Session(engine) as session:
        rows = session.execute(
            select(ChallengeEntry, votes)
            .outerjoin(ChallengeVote, ChallengeVote.entry_id == ChallengeEntry.id)
            .where(
                ChallengeEntry.challenge_id == challenge_id,
                ChallengeEntry.is_approved.is_(True),
            )
            .group_by(ChallengeEntry.id)
            .order_by(votes.desc(), ChallengeEntry.created_at, ChallengeEntry.id)
            .limit(limit)
        ).all()

        return [
            LeaderboardRow(
                rank=index + 1,
                entry_id=row.ChallengeEntry.id,
                author_id=row.ChallengeEntry.author_id,
                title=row.ChallengeEntry.title,
                votes=row.votes,
            )
            for index, row in enumerate(rows)
        ]
