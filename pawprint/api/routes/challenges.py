"""
pawprint.api.routes.challenges — Challenge voting & leaderboards
=================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import Engine

from pawprint.api.deps import Identity, get_current_user, get_engine
from pawprint.engine.errors import ValidationError
from pawprint.services import vote_service

router = APIRouter(prefix="/challenges", tags=["challenges"])


class VoteBody(BaseModel):
    entry_id: str | None = None


@router.post("/vote", status_code=201)
def cast_vote(
    body: VoteBody,
    user: Identity = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    if not body.entry_id:
        raise ValidationError("Entry ID is required")
    result = vote_service.vote(engine, body.entry_id, user.user_id)
    return result.to_dict()


@router.get("/entries/{entry_id}/votes")
def get_entry_votes(
    entry_id: str,
    user: Identity = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return {
        "entry_id": entry_id,
        "tally": vote_service.tally(engine, entry_id),
        "has_voted": vote_service.has_voted(engine, entry_id, user.user_id),
    }


@router.get("/{challenge_id}/leaderboard")
def get_leaderboard(
    challenge_id: str,
    limit: int = Query(10, ge=1, le=100),
    engine: Engine = Depends(get_engine),
):
    rows = vote_service.leaderboard(engine, challenge_id, limit=limit)
    return {"challenge_id": challenge_id, "entries": [row.to_dict() for row in rows]}
