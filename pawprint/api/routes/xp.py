"""
pawprint.api.routes.xp — XP totals, levels and ledger history
==============================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Engine

from pawprint.api.deps import Identity, get_current_user, get_engine
from pawprint.services import xp_service

router = APIRouter(tags=["xp"])


@router.get("/xp")
def get_xp(
    user: Identity = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return xp_service.xp_summary(engine, user.user_id).to_dict()


@router.get("/xp/history")
def get_xp_history(
    limit: int = Query(50, ge=1, le=200),
    user: Identity = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return {"entries": xp_service.xp_history(engine, user.user_id, limit=limit)}
