"""
pawprint.api.routes.streaks — Daily check-in streaks
=====================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import Engine

from pawprint.api.deps import Identity, get_catalog, get_current_user, get_engine
from pawprint.engine.catalog import MissionCatalog
from pawprint.services import streak_service

router = APIRouter(tags=["streaks"])


@router.get("/streaks")
def get_streak(
    user: Identity = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return streak_service.get_streak(engine, user.user_id).to_dict()


@router.post("/streaks")
def check_in(
    user: Identity = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
    catalog: MissionCatalog = Depends(get_catalog),
):
    return streak_service.check_in(engine, catalog, user.user_id).to_dict()
