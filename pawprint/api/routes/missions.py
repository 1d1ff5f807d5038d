"""
pawprint.api.routes.missions — Mission progress & reward claims
================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import Engine

from pawprint.api.deps import Identity, get_catalog, get_current_user, get_engine
from pawprint.constants import MAX_AMOUNT
from pawprint.engine.catalog import MissionCatalog
from pawprint.engine.events import ActivitySignal
from pawprint.services import claim_service, progress_service

router = APIRouter(tags=["missions"])


class ActivityBody(BaseModel):
    activity: str = Field(min_length=1, max_length=64)
    signal_id: str | None = Field(default=None, max_length=128)
    amount: int = Field(default=1, ge=1, le=MAX_AMOUNT)
    # Target one mission instead of every mission counting the activity.
    mission_id: str | None = None


@router.get("/missions")
def list_missions(
    user: Identity = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
    catalog: MissionCatalog = Depends(get_catalog),
):
    views = progress_service.get_progress(engine, catalog, user.user_id)
    return {"missions": [view.to_dict() for view in views]}


@router.post("/missions/{mission_id}/claim")
def claim_mission(
    mission_id: str,
    user: Identity = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
    catalog: MissionCatalog = Depends(get_catalog),
):
    result = claim_service.claim(engine, catalog, user.user_id, mission_id)
    return result.to_dict()


@router.post("/activity")
def record_activity(
    body: ActivityBody,
    user: Identity = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
    catalog: MissionCatalog = Depends(get_catalog),
):
    signal = ActivitySignal(
        activity=body.activity,
        signal_id=body.signal_id,
        amount=body.amount,
    )
    if body.mission_id:
        views = [
            progress_service.record_activity(engine, catalog, user.user_id, body.mission_id, signal)
        ]
    else:
        views = progress_service.track_activity(engine, catalog, user.user_id, signal)

    return {
        "progress": [{"mission_id": view.mission_id, **view.to_dict()} for view in views],
    }
