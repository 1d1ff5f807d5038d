"""
pawprint.api.routes.admin — Admin endpoints (JWT‑protected)
============================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import Engine

from pawprint.api.deps import Identity, get_current_admin, get_engine
from pawprint.constants import MAX_AMOUNT
from pawprint.engine.errors import EntryNotFound
from pawprint.services import admin_service

router = APIRouter(prefix="/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ManualAward(BaseModel):
    user_id: str
    amount: int = Field(le=MAX_AMOUNT)
    reason: str = ""


# ---------------------------------------------------------------------------
# Challenge entries
# ---------------------------------------------------------------------------
@router.delete("/challenges/entries/{entry_id}")
def delete_entry(
    entry_id: str,
    reason: str | None = Query(None, max_length=500),
    admin: Identity = Depends(get_current_admin),
    engine: Engine = Depends(get_engine),
):
    deleted = admin_service.delete_entry(
        engine, entry_id, actor_id=admin.user_id, reason=reason,
    )
    if not deleted:
        raise EntryNotFound(f"Entry {entry_id!r} does not exist")
    return {"success": True}


# ---------------------------------------------------------------------------
# XP
# ---------------------------------------------------------------------------
@router.post("/xp")
def award_xp(
    body: ManualAward,
    admin: Identity = Depends(get_current_admin),
    engine: Engine = Depends(get_engine),
):
    total = admin_service.award_manual(
        engine,
        user_id=body.user_id,
        amount=body.amount,
        actor_id=admin.user_id,
        reason=body.reason,
    )
    return {"user_id": body.user_id, "total_xp": total}


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------
@router.get("/audit")
def get_audit_log(
    limit: int = Query(50, ge=1, le=200),
    admin: Identity = Depends(get_current_admin),
    engine: Engine = Depends(get_engine),
):
    return {"entries": admin_service.get_audit_log(engine, limit=limit)}
