"""
Training cycle and preference API routes for IronLog.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...auth import require_user
from ...db import repo
from ...services import WorkoutService
from ...services.workout_service import cycle_status_dict, preferences_dict

router = APIRouter()
workout_service = WorkoutService()


class StartCycleRequest(BaseModel):
    hard_weeks: int = Field(..., ge=1, le=52)
    deload_weeks: int = Field(..., ge=1, le=52)


class PreferencesUpdate(BaseModel):
    hard_weeks: int | None = Field(None, ge=1, le=52)
    deload_weeks: int | None = Field(None, ge=1, le=52)


@router.get("/cycle")
async def cycle_status(user_id: int = Depends(require_user)) -> dict[str, Any]:
    """Where the current week falls in the active cycle, if any."""
    user, status = await workout_service.get_cycle_status(user_id)
    return {
        "success": True,
        "preferences": preferences_dict(user),
        "cycleInfo": cycle_status_dict(status),
    }


@router.post("/cycle/start")
async def start_cycle(req: StartCycleRequest, user_id: int = Depends(require_user)) -> dict[str, Any]:
    user = await workout_service.start_new_cycle(user_id, req.hard_weeks, req.deload_weeks)
    return {"success": True, "preferences": preferences_dict(user)}


@router.get("/preferences")
async def get_preferences(user_id: int = Depends(require_user)) -> dict[str, Any]:
    user, _ = await workout_service.get_cycle_status(user_id)
    return preferences_dict(user)


@router.patch("/preferences")
async def update_preferences(
    req: PreferencesUpdate, user_id: int = Depends(require_user)
) -> dict[str, Any]:
    user = await repo.update_user_preferences(
        user_id, hard_weeks=req.hard_weeks, deload_weeks=req.deload_weeks
    )
    logging.info("Updated preferences for user %s", user_id)
    return {"success": True, "preferences": preferences_dict(user)}
