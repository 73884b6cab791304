"""
Workout history API routes for IronLog.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ...auth import require_user
from ...db import repo
from ..serializers import log_dict

router = APIRouter()


class SetUpdateRequest(BaseModel):
    reps: int = Field(..., gt=0)
    weight: float = Field(..., ge=0)


@router.get("/history/exercise/{exercise_id}")
async def exercise_history(exercise_id: int, _: int = Depends(require_user)) -> dict[str, Any]:
    """Every set of an exercise, oldest first, for charting."""
    points = await repo.get_exercise_history(exercise_id)
    return {"success": True, "history": points}


@router.get("/history/{workout_id}")
async def workout_history(
    workout_id: int,
    limit: int = Query(8, ge=1, le=100),
    _: int = Depends(require_user),
) -> dict[str, Any]:
    sessions = await repo.get_workout_history(workout_id, limit=limit)
    return {"success": True, "history": [s.as_dict() for s in sessions]}


@router.patch("/history/sets/{log_id}")
async def update_set(
    log_id: int, req: SetUpdateRequest, _: int = Depends(require_user)
) -> dict[str, Any]:
    log = await repo.update_workout_log(log_id, req.reps, req.weight)
    logging.info("Updated set %s", log_id)
    return {"success": True, "log": log_dict(log)}


@router.delete("/history/sets/{log_id}")
async def delete_set(log_id: int, _: int = Depends(require_user)) -> dict[str, Any]:
    await repo.delete_workout_log(log_id)
    logging.info("Deleted set %s", log_id)
    return {"success": True}
