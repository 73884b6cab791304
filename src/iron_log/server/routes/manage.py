"""
Exercise management API routes for IronLog.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, model_validator

from ...auth import require_user
from ...db import repo
from ..serializers import exercise_dict

router = APIRouter()


class ExerciseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    order_index: int | None = Field(None, ge=0)
    target_sets: int = Field(..., gt=0)
    target_reps_min: int = Field(..., gt=0)
    target_reps_max: int = Field(..., gt=0)
    default_weight: float = Field(..., ge=0)

    @model_validator(mode="after")
    def check_rep_range(self) -> ExerciseCreate:
        if self.target_reps_min > self.target_reps_max:
            raise ValueError("target_reps_min must not exceed target_reps_max")
        return self


class ExerciseUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    order_index: int | None = Field(None, ge=0)
    target_sets: int | None = Field(None, gt=0)
    target_reps_min: int | None = Field(None, gt=0)
    target_reps_max: int | None = Field(None, gt=0)
    default_weight: float | None = Field(None, ge=0)


@router.post("/manage/workouts/{workout_id}/exercises")
async def add_exercise(
    workout_id: int, req: ExerciseCreate, _: int = Depends(require_user)
) -> dict[str, Any]:
    exercise = await repo.add_exercise(workout_id, **req.model_dump())
    logging.info("Added exercise %s to workout %s", exercise.id, workout_id)
    return {"success": True, "exercise": exercise_dict(exercise)}


@router.patch("/manage/exercises/{exercise_id}")
async def update_exercise(
    exercise_id: int, req: ExerciseUpdate, _: int = Depends(require_user)
) -> dict[str, Any]:
    exercise = await repo.update_exercise(exercise_id, **req.model_dump(exclude_none=True))
    return {"success": True, "exercise": exercise_dict(exercise)}


@router.delete("/manage/exercises/{exercise_id}")
async def delete_exercise(exercise_id: int, _: int = Depends(require_user)) -> dict[str, Any]:
    await repo.delete_exercise(exercise_id)
    logging.info("Deleted exercise %s", exercise_id)
    return {"success": True}
