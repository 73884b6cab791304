"""
Workout tracking API routes for IronLog.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ...auth import require_user
from ...catalog import get_grip_config, get_swap_suggestions, is_valid_grip
from ...db import repo
from ...errors import NotFoundError, ValidationError
from ...schedule import build_exercise_progress, format_elapsed, workout_day_for
from ...services import WorkoutService
from ..serializers import exercise_dict, log_dict, workout_dict

router = APIRouter()
workout_service = WorkoutService()


class SetLogRequest(BaseModel):
    workout_id: int = Field(..., gt=0)
    exercise_id: int = Field(..., gt=0)
    set_number: int = Field(..., gt=0)
    reps: int = Field(..., gt=0)
    weight: float = Field(..., ge=0)
    grip: str | None = None


class SwapRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    default_weight: float = Field(..., ge=0)


async def _exercise_or_404(exercise_id: int):
    exercise = await repo.get_exercise(exercise_id)
    if exercise is None:
        raise NotFoundError(f"Exercise with id {exercise_id} not found")
    return exercise


@router.get("/workouts")
async def list_workouts() -> list[dict[str, Any]]:
    """All workouts with their exercises, ordered by weekday."""
    workouts = await repo.get_workouts()
    return [workout_dict(w) for w in workouts]


@router.get("/workouts/today")
async def todays_workout(_: int = Depends(require_user)) -> dict[str, Any]:
    """Workout scheduled for today; rest days show Monday's workout."""
    now = datetime.now(UTC)
    day = workout_day_for(now)
    workout = await repo.get_workout_by_day(day)
    if workout is None:
        return {"success": True, "workout": None}
    logs = await repo.get_today_logs(workout.id, now.date())
    progress = build_exercise_progress(workout.exercises, logs)
    elapsed = None
    if logs:
        started = min(log.logged_at for log in logs)
        # SQLite hands back naive UTC
        if started.tzinfo is None:
            started = started.replace(tzinfo=UTC)
        elapsed = format_elapsed((now - started).total_seconds())
    return {
        "success": True,
        "workout": workout_dict(workout),
        "elapsed": elapsed,
        "progress": [
            {
                "exerciseId": p.exercise_id,
                "completedSets": p.completed_sets,
                "targetSetsCompleted": p.target_sets_completed,
                "lastSetNumber": p.last_set_number,
            }
            for p in progress.values()
        ],
    }


@router.get("/workouts/{workout_id}")
async def get_workout(workout_id: int) -> dict[str, Any]:
    workout = await repo.get_workout_with_exercises(workout_id)
    if workout is None:
        raise NotFoundError(f"Workout with id {workout_id} not found")
    return {"success": True, "workout": workout_dict(workout)}


@router.get("/workouts/{workout_id}/today-logs")
async def today_logs(workout_id: int, _: int = Depends(require_user)) -> dict[str, Any]:
    logs = await repo.get_today_logs(workout_id, datetime.now(UTC).date())
    return {"success": True, "logs": [log_dict(log) for log in logs]}


@router.post("/workouts/log")
async def log_set(req: SetLogRequest, _: int = Depends(require_user)) -> dict[str, Any]:
    """Log a single set."""
    if req.grip is not None:
        exercise = await _exercise_or_404(req.exercise_id)
        if not is_valid_grip(exercise.name, req.grip):
            raise ValidationError(f"Invalid grip for {exercise.name}")
    log = await repo.log_set(
        workout_id=req.workout_id,
        exercise_id=req.exercise_id,
        set_number=req.set_number,
        reps=req.reps,
        weight=req.weight,
        grip=req.grip,
    )
    logging.info(
        "Logged set %s of exercise %s: %s x %s", req.set_number, req.exercise_id, req.reps, req.weight
    )
    return {"success": True, "log": log_dict(log)}


@router.get("/exercises/{exercise_id}/last-log")
async def last_log(exercise_id: int, _: int = Depends(require_user)) -> dict[str, Any]:
    log = await repo.get_last_log_for_exercise(exercise_id)
    last = {"reps": log.reps, "weight": log.weight} if log else None
    return {"success": True, "lastLog": last}


@router.get("/exercises/{exercise_id}/last-grip")
async def last_grip(exercise_id: int, _: int = Depends(require_user)) -> dict[str, Any]:
    exercise = await _exercise_or_404(exercise_id)
    grip = await repo.get_last_grip_for_exercise(exercise_id)
    config = get_grip_config(exercise.name)
    return {
        "success": True,
        "lastGrip": grip,
        "options": list(config.options) if config else [],
        "defaultGrip": config.default if config else None,
    }


@router.get("/exercises/{exercise_id}/last-session")
async def last_session(
    exercise_id: int,
    grip: str | None = Query(None, description="Only sets logged with this grip"),
    _: int = Depends(require_user),
) -> dict[str, Any]:
    """Sets of the most recent session before today."""
    sets = await workout_service.get_last_session_sets(exercise_id, grip=grip)
    return {"success": True, "sets": sets}


@router.get("/exercises/{exercise_id}/suggestion")
async def suggestion(
    exercise_id: int,
    grip: str | None = Query(None, description="Only consider sets logged with this grip"),
    user_id: int = Depends(require_user),
) -> dict[str, Any]:
    """Weight and rep suggestion for the next session."""
    result = await workout_service.get_exercise_suggestion(user_id, exercise_id, grip=grip)
    return {"success": True, **result}


@router.get("/exercises/{exercise_id}/swaps")
async def swaps(exercise_id: int) -> dict[str, Any]:
    exercise = await _exercise_or_404(exercise_id)
    items = [
        {"name": a.name, "defaultWeight": a.default_weight}
        for a in get_swap_suggestions(exercise.name)
    ]
    return {"success": True, "items": items}


@router.post("/exercises/{exercise_id}/swap")
async def swap_permanently(
    exercise_id: int, req: SwapRequest, _: int = Depends(require_user)
) -> dict[str, Any]:
    """Replace the exercise in its workout slot for all future sessions."""
    exercise = await workout_service.swap_exercise_permanently(
        exercise_id, req.name, req.default_weight
    )
    return {"success": True, "exercise": exercise_dict(exercise)}
