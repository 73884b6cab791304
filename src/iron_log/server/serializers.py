"""JSON shapes for ORM rows returned by the API."""

from __future__ import annotations

from typing import Any

from ..db.models import Exercise, Workout, WorkoutLog


def exercise_dict(ex: Exercise) -> dict[str, Any]:
    return {
        "id": ex.id,
        "workoutId": ex.workout_id,
        "orderIndex": ex.order_index,
        "name": ex.name,
        "targetSets": ex.target_sets,
        "targetRepsMin": ex.target_reps_min,
        "targetRepsMax": ex.target_reps_max,
        "defaultWeight": ex.default_weight,
    }


def workout_dict(w: Workout, with_exercises: bool = True) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": w.id,
        "name": w.name,
        "dayOfWeek": w.day_of_week,
        "createdAt": w.created_at.isoformat() if w.created_at else None,
        "updatedAt": w.updated_at.isoformat() if w.updated_at else None,
    }
    if with_exercises:
        data["exercises"] = [exercise_dict(e) for e in w.exercises]
    return data


def log_dict(log: WorkoutLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "workoutId": log.workout_id,
        "exerciseId": log.exercise_id,
        "loggedAt": log.logged_at.isoformat(),
        "setNumber": log.set_number,
        "reps": log.reps,
        "weight": log.weight,
        "exerciseName": log.exercise_name,
        "grip": log.grip,
    }
