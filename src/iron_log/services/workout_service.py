"""
Service tying stored preferences and logs to the cycle and progression logic.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import UTC, date, datetime, timedelta
from typing import Any

from ..cycle import CycleStatus, compute_cycle_week, new_cycle_start, resolve_cycle_config
from ..db import repo
from ..db.models import Exercise, User
from ..errors import NotFoundError
from ..progression import ExerciseTarget, select_last_session, suggest_next_session

logger = logging.getLogger(__name__)


def cycle_status_dict(status: CycleStatus | None) -> dict[str, Any] | None:
    if status is None:
        return None
    data = asdict(status)
    data["cycle_start_date"] = status.cycle_start_date.isoformat()
    return data


def preferences_dict(user: User) -> dict[str, Any]:
    return {
        "hard_weeks": user.hard_weeks,
        "deload_weeks": user.deload_weeks,
        "cycle_start_date": (
            user.cycle_start_date.isoformat() if user.cycle_start_date else None
        ),
        "cycle_hard_weeks": user.cycle_hard_weeks,
        "cycle_deload_weeks": user.cycle_deload_weeks,
    }


class WorkoutService:
    """Service for handling workout-related operations."""

    async def _require_preferences(self, user_id: int) -> User:
        user = await repo.get_user_preferences(user_id)
        if user is None:
            raise NotFoundError("User preferences not found")
        return user

    async def get_cycle_status(
        self, user_id: int, now: datetime | None = None
    ) -> tuple[User, CycleStatus | None]:
        user = await self._require_preferences(user_id)
        status = compute_cycle_week(resolve_cycle_config(user), now or datetime.now(UTC))
        return user, status

    async def start_new_cycle(
        self,
        user_id: int,
        hard_weeks: int,
        deload_weeks: int,
        now: datetime | None = None,
    ) -> User:
        """Begin a cycle anchored at the Monday of the current week."""
        start = new_cycle_start(now or datetime.now(UTC))
        user = await repo.upsert_user_cycle_overrides(
            user_id,
            cycle_start_date=start,
            cycle_hard_weeks=hard_weeks,
            cycle_deload_weeks=deload_weeks,
        )
        logger.info(
            "User %s started cycle on %s (%s hard / %s deload)",
            user_id,
            start,
            hard_weeks,
            deload_weeks,
        )
        return user

    async def get_exercise_suggestion(
        self,
        user_id: int,
        exercise_id: int,
        grip: str | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Next-session suggestion for an exercise.

        ``suggestion`` is None when the exercise has no history before today;
        the client then falls back to ``defaultWeight``. ``averageReps`` covers
        the past seven days, today included.
        """
        now = now or datetime.now(UTC)
        _, status = await self.get_cycle_status(user_id, now)
        is_deload = status.is_deload_week if status else False

        exercise = await repo.get_exercise(exercise_id)
        if exercise is None:
            raise NotFoundError("Exercise not found")
        target = ExerciseTarget(
            target_reps_min=exercise.target_reps_min,
            target_reps_max=exercise.target_reps_max,
            default_weight=exercise.default_weight,
        )

        today = now.date()
        rows = await repo.get_recent_sets_before(exercise_id, today, grip=grip)
        last_session = select_last_session(rows, today)
        suggestion = suggest_next_session(target, last_session, is_deload)
        average_reps = await repo.get_exercise_average_reps_since(
            exercise_id, now - timedelta(days=7)
        )

        return {
            "suggestion": asdict(suggestion) if suggestion else None,
            "averageReps": round(average_reps, 2) if average_reps is not None else None,
            "midpoint": exercise.target_reps_max if suggestion else None,
            "defaultWeight": exercise.default_weight,
            "cycleInfo": cycle_status_dict(status),
        }

    async def get_last_session_sets(
        self, exercise_id: int, grip: str | None = None, today: date | None = None
    ) -> list[dict[str, Any]]:
        today = today or datetime.now(UTC).date()
        rows = await repo.get_recent_sets_before(exercise_id, today, grip=grip)
        return [
            {"setNumber": s.set_number, "reps": s.reps, "weight": s.weight}
            for s in select_last_session(rows, today)
        ]

    async def swap_exercise_permanently(
        self, exercise_id: int, name: str, default_weight: float
    ) -> Exercise:
        exercise = await repo.update_exercise(
            exercise_id, name=name, default_weight=default_weight
        )
        logger.info("Exercise %s permanently swapped to %s", exercise_id, name)
        return exercise
