"""Weekly schedule lookup and in-session progress helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol

# Monday, Tuesday, Thursday, Friday
WORKOUT_DAYS = (1, 2, 4, 5)


class ExerciseLike(Protocol):
    id: int
    target_sets: int


class LogLike(Protocol):
    exercise_id: int
    set_number: int


@dataclass(frozen=True)
class ExerciseProgress:
    exercise_id: int
    completed_sets: int = 0
    target_sets_completed: bool = False
    last_set_number: int = 0


def workout_day_for(day: date | datetime) -> int:
    """ISO weekday of the workout to show; rest days fall back to Monday's."""
    dow = day.isoweekday()
    return dow if dow in WORKOUT_DAYS else 1


def build_exercise_progress(
    exercises: Sequence[ExerciseLike], logs: Iterable[LogLike]
) -> dict[int, ExerciseProgress]:
    """Count logged sets per exercise against its target set count."""
    targets = {e.id: e.target_sets for e in exercises}
    progress = {e.id: ExerciseProgress(exercise_id=e.id) for e in exercises}
    for log in logs:
        current = progress.get(log.exercise_id)
        if current is None:
            continue
        completed = current.completed_sets + 1
        progress[log.exercise_id] = ExerciseProgress(
            exercise_id=log.exercise_id,
            completed_sets=completed,
            target_sets_completed=completed >= targets[log.exercise_id],
            last_set_number=max(current.last_set_number, log.set_number),
        )
    return progress


def format_elapsed(seconds: float) -> str:
    total = max(int(seconds), 0)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def session_duration_minutes(timestamps: Iterable[datetime]) -> int | None:
    """Minutes between the first and last set of a session."""
    stamps = list(timestamps)
    if not stamps:
        return None
    return round((max(stamps) - min(stamps)).total_seconds() / 60)
