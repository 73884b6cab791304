"""CSV rendering of logged sets."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

HEADERS = ["Workout Name", "Exercise Name", "Date", "Time", "Set Number", "Reps", "Weight"]


@dataclass(frozen=True)
class LogExportRow:
    workout_name: str
    exercise_name: str
    logged_at: datetime
    set_number: int
    reps: int
    weight: float


def _fmt_weight(weight: float) -> str:
    # 80.0 -> "80", 22.5 -> "22.5"; never drops digits
    weight = float(weight)
    return str(int(weight)) if weight.is_integer() else repr(weight)


def generate_workout_csv(logs: Sequence[LogExportRow]) -> str:
    """Render logs as CSV; fields are quoted only when they need it."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(HEADERS)
    for log in logs:
        writer.writerow(
            [
                log.workout_name,
                log.exercise_name,
                log.logged_at.strftime("%Y-%m-%d"),
                log.logged_at.strftime("%H:%M:%S"),
                log.set_number,
                log.reps,
                _fmt_weight(log.weight),
            ]
        )
    return buf.getvalue().rstrip("\n")


def export_stats(logs: Sequence[LogExportRow]) -> dict[str, Any]:
    """Summary figures included in export emails and responses."""
    if not logs:
        return {"totalSets": 0, "totalReps": 0, "uniqueWorkouts": 0, "dateRange": None}
    first = min(log.logged_at for log in logs)
    last = max(log.logged_at for log in logs)
    return {
        "totalSets": len(logs),
        "totalReps": sum(log.reps for log in logs),
        "uniqueWorkouts": len({log.workout_name for log in logs}),
        "dateRange": f"{first:%Y-%m-%d} to {last:%Y-%m-%d}",
    }
