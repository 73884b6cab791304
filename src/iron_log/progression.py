"""Progression logic for training loads."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

logger = logging.getLogger(__name__)

WEIGHT_INCREMENT = 1.25
DELOAD_FACTOR = 0.75


@dataclass(frozen=True)
class ExerciseTarget:
    target_reps_min: int
    target_reps_max: int
    default_weight: float


@dataclass(frozen=True)
class SessionSet:
    reps: int
    weight: float
    set_number: int | None = None


@dataclass(frozen=True)
class Suggestion:
    should_increase_weight: bool
    suggested_weight: float
    suggested_reps: int


class LoggedRow(Protocol):
    reps: int
    weight: float
    set_number: int
    logged_at: datetime


def round_weight(value: float) -> float:
    """Round to 2 decimals, halves away from zero (60.9375 -> 60.94)."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def all_sets_maxed_out(sets: Iterable[SessionSet], reps_max: int) -> bool:
    return all(s.reps >= reps_max for s in sets)


def suggest_next_session(
    target: ExerciseTarget,
    last_session_sets: Sequence[SessionSet],
    is_deload_week: bool,
) -> Suggestion | None:
    """
    Suggest weight and reps for the next session.

    ``last_session_sets`` holds the previous session's sets, most recently
    logged first; the first set's weight is the reference weight. Weight goes
    up only when every set reached ``target_reps_max``. Deload weeks take 25%
    off the weight that would otherwise be suggested.

    Returns None when there is no history.
    """
    if not last_session_sets:
        return None

    maxed = all_sets_maxed_out(last_session_sets, target.target_reps_max)
    last_weight = float(last_session_sets[0].weight)

    if maxed:
        weight = last_weight + WEIGHT_INCREMENT
        if is_deload_week:
            weight = round_weight(weight * DELOAD_FACTOR)
        suggestion = Suggestion(
            should_increase_weight=True,
            suggested_weight=weight,
            suggested_reps=target.target_reps_min,
        )
    else:
        weight = round_weight(last_weight * DELOAD_FACTOR) if is_deload_week else last_weight
        suggestion = Suggestion(
            should_increase_weight=False,
            suggested_weight=weight,
            suggested_reps=target.target_reps_max,
        )

    logger.debug(
        "Suggestion: last=%s sets=%s maxed=%s deload=%s -> %s",
        last_weight,
        len(last_session_sets),
        maxed,
        is_deload_week,
        suggestion,
    )
    return suggestion


def select_last_session(rows: Iterable[LoggedRow], today: date) -> list[SessionSet]:
    """
    Keep the sets of the most recent session strictly before ``today``.

    ``rows`` must already be ordered by ``logged_at`` descending; that order
    is preserved in the result.
    """
    session_day: date | None = None
    sets: list[SessionSet] = []
    for row in rows:
        day = row.logged_at.date()
        if day >= today:
            continue
        if session_day is None:
            session_day = day
        if day != session_day:
            break
        sets.append(SessionSet(reps=row.reps, weight=float(row.weight), set_number=row.set_number))
    return sets
