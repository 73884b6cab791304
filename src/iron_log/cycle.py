"""Training cycle math: hard weeks followed by deload weeks, repeating."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleConfig:
    """
    A repeating cycle anchored at ``cycle_start_date``.

    ``hard_weeks`` and ``deload_weeks`` must both be >= 1. Invalid counts are
    rejected where preferences are written; here they are undefined behaviour.
    """

    cycle_start_date: date | None
    hard_weeks: int
    deload_weeks: int

    @property
    def total_weeks(self) -> int:
        return self.hard_weeks + self.deload_weeks


@dataclass(frozen=True)
class CycleStatus:
    week_index: int
    total_weeks: int
    hard_weeks: int
    deload_weeks: int
    position_in_cycle: int
    is_deload_week: bool
    cycle_start_date: date


class CyclePreferences(Protocol):
    hard_weeks: int
    deload_weeks: int
    cycle_start_date: date | None
    cycle_hard_weeks: int | None
    cycle_deload_weeks: int | None


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def start_of_iso_week(value: date | datetime) -> date:
    """Return the Monday of the ISO week containing ``value``."""
    day = _as_date(value)
    return day - timedelta(days=day.weekday())


def new_cycle_start(now: date | datetime) -> date:
    """Start date stored when a new cycle begins: Monday of the current week."""
    return start_of_iso_week(now)


def resolve_cycle_config(prefs: CyclePreferences) -> CycleConfig:
    """Cycle overrides win over the user's default hard/deload week counts."""
    hard = prefs.cycle_hard_weeks if prefs.cycle_hard_weeks is not None else prefs.hard_weeks
    deload = (
        prefs.cycle_deload_weeks if prefs.cycle_deload_weeks is not None else prefs.deload_weeks
    )
    return CycleConfig(
        cycle_start_date=prefs.cycle_start_date, hard_weeks=hard, deload_weeks=deload
    )


def compute_cycle_week(config: CycleConfig, now: date | datetime) -> CycleStatus | None:
    """
    Place ``now`` within the repeating cycle.

    Returns None when no cycle has been started. Dates before the start give
    ``week_index <= 0`` while ``position_in_cycle`` still wraps into range.
    """
    if config.cycle_start_date is None:
        return None

    cycle_start = start_of_iso_week(config.cycle_start_date)
    week_start = start_of_iso_week(now)
    days_since_start = (week_start - cycle_start).days
    week_index = days_since_start // 7 + 1
    total_weeks = config.total_weeks
    # Python's % is non-negative for a positive divisor
    position = (week_index - 1) % total_weeks + 1
    is_deload = position > config.hard_weeks

    logger.debug(
        "Cycle week: start=%s now=%s week_index=%s position=%s/%s deload=%s",
        cycle_start,
        week_start,
        week_index,
        position,
        total_weeks,
        is_deload,
    )
    return CycleStatus(
        week_index=week_index,
        total_weeks=total_weeks,
        hard_weeks=config.hard_weeks,
        deload_weeks=config.deload_weeks,
        position_in_cycle=position,
        is_deload_week=is_deload,
        cycle_start_date=config.cycle_start_date,
    )
