"""
Default four-day upper/lower program.
"""

from __future__ import annotations

import logging

from sqlalchemy import select

from .models import Exercise, Workout
from .repo import get_session

logger = logging.getLogger(__name__)

# (name, sets, reps_min, reps_max, weight)
_UPPER_1 = [
    ("Flat BB press", 3, 6, 8, 80),
    ("Cable row", 3, 6, 8, 81),
    ("Incline DB press", 3, 10, 12, 24),
    ("Assisted chin-ups", 3, 10, 12, 20.4),
    ("Machine lat raises", 3, 10, 12, 50),
    ("DB curl", 2, 10, 12, 12),
    ("Overhead triceps extension", 2, 10, 12, 34),
]
_LOWER_1 = [
    ("Back squat", 3, 6, 8, 110),
    ("RDL", 3, 6, 8, 90),
    ("Leg extensions", 3, 10, 12, 68),
    ("Lying curls", 3, 10, 12, 63),
    ("Calf raises", 3, 10, 15, 106),
    ("Abs", 3, 10, 15, 81),
]
_UPPER_2 = [
    ("Flat BB press", 3, 6, 8, 80),
    ("BB row", 3, 6, 8, 70),
    ("Incline DB press", 3, 10, 12, 24),
    ("Machine lat pulldown", 3, 10, 12, 52),
    ("Machine lat raises", 3, 10, 12, 50),
    ("BB curl", 2, 10, 12, 22.5),
    ("Triceps pressdown", 2, 10, 12, 50),
]
_LOWER_2 = [
    ("Leg press", 3, 6, 8, 255),
    ("RDL", 3, 6, 8, 90),
    ("Leg extensions", 3, 10, 12, 68),
    ("Lying curls", 3, 10, 12, 63),
    ("Calf raises", 3, 10, 15, 108),
    ("Abs", 3, 10, 15, 86),
]

PROGRAM: list[tuple[str, int, list[tuple[str, int, int, int, float]]]] = [
    ("Upper 1", 1, _UPPER_1),
    ("Lower 1", 2, _LOWER_1),
    ("Upper 2", 4, _UPPER_2),
    ("Lower 2", 5, _LOWER_2),
]


async def seed_database() -> int:
    """
    Insert the default program. Existing workouts are left untouched.

    Returns the number of workouts created.
    """
    created = 0
    sessmaker = get_session()
    async with sessmaker() as s:
        for name, day, exercises in PROGRAM:
            res = await s.execute(
                select(Workout).where(Workout.name == name, Workout.day_of_week == day)
            )
            if res.scalar_one_or_none() is not None:
                continue
            workout = Workout(name=name, day_of_week=day)
            workout.exercises = [
                Exercise(
                    order_index=i,
                    name=ex_name,
                    target_sets=sets,
                    target_reps_min=reps_min,
                    target_reps_max=reps_max,
                    default_weight=weight,
                )
                for i, (ex_name, sets, reps_min, reps_max, weight) in enumerate(exercises, start=1)
            ]
            s.add(workout)
            created += 1
            logger.info("Seeded %s with %s exercises", name, len(exercises))
        await s.commit()
    return created
