import pytest

from iron_log.db import repo
from iron_log.db.seed import PROGRAM, seed_database


@pytest.mark.asyncio
async def test_seed_creates_program_once(db):
    assert await seed_database() == len(PROGRAM)
    assert await seed_database() == 0

    workouts = await repo.get_workouts()
    assert [(w.name, w.day_of_week) for w in workouts] == [
        ("Upper 1", 1),
        ("Lower 1", 2),
        ("Upper 2", 4),
        ("Lower 2", 5),
    ]
    upper = workouts[0]
    assert upper.exercises[0].name == "Flat BB press"
    assert [e.order_index for e in upper.exercises] == list(range(1, len(upper.exercises) + 1))
    for w in workouts:
        for e in w.exercises:
            assert e.target_reps_min <= e.target_reps_max
