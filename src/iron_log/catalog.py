"""
Static exercise catalog: library entries, swap alternatives and grip options.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

GripType = Literal["standard", "wide", "narrow", "neutral"]


@dataclass(frozen=True)
class ExerciseDefinition:
    name: str
    muscle_group: str
    default_weight: float


@dataclass(frozen=True)
class ExerciseAlternative:
    name: str
    default_weight: float


@dataclass(frozen=True)
class GripConfig:
    options: tuple[GripType, ...]
    default: GripType


def _lib(group: str, *items: tuple[str, float]) -> list[ExerciseDefinition]:
    return [ExerciseDefinition(name, group, weight) for name, weight in items]


EXERCISE_LIBRARY: list[ExerciseDefinition] = [
    *_lib(
        "Chest",
        ("Flat BB press", 80),
        ("Incline BB press", 50),
        ("Incline DB press", 26),
        ("DB bench press", 30),
        ("Chest press machine", 60),
        ("Pec fly", 73),
        ("Cable flyes", 15),
        ("Dips", 0),
        ("Assisted dips", 0),
    ),
    *_lib(
        "Back",
        ("Cable row", 81),
        ("BB row", 70),
        ("Seated machine row", 60),
        ("Single-arm DB row", 30),
        ("T-bar row", 40),
        ("Lat pulldown", 50),
        ("Machine lat pulldown", 52),
        ("Assisted chin-ups", 20),
        ("Cable pulldown", 50),
        ("Neutral grip pulldown", 50),
        ("Pull-ups", 0),
        ("Chin-ups", 0),
    ),
    *_lib(
        "Shoulders",
        ("Machine lat raises", 10),
        ("DB lat raises", 10),
        ("Cable lat raises", 10),
        ("Rear delt flyes", 12),
        ("Overhead press", 40),
        ("DB shoulder press", 20),
        ("Arnold press", 16),
        ("Face pulls", 25),
    ),
    *_lib(
        "Biceps",
        ("DB curl", 16),
        ("BB curl", 22.5),
        ("Cable curl", 25),
        ("Hammer curl", 12),
        ("Preacher curl", 20),
        ("Incline DB curl", 10),
        ("Concentration curl", 12),
    ),
    *_lib(
        "Triceps",
        ("Overhead triceps extension", 34),
        ("Triceps overhead extension", 40),
        ("Triceps pressdown", 50),
        ("Triceps extension", 41),
        ("Skull crushers", 25),
        ("Close-grip bench press", 60),
    ),
    *_lib(
        "Quads",
        ("Front squat", 40),
        ("Back squat", 110),
        ("Leg press", 255),
        ("Hack squat", 100),
        ("Goblet squat", 30),
        ("Smith machine squat", 80),
        ("Leg extensions", 50),
        ("Sissy squat", 0),
        ("Walking lunges", 20),
        ("Bulgarian split squat", 20),
    ),
    *_lib(
        "Hamstrings",
        ("RDL", 90),
        ("Deadlift", 140),
        ("Stiff-leg deadlift", 80),
        ("Good mornings", 40),
        ("Hip thrust", 100),
        ("Lying curls", 50),
        ("Seated curls", 55),
        ("Standing curls", 30),
        ("Nordic curls", 0),
    ),
    *_lib(
        "Calves",
        ("Calf raises", 60),
        ("Seated calf raises", 60),
        ("Donkey calf raises", 80),
        ("Smith machine calf raises", 80),
    ),
    *_lib(
        "Core",
        ("Abs", 80),
        ("Plank", 0),
        ("Cable crunches", 40),
        ("Hanging leg raises", 0),
        ("Ab wheel rollout", 0),
    ),
]

_BY_NAME = {e.name.lower(): e for e in EXERCISE_LIBRARY}


def _alts(*names: str) -> list[ExerciseAlternative]:
    return [ExerciseAlternative(n, _BY_NAME[n.lower()].default_weight) for n in names]


# Alternatives grouped by movement pattern; default weights come from the library.
SWAP_MAP: dict[str, list[ExerciseAlternative]] = {
    "Flat BB press": _alts("DB bench press", "Chest press machine", "Dips", "Incline DB press"),
    "Incline DB press": _alts("Incline BB press", "Flat BB press", "Pec fly", "Dips", "Assisted dips"),
    "Pec fly": _alts("Incline DB press", "Cable flyes", "Flat BB press"),
    "Cable row": _alts("BB row", "Seated machine row", "Single-arm DB row", "T-bar row"),
    "BB row": _alts("Cable row", "Seated machine row", "Single-arm DB row", "T-bar row"),
    "Lat pulldown": _alts("Assisted chin-ups", "Cable pulldown", "Neutral grip pulldown"),
    "Machine lat raises": _alts("DB lat raises", "Cable lat raises", "Rear delt flyes"),
    "DB curl": _alts("BB curl", "Cable curl", "Hammer curl", "Preacher curl"),
    "BB curl": _alts("DB curl", "Cable curl", "Hammer curl", "Preacher curl"),
    "Overhead triceps extension": _alts(
        "Triceps pressdown", "Triceps extension", "Skull crushers", "Dips"
    ),
    "Triceps overhead extension": _alts(
        "Triceps pressdown", "Triceps extension", "Skull crushers", "Dips"
    ),
    "Triceps extension": _alts(
        "Overhead triceps extension", "Triceps overhead extension", "Triceps pressdown", "Dips"
    ),
    "Front squat": _alts("Back squat", "Leg press", "Hack squat", "Goblet squat"),
    "Back squat": _alts("Front squat", "Leg press", "Hack squat", "Goblet squat"),
    "Leg press": _alts("Back squat", "Front squat", "Hack squat", "Smith machine squat"),
    "Leg extensions": _alts("Sissy squat", "Walking lunges", "Bulgarian split squat"),
    "RDL": _alts("Deadlift", "Stiff-leg deadlift", "Good mornings", "Hip thrust"),
    "Deadlift": _alts("RDL", "Stiff-leg deadlift", "Good mornings", "Hip thrust"),
    "Lying curls": _alts("Seated curls", "Standing curls", "Nordic curls"),
    "Calf raises": _alts("Seated calf raises", "Donkey calf raises", "Smith machine calf raises"),
}

GRIP_MAP: dict[str, GripConfig] = {
    "Lat pulldown": GripConfig(("standard", "wide", "narrow", "neutral"), "standard"),
    "Machine lat pulldown": GripConfig(("standard", "wide", "narrow", "neutral"), "standard"),
    "Cable row": GripConfig(("narrow", "wide", "neutral"), "narrow"),
    "BB curl": GripConfig(("standard", "wide", "narrow"), "standard"),
}


def get_exercise_by_name(name: str) -> ExerciseDefinition | None:
    return _BY_NAME.get(name.lower())


def search_exercises(query: str) -> list[ExerciseDefinition]:
    """Case-insensitive substring match on exercise names."""
    q = query.lower()
    return [e for e in EXERCISE_LIBRARY if q in e.name.lower()]


def exercises_by_muscle_group() -> dict[str, list[ExerciseDefinition]]:
    grouped: dict[str, list[ExerciseDefinition]] = {}
    for e in EXERCISE_LIBRARY:
        grouped.setdefault(e.muscle_group, []).append(e)
    return grouped


def get_swap_suggestions(exercise_name: str) -> list[ExerciseAlternative]:
    return list(SWAP_MAP.get(exercise_name, []))


def get_grip_config(exercise_name: str) -> GripConfig | None:
    return GRIP_MAP.get(exercise_name)


def get_default_grip(exercise_name: str) -> GripType | None:
    config = GRIP_MAP.get(exercise_name)
    return config.default if config else None


def has_grip_options(exercise_name: str) -> bool:
    return exercise_name in GRIP_MAP


def is_valid_grip(exercise_name: str, grip: str) -> bool:
    config = GRIP_MAP.get(exercise_name)
    return config is not None and grip in config.options
