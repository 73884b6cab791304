from datetime import date, datetime
from types import SimpleNamespace

from iron_log.schedule import (
    build_exercise_progress,
    format_elapsed,
    session_duration_minutes,
    workout_day_for,
)


def test_workout_days_map_to_themselves():
    assert workout_day_for(date(2024, 1, 1)) == 1  # Monday
    assert workout_day_for(date(2024, 1, 2)) == 2
    assert workout_day_for(date(2024, 1, 4)) == 4
    assert workout_day_for(datetime(2024, 1, 5, 7, 0)) == 5


def test_rest_days_fall_back_to_monday():
    assert workout_day_for(date(2024, 1, 3)) == 1  # Wednesday
    assert workout_day_for(date(2024, 1, 6)) == 1
    assert workout_day_for(date(2024, 1, 7)) == 1


def test_build_exercise_progress_counts_sets():
    exercises = [SimpleNamespace(id=1, target_sets=3), SimpleNamespace(id=2, target_sets=2)]
    logs = [
        SimpleNamespace(exercise_id=1, set_number=1),
        SimpleNamespace(exercise_id=1, set_number=2),
        SimpleNamespace(exercise_id=2, set_number=1),
        SimpleNamespace(exercise_id=2, set_number=2),
        SimpleNamespace(exercise_id=99, set_number=1),
    ]
    progress = build_exercise_progress(exercises, logs)
    assert set(progress) == {1, 2}
    assert progress[1].completed_sets == 2
    assert progress[1].target_sets_completed is False
    assert progress[1].last_set_number == 2
    assert progress[2].target_sets_completed is True


def test_build_exercise_progress_without_logs():
    progress = build_exercise_progress([SimpleNamespace(id=5, target_sets=3)], [])
    assert progress[5].completed_sets == 0
    assert progress[5].last_set_number == 0


def test_format_elapsed():
    assert format_elapsed(0) == "0:00"
    assert format_elapsed(65) == "1:05"
    assert format_elapsed(3723) == "1:02:03"
    assert format_elapsed(-5) == "0:00"


def test_session_duration_minutes():
    assert session_duration_minutes([]) is None
    stamps = [datetime(2024, 1, 1, 10, 0), datetime(2024, 1, 1, 10, 47, 40)]
    assert session_duration_minutes(stamps) == 48
