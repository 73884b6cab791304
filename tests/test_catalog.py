from iron_log.catalog import (
    EXERCISE_LIBRARY,
    GRIP_MAP,
    SWAP_MAP,
    exercises_by_muscle_group,
    get_default_grip,
    get_exercise_by_name,
    get_grip_config,
    get_swap_suggestions,
    has_grip_options,
    is_valid_grip,
    search_exercises,
)


def test_library_names_are_unique():
    names = [e.name.lower() for e in EXERCISE_LIBRARY]
    assert len(names) == len(set(names))


def test_lookup_is_case_insensitive():
    ex = get_exercise_by_name("flat bb PRESS")
    assert ex is not None
    assert ex.name == "Flat BB press"
    assert ex.muscle_group == "Chest"
    assert get_exercise_by_name("Underwater basket weaving") is None


def test_search_matches_substrings():
    names = {e.name for e in search_exercises("curl")}
    assert {"DB curl", "BB curl", "Lying curls"} <= names
    assert search_exercises("zzz") == []


def test_grouping_covers_library():
    grouped = exercises_by_muscle_group()
    assert "Quads" in grouped
    assert sum(len(v) for v in grouped.values()) == len(EXERCISE_LIBRARY)


def test_swap_alternatives_use_library_weights():
    alts = get_swap_suggestions("Back squat")
    assert [a.name for a in alts] == ["Front squat", "Leg press", "Hack squat", "Goblet squat"]
    assert alts[1].default_weight == 255
    for source, options in SWAP_MAP.items():
        for alt in options:
            assert alt.name != source
            assert get_exercise_by_name(alt.name).default_weight == alt.default_weight


def test_swap_suggestions_unknown_exercise():
    assert get_swap_suggestions("Abs") == []


def test_swap_suggestions_returns_copy():
    get_swap_suggestions("RDL").clear()
    assert get_swap_suggestions("RDL")


def test_grip_options():
    assert has_grip_options("Cable row")
    assert not has_grip_options("Back squat")
    assert get_default_grip("Cable row") == "narrow"
    assert get_default_grip("Back squat") is None
    assert get_grip_config("BB curl").options == ("standard", "wide", "narrow")
    for config in GRIP_MAP.values():
        assert config.default in config.options


def test_is_valid_grip():
    assert is_valid_grip("Lat pulldown", "neutral")
    assert not is_valid_grip("BB curl", "neutral")
    assert not is_valid_grip("Back squat", "standard")
