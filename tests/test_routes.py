"""
Tests for the HTTP API running against an in-memory database.
"""

import os
import re
from datetime import UTC, datetime, timedelta
from functools import partial

import pytest
from fastapi.testclient import TestClient

from iron_log.db import repo
from iron_log.db.seed import seed_database
from iron_log.server.main import app

PASSWORD = os.environ["WORKOUT_PASSWORD"]


@pytest.fixture
def client():
    repo._engine = None
    repo._session = None
    with TestClient(app) as c:
        c.portal.call(seed_database)
        yield c


@pytest.fixture
def authed(client):
    resp = client.post("/api/v1/login", json={"password": PASSWORD})
    assert resp.status_code == 200
    return client


def _first_exercise(client, index=0):
    workouts = client.get("/api/v1/workouts").json()
    workout = workouts[index]
    return workout["id"], workout["exercises"][0]


def test_root_and_healthz(client):
    assert client.get("/").json()["ok"] is True
    data = client.get("/healthz").json()
    assert data["status"] in {"healthy", "degraded"}
    assert "system" in data


def test_login_rejects_wrong_password(client):
    resp = client.post("/api/v1/login", json={"password": "nope"})
    assert resp.status_code == 401
    assert client.get("/api/v1/me").status_code == 401


def test_login_logout_cycle(client):
    resp = client.post("/api/v1/login", json={"password": PASSWORD})
    assert resp.json()["success"] is True
    me = client.get("/api/v1/me").json()
    assert me["user"]["email"] == repo.SETTINGS.OWNER_EMAIL

    client.post("/api/v1/logout")
    assert client.get("/api/v1/me").status_code == 401


def test_protected_routes_require_session(client):
    assert client.get("/api/v1/cycle").status_code == 401
    assert client.get("/api/v1/workouts/today").status_code == 401
    assert client.get("/api/v1/export/csv").status_code == 401


def test_list_workouts(client):
    workouts = client.get("/api/v1/workouts").json()
    assert [w["dayOfWeek"] for w in workouts] == [1, 2, 4, 5]
    assert workouts[0]["exercises"][0]["name"] == "Flat BB press"


def test_get_workout_not_found(client):
    assert client.get("/api/v1/workouts/999").status_code == 404


def test_today_workout(authed):
    data = authed.get("/api/v1/workouts/today").json()
    assert data["success"] is True
    assert data["workout"]["dayOfWeek"] in {1, 2, 4, 5}
    assert all(p["completedSets"] == 0 for p in data["progress"])


def test_log_set_and_today_logs(authed):
    workout_id, exercise = _first_exercise(authed)
    resp = authed.post(
        "/api/v1/workouts/log",
        json={
            "workout_id": workout_id,
            "exercise_id": exercise["id"],
            "set_number": 1,
            "reps": 8,
            "weight": 80,
        },
    )
    assert resp.status_code == 200
    assert resp.json()["log"]["exerciseName"] == exercise["name"]

    logs = authed.get(f"/api/v1/workouts/{workout_id}/today-logs").json()["logs"]
    assert len(logs) == 1

    last = authed.get(f"/api/v1/exercises/{exercise['id']}/last-log").json()
    assert last["lastLog"] == {"reps": 8, "weight": 80.0}


def test_log_set_validation(authed):
    workout_id, exercise = _first_exercise(authed)
    body = {
        "workout_id": workout_id,
        "exercise_id": exercise["id"],
        "set_number": 1,
        "reps": 0,
        "weight": 80,
    }
    assert authed.post("/api/v1/workouts/log", json=body).status_code == 422

    body.update(reps=8, grip="wide")  # Flat BB press has no grip options
    resp = authed.post("/api/v1/workouts/log", json=body)
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    body.update(grip=None, exercise_id=9999)
    assert authed.post("/api/v1/workouts/log", json=body).status_code == 404


def test_last_grip_for_grip_exercise(authed):
    workouts = authed.get("/api/v1/workouts").json()
    cable_row = next(e for e in workouts[0]["exercises"] if e["name"] == "Cable row")
    data = authed.get(f"/api/v1/exercises/{cable_row['id']}/last-grip").json()
    assert data["lastGrip"] is None
    assert data["defaultGrip"] == "narrow"
    assert data["options"] == ["narrow", "wide", "neutral"]


def test_suggestion_from_previous_session(authed):
    workout_id, exercise = _first_exercise(authed)
    earlier = (datetime.now(UTC) - timedelta(days=2)).replace(hour=12, minute=0)
    for n in (1, 2, 3):
        authed.portal.call(
            partial(
                repo.log_set,
                workout_id,
                exercise["id"],
                n,
                exercise["targetRepsMax"],
                80,
                logged_at=earlier + timedelta(minutes=n),
            )
        )

    data = authed.get(f"/api/v1/exercises/{exercise['id']}/suggestion").json()
    assert data["success"] is True
    assert data["suggestion"]["should_increase_weight"] is True
    assert data["suggestion"]["suggested_weight"] == 81.25
    assert data["suggestion"]["suggested_reps"] == exercise["targetRepsMin"]

    sets = authed.get(f"/api/v1/exercises/{exercise['id']}/last-session").json()["sets"]
    assert [s["setNumber"] for s in sets] == [3, 2, 1]


def test_suggestion_without_history(authed):
    _, exercise = _first_exercise(authed)
    data = authed.get(f"/api/v1/exercises/{exercise['id']}/suggestion").json()
    assert data["suggestion"] is None
    assert data["defaultWeight"] == exercise["defaultWeight"]


def test_cycle_start_and_preferences(authed):
    assert authed.get("/api/v1/cycle").json()["cycleInfo"] is None

    resp = authed.post("/api/v1/cycle/start", json={"hard_weeks": 4, "deload_weeks": 1})
    assert resp.status_code == 200
    info = authed.get("/api/v1/cycle").json()["cycleInfo"]
    assert info["week_index"] == 1
    assert info["total_weeks"] == 5
    assert info["is_deload_week"] is False

    assert authed.post("/api/v1/cycle/start", json={"hard_weeks": 0, "deload_weeks": 1}).status_code == 422

    prefs = authed.patch("/api/v1/preferences", json={"hard_weeks": 8}).json()["preferences"]
    assert prefs["hard_weeks"] == 8
    assert prefs["cycle_hard_weeks"] == 4
    assert authed.get("/api/v1/preferences").json()["hard_weeks"] == 8


def test_swaps_and_permanent_swap(authed):
    _, exercise = _first_exercise(authed)
    items = authed.get(f"/api/v1/exercises/{exercise['id']}/swaps").json()["items"]
    assert items[0] == {"name": "DB bench press", "defaultWeight": 30}

    resp = authed.post(
        f"/api/v1/exercises/{exercise['id']}/swap",
        json={"name": "DB bench press", "default_weight": 30},
    )
    assert resp.json()["exercise"]["name"] == "DB bench press"


def test_history_edit_and_delete(authed):
    workout_id, exercise = _first_exercise(authed)
    log = authed.post(
        "/api/v1/workouts/log",
        json={
            "workout_id": workout_id,
            "exercise_id": exercise["id"],
            "set_number": 1,
            "reps": 6,
            "weight": 80,
        },
    ).json()["log"]

    history = authed.get(f"/api/v1/history/{workout_id}").json()["history"]
    assert len(history) == 1
    assert history[0]["exercises"][0]["sets"][0]["reps"] == 6

    updated = authed.patch(f"/api/v1/history/sets/{log['id']}", json={"reps": 7, "weight": 82.5})
    assert updated.json()["log"]["reps"] == 7

    points = authed.get(f"/api/v1/history/exercise/{exercise['id']}").json()["history"]
    assert points[0]["weight"] == 82.5

    assert authed.delete(f"/api/v1/history/sets/{log['id']}").json()["success"] is True
    missing = authed.delete(f"/api/v1/history/sets/{log['id']}")
    assert missing.status_code == 404
    assert missing.json()["success"] is False

    assert authed.get(f"/api/v1/history/{workout_id}?limit=0").status_code == 422


def test_manage_exercises(authed):
    workout_id, _ = _first_exercise(authed)
    body = {
        "name": "Face pulls",
        "order_index": 20,
        "target_sets": 2,
        "target_reps_min": 12,
        "target_reps_max": 15,
        "default_weight": 25,
    }
    created = authed.post(f"/api/v1/manage/workouts/{workout_id}/exercises", json=body).json()
    exercise_id = created["exercise"]["id"]

    patched = authed.patch(f"/api/v1/manage/exercises/{exercise_id}", json={"target_sets": 3})
    assert patched.json()["exercise"]["targetSets"] == 3

    bad = authed.patch(f"/api/v1/manage/exercises/{exercise_id}", json={"target_reps_min": 20})
    assert bad.status_code == 400

    invalid = dict(body, target_reps_min=16)
    resp = authed.post(f"/api/v1/manage/workouts/{workout_id}/exercises", json=invalid)
    assert resp.status_code == 422

    assert authed.delete(f"/api/v1/manage/exercises/{exercise_id}").json()["success"] is True
    workout = authed.get(f"/api/v1/workouts/{workout_id}").json()["workout"]
    assert all(e["id"] != exercise_id for e in workout["exercises"])


def test_catalog(client):
    data = client.get("/api/v1/catalog").json()
    assert data["ok"] is True
    assert "Chest" in data["items"]

    search = client.get("/api/v1/catalog/search", params={"q": "squat", "limit": 3}).json()
    assert search["total"] == 3
    assert all("squat" in item["name"].lower() for item in search["items"])


def test_export_csv_download(authed):
    resp = authed.get("/api/v1/export/csv")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=\"workout-export-" in resp.headers["content-disposition"]
    assert resp.text == "Workout Name,Exercise Name,Date,Time,Set Number,Reps,Weight"


def test_email_export_not_configured(authed, monkeypatch):
    monkeypatch.setattr(repo.SETTINGS, "RESEND_API_KEY", None)
    monkeypatch.setattr(repo.SETTINGS, "FF_EMAIL_EXPORT", True)
    assert authed.post("/api/v1/export/email/all").status_code == 500


def test_email_export_disabled(authed, monkeypatch):
    monkeypatch.setattr(repo.SETTINGS, "FF_EMAIL_EXPORT", False)
    assert authed.post("/api/v1/export/email/weekly").status_code == 503


def test_add_exercise_to_taken_slot_is_rejected(authed):
    workout_id, first = _first_exercise(authed)
    body = {
        "name": "Face pulls",
        "order_index": first["orderIndex"],
        "target_sets": 2,
        "target_reps_min": 12,
        "target_reps_max": 15,
        "default_weight": 25,
    }
    resp = authed.post(f"/api/v1/manage/workouts/{workout_id}/exercises", json=body)
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    del body["order_index"]
    created = authed.post(f"/api/v1/manage/workouts/{workout_id}/exercises", json=body).json()
    workout = authed.get(f"/api/v1/workouts/{workout_id}").json()["workout"]
    slots = [e["orderIndex"] for e in workout["exercises"]]
    assert created["exercise"]["orderIndex"] == max(slots)
    assert len(slots) == len(set(slots))


def test_moving_exercise_onto_taken_slot_is_rejected(authed):
    workout_id, first = _first_exercise(authed)
    exercises = authed.get(f"/api/v1/workouts/{workout_id}").json()["workout"]["exercises"]
    second = exercises[1]
    resp = authed.patch(
        f"/api/v1/manage/exercises/{second['id']}", json={"order_index": first["orderIndex"]}
    )
    assert resp.status_code == 400


def test_not_found_bodies_are_uniform(authed):
    for path in ("/api/v1/workouts/999", "/api/v1/exercises/999/swaps"):
        resp = authed.get(path)
        assert resp.status_code == 404
        assert resp.json()["success"] is False


def test_today_workout_reports_elapsed_time(authed):
    workout = authed.get("/api/v1/workouts/today").json()["workout"]
    assert authed.get("/api/v1/workouts/today").json()["elapsed"] is None
    exercise = workout["exercises"][0]
    authed.post(
        "/api/v1/workouts/log",
        json={
            "workout_id": workout["id"],
            "exercise_id": exercise["id"],
            "set_number": 1,
            "reps": 8,
            "weight": 80,
        },
    )
    data = authed.get("/api/v1/workouts/today").json()
    assert re.fullmatch(r"\d+:\d\d", data["elapsed"])
    progress = {p["exerciseId"]: p for p in data["progress"]}
    assert progress[exercise["id"]]["completedSets"] == 1
