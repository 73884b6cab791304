import base64
import json
from datetime import UTC, datetime

import httpx
import pytest

from iron_log.config import SETTINGS
from iron_log.db import repo
from iron_log.db.models import Workout
from iron_log.errors import ExportNotConfigured
from iron_log.services import ExportService

NOW = datetime(2024, 3, 12, 8, 0, tzinfo=UTC)


async def _log_sets(db):
    async with db() as s:
        w = Workout(name="Upper 1", day_of_week=1)
        s.add(w)
        await s.commit()
        workout_id = w.id
    ex = await repo.add_exercise(workout_id, "Flat BB press", 1, 3, 6, 8, 80)
    await repo.log_set(workout_id, ex.id, 1, 8, 80, logged_at=datetime(2024, 2, 1, 18, tzinfo=UTC))
    await repo.log_set(workout_id, ex.id, 1, 8, 81.25, logged_at=datetime(2024, 3, 11, 18, tzinfo=UTC))


@pytest.fixture
def resend(monkeypatch):
    monkeypatch.setattr(SETTINGS, "RESEND_API_KEY", "re_test_key_123456")
    monkeypatch.setattr(SETTINGS, "EXPORT_EMAIL", "me@example.com")
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client, requests


@pytest.mark.asyncio
async def test_build_csv_all(db):
    await _log_sets(db)
    filename, csv_text, stats = await ExportService().build_csv("all", NOW)
    assert filename == "workout-export-2024-03-12.csv"
    assert csv_text.count("\n") == 2
    assert stats["totalSets"] == 2


@pytest.mark.asyncio
async def test_build_csv_weekly_only_last_seven_days(db):
    await _log_sets(db)
    filename, csv_text, stats = await ExportService().build_csv("weekly", NOW)
    assert filename == "workout-weekly-2024-03-12.csv"
    assert stats["totalSets"] == 1
    assert "81.25" in csv_text


@pytest.mark.asyncio
async def test_email_requires_configuration(db, monkeypatch):
    monkeypatch.setattr(SETTINGS, "RESEND_API_KEY", None)
    with pytest.raises(ExportNotConfigured):
        await ExportService().send_email_export("all", NOW)


@pytest.mark.asyncio
async def test_email_skipped_without_data(db, resend):
    client, requests = resend
    result = await ExportService(client).send_email_export("all", NOW)
    assert result["message"] == "No workout data to export"
    assert requests == []


@pytest.mark.asyncio
async def test_email_posts_attachment(db, resend):
    client, requests = resend
    await _log_sets(db)

    result = await ExportService(client).send_email_export("full", NOW)

    assert result["message"] == "Export sent successfully"
    assert len(requests) == 1
    req = requests[0]
    assert str(req.url) == SETTINGS.RESEND_API_URL
    assert req.headers["Authorization"] == "Bearer re_test_key_123456"
    body = json.loads(req.content)
    assert body["to"] == ["me@example.com"]
    assert body["subject"] == "Monthly IRON Full Data Export - 2024-03-12"
    attachment = body["attachments"][0]
    assert attachment["filename"] == "workout-full-export-2024-03-12.csv"
    csv_text = base64.b64decode(attachment["content"]).decode("utf-8")
    assert csv_text.startswith("Workout Name,Exercise Name")
    await client.aclose()


@pytest.mark.asyncio
async def test_email_upstream_error(db, monkeypatch):
    monkeypatch.setattr(SETTINGS, "RESEND_API_KEY", "re_test_key_123456")
    monkeypatch.setattr(SETTINGS, "EXPORT_EMAIL", "me@example.com")
    await _log_sets(db)
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(422, json={}))
    )
    with pytest.raises(httpx.HTTPStatusError):
        await ExportService(client).send_email_export("all", NOW)
    await client.aclose()
