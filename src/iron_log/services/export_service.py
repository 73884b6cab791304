"""
CSV export of logged sets, downloaded directly or emailed through Resend.
"""

from __future__ import annotations

import base64
import logging
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import httpx

from ..config import SETTINGS
from ..csv_export import LogExportRow, export_stats, generate_workout_csv
from ..db import repo
from ..errors import ExportNotConfigured

logger = logging.getLogger(__name__)

ExportKind = Literal["all", "weekly", "full"]

_SUBJECTS = {
    "all": "Weekly Workout Export",
    "weekly": "Weekly IRON Workout Summary",
    "full": "Monthly IRON Full Data Export",
}
_FILE_PREFIX = {"all": "workout-export", "weekly": "workout-weekly", "full": "workout-full-export"}


class ExportService:
    """Builds CSV exports and delivers them by email."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    async def load_logs(self, kind: ExportKind, now: datetime | None = None) -> list[LogExportRow]:
        if kind == "weekly":
            now = now or datetime.now(UTC)
            return await repo.get_logs_for_date_range(now - timedelta(days=7), now)
        return await repo.get_all_logs_for_export()

    async def build_csv(
        self, kind: ExportKind, now: datetime | None = None
    ) -> tuple[str, str, dict[str, Any]]:
        """Return ``(filename, csv_text, stats)``."""
        now = now or datetime.now(UTC)
        logs = await self.load_logs(kind, now)
        filename = f"{_FILE_PREFIX[kind]}-{now:%Y-%m-%d}.csv"
        return filename, generate_workout_csv(logs), export_stats(logs)

    async def send_email_export(
        self, kind: ExportKind, now: datetime | None = None
    ) -> dict[str, Any]:
        if not SETTINGS.RESEND_API_KEY:
            raise ExportNotConfigured("RESEND_API_KEY not configured")
        if not SETTINGS.EXPORT_EMAIL:
            raise ExportNotConfigured("EXPORT_EMAIL not configured")

        now = now or datetime.now(UTC)
        filename, csv_text, stats = await self.build_csv(kind, now)
        if stats["totalSets"] == 0:
            return {"message": "No workout data to export", "stats": stats}

        subject = f"{_SUBJECTS[kind]} - {now:%Y-%m-%d}"
        html = (
            "<p>Your workout data export is attached.</p><ul>"
            f"<li><strong>Total Sets:</strong> {stats['totalSets']}</li>"
            f"<li><strong>Total Reps:</strong> {stats['totalReps']}</li>"
            f"<li><strong>Date Range:</strong> {stats['dateRange']}</li></ul>"
        )
        payload = {
            "from": SETTINGS.EXPORT_FROM,
            "to": [SETTINGS.EXPORT_EMAIL],
            "subject": subject,
            "html": html,
            "attachments": [
                {
                    "filename": filename,
                    "content": base64.b64encode(csv_text.encode("utf-8")).decode("ascii"),
                }
            ],
        }
        headers = {"Authorization": f"Bearer {SETTINGS.RESEND_API_KEY}"}

        client = self._client or httpx.AsyncClient(timeout=15.0)
        try:
            resp = await client.post(SETTINGS.RESEND_API_URL, json=payload, headers=headers)
            resp.raise_for_status()
        finally:
            if self._client is None:
                await client.aclose()

        logger.info("Sent %s export %s (%s sets)", kind, filename, stats["totalSets"])
        return {"message": "Export sent successfully", "stats": stats}
