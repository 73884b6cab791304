import asyncio
import logging
import re
import traceback

import httpx

from .config import SETTINGS

_tasks: list[asyncio.Task[None]] = []

_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"Bearer\s+[A-Za-z0-9._\-]+"), "Bearer <REDACTED>"),
    (re.compile(r"\bre_[A-Za-z0-9_]{8,}"), "<REDACTED>"),
    (re.compile(r"(password=)[^&\s]+", re.IGNORECASE), r"\1<REDACTED>"),
]


class SensitiveDataFilter(logging.Filter):
    """
    Redact API keys, bearer tokens and configured secrets from log records.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage() if record.args else str(record.msg)
        redacted = msg
        for pattern, repl in _PATTERNS:
            redacted = pattern.sub(repl, redacted)
        for secret in (SETTINGS.WORKOUT_PASSWORD, SETTINGS.SESSION_SECRET):
            if secret and len(secret) >= 4:
                redacted = redacted.replace(secret, "<REDACTED>")
        if redacted != msg:
            record.msg = redacted
            record.args = ()
        return True


class AlertWebhookHandler(logging.Handler):
    """
    Logging handler that posts error logs to a JSON webhook.
    """

    def emit(self, record: logging.LogRecord) -> None:
        if not SETTINGS.FF_ADMIN_ALERTS:
            return
        url = SETTINGS.ALERT_WEBHOOK_URL
        if not url:
            return
        try:
            msg = self.format(record)
            # Compact stack if exists
            if record.exc_info:
                exc_text = "".join(traceback.format_exception(*record.exc_info))
                if len(exc_text) > 3500:
                    exc_text = "[truncated]\n" + exc_text[-3500:]
                msg = f"{msg}\n\n{exc_text}"
            payload = {"text": msg[:3900], "level": record.levelname, "logger": record.name}

            async def _post() -> None:
                try:
                    async with httpx.AsyncClient(timeout=5.0) as client:
                        await client.post(url, json=payload)
                except Exception as e:  # pragma: no cover - network
                    logging.getLogger(__name__).warning("Failed to send alert: %s", e)

            try:
                task = asyncio.get_running_loop().create_task(_post())
                _tasks.append(task)
                task.add_done_callback(_tasks.remove)
            except RuntimeError:
                # No running loop; fall back to blocking call
                try:
                    httpx.post(url, json=payload, timeout=5.0)
                except Exception as e:  # pragma: no cover - network
                    logging.getLogger(__name__).warning("Failed to send alert: %s", e)
        except Exception as e:
            logging.getLogger(__name__).warning("Failed to send alert: %s", e)


def setup_logging(level: int = logging.INFO) -> None:
    """
    Set up root logger with stream and webhook alert handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return  # already configured
    root.setLevel(level)
    fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    redactor = SensitiveDataFilter()
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    ch.addFilter(redactor)
    root.addHandler(ch)
    alerts = AlertWebhookHandler()
    alerts.setLevel(logging.ERROR)
    alerts.setFormatter(fmt)
    alerts.addFilter(redactor)
    root.addHandler(alerts)
