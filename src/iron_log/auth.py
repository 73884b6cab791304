"""Password login backed by a signed session cookie."""

from __future__ import annotations

import hmac
import logging

from fastapi import HTTPException, Request

from .config import SETTINGS

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


def verify_password(candidate: str) -> bool:
    """Compare ``candidate`` with the configured owner password."""
    expected = SETTINGS.WORKOUT_PASSWORD
    if not expected:
        raise RuntimeError("WORKOUT_PASSWORD environment variable is not set")
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def login_session(request: Request, user_id: int) -> None:
    request.session[SESSION_USER_KEY] = user_id


def logout_session(request: Request) -> None:
    request.session.clear()


def current_user_id(request: Request) -> int | None:
    value = request.session.get(SESSION_USER_KEY)
    return value if isinstance(value, int) else None


def require_user(request: Request) -> int:
    """FastAPI dependency: the logged-in user's id, or 401."""
    user_id = current_user_id(request)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id
