"""
Login/logout API routes for IronLog.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from ...auth import login_session, logout_session, require_user, verify_password
from ...config import SETTINGS
from ...db import repo

router = APIRouter()


class LoginRequest(BaseModel):
    password: str = Field(..., min_length=1)


@router.post("/login")
async def login(req: LoginRequest, request: Request) -> dict[str, Any]:
    """Check the owner password and open a session."""
    if not verify_password(req.password):
        logging.warning("Failed login attempt from %s", request.client.host if request.client else "?")
        raise HTTPException(status_code=401, detail="Invalid password")

    user = await repo.upsert_owner(SETTINGS.OWNER_EMAIL)
    login_session(request, user.id)
    logging.info("User %s logged in", user.id)
    return {"success": True, "user": {"id": user.id, "email": user.email}}


@router.post("/logout")
async def logout(request: Request) -> dict[str, Any]:
    logout_session(request)
    return {"success": True}


@router.get("/me")
async def me(user_id: int = Depends(require_user)) -> dict[str, Any]:
    user = await repo.get_user_preferences(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return {"success": True, "user": {"id": user.id, "email": user.email}}
