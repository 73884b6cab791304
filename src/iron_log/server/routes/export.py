"""
CSV export API routes for IronLog.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from ...auth import require_user
from ...config import SETTINGS
from ...errors import ExportNotConfigured
from ...services import ExportService

router = APIRouter()


@router.get("/export/csv")
async def download_csv(
    kind: Literal["all", "weekly", "full"] = Query("all"),
    _: int = Depends(require_user),
) -> Response:
    """Download logged sets as a CSV attachment."""
    filename, csv_text, _stats = await ExportService().build_csv(kind)
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/export/email/{kind}")
async def email_export(
    kind: Literal["all", "weekly", "full"], _: int = Depends(require_user)
) -> dict[str, Any]:
    """Email the CSV export to the configured address."""
    if not SETTINGS.FF_EMAIL_EXPORT:
        raise HTTPException(status_code=503, detail="Email export disabled")
    try:
        return await ExportService().send_email_export(kind)
    except ExportNotConfigured as err:
        logging.error("Email export not configured: %s", err)
        raise HTTPException(status_code=500, detail=str(err)) from err
    except httpx.HTTPError as err:
        logging.exception("Email export failed")
        raise HTTPException(status_code=502, detail="Upstream error") from err
