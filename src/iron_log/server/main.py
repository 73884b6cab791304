"""
IronLog FastAPI server main entrypoint.
Handles sessions, CORS, error handling, and API routers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from urllib.parse import urlparse

import psutil
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from ..config import SETTINGS
from ..db import close_db, init_db
from ..errors import NotFoundError, ValidationError
from ..logging_setup import setup_logging
from .routes.auth import router as r_auth
from .routes.catalog import router as r_catalog
from .routes.cycle import router as r_cycle
from .routes.export import router as r_export
from .routes.history import router as r_history
from .routes.manage import router as r_manage
from .routes.workout import router as r_workout


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    try:
        await init_db()
        logging.info("FastAPI server startup completed")
    except Exception as e:
        logging.exception("FastAPI startup failed: %s", e)
        raise

    yield

    try:
        await close_db()
        logging.info("FastAPI server shutdown completed")
    except Exception as e:
        logging.exception("FastAPI shutdown failed: %s", e)


app = FastAPI(
    title="IronLog API",
    description="Workout tracking API with deload-aware progression suggestions",
    version=__import__("iron_log").__version__,
    lifespan=lifespan,
)

# CORS setup: allow the configured frontend plus local development origins
allowed: set[str] = set()
try:
    u = urlparse(SETTINGS.WEBAPP_URL)
    if u.scheme and u.netloc:
        allowed.add(f"{u.scheme}://{u.netloc}")
except ValueError:
    pass
allowed.add("http://localhost:3000")
allowed.add("http://127.0.0.1:3000")

app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(allowed),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(
    SessionMiddleware,
    secret_key=SETTINGS.SESSION_SECRET,
    session_cookie=SETTINGS.SESSION_COOKIE,
    max_age=SETTINGS.SESSION_MAX_AGE,
    https_only=SETTINGS.SESSION_HTTPS_ONLY,
    same_site="lax",
)


@app.exception_handler(ValidationError)
async def validation_exc_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logging.info("Rejected request to %s: %s", request.url.path, exc)
    return JSONResponse({"success": False, "error": str(exc)}, status_code=400)


@app.exception_handler(NotFoundError)
async def not_found_exc_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse({"success": False, "error": str(exc)}, status_code=404)


@app.exception_handler(Exception)
async def global_exc_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler: log and return a generic error response.
    """
    logging.exception("Unhandled error in %s: %s", request.url, exc)
    return JSONResponse(
        {"ok": False, "error": "internal_error", "message": "Internal server error"},
        status_code=500,
    )


@app.get("/healthz")
async def healthz() -> dict:
    """
    Health check endpoint with system status.
    """
    try:
        memory = psutil.virtual_memory()
        cpu_percent = psutil.cpu_percent(interval=0.1)
        is_healthy = memory.percent < 90 and cpu_percent < 95

        return {
            "ok": is_healthy,
            "status": "healthy" if is_healthy else "degraded",
            "timestamp": datetime.now(UTC).isoformat(),
            "system": {
                "memory_percent": round(memory.percent, 1),
                "memory_available_mb": round(memory.available / 1024 / 1024, 1),
                "cpu_percent": round(cpu_percent, 1),
            },
        }

    except Exception as e:
        logging.exception("Health check failed: %s", e)
        return {
            "ok": False,
            "status": "error",
            "timestamp": datetime.now(UTC).isoformat(),
            "error": str(e),
        }


@app.get("/")
async def root() -> dict:
    """
    Root endpoint with API information.
    """
    return {
        "ok": True,
        "name": "IronLog API",
        "version": app.version,
        "description": "Workout tracking with hard/deload cycles",
    }


# Routers for API endpoints
app.include_router(r_auth, prefix="/api/v1", tags=["auth"])
app.include_router(r_workout, prefix="/api/v1", tags=["workout"])
app.include_router(r_cycle, prefix="/api/v1", tags=["cycle"])
app.include_router(r_history, prefix="/api/v1", tags=["history"])
app.include_router(r_manage, prefix="/api/v1", tags=["manage"])
app.include_router(r_catalog, prefix="/api/v1", tags=["catalog"])
app.include_router(r_export, prefix="/api/v1", tags=["export"])
