import os

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load .env for local dev; deployed instances use real env vars
load_dotenv(override=False)


def _bool(name: str, default: bool) -> bool:
    """
    Helper to parse boolean environment variables.
    Accepts: 1, true, yes, on (case-insensitive).
    """
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


def _norm_db_url(url: str | None) -> str | None:
    """
    Normalize database URL to use async drivers for SQLAlchemy.

    Ensures ``postgres`` URLs use ``asyncpg`` and plain ``sqlite`` URLs use
    ``aiosqlite``. URLs already specifying an async driver are returned as-is.
    """
    if not url:
        return None
    if url.startswith("postgres://"):
        url = "postgresql+asyncpg://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://") :]
    if url.startswith("sqlite://"):
        url = "sqlite+aiosqlite://" + url[len("sqlite://") :]
    return url


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables.
    Uses pydantic for validation and parsing.
    """

    DATABASE_URL: str = Field(..., description="Database URL")
    SESSION_SECRET: str = Field(..., description="Secret used to sign the session cookie")
    WORKOUT_PASSWORD: str | None = Field(None, description="Owner login password")
    OWNER_EMAIL: str = Field("owner@localhost", description="Email of the owner account")

    SESSION_COOKIE: str = Field("workout_session", description="Session cookie name")
    SESSION_MAX_AGE: int = Field(
        60 * 60 * 24 * 365 * 10, description="Session cookie lifetime in seconds"
    )
    SESSION_HTTPS_ONLY: bool = Field(
        default_factory=lambda: _bool("SESSION_HTTPS_ONLY", False),
        description="Only send the session cookie over HTTPS",
    )

    DEFAULT_HARD_WEEKS: int = Field(6, ge=1, description="Default hard weeks per cycle")
    DEFAULT_DELOAD_WEEKS: int = Field(1, ge=1, description="Default deload weeks per cycle")

    RESEND_API_KEY: str | None = Field(None, description="Resend API key for email export")
    RESEND_API_URL: str = Field("https://api.resend.com/emails", description="Resend endpoint")
    EXPORT_EMAIL: str | None = Field(None, description="Recipient of CSV exports")
    EXPORT_FROM: str = Field("IRON <onboarding@resend.dev>", description="Export sender")

    ALERT_WEBHOOK_URL: str | None = Field(None, description="Webhook receiving error logs")
    WEBAPP_URL: str = Field("http://localhost:3000", description="Frontend origin for CORS")

    # Feature flags
    FF_ADMIN_ALERTS: bool = Field(
        default_factory=lambda: _bool("FF_ADMIN_ALERTS", True),
        description="Admin alerts feature flag",
    )
    FF_EMAIL_EXPORT: bool = Field(
        default_factory=lambda: _bool("FF_EMAIL_EXPORT", True),
        description="Email export feature flag",
    )

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL environment variable is required")
        return _norm_db_url(v)

    @field_validator("SESSION_SECRET")
    @classmethod
    def session_secret_required(cls, v):
        if not v:
            raise ValueError("SESSION_SECRET environment variable is required")
        return v


SETTINGS = Config()  # pyright: ignore[reportCallIssue]
