# backend/mentorship/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )
    is_testing: bool = False  # Set to True when running tests

    # Database
    database_url: str = Field(
        default="sqlite:///./mentorship.db",
        description="SQLAlchemy database URL",
    )
    db_echo: bool = Field(default=False, description="Echo SQL statements to the log")
    db_pool_size: int = Field(default=10, ge=1)
    db_max_overflow: int = Field(default=5, ge=0)

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    structured_logs: bool = Field(
        default=False,
        description="Emit JSON log lines instead of the plain text format",
    )
    slow_request_ms: int = Field(default=500, ge=0)

    # API
    api_v1_prefix: str = "/api/v1"
    identity_header: str = Field(
        default="X-User-Id",
        description="Header carrying the authenticated user id from the identity provider",
    )
    cors_origins: str = Field(default="", description="Comma-separated list of allowed origins")

    # Scheduling policy
    auto_confirm_sessions: bool = Field(
        default=False,
        description="Mentor auto-accept: new bookings start as confirmed instead of pending",
    )
    reconfirm_on_reschedule: bool = Field(
        default=False,
        description="Move confirmed sessions back to pending after a reschedule",
    )
    calendar_first_weekday: int = Field(
        default=6,
        ge=0,
        le=6,
        description="First column of the month grid (0=Monday ... 6=Sunday)",
    )
    availability_max_range_days: int = Field(
        default=92,
        ge=1,
        description="Largest date range accepted by the availability query",
    )

    # Collaborators
    meeting_url_template: str = Field(
        default="",
        description="Template for provisioned meeting links, e.g. https://meet.example.com/{session_id}",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        normalized = str(value).strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return normalized

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.lower().startswith("sqlite")

    def get_database_url(self, override: Optional[str] = None) -> str:
        """Return the effective database URL, honoring an explicit override."""
        return override or self.database_url


settings = Settings()
