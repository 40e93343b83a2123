"""
Trackademic Reminders — Centralized configuration.

Loads all settings from .env and validates them.
Every other module reads its settings from here.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (two levels up from trackademic/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite
    DATABASE_PATH: str = "data/trackademic.db"

    # SendGrid (empty key → emails are logged instead of sent)
    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = "noreply@trackademic.com"
    SENDGRID_FROM_NAME: str = "Trackademic"
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # Reminder job
    REMINDER_INTERVAL_MINUTES: int = 15
    REMINDER_MAX_CONCURRENCY: int = 5

    # Zone used when rendering deadlines in emails
    TIMEZONE: str = "UTC"

    LOG_LEVEL: str = "INFO"

    @field_validator("SENDGRID_API_KEY", mode="before")
    @classmethod
    def drop_placeholder_key(cls, v: str | None) -> str:
        if not v or v.startswith("your-"):
            return ""
        return v.strip()

    @field_validator("REMINDER_INTERVAL_MINUTES", "REMINDER_MAX_CONCURRENCY", mode="before")
    @classmethod
    def parse_positive_int(cls, v: str | int) -> int:
        value = int(v)
        if value <= 0:
            raise ValueError(f"must be a positive integer, got {value}")
        return value

    @field_validator("EMAIL_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def parse_timeout(cls, v: str | float) -> float:
        value = float(v)
        if value <= 0:
            raise ValueError(f"must be positive, got {value}")
        return value

    @field_validator("TIMEZONE", mode="before")
    @classmethod
    def parse_timezone(cls, v: str) -> str:
        from trackademic.core.reminder_message import check_timezone

        return check_timezone(str(v).strip() or "UTC")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    try:
        return Settings(
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/trackademic.db"),
            SENDGRID_API_KEY=os.getenv("SENDGRID_API_KEY", ""),
            SENDGRID_FROM_EMAIL=os.getenv("SENDGRID_FROM_EMAIL", "noreply@trackademic.com"),
            SENDGRID_FROM_NAME=os.getenv("SENDGRID_FROM_NAME", "Trackademic"),
            EMAIL_TIMEOUT_SECONDS=os.getenv("EMAIL_TIMEOUT_SECONDS", "10"),
            REMINDER_INTERVAL_MINUTES=os.getenv("REMINDER_INTERVAL_MINUTES", "15"),
            REMINDER_MAX_CONCURRENCY=os.getenv("REMINDER_MAX_CONCURRENCY", "5"),
            TIMEZONE=os.getenv("TIMEZONE", "UTC"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
    except (ValidationError, ValueError) as exc:
        print(f"ERROR: invalid configuration in .env:\n{exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by all other modules as:
#   from trackademic.config import settings
settings = _load_settings()
