"""
Family Days — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from familydays/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Document store (SQLite)
    DATABASE_PATH: str = "data/familydays.db"
    STORE_TIMEOUT_SECONDS: float = 5.0

    # Scheduler: one fixed timezone for every user
    SCHEDULER_TIMEZONE: str = "America/New_York"
    MORNING_HOUR: int = 9
    AFTERNOON_HOUR: int = 14
    EVENING_HOUR: int = 19

    # Feb 29 anniversaries in common years: "mar1" | "feb28"
    LEAP_DAY_RULE: str = "mar1"

    # Use create-if-absent claims instead of check-then-record
    LEDGER_ATOMIC_CLAIM: bool = True

    # Chat channel provider: "whatsapp" | "telegram"
    CHAT_PROVIDER: str = "whatsapp"

    # Twilio (SMS + WhatsApp)
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""
    TWILIO_MESSAGING_SERVICE_SID: str = ""
    TWILIO_WHATSAPP_FROM: str = "whatsapp:+14155238886"  # Twilio sandbox

    # Resend (email)
    RESEND_API_KEY: str = ""
    FROM_EMAIL: str = "Family Days Reminder <onboarding@resend.dev>"
    EMAIL_SUBJECT: str = "🔔 Family Days Reminder"

    # Telegram (only needed when CHAT_PROVIDER=telegram)
    TELEGRAM_BOT_TOKEN: str = ""

    # Outbound provider calls
    HTTP_TIMEOUT_SECONDS: float = 10.0

    @field_validator("MORNING_HOUR", "AFTERNOON_HOUR", "EVENING_HOUR", mode="before")
    @classmethod
    def parse_hour(cls, v: str | int) -> int:
        hour = int(v)
        if not 0 <= hour <= 23:
            raise ValueError(f"Hour out of range: {hour}")
        return hour

    @field_validator("LEDGER_ATOMIC_CLAIM", mode="before")
    @classmethod
    def parse_bool(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in _TRUE_VALUES

    @field_validator("LEAP_DAY_RULE", "CHAT_PROVIDER", mode="before")
    @classmethod
    def normalize_choice(cls, v: str) -> str:
        return str(v).strip().lower()

    @field_validator("LEAP_DAY_RULE")
    @classmethod
    def check_leap_day_rule(cls, v: str) -> str:
        if v not in ("mar1", "feb28"):
            raise ValueError(f"Unknown LEAP_DAY_RULE: {v!r}")
        return v

    @field_validator("SCHEDULER_TIMEZONE")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown SCHEDULER_TIMEZONE: {v!r}") from exc
        return v


def _load_settings() -> Settings:
    """Load settings from environment.

    Provider credentials are optional here: a missing key only fails the
    send attempts of the channel that needs it.
    """
    return Settings(
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/familydays.db"),
        STORE_TIMEOUT_SECONDS=os.getenv("STORE_TIMEOUT_SECONDS", "5"),
        SCHEDULER_TIMEZONE=os.getenv("SCHEDULER_TIMEZONE", "America/New_York"),
        MORNING_HOUR=os.getenv("MORNING_HOUR", "9"),
        AFTERNOON_HOUR=os.getenv("AFTERNOON_HOUR", "14"),
        EVENING_HOUR=os.getenv("EVENING_HOUR", "19"),
        LEAP_DAY_RULE=os.getenv("LEAP_DAY_RULE", "mar1"),
        LEDGER_ATOMIC_CLAIM=os.getenv("LEDGER_ATOMIC_CLAIM", "true"),
        CHAT_PROVIDER=os.getenv("CHAT_PROVIDER", "whatsapp"),
        TWILIO_ACCOUNT_SID=os.getenv("TWILIO_ACCOUNT_SID", ""),
        TWILIO_AUTH_TOKEN=os.getenv("TWILIO_AUTH_TOKEN", ""),
        TWILIO_PHONE_NUMBER=os.getenv("TWILIO_PHONE_NUMBER", ""),
        TWILIO_MESSAGING_SERVICE_SID=os.getenv("TWILIO_MESSAGING_SERVICE_SID", ""),
        TWILIO_WHATSAPP_FROM=os.getenv("TWILIO_WHATSAPP_FROM", "whatsapp:+14155238886"),
        RESEND_API_KEY=os.getenv("RESEND_API_KEY", ""),
        FROM_EMAIL=os.getenv("FROM_EMAIL", "Family Days Reminder <onboarding@resend.dev>"),
        EMAIL_SUBJECT=os.getenv("EMAIL_SUBJECT", "🔔 Family Days Reminder"),
        TELEGRAM_BOT_TOKEN=os.getenv("TELEGRAM_BOT_TOKEN", ""),
        HTTP_TIMEOUT_SECONDS=os.getenv("HTTP_TIMEOUT_SECONDS", "10"),
    )


# Singleton, imported by all other modules as:
#   from familydays.config import settings
settings = _load_settings()
