"""
Reminder Bot — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str
    BOT_USERNAME: str = ""       # accepted in "/add@<name>"; empty → any name

    # SQLite
    DATABASE_PATH: str = "data/reminders.db"

    # Webhook — polling is used when WEBHOOK_URL is empty
    WEBHOOK_URL: str = ""
    WEBHOOK_LISTEN: str = "0.0.0.0"
    WEBHOOK_PORT: int = 8443
    WEBHOOK_PATH: str = "webhook"
    WEBHOOK_SECRET_TOKEN: str = ""

    # Conversation state — 0 keeps an unfinished /add until the process exits
    CONVERSATION_TTL_SECONDS: int = 0

    LOG_LEVEL: str = "INFO"

    @field_validator("WEBHOOK_PORT", "CONVERSATION_TTL_SECONDS", mode="before")
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        if isinstance(v, str) and not v.strip():
            return 0
        return int(v)

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("WEBHOOK_PATH", mode="before")
    @classmethod
    def parse_webhook_path(cls, v: str) -> str:
        return (v or "").strip().strip("/")


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        BOT_USERNAME=os.getenv("BOT_USERNAME", ""),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/reminders.db"),
        WEBHOOK_URL=os.getenv("WEBHOOK_URL", ""),
        WEBHOOK_LISTEN=os.getenv("WEBHOOK_LISTEN", "0.0.0.0"),
        WEBHOOK_PORT=os.getenv("WEBHOOK_PORT", "8443"),
        WEBHOOK_PATH=os.getenv("WEBHOOK_PATH", "webhook"),
        WEBHOOK_SECRET_TOKEN=os.getenv("WEBHOOK_SECRET_TOKEN", ""),
        CONVERSATION_TTL_SECONDS=os.getenv("CONVERSATION_TTL_SECONDS", "0"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
