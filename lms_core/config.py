"""
Centralized configuration for the call scheduling engine.

Settings come from environment variables; the host process is expected to
load `.env` / `.env.local` with python-dotenv before importing the engine.
"""

import os


def get_base_url() -> str:
    """Get the frontend base URL used in notification links."""
    return os.environ.get("BASE_URL", "http://localhost:3000").rstrip("/")


def get_default_timezone() -> str:
    """Timezone assumed for calls stored without one."""
    return os.environ.get("DEFAULT_TIMEZONE", "Asia/Kolkata")


def get_email_send_timeout() -> float:
    """Seconds the email channel waits for the provider before failing."""
    return float(os.getenv("EMAIL_SEND_TIMEOUT", "15"))


def get_database_url() -> str | None:
    """PostgreSQL connection string, if one is configured."""
    return os.environ.get("DATABASE_URL") or None


def get_pool_settings() -> dict:
    """Connection pool sizing for the async engine."""
    return {
        "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
        "pool_timeout": 30,
        "pool_recycle": 1800,  # seconds
    }
