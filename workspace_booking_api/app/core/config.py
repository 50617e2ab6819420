"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any configuration in development.  In a
production deployment override them via environment variables.
"""

import os
from dataclasses import dataclass


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Workspace Booking API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _flag("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Bearer tokens are issued by the identity provider and signed with
    # this shared secret.
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Optional long-lived token for integrations.  Requests carrying it
    # are treated as an administrator without a person record.
    admin_static_token: str = os.getenv("ADMIN_STATIC_TOKEN", "")

    # Path to the SQLite database.  Relative paths are resolved against
    # the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "workspace_booking.db")

    # Admission policy.  Past-date and operating-hour checks are
    # switchable because the console only hints at them.
    weekly_reservation_quota: int = int(os.getenv("WEEKLY_RESERVATION_QUOTA", "3"))
    enforce_past_date: bool = _flag("ENFORCE_PAST_DATE", "true")
    enforce_operating_hours: bool = _flag("ENFORCE_OPERATING_HOURS", "false")
    operating_hours_start: str = os.getenv("OPERATING_HOURS_START", "08:00")
    operating_hours_end: str = os.getenv("OPERATING_HOURS_END", "20:00")

    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must be set before importing this module.
settings = Settings()
