# backend/mentorship/core/config.py
from datetime import datetime, time
import logging
import os
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_BOOKING_WINDOW_DAYS,
    DEFAULT_MEETING_LINK_MAX_LENGTH,
    DEFAULT_NOTES_MAX_LENGTH,
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


_BACKEND_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SQLITE_URL = f"sqlite:///{_BACKEND_ROOT / 'mentorship.db'}"

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _BACKEND_ROOT / ".env"
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


def _parse_clock(value: Any) -> time:
    if isinstance(value, time):
        return value
    text = str(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time of day: {value!r}")


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )
    is_testing: bool = False  # Set to True when running tests

    # Database
    database_url: str = Field(
        default=DEFAULT_SQLITE_URL,
        description="SQLAlchemy URL of the relational store",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements to the log")
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=5, ge=0)
    # Fail fast when the pool is exhausted; callers see StoreUnavailable
    database_pool_timeout: float = Field(default=2.0, gt=0)
    sqlite_busy_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long a SQLite writer waits for a competing transaction",
    )

    # Logging / telemetry
    log_level: str = Field(default="INFO")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"
    )
    slow_operation_threshold_seconds: float = Field(default=1.0, gt=0)

    # Mentee booking flow
    booking_window_days: int = Field(
        default=DEFAULT_BOOKING_WINDOW_DAYS,
        description="Number of consecutive dates offered to mentees, starting today",
    )
    meeting_link_max_length: int = Field(default=DEFAULT_MEETING_LINK_MAX_LENGTH, gt=0)
    notes_max_length: int = Field(default=DEFAULT_NOTES_MAX_LENGTH, gt=0)

    # Mentor time picker grid
    slot_picker_start: time = Field(default=time(8, 0))
    slot_picker_end: time = Field(default=time(21, 0))
    slot_picker_step_minutes: int = Field(default=30)

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("slot_picker_start", "slot_picker_end", mode="before")
    @classmethod
    def parse_picker_time(cls, value: Any) -> time:
        """Accept "HH:MM" strings for the picker bounds."""
        return _parse_clock(value)

    @field_validator("booking_window_days", "slot_picker_step_minutes")
    @classmethod
    def require_positive(cls, value: int, info: ValidationInfo) -> int:
        if value <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @model_validator(mode="after")
    def _check_picker_range(self) -> "Settings":
        if self.slot_picker_end <= self.slot_picker_start:
            raise ValueError("slot_picker_end must be after slot_picker_start")
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
