"""Runtime configuration, read from environment variables."""

import os
from datetime import timedelta
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from .database.connection import DEFAULT_DB_PATH


class SchedulerConfig(BaseModel):
    """Settings shared by the server and the review services."""

    db_path: Path = DEFAULT_DB_PATH
    first_delay_minutes: int = Field(default=60, ge=1, description="Delay before the first prompt of a new word")
    timezone: str = Field(default="UTC", description="Zone that defines the reminder day boundary")
    log_level: str = "INFO"
    port: int | None = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone '{value}'")
        return value

    @property
    def first_delay(self) -> timedelta:
        return timedelta(minutes=self.first_delay_minutes)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls) -> "SchedulerConfig":
        """Build a config from WORD_REVIEW_* variables and PORT."""
        values: dict = {}
        if os.environ.get("WORD_REVIEW_DB_PATH"):
            values["db_path"] = os.environ["WORD_REVIEW_DB_PATH"]
        if os.environ.get("WORD_REVIEW_FIRST_DELAY_MINUTES"):
            values["first_delay_minutes"] = os.environ["WORD_REVIEW_FIRST_DELAY_MINUTES"]
        if os.environ.get("WORD_REVIEW_TIMEZONE"):
            values["timezone"] = os.environ["WORD_REVIEW_TIMEZONE"]
        if os.environ.get("WORD_REVIEW_LOG_LEVEL"):
            values["log_level"] = os.environ["WORD_REVIEW_LOG_LEVEL"].upper()
        if os.environ.get("PORT"):
            values["port"] = os.environ["PORT"]
        return cls(**values)
