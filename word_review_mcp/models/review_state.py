"""Review state model: one record per (user, word)."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator
import json

from .enums import SchedulingMode

SHORT_SLOT_COUNT = 3
LONG_SLOT_COUNT = 6

DEFAULT_EASE_FACTOR = 2.5


class ReviewState(BaseModel):
    """Scheduling state of a word for its owner."""

    word_id: str
    user_id: str
    word: Optional[str] = None  # Filled in when joined with the words table
    mode: SchedulingMode = SchedulingMode.CONTINUOUS

    # Continuous mode
    stage: int = Field(default=1, ge=1)
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR, ge=1.3, le=3.0)
    memory_strength: float = Field(default=0.0, ge=0.0, le=1.0)
    interval_days: float = 0.0

    # Milestone mode
    short_slots: tuple[bool, ...] = (False,) * SHORT_SLOT_COUNT
    long_slots: tuple[bool, ...] = (False,) * LONG_SLOT_COUNT
    milestone_completions: int = Field(default=0, ge=0)  # Checks ever made, undos included

    # Counters
    review_count: int = Field(default=0, ge=0)
    correct_count: int = Field(default=0, ge=0)
    error_count: int = Field(default=0, ge=0)
    mastery_level: int = Field(default=0, ge=0, le=5)

    last_review_at: Optional[datetime] = None
    next_review_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("short_slots")
    @classmethod
    def check_short_slots(cls, value: tuple[bool, ...]) -> tuple[bool, ...]:
        if len(value) != SHORT_SLOT_COUNT:
            raise ValueError(f"short_slots must hold {SHORT_SLOT_COUNT} entries")
        return value

    @field_validator("long_slots")
    @classmethod
    def check_long_slots(cls, value: tuple[bool, ...]) -> tuple[bool, ...]:
        if len(value) != LONG_SLOT_COUNT:
            raise ValueError(f"long_slots must hold {LONG_SLOT_COUNT} entries")
        return value

    @classmethod
    def from_row(cls, row: dict) -> "ReviewState":
        """Create a ReviewState from a database row."""
        data = dict(row)

        # Parse JSON slot arrays; a damaged column falls back to an empty grid
        for field, size in (("short_slots", SHORT_SLOT_COUNT), ("long_slots", LONG_SLOT_COUNT)):
            try:
                slots = json.loads(data.get(field) or "[]")
            except (json.JSONDecodeError, TypeError):
                slots = []
            if not isinstance(slots, list) or len(slots) != size:
                slots = [False] * size
            data[field] = tuple(bool(s) for s in slots)

        # Parse datetime fields
        for field in ["last_review_at", "next_review_at", "created_at", "updated_at"]:
            if data.get(field):
                try:
                    data[field] = datetime.fromisoformat(data[field])
                except (ValueError, TypeError):
                    data[field] = None

        if isinstance(data.get("mode"), str):
            data["mode"] = SchedulingMode(data["mode"])

        return cls(**data)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "word_id": self.word_id,
            "user_id": self.user_id,
            "word": self.word,
            "mode": self.mode.value,
            "stage": self.stage,
            "ease_factor": self.ease_factor,
            "memory_strength": self.memory_strength,
            "interval_days": self.interval_days,
            "short_slots": list(self.short_slots),
            "long_slots": list(self.long_slots),
            "milestone_completions": self.milestone_completions,
            "review_count": self.review_count,
            "correct_count": self.correct_count,
            "error_count": self.error_count,
            "mastery_level": self.mastery_level,
            "last_review_at": self.last_review_at.isoformat() if self.last_review_at else None,
            "next_review_at": self.next_review_at.isoformat(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
