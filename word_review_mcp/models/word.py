"""Word models for the review scheduler."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class WordCreate(BaseModel):
    """Input model for adding a word to a user's collection."""

    user_id: str = Field(..., min_length=1, description="Owner of the word")
    word: str = Field(..., min_length=1, description="The vocabulary item")
    definition: Optional[str] = Field(None, description="Optional short definition")

    @field_validator("word")
    @classmethod
    def normalize_word(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("word must not be blank")
        return normalized


class Word(BaseModel):
    """A word in a user's collection."""

    id: str
    user_id: str
    word: str
    definition: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "Word":
        """Create a Word from a database row."""
        data = dict(row)

        if data.get("created_at"):
            try:
                data["created_at"] = datetime.fromisoformat(data["created_at"])
            except (ValueError, TypeError):
                data["created_at"] = None

        return cls(**data)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "word": self.word,
            "definition": self.definition,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
