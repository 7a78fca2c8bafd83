"""Enums for the review scheduler."""

from enum import Enum


class Outcome(str, Enum):
    """How well a word was recalled during a review."""

    FORGOT = "forgot"  # Could not recall at all
    HARD = "hard"      # Recalled with serious difficulty
    GOOD = "good"      # Recalled correctly
    EASY = "easy"      # Recalled instantly


class Track(str, Enum):
    """Milestone grid tracks."""

    SHORT = "short"  # 1h, 4h, 12h
    LONG = "long"    # 1d, 2d, 4d, 7d, 15d, 31d


class SchedulingMode(str, Enum):
    """Which progression mechanism currently owns a review state."""

    CONTINUOUS = "continuous"  # stage / ease factor, driven by outcomes
    MILESTONE = "milestone"    # 9-slot grid, driven by manual toggles


class QueryType(str, Enum):
    """Types of review queries supported."""

    DUE_FOR_REVIEW = "due_for_review"  # Prioritized queue of due words
    STRUGGLING = "struggling"          # More errors than correct answers
    UPCOMING = "upcoming"              # Not yet due, soonest first
    ALL_WORDS = "all_words"            # Every word of the user
