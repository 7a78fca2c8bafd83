from .enums import Outcome, QueryType, SchedulingMode, Track
from .word import Word, WordCreate
from .review_state import ReviewState, LONG_SLOT_COUNT, SHORT_SLOT_COUNT

__all__ = [
    "Outcome",
    "QueryType",
    "SchedulingMode",
    "Track",
    "Word",
    "WordCreate",
    "ReviewState",
    "SHORT_SLOT_COUNT",
    "LONG_SLOT_COUNT",
]
