"""Mastery level (0-5) derived from review counters or milestone progress."""

import math

from ..models.enums import SchedulingMode
from ..models.review_state import ReviewState
from .milestone_policy import completion_ratio

MAX_LEVEL = 5

# A word needs this many reviews before it can show level 3 or above
MIN_REVIEWS_FOR_HIGH_LEVEL = 3


def _clamp_level(level: int) -> int:
    return max(0, min(MAX_LEVEL, level))


def _apply_review_guardrail(level: int, review_count: int) -> int:
    if review_count < MIN_REVIEWS_FOR_HIGH_LEVEL:
        return min(level, max(2, review_count))
    return level


def continuous_mastery(
    memory_strength: float,
    review_count: int,
    correct_count: int,
) -> int:
    """
    Mastery from memory strength, nudged by the correct-answer rate.

    A correct rate below 50% costs a level, a perfect record earns one.
    """
    memory_strength = max(0.0, min(1.0, memory_strength))
    review_count = max(0, review_count)
    correct_count = max(0, min(correct_count, review_count))

    level = math.floor(memory_strength * MAX_LEVEL)
    if review_count > 0:
        correct_rate = correct_count / review_count
        level += math.floor((correct_rate - 0.5) * 2)

    return _apply_review_guardrail(_clamp_level(level), review_count)


def milestone_mastery(short_slots, long_slots, review_count: int) -> int:
    """Mastery from the share of checked milestone slots."""
    level = math.floor(completion_ratio(short_slots, long_slots) * MAX_LEVEL)
    return _apply_review_guardrail(_clamp_level(level), max(0, review_count))


def estimate_mastery(state: ReviewState) -> int:
    """Mastery level for a state, using whichever mechanism owns it."""
    if state.mode == SchedulingMode.MILESTONE:
        return milestone_mastery(state.short_slots, state.long_slots, state.review_count)
    return continuous_mastery(state.memory_strength, state.review_count, state.correct_count)
