"""Stage-based review intervals (Ebbinghaus curve with SM-2 style ease)."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..models.enums import Outcome

# Interval length in days for each stage:
# same session, ~20min, ~1h, ~8h, 1d, 2d, 6d, 15d, 30d
INTERVAL_DAYS = (0, 0.014, 0.04, 0.33, 1, 2, 6, 15, 30)

MIN_STAGE = 1
MAX_STAGE = len(INTERVAL_DAYS) - 1

MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 3.0


@dataclass(frozen=True)
class IntervalResult:
    """Result of a continuous-mode transition."""

    stage: int
    ease_factor: float
    memory_strength: float
    interval_days: float
    next_review_at: datetime

    @property
    def interval_hours(self) -> float:
        return round(self.interval_days * 24, 2)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def interval_days_for(stage: int) -> float:
    """Interval length for a stage, with the stage clamped into the table."""
    return INTERVAL_DAYS[int(clamp(stage, MIN_STAGE, MAX_STAGE))]


def advance(
    outcome: Outcome | str,
    now: datetime,
    stage: int = MIN_STAGE,
    ease_factor: float = 2.5,
    memory_strength: float = 0.0,
) -> IntervalResult:
    """
    Apply a review outcome to the continuous-mode scheduling fields.

    Args:
        outcome: How well the word was recalled
            - forgot: back to stage 1, ease -0.2, strength -0.3
            - hard: stage kept, ease -0.1, strength -0.05
            - good: one stage up, ease kept, strength +0.10
            - easy: two stages up, ease +0.1, strength +0.15
        now: Time of the review
        stage: Current stage (clamped into 1..MAX_STAGE)
        ease_factor: Current ease factor (clamped into 1.3..3.0)
        memory_strength: Current memory strength (clamped into 0..1)

    Returns:
        IntervalResult with the new fields and next review time.
    """
    outcome = Outcome(outcome)
    stage = int(clamp(stage, MIN_STAGE, MAX_STAGE))
    ease_factor = clamp(ease_factor, MIN_EASE_FACTOR, MAX_EASE_FACTOR)
    memory_strength = clamp(memory_strength, 0.0, 1.0)

    match outcome:
        case Outcome.FORGOT:
            new_stage = MIN_STAGE
            new_ease_factor = max(MIN_EASE_FACTOR, ease_factor - 0.2)
            new_strength = max(0.0, memory_strength - 0.3)
        case Outcome.HARD:
            new_stage = max(MIN_STAGE, stage)
            new_ease_factor = max(MIN_EASE_FACTOR, ease_factor - 0.1)
            new_strength = max(0.0, memory_strength - 0.05)
        case Outcome.GOOD:
            new_stage = min(MAX_STAGE, stage + 1)
            new_ease_factor = ease_factor
            new_strength = min(1.0, memory_strength + 0.10)
        case Outcome.EASY:
            new_stage = min(MAX_STAGE, stage + 2)
            new_ease_factor = min(MAX_EASE_FACTOR, ease_factor + 0.1)
            new_strength = min(1.0, memory_strength + 0.15)

    interval_days = interval_days_for(new_stage)

    return IntervalResult(
        stage=new_stage,
        ease_factor=round(new_ease_factor, 2),
        memory_strength=round(new_strength, 4),
        interval_days=interval_days,
        next_review_at=now + timedelta(days=interval_days),
    )


def outcome_from_quality(quality: int) -> Outcome:
    """Map an SM-2 quality grade (0-5) onto an outcome."""
    quality = int(clamp(quality, 0, 5))
    if quality <= 1:
        return Outcome.FORGOT
    if quality == 2:
        return Outcome.HARD
    if quality == 3:
        return Outcome.GOOD
    return Outcome.EASY


def quality_from_outcome(outcome: Outcome | str) -> int:
    """Map an outcome back onto an SM-2 quality grade."""
    return {
        Outcome.FORGOT: 0,
        Outcome.HARD: 2,
        Outcome.GOOD: 3,
        Outcome.EASY: 5,
    }[Outcome(outcome)]
