"""Ordering of review states into a session queue."""

from datetime import datetime, time, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from ..models.review_state import ReviewState
from .clock import to_utc
from .mastery import estimate_mastery


def is_due(state: ReviewState, now: datetime) -> bool:
    """Whether the state's due time has been reached."""
    return to_utc(state.next_review_at) <= to_utc(now)


def queue_key(state: ReviewState, now: datetime) -> tuple:
    """Sort key: overdue first, then most errors, fewest reviews, lowest mastery."""
    return (
        not is_due(state, now),
        -state.error_count,
        state.review_count,
        estimate_mastery(state),
    )


def sort_review_queue(states: Iterable[ReviewState], now: datetime) -> list[ReviewState]:
    """
    Order states for a review session.

    The sort is stable, so ties keep their input order, and the only time
    source is the captured `now`.
    """
    return sorted(states, key=lambda state: queue_key(state, now))


def end_of_day(now: datetime, tz: ZoneInfo) -> datetime:
    """Last instant of `now`'s calendar day in `tz`, as UTC."""
    local = to_utc(now).astimezone(tz)
    next_midnight = datetime.combine(local.date() + timedelta(days=1), time.min, tzinfo=tz)
    return to_utc(next_midnight) - timedelta(microseconds=1)


def estimate_today_reviews(states: Iterable[ReviewState], now: datetime, tz: ZoneInfo) -> int:
    """Number of states that fall due before the local day ends."""
    cutoff = end_of_day(now, tz)
    return sum(1 for state in states if to_utc(state.next_review_at) <= cutoff)
