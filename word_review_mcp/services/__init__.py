from .clock import Clock, FixedClock, SystemClock
from .interval_policy import advance, IntervalResult
from .milestone_policy import toggle, MilestoneResult
from .mastery import estimate_mastery
from .due_queue import sort_review_queue
from .reminders import may_remind, ReminderService
from .review_service import ReviewService
from .query_engine import QueryEngine

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "advance",
    "IntervalResult",
    "toggle",
    "MilestoneResult",
    "estimate_mastery",
    "sort_review_queue",
    "may_remind",
    "ReminderService",
    "ReviewService",
    "QueryEngine",
]
