"""Review reminders: at most one per word per reminder day."""

import logging
import math
from datetime import datetime, time

from ..config import SchedulerConfig
from ..database.connection import get_connection
from ..errors import NotFoundError
from ..models.review_state import ReviewState
from .clock import Clock, system_clock, to_iso, to_utc
from .due_queue import is_due

logger = logging.getLogger(__name__)

# Words checked per batch when no specific word is given
REMINDER_BATCH_SIZE = 10


def may_remind(state: ReviewState, reminders_sent_today: int | bool, now: datetime) -> bool:
    """A due word may get a reminder unless one was already sent today."""
    return is_due(state, now) and not reminders_sent_today


def day_start(now: datetime, tz) -> datetime:
    """Start of `now`'s reminder day in `tz`, as UTC."""
    local = to_utc(now).astimezone(tz)
    return to_utc(datetime.combine(local.date(), time.min, tzinfo=tz))


def days_overdue(next_review_at: datetime, now: datetime) -> int:
    return math.floor((to_utc(now) - to_utc(next_review_at)).total_seconds() / 86400)


def reminder_message(word: str, next_review_at: datetime, now: datetime) -> str:
    """Reminder text for one word, labelled by how overdue it is."""
    overdue = days_overdue(next_review_at, now)
    if overdue > 7:
        label = "[Urgent] "
    elif overdue > 3:
        label = "[Important] "
    elif overdue > 0:
        label = "[Reminder] "
    else:
        label = ""

    if overdue > 0:
        return f"{label}'{word}' has been waiting {overdue} day(s) for a review."
    return f"{label}Time to review '{word}'."


class ReminderService:
    """Emits reminder messages for due words."""

    def __init__(self, clock: Clock = system_clock, config: SchedulerConfig | None = None):
        self.clock = clock
        self.config = config or SchedulerConfig()

    def send_due_reminders(self, user_id: str, word_id: str | None = None) -> dict:
        """
        Record a reminder for each due word that has none today.

        Args:
            user_id: Owner of the words
            word_id: Limit the batch to one word; otherwise the earliest due
                words are checked, up to REMINDER_BATCH_SIZE

        Returns:
            Dict with sent and total counts and the reminders written

        Raises:
            NotFoundError: If word_id is given but not owned by the user
        """
        now = self.clock.now()
        since = day_start(now, self.config.tz)

        with get_connection() as conn:
            cursor = conn.cursor()

            if word_id:
                cursor.execute(
                    """SELECT s.*, w.word FROM review_states s
                    JOIN words w ON w.id = s.word_id
                    WHERE s.word_id = ? AND s.user_id = ?""",
                    (word_id, user_id),
                )
                row = cursor.fetchone()
                if not row:
                    raise NotFoundError(user_id, word_id)
                states = [ReviewState.from_row(dict(row))]
            else:
                cursor.execute(
                    """SELECT s.*, w.word FROM review_states s
                    JOIN words w ON w.id = s.word_id
                    WHERE s.user_id = ? AND s.next_review_at <= ?
                    ORDER BY s.next_review_at ASC LIMIT ?""",
                    (user_id, to_iso(now), REMINDER_BATCH_SIZE),
                )
                states = [ReviewState.from_row(dict(row)) for row in cursor.fetchall()]

            sent = []
            for state in states:
                cursor.execute(
                    """SELECT COUNT(*) FROM reminders
                    WHERE user_id = ? AND word_id = ? AND sent_at >= ?""",
                    (user_id, state.word_id, to_iso(since)),
                )
                sent_today = cursor.fetchone()[0]
                if not may_remind(state, sent_today, now):
                    continue

                content = reminder_message(state.word or state.word_id, state.next_review_at, now)
                cursor.execute(
                    """INSERT INTO reminders (user_id, word_id, content, sent_at)
                    VALUES (?, ?, ?, ?)""",
                    (user_id, state.word_id, content, to_iso(now)),
                )
                sent.append({"word_id": state.word_id, "word": state.word, "content": content})

            conn.commit()

        logger.info("Sent %d of %d reminders for user %s", len(sent), len(states), user_id)
        return {"sent": len(sent), "total": len(states), "reminders": sent}

    def unread_count(self, user_id: str) -> int:
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) FROM reminders WHERE user_id = ? AND is_read = 0",
                (user_id,),
            )
            return cursor.fetchone()[0]
