"""Review state store: words, their review states, and state transitions."""

import json
import logging
import re
import uuid
from collections import Counter
from datetime import date, datetime, timedelta

from ..config import SchedulerConfig
from ..database.connection import get_connection
from ..errors import NotFoundError
from ..models.enums import Outcome, SchedulingMode, Track
from ..models.review_state import ReviewState
from ..models.word import Word, WordCreate
from . import interval_policy, milestone_policy
from .clock import Clock, system_clock, to_iso, to_utc
from .due_queue import end_of_day, sort_review_queue
from .mastery import estimate_mastery
from .reminders import day_start

logger = logging.getLogger(__name__)

STATE_QUERY = """SELECT s.*, w.word FROM review_states s
    JOIN words w ON w.id = s.word_id"""

# How far back review history is scanned for streaks
STREAK_WINDOW_DAYS = 365


def review_streaks(review_days: set[date], today: date) -> tuple[int, int]:
    """Current and longest runs of consecutive days with at least one review.

    The current run counts back from today, so it is 0 when today has no
    review yet.
    """
    current = 0
    day = today
    while day in review_days:
        current += 1
        day -= timedelta(days=1)

    longest = run = 0
    previous = None
    for day in sorted(review_days):
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        longest = max(longest, run)
        previous = day
    return current, longest


class ReviewService:
    """Service owning every write to a review state."""

    def __init__(self, clock: Clock = system_clock, config: SchedulerConfig | None = None):
        self.clock = clock
        self.config = config or SchedulerConfig()

    # ==================== Word Operations ====================

    def add_word(self, word_data: WordCreate) -> ReviewState:
        """
        Add a word to a user's collection and create its review state.

        The first prompt is scheduled after the configured delay rather
        than immediately.

        Args:
            word_data: Word creation data

        Returns:
            The new ReviewState

        Raises:
            ValueError: If the user already has this word
        """
        now = self.clock.now()
        word_id = self._generate_word_id(word_data.word)

        with get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                "SELECT id FROM words WHERE user_id = ? AND word = ?",
                (word_data.user_id, word_data.word),
            )
            existing = cursor.fetchone()
            if existing:
                raise ValueError(
                    f"Word '{word_data.word}' already exists with ID '{existing['id']}'"
                )

            cursor.execute(
                """INSERT INTO words (id, user_id, word, definition, created_at)
                VALUES (?, ?, ?, ?, ?)""",
                (word_id, word_data.user_id, word_data.word, word_data.definition, to_iso(now)),
            )
            cursor.execute(
                """INSERT INTO review_states
                (word_id, user_id, next_review_at, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)""",
                (
                    word_id,
                    word_data.user_id,
                    to_iso(now + self.config.first_delay),
                    to_iso(now),
                    to_iso(now),
                ),
            )
            conn.commit()

            state = self._fetch_state(cursor, word_data.user_id, word_id)

        logger.info("Added word '%s' (%s) for user %s", word_data.word, word_id, word_data.user_id)
        return state

    def get_word(self, user_id: str, word_id: str) -> Word:
        """Get a word owned by the user."""
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM words WHERE id = ? AND user_id = ?",
                (word_id, user_id),
            )
            row = cursor.fetchone()
            if not row:
                raise NotFoundError(user_id, word_id)
            return Word.from_row(dict(row))

    def delete_word(self, user_id: str, word_id: str) -> bool:
        """Delete a word; its review state, log and reminders go with it."""
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM words WHERE id = ? AND user_id = ?",
                (word_id, user_id),
            )
            conn.commit()
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Deleted word %s for user %s", word_id, user_id)
        return deleted

    def resolve_word_id(self, user_id: str, identifier: str) -> str | None:
        """Resolve a word identifier (ID or the word itself) to a word ID."""
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id FROM words WHERE user_id = ? AND (id = ? OR word = ?)",
                (user_id, identifier, identifier.strip().lower()),
            )
            row = cursor.fetchone()
            return row["id"] if row else None

    # ==================== State Transitions ====================

    def get_state(self, user_id: str, word_id: str) -> ReviewState:
        """Get the review state of a word owned by the user."""
        with get_connection() as conn:
            return self._fetch_state(conn.cursor(), user_id, word_id)

    def advance_on_outcome(self, user_id: str, word_id: str, outcome: Outcome | str) -> ReviewState:
        """
        Apply a review outcome and reschedule the word.

        Not idempotent: submitting the same outcome twice applies it twice.

        Args:
            user_id: Owner of the word
            word_id: Word that was reviewed
            outcome: forgot, hard, good or easy

        Returns:
            The updated ReviewState (mode becomes continuous)

        Raises:
            NotFoundError: If the user has no such word
        """
        outcome = Outcome(outcome)
        now = self.clock.now()

        with get_connection() as conn:
            cursor = conn.cursor()
            current = self._fetch_state(cursor, user_id, word_id)

            result = interval_policy.advance(
                outcome,
                now,
                stage=current.stage,
                ease_factor=current.ease_factor,
                memory_strength=current.memory_strength,
            )

            recalled = outcome in (Outcome.GOOD, Outcome.EASY)
            updated = current.model_copy(update={
                "mode": SchedulingMode.CONTINUOUS,
                "stage": result.stage,
                "ease_factor": result.ease_factor,
                "memory_strength": result.memory_strength,
                "interval_days": result.interval_days,
                "review_count": current.review_count + 1,
                "correct_count": current.correct_count + (1 if recalled else 0),
                "error_count": current.error_count + (0 if recalled else 1),
                "last_review_at": now,
                "next_review_at": result.next_review_at,
                "updated_at": now,
            })
            updated = updated.model_copy(update={"mastery_level": estimate_mastery(updated)})

            self._write_state(cursor, updated)
            self._log_event(
                cursor, current, updated, now,
                event="outcome",
                outcome=outcome.value,
            )
            conn.commit()

        logger.debug(
            "Word %s: %s -> stage %d, due %s",
            word_id, outcome.value, updated.stage, updated.next_review_at.isoformat(),
        )
        return updated

    def toggle_milestone(
        self,
        user_id: str,
        word_id: str,
        track: Track | str,
        index: int,
    ) -> ReviewState:
        """
        Check or uncheck one milestone slot.

        Only a new completion (unchecked to checked) moves the due time and
        counts as a review. Unchecking leaves both untouched, so a due time
        set by a completion that is later undone stays in place.

        Raises:
            NotFoundError: If the user has no such word
            ValueError: If index is outside the track
        """
        track = Track(track)
        now = self.clock.now()

        with get_connection() as conn:
            cursor = conn.cursor()
            current = self._fetch_state(cursor, user_id, word_id)

            result = milestone_policy.toggle(
                current.short_slots,
                current.long_slots,
                track,
                index,
                now,
                ever_completed=current.milestone_completions > 0,
            )

            update = {
                "mode": SchedulingMode.MILESTONE,
                "short_slots": result.short_slots,
                "long_slots": result.long_slots,
                "updated_at": now,
            }
            if result.is_new_completion:
                update["next_review_at"] = result.next_review_at
                update["interval_days"] = round((result.next_review_at - now) / timedelta(days=1), 4)
                update["milestone_completions"] = current.milestone_completions + 1
                update["review_count"] = current.review_count + 1
                update["last_review_at"] = now

            updated = current.model_copy(update=update)
            updated = updated.model_copy(update={"mastery_level": estimate_mastery(updated)})

            self._write_state(cursor, updated)
            self._log_event(
                cursor, current, updated, now,
                event="milestone" if result.is_new_completion else "milestone_undo",
                track=track.value,
                slot_index=index,
            )
            conn.commit()

        logger.debug(
            "Word %s: %s[%d] -> %s",
            word_id, track.value, index, "checked" if result.is_new_completion else "unchecked",
        )
        return updated

    def reset_progress(self, user_id: str, word_id: str) -> ReviewState:
        """Explicit reset: back to a fresh state with the first-review delay."""
        now = self.clock.now()

        with get_connection() as conn:
            cursor = conn.cursor()
            current = self._fetch_state(cursor, user_id, word_id)

            updated = ReviewState(
                word_id=current.word_id,
                user_id=current.user_id,
                word=current.word,
                next_review_at=now + self.config.first_delay,
                created_at=current.created_at,
                updated_at=now,
            )

            self._write_state(cursor, updated)
            self._log_event(cursor, current, updated, now, event="reset")
            conn.commit()

        logger.info("Reset progress of word %s for user %s", word_id, user_id)
        return updated

    def estimate_mastery(self, state: ReviewState) -> int:
        return estimate_mastery(state)

    # ==================== Queues & Statistics ====================

    def list_due(self, user_id: str, now=None, limit: int = 20) -> list[ReviewState]:
        """
        Get the user's due words, highest priority first.

        Args:
            user_id: Owner of the words
            now: Reference time; the clock is read once when omitted
            limit: Maximum number of states to return

        Returns:
            Due ReviewStates ordered for a review session
        """
        now = now or self.clock.now()

        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"{STATE_QUERY} WHERE s.user_id = ? AND s.next_review_at <= ?",
                (user_id, to_iso(now)),
            )
            states = [ReviewState.from_row(dict(row)) for row in cursor.fetchall()]

        return sort_review_queue(states, now)[:max(0, limit)]

    def list_states(self, user_id: str) -> list[ReviewState]:
        """All review states of a user, alphabetical by word."""
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"{STATE_QUERY} WHERE s.user_id = ? ORDER BY w.word ASC",
                (user_id,),
            )
            return [ReviewState.from_row(dict(row)) for row in cursor.fetchall()]

    def get_statistics(self, user_id: str) -> dict:
        """Get learning statistics and progress metrics for a user."""
        now = self.clock.now()
        states = self.list_states(user_id)

        with get_connection() as conn:
            cursor = conn.cursor()

            # Words reviewed since the start of the reminder day
            cursor.execute(
                """SELECT COUNT(DISTINCT word_id) FROM review_log
                WHERE user_id = ? AND event IN ('outcome', 'milestone')
                AND reviewed_at >= ?""",
                (user_id, to_iso(day_start(now, self.config.tz))),
            )
            reviewed_today = cursor.fetchone()[0]

            cursor.execute(
                """SELECT reviewed_at FROM review_log
                WHERE user_id = ? AND event IN ('outcome', 'milestone')
                AND reviewed_at >= ?""",
                (user_id, to_iso(now - timedelta(days=STREAK_WINDOW_DAYS))),
            )
            review_days = {
                to_utc(datetime.fromisoformat(row["reviewed_at"])).astimezone(self.config.tz).date()
                for row in cursor.fetchall()
            }

            cursor.execute(
                "SELECT COUNT(*) FROM reminders WHERE user_id = ? AND is_read = 0",
                (user_id,),
            )
            unread_reminders = cursor.fetchone()[0]

        levels = [estimate_mastery(s) for s in states]
        distribution = Counter(levels)
        total_reviews = sum(s.review_count for s in states)
        total_correct = sum(s.correct_count for s in states)
        total_errors = sum(s.error_count for s in states)
        answered = total_correct + total_errors
        cutoff = end_of_day(now, self.config.tz)
        streak_days, longest_streak = review_streaks(
            review_days, to_utc(now).astimezone(self.config.tz).date()
        )

        return {
            "total_words": len(states),
            "due_now": sum(1 for s in states if s.next_review_at <= now),
            "due_today": sum(1 for s in states if s.next_review_at <= cutoff),
            "reviewed_today": reviewed_today,
            "mastery_distribution": {str(level): distribution.get(level, 0) for level in range(6)},
            "average_mastery": round(sum(levels) / len(levels), 2) if levels else 0.0,
            "mastered_words": sum(1 for level in levels if level >= 4),
            "total_reviews": total_reviews,
            "correct_rate": round(total_correct / answered, 2) if answered else 0.0,
            "streak_days": streak_days,
            "longest_streak": longest_streak,
            "unread_reminders": unread_reminders,
        }

    # ==================== Helpers ====================

    def _fetch_state(self, cursor, user_id: str, word_id: str) -> ReviewState:
        cursor.execute(
            f"{STATE_QUERY} WHERE s.word_id = ? AND s.user_id = ?",
            (word_id, user_id),
        )
        row = cursor.fetchone()
        if not row:
            raise NotFoundError(user_id, word_id)
        return ReviewState.from_row(dict(row))

    def _write_state(self, cursor, state: ReviewState) -> None:
        cursor.execute(
            """UPDATE review_states SET
                mode = ?, stage = ?, ease_factor = ?, memory_strength = ?,
                interval_days = ?, short_slots = ?, long_slots = ?,
                milestone_completions = ?,
                review_count = ?, correct_count = ?, error_count = ?,
                mastery_level = ?, last_review_at = ?, next_review_at = ?,
                updated_at = ?
            WHERE word_id = ? AND user_id = ?""",
            (
                state.mode.value,
                state.stage,
                state.ease_factor,
                state.memory_strength,
                state.interval_days,
                json.dumps(list(state.short_slots)),
                json.dumps(list(state.long_slots)),
                state.milestone_completions,
                state.review_count,
                state.correct_count,
                state.error_count,
                state.mastery_level,
                to_iso(state.last_review_at) if state.last_review_at else None,
                to_iso(state.next_review_at),
                to_iso(state.updated_at) if state.updated_at else None,
                state.word_id,
                state.user_id,
            ),
        )

    def _log_event(self, cursor, before: ReviewState, after: ReviewState, now, event: str,
                   outcome: str | None = None, track: str | None = None,
                   slot_index: int | None = None) -> None:
        cursor.execute(
            """INSERT INTO review_log
            (word_id, user_id, event, outcome, track, slot_index,
             stage_before, stage_after, mastery_before, mastery_after, reviewed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                after.word_id,
                after.user_id,
                event,
                outcome,
                track,
                slot_index,
                before.stage,
                after.stage,
                before.mastery_level,
                after.mastery_level,
                to_iso(now),
            ),
        )

    def _generate_word_id(self, word: str) -> str:
        """Generate a word ID from the word and a random suffix."""
        slug = re.sub(r"[^a-z0-9]+", "_", word.lower()).strip("_") or "word"
        return f"{slug}_{uuid.uuid4().hex[:8]}"
