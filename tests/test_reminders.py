from datetime import timedelta
from zoneinfo import ZoneInfo

import pytest

from word_review_mcp.config import SchedulerConfig
from word_review_mcp.errors import NotFoundError
from word_review_mcp.models.word import WordCreate
from word_review_mcp.services.reminders import (
    ReminderService,
    day_start,
    may_remind,
    reminder_message,
)


class TestMayRemind:
    """Daily reminder gate"""

    def test_due_without_reminder(self, now, make_state):
        assert may_remind(make_state(next_review_at=now - timedelta(hours=1)), 0, now)

    def test_already_reminded_today(self, now, make_state):
        assert not may_remind(make_state(next_review_at=now - timedelta(hours=1)), 1, now)
        assert not may_remind(make_state(next_review_at=now), True, now)

    def test_not_due_yet(self, now, make_state):
        assert not may_remind(make_state(next_review_at=now + timedelta(minutes=5)), 0, now)


class TestReminderText:
    @pytest.mark.parametrize("days,label", [
        (0, ""),
        (1, "[Reminder]"),
        (4, "[Important]"),
        (8, "[Urgent]"),
    ])
    def test_urgency_labels(self, now, days, label):
        message = reminder_message("ephemeral", now - timedelta(days=days, minutes=1), now)
        assert "ephemeral" in message
        assert message.startswith(label)

    def test_day_start_in_zone(self, now):
        # 09:30 UTC on March 2 is 04:30 in New York, whose day began at 05:00 UTC
        start = day_start(now, ZoneInfo("America/New_York"))
        assert start == now.replace(hour=5, minute=0)


class TestReminderService:
    def test_one_reminder_per_day(self, service, reminders, clock):
        service.add_word(WordCreate(user_id="u1", word="alpha"))
        service.add_word(WordCreate(user_id="u1", word="beta"))
        clock.advance(timedelta(hours=2))

        first = reminders.send_due_reminders("u1")
        second = reminders.send_due_reminders("u1")

        assert first["sent"] == 2
        assert first["total"] == 2
        assert second["sent"] == 0
        assert second["total"] == 2
        assert reminders.unread_count("u1") == 2

    def test_new_day_allows_another_reminder(self, service, reminders, clock):
        service.add_word(WordCreate(user_id="u1", word="alpha"))
        clock.advance(timedelta(hours=2))
        reminders.send_due_reminders("u1")

        clock.advance(timedelta(days=1))
        assert reminders.send_due_reminders("u1")["sent"] == 1

    def test_not_due_words_skipped(self, service, reminders):
        service.add_word(WordCreate(user_id="u1", word="alpha"))
        assert reminders.send_due_reminders("u1") == {"sent": 0, "total": 0, "reminders": []}

    def test_single_word(self, service, reminders, clock):
        target = service.add_word(WordCreate(user_id="u1", word="alpha")).word_id
        service.add_word(WordCreate(user_id="u1", word="beta"))
        clock.advance(timedelta(hours=2))

        result = reminders.send_due_reminders("u1", word_id=target)
        assert result["sent"] == 1
        assert result["reminders"][0]["word"] == "alpha"

    def test_single_word_not_found(self, reminders):
        with pytest.raises(NotFoundError):
            reminders.send_due_reminders("u1", word_id="missing")

    def test_day_boundary_follows_timezone(self, db_path, clock, service):
        """In Tokyo the day rolls over at 15:00 UTC"""
        tokyo = ReminderService(clock=clock, config=SchedulerConfig(db_path=db_path, timezone="Asia/Tokyo"))
        service.add_word(WordCreate(user_id="u1", word="alpha"))
        clock.advance(timedelta(hours=2))  # 11:30 UTC
        assert tokyo.send_due_reminders("u1")["sent"] == 1

        clock.advance(timedelta(hours=4))  # 15:30 UTC, next day in Tokyo
        assert tokyo.send_due_reminders("u1")["sent"] == 1
