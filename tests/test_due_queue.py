from datetime import timedelta
from zoneinfo import ZoneInfo

from word_review_mcp.services.due_queue import (
    end_of_day,
    estimate_today_reviews,
    is_due,
    sort_review_queue,
)


class TestSortReviewQueue:
    """Priority ordering of review sessions"""

    def test_overdue_before_not_due(self, now, make_state):
        later = make_state(word_id="later", next_review_at=now + timedelta(hours=1), error_count=9)
        due = make_state(word_id="due", next_review_at=now - timedelta(minutes=1))

        ordered = sort_review_queue([later, due], now)
        assert [s.word_id for s in ordered] == ["due", "later"]

    def test_due_exactly_now_counts_as_overdue(self, now, make_state):
        assert is_due(make_state(next_review_at=now), now)
        assert not is_due(make_state(next_review_at=now + timedelta(seconds=1)), now)

    def test_full_key_order(self, now, make_state):
        past = now - timedelta(hours=2)
        states = [
            make_state(word_id="mastered", next_review_at=past, error_count=1, review_count=4,
                       memory_strength=1.0, correct_count=3),
            make_state(word_id="fresh", next_review_at=past, error_count=1, review_count=4),
            make_state(word_id="practiced", next_review_at=past, error_count=1, review_count=9),
            make_state(word_id="errors", next_review_at=past, error_count=3, review_count=9),
        ]

        ordered = sort_review_queue(states, now)
        assert [s.word_id for s in ordered] == ["errors", "fresh", "mastered", "practiced"]

    def test_ties_keep_input_order(self, now, make_state):
        states = [make_state(word_id=f"w{i}") for i in range(5)]
        ordered = sort_review_queue(states, now)
        assert [s.word_id for s in ordered] == [f"w{i}" for i in range(5)]

    def test_deterministic(self, now, make_state):
        states = [
            make_state(word_id=f"w{i}", error_count=i % 3, review_count=i % 2,
                       next_review_at=now + timedelta(minutes=i * 7 - 20))
            for i in range(12)
        ]
        first = [s.word_id for s in sort_review_queue(states, now)]
        second = [s.word_id for s in sort_review_queue(states, now)]
        assert first == second

    def test_input_not_modified(self, now, make_state):
        states = [make_state(word_id="b", error_count=0), make_state(word_id="a", error_count=5)]
        sort_review_queue(states, now)
        assert [s.word_id for s in states] == ["b", "a"]


class TestTodayEstimate:
    def test_end_of_day_in_zone(self, now):
        # 09:30 UTC is 18:30 in Tokyo; the Tokyo day ends at 15:00 UTC
        cutoff = end_of_day(now, ZoneInfo("Asia/Tokyo"))
        assert cutoff.hour == 14 and cutoff.minute == 59

    def test_counts_states_due_before_midnight(self, now, make_state):
        states = [
            make_state(next_review_at=now - timedelta(days=3)),
            make_state(next_review_at=now + timedelta(hours=10)),
            make_state(next_review_at=now + timedelta(hours=20)),
        ]
        assert estimate_today_reviews(states, now, ZoneInfo("UTC")) == 2
