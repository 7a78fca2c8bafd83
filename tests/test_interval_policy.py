from datetime import timedelta
import itertools

import pytest

from word_review_mcp.models.enums import Outcome
from word_review_mcp.services.interval_policy import (
    INTERVAL_DAYS,
    MAX_STAGE,
    advance,
    interval_days_for,
    outcome_from_quality,
    quality_from_outcome,
)


class TestAdvance:
    """Continuous-mode transitions"""

    def test_three_goods_from_fresh_state(self, now):
        """Three goods in a row reach stage 4 without touching the ease factor"""
        stage, ease, strength = 1, 2.5, 0.0
        for _ in range(3):
            result = advance(Outcome.GOOD, now, stage=stage, ease_factor=ease, memory_strength=strength)
            stage, ease, strength = result.stage, result.ease_factor, result.memory_strength

        assert stage == 4
        assert ease == 2.5
        assert strength == pytest.approx(0.3)

    @pytest.mark.parametrize("stage", range(1, MAX_STAGE + 1))
    def test_forgot_resets_stage(self, now, stage):
        """Forgetting always sends the word back to stage 1"""
        result = advance(Outcome.FORGOT, now, stage=stage)
        assert result.stage == 1

    @pytest.mark.parametrize("stage", range(1, MAX_STAGE + 1))
    def test_good_never_regresses(self, now, stage):
        result = advance(Outcome.GOOD, now, stage=stage)
        assert result.stage >= stage

    def test_easy_skips_a_stage(self, now):
        result = advance(Outcome.EASY, now, stage=2, ease_factor=2.5, memory_strength=0.5)
        assert result.stage == 4
        assert result.ease_factor == 2.6
        assert result.memory_strength == pytest.approx(0.65)

    def test_hard_keeps_stage_and_lowers_ease(self, now):
        result = advance(Outcome.HARD, now, stage=5, ease_factor=2.5, memory_strength=0.5)
        assert result.stage == 5
        assert result.ease_factor == 2.4
        assert result.memory_strength == pytest.approx(0.45)

    def test_forgot_penalties(self, now):
        result = advance(Outcome.FORGOT, now, stage=6, ease_factor=2.5, memory_strength=0.2)
        assert result.ease_factor == 2.3
        assert result.memory_strength == 0.0

    def test_stage_capped_at_max(self, now):
        result = advance(Outcome.EASY, now, stage=MAX_STAGE - 1)
        assert result.stage == MAX_STAGE
        assert result.interval_days == 30

    def test_next_review_uses_stage_interval(self, now):
        result = advance(Outcome.GOOD, now, stage=4)
        assert result.interval_days == 2
        assert result.next_review_at == now + timedelta(days=2)
        assert result.interval_hours == 48

    def test_accepts_outcome_strings(self, now):
        assert advance("good", now).stage == 2

    def test_rejects_unknown_outcome(self, now):
        with pytest.raises(ValueError):
            advance("meh", now)


class TestInvariants:
    """Properties that hold for every input"""

    @pytest.mark.parametrize("outcome", list(Outcome))
    @pytest.mark.parametrize("stage", [-3, 0, 1, 4, MAX_STAGE, 99])
    def test_next_review_never_in_past(self, now, outcome, stage):
        result = advance(outcome, now, stage=stage, ease_factor=9.0, memory_strength=-1.0)
        assert result.next_review_at >= now
        assert 1 <= result.stage <= MAX_STAGE

    def test_ease_factor_stays_bounded(self, now):
        """Every outcome sequence of length 6 keeps the ease factor in bounds"""
        for sequence in itertools.product(list(Outcome), repeat=6):
            stage, ease, strength = 1, 2.5, 0.0
            for outcome in sequence:
                result = advance(outcome, now, stage=stage, ease_factor=ease, memory_strength=strength)
                stage, ease, strength = result.stage, result.ease_factor, result.memory_strength
                assert 1.3 <= ease <= 3.0
                assert 0.0 <= strength <= 1.0

    def test_out_of_range_inputs_are_clamped(self, now):
        low = advance(Outcome.FORGOT, now, ease_factor=0.1, memory_strength=-5)
        high = advance(Outcome.EASY, now, ease_factor=10, memory_strength=5)

        assert low.ease_factor == 1.3
        assert low.memory_strength == 0.0
        assert high.ease_factor == 3.0
        assert high.memory_strength == 1.0


class TestHelpers:
    def test_interval_table_is_increasing(self):
        assert list(INTERVAL_DAYS) == sorted(INTERVAL_DAYS)

    def test_interval_days_for_clamps(self):
        assert interval_days_for(0) == INTERVAL_DAYS[1]
        assert interval_days_for(100) == INTERVAL_DAYS[MAX_STAGE]

    @pytest.mark.parametrize("quality,expected", [
        (-1, Outcome.FORGOT),
        (0, Outcome.FORGOT),
        (1, Outcome.FORGOT),
        (2, Outcome.HARD),
        (3, Outcome.GOOD),
        (4, Outcome.EASY),
        (5, Outcome.EASY),
        (9, Outcome.EASY),
    ])
    def test_outcome_from_quality(self, quality, expected):
        assert outcome_from_quality(quality) == expected

    def test_quality_from_outcome(self):
        assert [quality_from_outcome(o) for o in Outcome] == [0, 2, 3, 5]
