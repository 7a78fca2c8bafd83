import pytest

from word_review_mcp.models.enums import SchedulingMode
from word_review_mcp.services.mastery import (
    continuous_mastery,
    estimate_mastery,
    milestone_mastery,
)


class TestContinuousMastery:
    """Mastery from memory strength and correct rate"""

    def test_never_reviewed(self):
        assert continuous_mastery(0.0, 0, 0) == 0

    def test_no_nudge_without_reviews(self):
        assert continuous_mastery(0.45, 0, 0) == 2

    def test_perfect_record_earns_a_level(self):
        # floor(0.6 * 5) = 3, +1 for 100% correct
        assert continuous_mastery(0.6, 6, 6) == 4

    def test_poor_record_costs_a_level(self):
        # floor(0.6 * 5) = 3, -1 for 25% correct
        assert continuous_mastery(0.6, 8, 2) == 2

    def test_middling_record_is_neutral(self):
        assert continuous_mastery(0.6, 4, 3) == 3

    def test_clamped_to_five(self):
        assert continuous_mastery(1.0, 10, 10) == 5

    def test_clamped_to_zero(self):
        assert continuous_mastery(0.0, 5, 0) == 0

    def test_out_of_range_inputs(self):
        assert continuous_mastery(7.0, 10, 99) == 5
        assert continuous_mastery(-1.0, -4, -2) == 0

    @pytest.mark.parametrize("review_count", [0, 1, 2])
    def test_guardrail_before_three_reviews(self, review_count):
        level = continuous_mastery(1.0, review_count, review_count)
        assert level <= max(2, review_count)

    def test_guardrail_lifted_at_three_reviews(self):
        assert continuous_mastery(0.8, 3, 3) == 5


class TestMilestoneMastery:
    def test_ratio_scaled_to_levels(self):
        # 6 of 9 slots -> floor(3.33) = 3
        assert milestone_mastery((True,) * 3, (True,) * 3 + (False,) * 3, review_count=6) == 3

    def test_full_grid(self):
        assert milestone_mastery((True,) * 3, (True,) * 6, review_count=9) == 5

    def test_guardrail_applies(self):
        assert milestone_mastery((True,) * 3, (True,) * 6, review_count=1) == 2


class TestEstimateMastery:
    def test_dispatches_on_mode(self, make_state):
        continuous = make_state(memory_strength=0.8, review_count=5, correct_count=5)
        milestone = continuous.model_copy(update={"mode": SchedulingMode.MILESTONE})

        assert estimate_mastery(continuous) == 5
        assert estimate_mastery(milestone) == 0

    def test_mastery_floor_for_every_state(self, make_state):
        for review_count in range(3):
            state = make_state(
                memory_strength=1.0,
                review_count=review_count,
                correct_count=review_count,
                short_slots=(True,) * 3,
                long_slots=(True,) * 6,
            )
            for mode in SchedulingMode:
                level = estimate_mastery(state.model_copy(update={"mode": mode}))
                assert level <= max(2, review_count)
