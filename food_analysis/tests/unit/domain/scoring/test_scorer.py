"""
Unit tests for the nutrition scorer.

Reference values per 100 g are taken from the scoring formula:
sugar 20 g -> -18, sodium 1000 mg -> -50, saturated fat 12 g -> -20.
"""

import pytest

from food_analysis.domain.nutrition.models import NutritionProfile
from food_analysis.domain.scoring.scorer import (
    Grade,
    NutritionScorer,
    calculate_nutrition_score,
    clamp,
    grade_for,
    round_half_up,
)


def _zero_profile(**overrides: float) -> NutritionProfile:
    values = {
        "calories": 0.0,
        "protein_g": 0.0,
        "carbs_g": 0.0,
        "fat_g": 0.0,
        "saturated_fat_g": 0.0,
        "fiber_g": 0.0,
        "sugar_g": 0.0,
        "sodium_mg": 0.0,
    }
    values.update(overrides)
    return NutritionProfile(**values)


class TestClamp:
    """Test clamp helper."""

    def test_within_bounds(self) -> None:
        assert clamp(5, 0, 10) == 5

    def test_below_lower_bound(self) -> None:
        assert clamp(-3, 0, 10) == 0

    def test_above_upper_bound(self) -> None:
        assert clamp(42, 0, 10) == 10

    def test_degenerate_range(self) -> None:
        assert clamp(7, 3, 3) == 3

    def test_inverted_bounds_raise(self) -> None:
        with pytest.raises(ValueError, match="Invalid clamp bounds"):
            clamp(1, 10, 0)


class TestRoundHalfUp:
    """Test rounding used for final scores."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (84.49, 84), (84.5, 85), (0.0, 0)],
    )
    def test_round_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


class TestGradeFor:
    """Test grade thresholds."""

    @pytest.mark.parametrize(
        "score,grade",
        [
            (100, Grade.A),
            (85, Grade.A),
            (84, Grade.B),
            (70, Grade.B),
            (69, Grade.C),
            (55, Grade.C),
            (54, Grade.D),
            (0, Grade.D),
        ],
    )
    def test_thresholds(self, score: int, grade: Grade) -> None:
        assert grade_for(score) == grade


class TestNutritionScorer:
    """Test point-based score computation."""

    @pytest.fixture
    def scorer(self) -> NutritionScorer:
        return NutritionScorer()

    def test_all_zero_profile_scores_100(self, scorer: NutritionScorer) -> None:
        """Neutral food keeps the base score."""
        result = scorer.score(_zero_profile())

        assert result.score == 100
        assert result.grade == "A"
        assert result.unknown_nutrients == []

    def test_sugar_penalty(self, scorer: NutritionScorer) -> None:
        result = scorer.score(_zero_profile(sugar_g=20.0))

        assert result.breakdown.penalty_sugar == 18.0
        assert result.score == 82
        assert result.grade == "B"

    def test_sodium_penalty(self, scorer: NutritionScorer) -> None:
        result = scorer.score(_zero_profile(sodium_mg=1000.0))

        assert result.breakdown.penalty_sodium == 50.0
        assert result.score == 50
        assert result.grade == "D"

    def test_saturated_fat_penalty(self, scorer: NutritionScorer) -> None:
        result = scorer.score(_zero_profile(saturated_fat_g=12.0))

        assert result.breakdown.penalty_saturated_fat == 20.0
        assert result.score == 80

    def test_score_sums_unrounded_terms(self, scorer: NutritionScorer) -> None:
        """Only the breakdown is rounded; the total uses exact terms."""
        # (1007.0644 - 300) / 14 = 50.5046
        result = scorer.score(_zero_profile(sodium_mg=1007.0644))

        assert result.breakdown.penalty_sodium == 50.5
        assert result.score == 49

    def test_penalties_are_capped(self, scorer: NutritionScorer) -> None:
        result = scorer.score(_zero_profile(sugar_g=500.0, sodium_mg=50000.0, saturated_fat_g=90.0))

        assert result.breakdown.penalty_sugar == 30.0
        assert result.breakdown.penalty_sodium == 100.0
        assert result.breakdown.penalty_saturated_fat == 36.0
        assert result.score == 0
        assert result.grade == "D"

    def test_small_amounts_below_thresholds_are_free(self, scorer: NutritionScorer) -> None:
        result = scorer.score(_zero_profile(sugar_g=5.0, sodium_mg=300.0, saturated_fat_g=2.0))

        assert result.breakdown.penalty_sugar == 0.0
        assert result.breakdown.penalty_sodium == 0.0
        assert result.breakdown.penalty_saturated_fat == 0.0

    def test_fiber_and_protein_bonuses_are_capped(self, scorer: NutritionScorer) -> None:
        result = scorer.score(_zero_profile(fiber_g=20.0, protein_g=30.0))

        assert result.breakdown.bonus_fiber == 20.0
        assert result.breakdown.bonus_protein == 24.0
        assert result.score == 100

    def test_bonuses_offset_penalties(self, scorer: NutritionScorer) -> None:
        result = scorer.score(_zero_profile(sugar_g=20.0, fiber_g=5.0))

        # 100 - 18 + 10
        assert result.score == 92

    def test_micronutrient_bonus(self, scorer: NutritionScorer) -> None:
        profile = _zero_profile(sodium_mg=1000.0).model_copy(
            update={
                "micronutrients_percent_dv": {
                    "vitamin_c": 50.0,
                    "iron": 10.0,
                    "calcium": 12.0,
                    "potassium": 30.0,
                    "zinc": 9.99,
                }
            }
        )

        result = scorer.score(profile)

        assert result.breakdown.bonus_micronutrients == 6.0
        assert result.score == 56

    def test_micronutrient_bonus_is_capped(self, scorer: NutritionScorer) -> None:
        dv = {f"nutrient_{i}": 25.0 for i in range(14)}
        profile = _zero_profile().model_copy(update={"micronutrients_percent_dv": dv})

        result = scorer.score(profile)

        assert result.breakdown.bonus_micronutrients == 20.0

    def test_unknown_nutrients_scored_as_zero_and_reported(self, scorer: NutritionScorer) -> None:
        result = scorer.score(NutritionProfile(calories=120.0, sugar_g=20.0))

        assert result.breakdown.penalty_sugar == 18.0
        assert result.score == 82
        assert result.unknown_nutrients == [
            "sodium_mg",
            "saturated_fat_g",
            "fiber_g",
            "protein_g",
        ]
        assert "Unknown values scored as 0" in result.explanation

    def test_score_is_normalized_per_100g(
        self, scorer: NutritionScorer, chicken_profile: NutritionProfile
    ) -> None:
        """A 150 g portion scores like its per-100 g data."""
        portion = chicken_profile.scale_to_quantity(150.0)

        assert scorer.score(portion) == scorer.score(chicken_profile)

    def test_explanation_lists_terms(self, scorer: NutritionScorer) -> None:
        result = scorer.score(_zero_profile(sugar_g=20.0, protein_g=10.0))

        assert result.explanation.startswith("Score 94/100 (grade A)")
        assert "sugar -18" in result.explanation
        assert "protein +12" in result.explanation

    def test_deterministic(self, scorer: NutritionScorer, chicken_profile: NutritionProfile) -> None:
        first = scorer.score(chicken_profile)
        second = scorer.score(chicken_profile)

        assert first == second

    def test_chicken_breast_is_grade_a(self, chicken_profile: NutritionProfile) -> None:
        result = calculate_nutrition_score(chicken_profile)

        assert result.breakdown.bonus_protein == 24.0
        assert result.score == 100
        assert result.grade == "A"
