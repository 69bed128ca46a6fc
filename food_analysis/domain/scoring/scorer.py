"""
Nutrition scoring.

Transparent point-based health score computed per 100 g:

    base 100
    - sugar penalty        clamp(sugar_g - 5, 0, 25) * 1.2
    - sodium penalty       clamp(sodium_mg - 300, 0, 1400) / 14
    - saturated fat        clamp(sat_fat_g - 2, 0, 18) * 2
    + fiber bonus          clamp(fiber_g, 0, 10) * 2
    + protein bonus        clamp(protein_g, 0, 20) * 1.2
    + micronutrient bonus  min(round(count(%DV >= 10) * 1.5), 20)

Grades: >= 85 A, >= 70 B, >= 55 C, else D.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from food_analysis.domain.nutrition.models import NutritionProfile

BASE_SCORE = 100.0
MICRONUTRIENT_DV_THRESHOLD = 10.0
MICRONUTRIENT_POINTS = 1.5
MICRONUTRIENT_BONUS_CAP = 20

# Nutrients the formula reads; unknown ones are scored as 0.
SCORED_NUTRIENTS: tuple[str, ...] = (
    "sugar_g",
    "sodium_mg",
    "saturated_fat_g",
    "fiber_g",
    "protein_g",
)


class Grade(str, Enum):
    """Letter grade of a nutrition score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"


class ScoreBreakdown(BaseModel):
    """Every term of the score formula, rounded to 2 decimals."""

    model_config = ConfigDict(frozen=True)

    base_score: float = BASE_SCORE
    penalty_sugar: float = Field(0.0, ge=0)
    penalty_sodium: float = Field(0.0, ge=0)
    penalty_saturated_fat: float = Field(0.0, ge=0)
    bonus_fiber: float = Field(0.0, ge=0)
    bonus_protein: float = Field(0.0, ge=0)
    bonus_micronutrients: float = Field(0.0, ge=0)
    final_score: int = Field(0, ge=0, le=100)


class NutritionScore(BaseModel):
    """
    Health score of a nutrition profile.

    Example:
        >>> score = NutritionScorer().score(NutritionProfile())
        >>> assert score.score == 100
        >>> assert score.grade == "A"
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    score: int = Field(..., ge=0, le=100)
    grade: Grade
    breakdown: ScoreBreakdown
    explanation: str = ""
    unknown_nutrients: list[str] = Field(default_factory=list)


def clamp(x: float, lo: float, hi: float) -> float:
    """
    Bound ``x`` to ``[lo, hi]``.

    Raises:
        ValueError: If lo > hi
    """
    if lo > hi:
        raise ValueError(f"Invalid clamp bounds: {lo} > {hi}")
    return max(lo, min(hi, x))


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves away from zero for x >= 0."""
    return int(math.floor(x + 0.5))


def grade_for(score: float) -> Grade:
    """Letter grade for a 0-100 score."""
    if score >= 85:
        return Grade.A
    if score >= 70:
        return Grade.B
    if score >= 55:
        return Grade.C
    return Grade.D


def _value(profile: NutritionProfile, name: str) -> float:
    value: Optional[float] = getattr(profile, name)
    return 0.0 if value is None else value


class NutritionScorer:
    """Pure, deterministic nutrition scorer."""

    def score(self, profile: NutritionProfile) -> NutritionScore:
        """
        Score a profile.

        The profile is normalised to 100 g first, so a 150 g portion and
        its per-100 g source data get the same score.

        Args:
            profile: Nutrition profile for any quantity

        Returns:
            NutritionScore with breakdown and explanation
        """
        per_100g = profile.per_100g()
        unknown = [name for name in SCORED_NUTRIENTS if getattr(per_100g, name) is None]

        penalty_sugar = clamp(_value(per_100g, "sugar_g") - 5, 0, 25) * 1.2
        penalty_sodium = clamp(_value(per_100g, "sodium_mg") - 300, 0, 1400) / 14
        penalty_saturated_fat = clamp(_value(per_100g, "saturated_fat_g") - 2, 0, 18) * 2
        bonus_fiber = clamp(_value(per_100g, "fiber_g"), 0, 10) * 2
        bonus_protein = clamp(_value(per_100g, "protein_g"), 0, 20) * 1.2

        rich_micronutrients = sum(
            1
            for dv in per_100g.micronutrients_percent_dv.values()
            if dv >= MICRONUTRIENT_DV_THRESHOLD
        )
        bonus_micronutrients = float(
            min(round_half_up(rich_micronutrients * MICRONUTRIENT_POINTS), MICRONUTRIENT_BONUS_CAP)
        )

        raw = (
            BASE_SCORE
            - penalty_sugar
            - penalty_sodium
            - penalty_saturated_fat
            + bonus_fiber
            + bonus_protein
            + bonus_micronutrients
        )
        final_score = round_half_up(clamp(raw, 0, 100))
        grade = grade_for(final_score)

        # The sum uses unrounded terms; only the breakdown is rounded
        breakdown = ScoreBreakdown(
            penalty_sugar=round(penalty_sugar, 2),
            penalty_sodium=round(penalty_sodium, 2),
            penalty_saturated_fat=round(penalty_saturated_fat, 2),
            bonus_fiber=round(bonus_fiber, 2),
            bonus_protein=round(bonus_protein, 2),
            bonus_micronutrients=bonus_micronutrients,
            final_score=final_score,
        )

        return NutritionScore(
            score=final_score,
            grade=grade,
            breakdown=breakdown,
            explanation=self._explain(breakdown, grade, unknown),
            unknown_nutrients=unknown,
        )

    @staticmethod
    def _explain(breakdown: ScoreBreakdown, grade: Grade, unknown: list[str]) -> str:
        terms = [
            ("sugar", -breakdown.penalty_sugar),
            ("sodium", -breakdown.penalty_sodium),
            ("saturated fat", -breakdown.penalty_saturated_fat),
            ("fiber", breakdown.bonus_fiber),
            ("protein", breakdown.bonus_protein),
            ("micronutrients", breakdown.bonus_micronutrients),
        ]
        parts = [f"{label} {points:+g}" for label, points in terms if points]
        text = f"Score {breakdown.final_score}/100 (grade {grade.value})"
        if parts:
            text += ": " + ", ".join(parts)
        if unknown:
            text += f". Unknown values scored as 0: {', '.join(unknown)}"
        return text


def calculate_nutrition_score(profile: NutritionProfile) -> NutritionScore:
    """Module-level shortcut for ``NutritionScorer().score``."""
    return NutritionScorer().score(profile)
