"""Health suggestions derived from the score breakdown and diet checks."""

from __future__ import annotations

from typing import Optional

from food_analysis.domain.diet.models import DietCompatibilityResult
from food_analysis.domain.scoring.scorer import NutritionScore

LOW_CONFIDENCE_THRESHOLD = 0.5


def generate_health_suggestions(
    score: NutritionScore,
    diet_compatibility: Optional[DietCompatibilityResult] = None,
    confidence: float = 1.0,
    unresolved_items: Optional[list[str]] = None,
) -> list[str]:
    """
    Human-readable suggestions for an analyzed meal.

    Args:
        score: Nutrition score of the meal
        diet_compatibility: Diet and allergen check, if preferences were given
        confidence: Aggregate confidence of the analysis
        unresolved_items: Names of items with no nutrition data

    Returns:
        Suggestions, most important first
    """
    suggestions: list[str] = []

    if diet_compatibility is not None:
        for warning in diet_compatibility.allergen_warnings:
            suggestions.append(
                f"Warning: contains {warning.allergen} ({', '.join(warning.ingredients)})."
            )
        for violation in diet_compatibility.violations:
            suggestions.append(
                f"Not compatible with your {violation.diet} diet: "
                f"{', '.join(violation.violating_ingredients)}."
            )
        if diet_compatibility.unknown_ingredients and diet_compatibility.warnings:
            suggestions.append(
                "Could not verify diet and allergen safety for: "
                f"{', '.join(diet_compatibility.unknown_ingredients)}. Check the labels."
            )

    breakdown = score.breakdown
    if breakdown.penalty_sugar > 10:
        suggestions.append(
            "Consider reducing sugar intake by choosing fresh fruits instead of processed sweets."
        )
    if breakdown.penalty_sodium > 20:
        suggestions.append(
            "This meal is high in sodium. Try using herbs and spices for flavor instead of salt."
        )
    if breakdown.bonus_fiber < 5:
        suggestions.append(
            "Add more fiber with vegetables, fruits, or whole grains to support digestive health."
        )
    if breakdown.bonus_protein < 10:
        suggestions.append("Consider adding lean protein sources like chicken, fish, or legumes.")
    if score.score >= 85:
        suggestions.append("Excellent nutritional balance! This meal supports your health goals.")

    if unresolved_items:
        suggestions.append(
            "Nutrition totals exclude items we could not identify: "
            f"{', '.join(unresolved_items)}."
        )
    if confidence < LOW_CONFIDENCE_THRESHOLD:
        suggestions.append("These values are rough estimates; treat them as approximate.")

    return suggestions


def no_items_message(total_items: int) -> str:
    """Message shown when nothing could be resolved."""
    if total_items == 0:
        return "We could not recognize any food in this input. Try describing it in text."
    return (
        f"We could not find nutrition data for any of the {total_items} item(s). "
        "Try a more common name or add it manually."
    )
