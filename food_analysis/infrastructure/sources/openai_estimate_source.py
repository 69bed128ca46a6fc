"""
OpenAI nutrition estimate source.

Last resort of the text chain: asks the model for typical per-100g
values. Its confidence never exceeds 0.5.
"""

from typing import Any, Optional

import structlog
from pydantic import ValidationError

from food_analysis.domain.nutrition.daily_values import percent_daily_values
from food_analysis.domain.nutrition.models import (
    NUTRIENT_FIELDS,
    NutrientSource,
    NutritionProfile,
    SourceMatch,
)
from food_analysis.domain.recognition.prompts import build_nutrition_estimate_messages
from food_analysis.infrastructure.ai.openai_client import OpenAIClient

logger = structlog.get_logger(__name__)

MAX_ESTIMATE_CONFIDENCE = 0.5


def _non_negative(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


class OpenAIEstimateSource:
    """LLM-estimated nutrition, tagged ``openai``."""

    name = NutrientSource.OPENAI.value

    def __init__(self, openai_client: OpenAIClient) -> None:
        self.openai_client = openai_client

    async def lookup(self, query: str) -> Optional[SourceMatch]:
        """
        Estimate per-100g nutrients for a food name.

        Raises:
            ExternalServiceError: On API failure or unusable JSON
        """
        async with self.openai_client as client:
            data = await client.complete_json(build_nutrition_estimate_messages(query), max_tokens=400)

        matched_name = data.get("matched_name")
        if not matched_name:
            return None

        values = {field: _non_negative(data.get(field)) for field in NUTRIENT_FIELDS}
        try:
            profile = NutritionProfile(
                **values,
                micronutrients_percent_dv=percent_daily_values(
                    {
                        "vitamin_c": values["vitamin_c_mg"],
                        "iron": values["iron_mg"],
                        "calcium": values["calcium_mg"],
                    }
                ),
            )
        except ValidationError as e:
            logger.warning("Unusable OpenAI estimate", query=query, error=str(e))
            return None

        if profile.is_empty():
            return None

        confidence = _non_negative(data.get("confidence"))
        confidence = min(confidence if confidence is not None else MAX_ESTIMATE_CONFIDENCE, 1.0)

        return SourceMatch(
            profile=profile,
            matched_name=str(matched_name),
            source=NutrientSource.OPENAI,
            confidence=min(confidence, MAX_ESTIMATE_CONFIDENCE),
        )
