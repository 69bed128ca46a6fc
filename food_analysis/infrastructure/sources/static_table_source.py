"""Static food table nutrition source."""

from typing import Optional

from food_analysis.domain.nutrition.models import NutrientSource, SourceMatch
from food_analysis.infrastructure.static_table.food_table import find_static_food

EXACT_MATCH_CONFIDENCE = 0.8
CONTAINED_MATCH_CONFIDENCE = 0.7


class StaticTableSource:
    """
    Offline source over the curated static table.

    Exact name or alias match scores 0.8, a whole-word match inside a
    longer name ("grilled chicken breast") scores 0.7.
    """

    name = NutrientSource.STATIC_TABLE.value

    async def lookup(self, query: str) -> Optional[SourceMatch]:
        match = find_static_food(query)
        if match is None:
            return None
        return SourceMatch(
            profile=match.food.profile,
            matched_name=match.food.name,
            source=NutrientSource.STATIC_TABLE,
            confidence=EXACT_MATCH_CONFIDENCE if match.exact else CONTAINED_MATCH_CONFIDENCE,
        )
