"""
USDA FoodData Central nutrition source.
"""

from typing import Callable, Optional

import structlog

from food_analysis.domain.nutrition.models import NutrientSource, SourceMatch
from food_analysis.domain.nutrition.usda_mapper import USDAMapper
from food_analysis.infrastructure.usda.api_client import RateLimiter, USDAApiClient

logger = structlog.get_logger(__name__)

USDA_CONFIDENCE = 0.95


class UsdaSource:
    """
    Nutrition source backed by USDA FoodData Central search.

    A fresh API client (and HTTP session) is opened per lookup so
    concurrent lookups never share a session; the rate limiter is shared.

    Example:
        >>> source = UsdaSource.from_api_key("DEMO_KEY", timeout_seconds=5)
        >>> match = await source.lookup("banana")
    """

    name = NutrientSource.USDA.value

    def __init__(self, client_factory: Callable[[], USDAApiClient]) -> None:
        self._client_factory = client_factory

    @classmethod
    def from_api_key(
        cls, api_key: str, timeout_seconds: float = 5, max_retries: int = 2
    ) -> "UsdaSource":
        """Build a source whose clients share one rate limiter."""
        rate_limiter = RateLimiter()
        return cls(
            lambda: USDAApiClient(
                api_key=api_key,
                timeout_seconds=timeout_seconds,
                max_retries=max_retries,
                rate_limiter=rate_limiter,
            )
        )

    async def lookup(self, query: str) -> Optional[SourceMatch]:
        """
        Search USDA and map the best match.

        Raises:
            SourceUnavailableError: On transport, auth or rate-limit failure
        """
        async with self._client_factory() as client:
            result = await client.search_by_description(query)

        if result is None:
            return None

        food = result.best_match()
        if food is None:
            return None

        profile = USDAMapper.to_nutrition_profile(food)
        if profile.is_empty():
            logger.info("USDA match without usable nutrients", query=query, fdc_id=food.fdc_id)
            return None

        logger.debug("USDA match", query=query, fdc_id=food.fdc_id, description=food.description)
        return SourceMatch(
            profile=profile,
            matched_name=food.description,
            source=NutrientSource.USDA,
            confidence=USDA_CONFIDENCE,
        )
