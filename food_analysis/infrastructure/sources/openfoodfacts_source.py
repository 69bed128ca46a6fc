"""
OpenFoodFacts barcode nutrition source.
"""

from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from food_analysis.domain.barcode.openfoodfacts_mapper import OpenFoodFactsMapper
from food_analysis.domain.nutrition.models import NutrientSource, SourceMatch
from food_analysis.domain.shared.errors import BarcodeNotFoundError
from food_analysis.domain.shared.value_objects import Barcode
from food_analysis.infrastructure.openfoodfacts.api_client import OpenFoodFactsClient

logger = structlog.get_logger(__name__)

OFF_CONFIDENCE = 0.9


class OpenFoodFactsSource:
    """
    Nutrition source backed by the OpenFoodFacts product database.

    Queries are barcodes; a missing product is a plain miss.
    """

    name = NutrientSource.OPENFOODFACTS.value

    def __init__(self, client_factory: Callable[[], OpenFoodFactsClient]) -> None:
        self._client_factory = client_factory

    @classmethod
    def from_settings(cls, timeout_seconds: float = 5, max_retries: int = 2) -> "OpenFoodFactsSource":
        """Build a source opening one client per lookup."""
        return cls(
            lambda: OpenFoodFactsClient(timeout_seconds=timeout_seconds, max_retries=max_retries)
        )

    async def lookup(self, query: str) -> Optional[SourceMatch]:
        """
        Look up a product by barcode.

        Raises:
            SourceUnavailableError: On transport or API failure
        """
        try:
            barcode = Barcode.from_raw(query)
        except ValidationError:
            logger.info("Not a barcode, skipping OFF lookup", query=query)
            return None

        try:
            async with self._client_factory() as client:
                result = await client.get_product(barcode)
        except BarcodeNotFoundError:
            return None

        product = result.product
        if product is None:
            return None

        profile = OpenFoodFactsMapper.to_nutrition_profile(product)
        if profile.is_empty():
            logger.info("OFF product without nutriments", barcode=barcode.value)
            return None

        logger.debug(
            "OFF match",
            barcode=barcode.value,
            name=product.display_name(),
            completeness=OpenFoodFactsMapper.calculate_completeness(product),
        )
        return SourceMatch(
            profile=profile,
            matched_name=product.display_name(),
            source=NutrientSource.OPENFOODFACTS,
            confidence=OFF_CONFIDENCE,
        )
