"""
OpenFoodFacts API client.

Handles HTTP requests to OpenFoodFacts database.
"""

import asyncio
from typing import Optional

import aiohttp
import structlog

from food_analysis.domain.barcode.openfoodfacts_mapper import OpenFoodFactsMapper
from food_analysis.domain.barcode.openfoodfacts_models import OFFSearchResult
from food_analysis.domain.shared.errors import (
    BarcodeNotFoundError,
    RateLimitError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from food_analysis.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)


class OpenFoodFactsClient:
    """OpenFoodFacts API client."""

    BASE_URL = "https://world.openfoodfacts.org/api/v2"
    USER_AGENT = "FoodAnalysisPipeline/1.0"

    def __init__(
        self,
        timeout_seconds: float = 10,
        max_retries: int = 3,
    ) -> None:
        """Initialize API client.

        Args:
            timeout_seconds: Request timeout
            max_retries: Max retry attempts
        """
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "OpenFoodFactsClient":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(headers={"User-Agent": self.USER_AGENT})
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.close()
            self._session = None

    async def get_product(self, barcode: Barcode) -> OFFSearchResult:
        """Get product by barcode.

        Args:
            barcode: Product barcode

        Returns:
            Search result with the product

        Raises:
            BarcodeNotFoundError: If barcode not in database
            SourceTimeoutError: If every attempt timed out
            SourceUnavailableError: If API or transport error

        Example:
            >>> async def test():
            ...     async with OpenFoodFactsClient() as client:
            ...         barcode = Barcode(value="3017620422003")
            ...         return await client.get_product(barcode)
        """
        url = f"{self.BASE_URL}/product/{barcode.value}"

        for attempt in range(self.max_retries):
            try:
                if not self._session:
                    msg = "Client not initialized, use async with"
                    raise SourceUnavailableError(msg)

                async with self._session.get(
                    url,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as response:
                    if response.status == 404:
                        logger.info(
                            "Barcode not found in OFF",
                            barcode=barcode.value,
                        )
                        raise BarcodeNotFoundError(f"Barcode {barcode.value} not found")

                    if response.status == 429:
                        msg = f"OpenFoodFacts rate limit (attempt {attempt + 1})"
                        logger.warning(msg, barcode=barcode.value)
                        raise RateLimitError(msg)

                    if response.status >= 400:
                        msg = f"OpenFoodFacts API error: {response.status}"
                        raise SourceUnavailableError(msg)

                    data = await response.json()
                    result = OpenFoodFactsMapper.parse_product_response(data)

                    if not result.is_found():
                        logger.info(
                            "Product not found in OFF",
                            barcode=barcode.value,
                        )
                        raise BarcodeNotFoundError(f"Barcode {barcode.value} not found")

                    logger.info(
                        "Product found in OFF",
                        barcode=barcode.value,
                        name=result.product.product_name if result.product else None,
                    )

                    return result

            except asyncio.TimeoutError as e:
                if attempt == self.max_retries - 1:
                    msg = "OpenFoodFacts API timeout"
                    raise SourceTimeoutError(msg) from e

                wait = 2**attempt
                logger.warning(
                    f"Timeout, retrying in {wait}s",
                    attempt=attempt + 1,
                )
                await asyncio.sleep(wait)

            except aiohttp.ClientError as e:
                if attempt == self.max_retries - 1:
                    msg = f"OpenFoodFacts API client error: {e}"
                    raise SourceUnavailableError(msg) from e

                wait = 2**attempt
                await asyncio.sleep(wait)

        msg = "Max retries exceeded"
        raise SourceUnavailableError(msg)
