"""
USDA FoodData Central API client.

Handles HTTP requests with rate limiting and retries.
"""

import asyncio
import time
from typing import Optional

import aiohttp
import structlog

from food_analysis.domain.nutrition.usda_mapper import USDAMapper
from food_analysis.domain.nutrition.usda_models import USDASearchResult
from food_analysis.domain.shared.errors import (
    RateLimitError,
    SourceTimeoutError,
    SourceUnavailableError,
)

logger = structlog.get_logger(__name__)


class RateLimiter:
    """Token bucket rate limiter.

    Ensures we don't exceed USDA API rate limits.
    """

    def __init__(self, requests_per_hour: int = 1000, burst_size: int = 10) -> None:
        """Initialize rate limiter.

        Args:
            requests_per_hour: Max requests per hour
            burst_size: Max burst requests
        """
        self.requests_per_hour = requests_per_hour
        self.burst_size = burst_size
        self.tokens = float(burst_size)
        self.last_update = time.time()
        self.lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Acquire token or wait.

        Raises:
            RateLimitError: If the wait for a token would exceed one minute
        """
        async with self.lock:
            now = time.time()
            elapsed = now - self.last_update

            # Refill tokens based on time elapsed
            refill_rate = self.requests_per_hour / 3600.0
            self.tokens = min(self.burst_size, self.tokens + elapsed * refill_rate)
            self.last_update = now

            if self.tokens >= 1.0:
                self.tokens -= 1.0
            else:
                # Wait time for next token
                wait_time = (1.0 - self.tokens) / refill_rate
                if wait_time > 60:
                    msg = "Rate limit exceeded, wait time > 1 minute"
                    raise RateLimitError(msg)

                await asyncio.sleep(wait_time)
                self.tokens = 0.0
                self.last_update = time.time()


class USDAApiClient:
    """USDA FoodData Central API client."""

    BASE_URL = "https://api.nal.usda.gov/fdc/v1"

    # Generic foods first; branded entries are noisy for free-text names
    DEFAULT_DATA_TYPES = ("Foundation", "SR Legacy", "Survey (FNDDS)", "Branded")

    def __init__(
        self,
        api_key: str,
        timeout_seconds: float = 10,
        max_retries: int = 3,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        """Initialize API client.

        Args:
            api_key: USDA API key
            timeout_seconds: Request timeout
            max_retries: Max retry attempts
            rate_limiter: Shared limiter, one per client when omitted
        """
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.rate_limiter = rate_limiter or RateLimiter()
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "USDAApiClient":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.close()
            self._session = None

    async def search_by_description(
        self, description: str, max_results: int = 5
    ) -> Optional[USDASearchResult]:
        """Search USDA database by food description.

        Args:
            description: Food description
            max_results: Max results to return

        Returns:
            Search results, or None when nothing matched

        Raises:
            RateLimitError: If rate limit exceeded
            SourceTimeoutError: If every attempt timed out
            SourceUnavailableError: If API error, auth failure or transport error

        Example:
            >>> async def test():
            ...     async with USDAApiClient(api_key="test") as client:
            ...         return await client.search_by_description("banana")
        """
        await self.rate_limiter.acquire()

        params: dict[str, str | int] = {
            "query": description,
            "pageSize": max_results,
            "dataType": ",".join(self.DEFAULT_DATA_TYPES),
            "api_key": self.api_key,
        }

        url = f"{self.BASE_URL}/foods/search"

        for attempt in range(self.max_retries):
            try:
                if not self._session:
                    msg = "Client not initialized, use async with"
                    raise SourceUnavailableError(msg)

                async with self._session.get(
                    url,
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as response:
                    if response.status == 429:
                        msg = f"USDA rate limit (attempt {attempt + 1})"
                        logger.warning(msg, query=description)
                        raise RateLimitError(msg)

                    if response.status in (401, 403):
                        msg = f"USDA API authentication failed: {response.status}"
                        logger.error(msg, query=description)
                        raise SourceUnavailableError(msg)

                    if response.status == 404:
                        logger.info("No USDA match", query=description)
                        return None

                    if response.status >= 400:
                        msg = f"USDA API error: {response.status}"
                        raise SourceUnavailableError(msg)

                    data = await response.json()
                    result = USDAMapper.parse_search_response(data)

                    if not result.foods:
                        logger.info("No USDA match", query=description)
                        return None

                    return result

            except asyncio.TimeoutError as e:
                if attempt == self.max_retries - 1:
                    msg = "USDA API timeout"
                    raise SourceTimeoutError(msg) from e

                wait = 2**attempt
                logger.warning(
                    f"Timeout, retrying in {wait}s",
                    attempt=attempt + 1,
                )
                await asyncio.sleep(wait)

            except aiohttp.ClientError as e:
                if attempt == self.max_retries - 1:
                    msg = f"USDA API client error: {e}"
                    raise SourceUnavailableError(msg) from e

                wait = 2**attempt
                await asyncio.sleep(wait)

        # Should not reach here
        msg = "Max retries exceeded"
        raise SourceUnavailableError(msg)
