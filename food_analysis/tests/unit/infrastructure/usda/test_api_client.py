"""
Unit tests for USDA API client.

The aiohttp session is patched; responses mimic FoodData Central search
answers for a roasted chicken breast.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from food_analysis.domain.shared.errors import (
    RateLimitError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from food_analysis.infrastructure.usda.api_client import RateLimiter, USDAApiClient


def _response(status: int, payload: dict | None = None) -> MagicMock:
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload or {})
    return response


class TestRateLimiter:
    """Tests for token bucket rate limiter."""

    @pytest.mark.asyncio
    async def test_acquire_with_available_tokens(self) -> None:
        """Test token acquisition when tokens available."""
        limiter = RateLimiter(requests_per_hour=3600, burst_size=10)

        await limiter.acquire()

        assert limiter.tokens < 10

    @pytest.mark.asyncio
    async def test_acquire_waits_when_tokens_depleted(self) -> None:
        """Test that acquire sleeps when the bucket is empty."""
        limiter = RateLimiter(requests_per_hour=3600, burst_size=1)
        await limiter.acquire()

        with patch("asyncio.sleep") as mock_sleep:
            await limiter.acquire()

            assert mock_sleep.called

    @pytest.mark.asyncio
    async def test_long_wait_raises(self) -> None:
        """Test that a wait above one minute is refused."""
        limiter = RateLimiter(requests_per_hour=1, burst_size=1)
        await limiter.acquire()

        with pytest.raises(RateLimitError, match="wait time > 1 minute"):
            await limiter.acquire()


class TestUSDAApiClient:
    """Tests for USDA FoodData Central API client."""

    @pytest.fixture
    def mock_search_response(self) -> MagicMock:
        """Search answer with one chicken breast entry."""
        return _response(
            200,
            {
                "foods": [
                    {
                        "fdcId": 171077,
                        "description": "Chicken, broilers or fryers, breast, meat only, cooked, roasted",
                        "dataType": "SR Legacy",
                        "foodNutrients": [
                            {"nutrientId": 1008, "value": 165},
                            {"nutrientId": 1003, "value": 31.02},
                            {"nutrientId": 1004, "value": 3.57},
                        ],
                    }
                ],
                "totalHits": 1,
                "currentPage": 1,
                "totalPages": 1,
            },
        )

    @pytest.mark.asyncio
    async def test_search_by_description_success(self, mock_search_response: MagicMock) -> None:
        """Test successful search by description."""
        async with USDAApiClient(api_key="test-key") as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = mock_search_response

                result = await client.search_by_description("chicken breast", max_results=5)

                assert result is not None
                assert result.total_hits == 1
                assert result.foods[0].fdc_id == "171077"
                mock_get.assert_called_once()

    @pytest.mark.asyncio
    async def test_search_sends_query_and_key(self, mock_search_response: MagicMock) -> None:
        """Test request parameters."""
        async with USDAApiClient(api_key="test-key") as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = mock_search_response

                await client.search_by_description("banana", max_results=3)

                params = mock_get.call_args.kwargs["params"]
                assert params["query"] == "banana"
                assert params["pageSize"] == 3
                assert params["api_key"] == "test-key"

    @pytest.mark.asyncio
    async def test_empty_results_return_none(self) -> None:
        """Test a 200 answer with no foods is a miss."""
        empty = _response(200, {"foods": [], "totalHits": 0, "currentPage": 1, "totalPages": 0})

        async with USDAApiClient(api_key="test-key") as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = empty

                assert await client.search_by_description("nonexistent food xyz") is None

    @pytest.mark.asyncio
    async def test_404_returns_none(self) -> None:
        """Test 404 response returns None."""
        async with USDAApiClient(api_key="test-key") as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response(404)

                assert await client.search_by_description("apple") is None

    @pytest.mark.asyncio
    async def test_rate_limited(self) -> None:
        """Test HTTP 429 raises RateLimitError."""
        async with USDAApiClient(api_key="test-key") as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response(429)

                with pytest.raises(RateLimitError):
                    await client.search_by_description("apple")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_failure(self, status: int) -> None:
        """Test bad API key makes the source unavailable."""
        async with USDAApiClient(api_key="bad-key") as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response(status)

                with pytest.raises(SourceUnavailableError, match="authentication failed"):
                    await client.search_by_description("apple")

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        """Test 5xx answers make the source unavailable."""
        async with USDAApiClient(api_key="test-key") as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response(503)

                with pytest.raises(SourceUnavailableError, match="503"):
                    await client.search_by_description("apple")

    @pytest.mark.asyncio
    async def test_retry_with_exponential_backoff(self) -> None:
        """Test timeouts are retried with backoff, then raise."""
        async with USDAApiClient(api_key="test-key", max_retries=3) as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                with patch("asyncio.sleep") as mock_sleep:
                    mock_get.side_effect = asyncio.TimeoutError()

                    with pytest.raises(SourceTimeoutError):
                        await client.search_by_description("test")

                    assert mock_sleep.call_count == 2
                    mock_sleep.assert_any_call(1)
                    mock_sleep.assert_any_call(2)

    @pytest.mark.asyncio
    async def test_client_error_becomes_unavailable(self) -> None:
        """Test transport errors surface as SourceUnavailableError."""
        async with USDAApiClient(api_key="test-key", max_retries=1) as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.side_effect = aiohttp.ClientError("connection reset")

                with pytest.raises(SourceUnavailableError, match="client error"):
                    await client.search_by_description("apple")

    @pytest.mark.asyncio
    async def test_requires_context_manager(self) -> None:
        """Test calling without a session fails cleanly."""
        client = USDAApiClient(api_key="test-key")

        with pytest.raises(SourceUnavailableError, match="not initialized"):
            await client.search_by_description("apple")

    @pytest.mark.asyncio
    async def test_context_manager_session_lifecycle(self) -> None:
        """Test async context manager creates and closes session."""
        client = USDAApiClient(api_key="test-key")
        assert client._session is None

        async with client:
            assert client._session is not None

        assert client._session is None
