"""
Unit tests for OpenAI client, vision extractor and transcriber.

The AsyncOpenAI SDK client is always injected as a mock.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from food_analysis.domain.shared.errors import (
    ExternalServiceError,
    RateLimitError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from food_analysis.infrastructure.ai.openai_client import OpenAIClient
from food_analysis.infrastructure.ai.speech_to_text import OpenAITranscriber
from food_analysis.infrastructure.ai.vision_extractor import (
    OpenAIVisionExtractor,
    detect_mime_type,
)


def _completion(content: str) -> MagicMock:
    response = MagicMock()
    choice = MagicMock()
    choice.message.content = content
    choice.finish_reason = "stop"
    response.choices = [choice]
    usage = MagicMock()
    usage.prompt_tokens = 100
    usage.completion_tokens = 50
    usage.total_tokens = 150
    response.usage = usage
    return response


@pytest.fixture
def mock_openai_client() -> AsyncMock:
    """Mock AsyncOpenAI client."""
    client = AsyncMock()
    client.close = AsyncMock()
    return client


class TestOpenAIClient:
    """Test suite for OpenAI client."""

    def test_init_with_api_key(self) -> None:
        """Test defaults with explicit API key."""
        client = OpenAIClient(api_key="test-key-123")

        assert client.api_key == "test-key-123"
        assert client.model == "gpt-4o-mini"
        assert client.max_retries == 1
        assert client.rpm_limit == 60

    def test_init_without_api_key_raises_error(self) -> None:
        """Test initialization without API key raises ValueError."""
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ValueError, match="OPENAI_API_KEY not found"):
                OpenAIClient()

    def test_init_reads_from_env(self) -> None:
        """Test initialization reads API key from environment."""
        with patch.dict("os.environ", {"OPENAI_API_KEY": "env-key-456"}):
            assert OpenAIClient().api_key == "env-key-456"

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, mock_openai_client: AsyncMock) -> None:
        """Test an injected SDK client outlives the context manager."""
        async with OpenAIClient(client=mock_openai_client) as client:
            assert client._client is mock_openai_client

        mock_openai_client.close.assert_not_called()
        assert client._client is mock_openai_client

    @pytest.mark.asyncio
    async def test_complete_basic_request(self, mock_openai_client: AsyncMock) -> None:
        """Test basic completion request."""
        mock_openai_client.chat.completions.create = AsyncMock(return_value=_completion("hi"))

        async with OpenAIClient(client=mock_openai_client) as client:
            response = await client.complete(messages=[{"role": "user", "content": "Hello"}])

        assert response["content"] == "hi"
        assert response["finish_reason"] == "stop"
        assert response["usage"]["total_tokens"] == 150

    @pytest.mark.asyncio
    async def test_complete_without_context_manager_raises_error(self) -> None:
        """Test calling complete without a client raises error."""
        client = OpenAIClient(api_key="test-key")

        with pytest.raises(RuntimeError, match="Client not initialized"):
            await client.complete(messages=[])

    @pytest.mark.asyncio
    async def test_complete_json_uses_json_mode(self, mock_openai_client: AsyncMock) -> None:
        """Test JSON mode request and parsing."""
        mock_openai_client.chat.completions.create = AsyncMock(
            return_value=_completion('{"items": [{"name": "apple"}]}')
        )

        async with OpenAIClient(client=mock_openai_client) as client:
            data = await client.complete_json([{"role": "user", "content": "JSON please"}])

        call_kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert call_kwargs["response_format"] == {"type": "json_object"}
        assert call_kwargs["temperature"] == 0.2
        assert data == {"items": [{"name": "apple"}]}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["Not valid JSON", "[1, 2]"])
    async def test_complete_json_rejects_non_objects(
        self, mock_openai_client: AsyncMock, content: str
    ) -> None:
        """Test unusable answers raise ExternalServiceError."""
        mock_openai_client.chat.completions.create = AsyncMock(return_value=_completion(content))

        async with OpenAIClient(client=mock_openai_client) as client:
            with pytest.raises(ExternalServiceError):
                await client.complete_json([{"role": "user", "content": "Test"}])

    @pytest.mark.asyncio
    async def test_sdk_timeout_maps_to_source_timeout(self, mock_openai_client: AsyncMock) -> None:
        """Test SDK timeout error translation."""
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        mock_openai_client.chat.completions.create = AsyncMock(
            side_effect=openai.APITimeoutError(request=request)
        )

        async with OpenAIClient(client=mock_openai_client) as client:
            with pytest.raises(SourceTimeoutError):
                await client.complete(messages=[])

    @pytest.mark.asyncio
    async def test_sdk_rate_limit_maps_to_rate_limit(self, mock_openai_client: AsyncMock) -> None:
        """Test SDK 429 translation."""
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(429, request=request)
        mock_openai_client.chat.completions.create = AsyncMock(
            side_effect=openai.RateLimitError("quota", response=response, body=None)
        )

        async with OpenAIClient(client=mock_openai_client) as client:
            with pytest.raises(RateLimitError):
                await client.complete(messages=[])

    @pytest.mark.asyncio
    async def test_other_sdk_errors_map_to_unavailable(self, mock_openai_client: AsyncMock) -> None:
        """Test generic SDK error translation."""
        mock_openai_client.chat.completions.create = AsyncMock(
            side_effect=openai.OpenAIError("boom")
        )

        async with OpenAIClient(client=mock_openai_client) as client:
            with pytest.raises(SourceUnavailableError, match="boom"):
                await client.complete(messages=[])

    @pytest.mark.asyncio
    async def test_transcribe(self, mock_openai_client: AsyncMock) -> None:
        """Test Whisper transcription."""
        transcription = MagicMock()
        transcription.text = "  two eggs and toast \n"
        mock_openai_client.audio.transcriptions.create = AsyncMock(return_value=transcription)

        async with OpenAIClient(client=mock_openai_client) as client:
            text = await client.transcribe(b"audio-bytes")

        assert text == "two eggs and toast"
        call_kwargs = mock_openai_client.audio.transcriptions.create.call_args.kwargs
        assert call_kwargs["model"] == "whisper-1"
        assert call_kwargs["file"] == ("audio.webm", b"audio-bytes")

    @pytest.mark.asyncio
    async def test_rate_limit_waits_when_at_limit(self) -> None:
        """Test rate limiting sleeps when at RPM limit."""
        import time

        client = OpenAIClient(api_key="test-key", rpm_limit=2)
        now = time.time()
        client._request_times = [now - 30.0, now - 15.0]

        with patch("asyncio.sleep") as mock_sleep:
            await client._rate_limit()

            mock_sleep.assert_called_once()
            assert mock_sleep.call_args[0][0] > 0

    def test_get_stats(self) -> None:
        """Test get_stats returns client statistics."""
        client = OpenAIClient(api_key="test-key", model="gpt-4o")

        stats = client.get_stats()

        assert stats == {"model": "gpt-4o", "rpm_limit": 60, "requests_last_minute": 0}


class TestVisionExtractor:
    """Test image food extraction."""

    def test_detect_mime_type(self) -> None:
        assert detect_mime_type(b"\x89PNG\r\n") == "image/png"
        assert detect_mime_type(b"\xff\xd8\xff\xe0") == "image/jpeg"
        assert detect_mime_type(b"unknown") == "image/jpeg"

    @pytest.mark.asyncio
    async def test_extract_items(self, mock_openai_client: AsyncMock) -> None:
        """Test items are parsed and low-confidence ones dropped."""
        payload = {
            "items": [
                {"name": "grilled chicken", "quantity_g": 150, "confidence": 0.9},
                {"name": "rice", "quantity_g": 200, "confidence": 0.8},
                {"name": "garnish", "quantity_g": 5, "confidence": 0.2},
                {"name": "", "quantity_g": 10, "confidence": 0.9},
                "not a dict",
            ]
        }
        mock_openai_client.chat.completions.create = AsyncMock(
            return_value=_completion(json.dumps(payload))
        )
        extractor = OpenAIVisionExtractor(OpenAIClient(client=mock_openai_client))

        items = await extractor.extract(b"\x89PNG fake")

        assert [(i.name, i.quantity, i.unit) for i in items] == [
            ("grilled chicken", 150.0, "g"),
            ("rice", 200.0, "g"),
        ]
        assert items[0].confidence == 0.9

    @pytest.mark.asyncio
    async def test_image_sent_as_data_url(self, mock_openai_client: AsyncMock) -> None:
        """Test the image reaches the model as a base64 data URL."""
        mock_openai_client.chat.completions.create = AsyncMock(
            return_value=_completion('{"items": []}')
        )
        extractor = OpenAIVisionExtractor(OpenAIClient(client=mock_openai_client))

        assert await extractor.extract(b"\x89PNG fake") == []

        messages = mock_openai_client.chat.completions.create.call_args.kwargs["messages"]
        assert "data:image/png;base64," in json.dumps(messages)


class TestTranscriber:
    """Test the speech-to-text adapter."""

    @pytest.mark.asyncio
    async def test_transcribe(self, mock_openai_client: AsyncMock) -> None:
        transcription = MagicMock()
        transcription.text = "a banana"
        mock_openai_client.audio.transcriptions.create = AsyncMock(return_value=transcription)

        transcriber = OpenAITranscriber(OpenAIClient(client=mock_openai_client))

        assert await transcriber.transcribe(b"audio") == "a banana"
