"""
OpenAI API client for food analysis.

Async client with structured JSON output, rate limiting, and
speech transcription.
"""

from __future__ import annotations

import asyncio
import json
import os
import time
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import openai
import structlog
from openai import AsyncOpenAI

from food_analysis.domain.shared.errors import (
    ExternalServiceError,
    RateLimitError,
    SourceTimeoutError,
    SourceUnavailableError,
)

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion

logger = structlog.get_logger(__name__)


class OpenAIClient:
    """
    Async OpenAI client for vision, text completion and transcription.

    Features:
    - Structured JSON output mode
    - Rate limiting (60 RPM default)
    - OpenAI SDK errors translated to domain errors
    - Context manager for resource cleanup

    Example:
        >>> async with OpenAIClient() as client:
        ...     messages = [
        ...         {"role": "system", "content": "Return JSON"},
        ...         {"role": "user", "content": "Hello"},
        ...     ]
        ...     data = await client.complete_json(messages)
    """

    TRANSCRIPTION_MODEL = "whisper-1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        max_retries: int = 1,
        timeout: float = 15,
        rpm_limit: int = 60,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (reads from environment if None)
            model: Chat model (must support vision for image extraction)
            max_retries: SDK retry attempts on failure
            timeout: Request timeout in seconds
            rpm_limit: Requests per minute limit
            client: Optional pre-configured AsyncOpenAI client (for testing)

        Raises:
            ValueError: If API key not found and client not provided
        """
        # If client provided, use it (for dependency injection/testing)
        if client is not None:
            self._client: Optional[AsyncOpenAI] = client
            self._owns_client = False
            self.api_key: str = api_key or "test-key"
        else:
            resolved_key = api_key or os.getenv("OPENAI_API_KEY")
            if not resolved_key:
                raise ValueError(
                    "OPENAI_API_KEY not found in environment. "
                    "Set it in .env file or pass as parameter."
                )
            self.api_key = resolved_key
            self._client = None
            self._owns_client = True

        self.model = model
        self.max_retries = max_retries
        self.timeout = timeout
        self.rpm_limit = rpm_limit

        # Rate limiting state
        self._request_times: List[float] = []
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> OpenAIClient:
        """Async context manager entry."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        if self._client and self._owns_client:
            await self._client.close()
            self._client = None

    async def _rate_limit(self) -> None:
        """
        Enforce rate limiting.

        Ensures requests stay within rpm_limit by tracking
        request timestamps and sleeping if necessary.
        """
        async with self._lock:
            now = time.time()

            # Remove requests older than 60 seconds
            cutoff = now - 60.0
            self._request_times = [t for t in self._request_times if t > cutoff]

            # If at limit, wait until oldest request expires
            if len(self._request_times) >= self.rpm_limit:
                oldest = self._request_times[0]
                wait_time = 60.0 - (now - oldest)
                if wait_time > 0:
                    await asyncio.sleep(wait_time)
                    now = time.time()
                    cutoff = now - 60.0
                    self._request_times = [t for t in self._request_times if t > cutoff]

            self._request_times.append(now)

    def _require_client(self) -> AsyncOpenAI:
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with.")
        return self._client

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        response_format: Optional[Dict[str, str]] = None,
        temperature: float = 0.3,
        max_tokens: int = 1500,
    ) -> Dict[str, Any]:
        """
        Complete chat and return the raw response text.

        Args:
            messages: Chat messages (system, user, assistant)
            response_format: {"type": "json_object"} for JSON mode
            temperature: Sampling temperature (0.0-2.0)
            max_tokens: Max tokens in response

        Returns:
            Dict with content, finish_reason and usage

        Raises:
            SourceTimeoutError: If OpenAI did not answer in time
            RateLimitError: If OpenAI rejected the request for quota
            SourceUnavailableError: On any other API failure
        """
        client = self._require_client()
        await self._rate_limit()

        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if response_format:
            params["response_format"] = response_format

        try:
            completion: ChatCompletion = await client.chat.completions.create(**params)
        except openai.APITimeoutError as e:
            raise SourceTimeoutError("OpenAI API timeout") from e
        except openai.RateLimitError as e:
            raise RateLimitError(f"OpenAI rate limit: {e}") from e
        except openai.OpenAIError as e:
            logger.warning("OpenAI completion failed", model=self.model, error=str(e))
            raise SourceUnavailableError(f"OpenAI API error: {e}") from e

        choice = completion.choices[0]
        return {
            "content": choice.message.content or "",
            "finish_reason": choice.finish_reason,
            "usage": {
                "prompt_tokens": (completion.usage.prompt_tokens if completion.usage else 0),
                "completion_tokens": (
                    completion.usage.completion_tokens if completion.usage else 0
                ),
                "total_tokens": (completion.usage.total_tokens if completion.usage else 0),
            },
        }

    async def complete_json(
        self,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1500,
    ) -> Dict[str, Any]:
        """
        Complete chat in JSON mode and parse the answer.

        Args:
            messages: Chat messages; the system prompt must ask for JSON

        Returns:
            Parsed JSON object

        Raises:
            ExternalServiceError: If the answer is not a JSON object
        """
        response = await self.complete(
            messages=messages,
            response_format={"type": "json_object"},
            temperature=0.2,  # Lower for more consistent output
            max_tokens=max_tokens,
        )

        try:
            data = json.loads(response["content"])
        except json.JSONDecodeError as e:
            raise ExternalServiceError(f"Invalid JSON response: {response['content']}") from e

        if not isinstance(data, dict):
            raise ExternalServiceError(f"Expected JSON object, got: {type(data).__name__}")
        return data

    async def transcribe(self, audio: bytes, filename: str = "audio.webm") -> str:
        """
        Transcribe audio with Whisper.

        Args:
            audio: Raw audio bytes
            filename: Name hinting the audio container format

        Returns:
            Transcript text

        Raises:
            SourceTimeoutError: If OpenAI did not answer in time
            SourceUnavailableError: On any other API failure
        """
        client = self._require_client()
        await self._rate_limit()

        try:
            transcription = await client.audio.transcriptions.create(
                model=self.TRANSCRIPTION_MODEL,
                file=(filename, audio),
            )
        except openai.APITimeoutError as e:
            raise SourceTimeoutError("OpenAI transcription timeout") from e
        except openai.OpenAIError as e:
            logger.warning("OpenAI transcription failed", error=str(e))
            raise SourceUnavailableError(f"OpenAI transcription error: {e}") from e

        return (transcription.text or "").strip()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get client statistics.

        Returns:
            Dict with model, rpm_limit and requests_last_minute
        """
        now = time.time()
        cutoff = now - 60.0
        recent = [t for t in self._request_times if t > cutoff]

        return {
            "model": self.model,
            "rpm_limit": self.rpm_limit,
            "requests_last_minute": len(recent),
        }
