"""OpenAI Whisper implementation of ISpeechToText."""

import structlog

from food_analysis.infrastructure.ai.openai_client import OpenAIClient

logger = structlog.get_logger(__name__)


class OpenAITranscriber:
    """Transcribes spoken meal descriptions."""

    def __init__(self, openai_client: OpenAIClient) -> None:
        self.openai_client = openai_client

    async def transcribe(self, audio: bytes) -> str:
        """
        Transcribe audio bytes.

        Raises:
            SourceUnavailableError: On API failure
        """
        async with self.openai_client as client:
            text = await client.transcribe(audio)
        logger.info("Audio transcribed", characters=len(text))
        return text
