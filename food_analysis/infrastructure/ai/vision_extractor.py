"""
Vision food extraction.

OpenAI-backed implementation of IVisionFoodExtractor.
"""

from __future__ import annotations

import base64
from typing import Any, List

import structlog

from food_analysis.domain.nutrition.models import FoodItem
from food_analysis.domain.recognition.prompts import build_vision_messages
from food_analysis.infrastructure.ai.openai_client import OpenAIClient

logger = structlog.get_logger(__name__)

_IMAGE_SIGNATURES = (
    (b"\x89PNG", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF8", "image/gif"),
    (b"RIFF", "image/webp"),
)


def detect_mime_type(image_bytes: bytes) -> str:
    """Image MIME type from magic bytes, JPEG when unknown."""
    for signature, mime in _IMAGE_SIGNATURES:
        if image_bytes.startswith(signature):
            return mime
    return "image/jpeg"


class OpenAIVisionExtractor:
    """
    Identify food items in a photo with an OpenAI vision model.

    Example:
        >>> extractor = OpenAIVisionExtractor(OpenAIClient(model="gpt-4o-mini"))
        >>> items = await extractor.extract(image_bytes)
    """

    def __init__(self, openai_client: OpenAIClient, min_confidence: float = 0.5) -> None:
        """
        Args:
            openai_client: Client for a vision-capable model
            min_confidence: Items below this confidence are dropped
        """
        self.openai_client = openai_client
        self.min_confidence = min_confidence

    async def extract(self, image_bytes: bytes) -> list[FoodItem]:
        """
        Recognize foods in an image.

        Raises:
            ExternalServiceError: On API failure or invalid response
        """
        encoded = base64.b64encode(image_bytes).decode("ascii")
        data_url = f"data:{detect_mime_type(image_bytes)};base64,{encoded}"

        async with self.openai_client as client:
            raw = await client.complete_json(build_vision_messages(data_url))

        items = self._parse_items(raw.get("items") or [])
        logger.info("Vision extraction done", items=len(items))
        return items

    def _parse_items(self, raw_items: List[Any]) -> list[FoodItem]:
        items = []
        for raw_item in raw_items:
            if not isinstance(raw_item, dict):
                continue
            try:
                confidence = float(raw_item.get("confidence", 0.0))
                item = FoodItem(
                    name=str(raw_item.get("name") or raw_item.get("label") or ""),
                    quantity=float(raw_item.get("quantity_g", 100.0)),
                    unit="g",
                    confidence=min(max(confidence, 0.0), 1.0),
                )
            except (ValueError, TypeError):
                # Skip invalid items
                continue
            if item.confidence >= self.min_confidence:
                items.append(item)
        return items
