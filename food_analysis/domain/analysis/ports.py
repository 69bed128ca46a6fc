"""
Ports (Interfaces) for Food Analysis Dependencies.

Defines abstract interfaces for the external capabilities used by the
FoodAnalysisPipeline: nutrition sources, vision extraction, speech to
text and cache storage.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Optional, Protocol, runtime_checkable

from food_analysis.domain.nutrition.models import FoodItem, SourceMatch


@runtime_checkable
class INutritionSource(Protocol):
    """
    Port for a nutrition data source.

    Implementations return per-100g data and never fabricate values:
    nutrients missing upstream stay None.
    """

    name: str

    async def lookup(self, query: str) -> Optional[SourceMatch]:
        """
        Look up nutrition data for a food name or barcode.

        Args:
            query: Food name, or barcode digits for barcode sources

        Returns:
            SourceMatch, or None when the source has no record

        Raises:
            SourceUnavailableError: On transport or authentication failure
            SourceTimeoutError: When the source did not answer in time
        """
        ...


@runtime_checkable
class IVisionFoodExtractor(Protocol):
    """
    Port for food recognition in images.

    Output is non-deterministic; the pipeline only consumes it.
    """

    async def extract(self, image_bytes: bytes) -> list[FoodItem]:
        """
        Identify foods in an image.

        Args:
            image_bytes: Raw image bytes

        Returns:
            Recognized food items with per-item confidence
        """
        ...


@runtime_checkable
class ISpeechToText(Protocol):
    """Port for audio transcription."""

    async def transcribe(self, audio: bytes) -> str:
        """
        Transcribe spoken food description.

        Args:
            audio: Raw audio bytes

        Returns:
            Transcript text
        """
        ...


@runtime_checkable
class ICacheStore(Protocol):
    """
    Port for key/value storage behind AnalysisCache.

    Values are opaque to the store.
    """

    def get(self, key: str) -> Optional[object]:
        """Stored value, or None."""
        ...

    def set(self, key: str, value: object) -> None:
        """Store value, replacing any previous one."""
        ...

    def exists(self, key: str) -> bool:
        """True when key is stored."""
        ...

    def delete(self, key: str) -> bool:
        """Remove key; True if something was removed."""
        ...

    def clear(self) -> None:
        """Remove everything."""
        ...

    def keys(self) -> list[str]:
        """Snapshot of stored keys."""
        ...
