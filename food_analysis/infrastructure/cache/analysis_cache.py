"""
Analysis result cache with TTL support.

Content-addressed: the key is a SHA-256 fingerprint of the input type,
the normalized payload and the user's preferences, so equivalent
requests share one entry.
"""

from __future__ import annotations

import hashlib
import re
import threading
import time
from typing import Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from food_analysis.domain.analysis.models import (
    FoodAnalysisInput,
    FoodAnalysisResult,
    InputType,
    UserPreferences,
)
from food_analysis.domain.analysis.ports import ICacheStore
from food_analysis.domain.shared.errors import CacheError
from food_analysis.domain.shared.value_objects import Barcode
from food_analysis.infrastructure.cache.memory_store import InMemoryCacheStore

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 7 * 24 * 3600


class CacheEntry(BaseModel):
    """
    Stored analysis.

    The result is kept serialized, so every read materializes a new
    FoodAnalysisResult and callers can never mutate the stored copy.
    """

    model_config = ConfigDict(frozen=True)

    result_json: str
    created_at: float = Field(..., description="Epoch seconds")
    hit_count: int = Field(0, ge=0)

    def result(self) -> FoodAnalysisResult:
        """Fresh result object built from the stored JSON."""
        return FoodAnalysisResult.model_validate_json(self.result_json)


def normalize_text(text: str) -> str:
    """
    Lowercase, drop characters outside [a-z0-9 ] and collapse whitespace.

    Example:
        >>> normalize_text("  Chicken   Breast!! ")
        'chicken breast'
    """
    return " ".join(re.sub(r"[^a-z0-9\s]", "", text.lower()).split())


def normalize_payload(input_type: InputType, data: str) -> str:
    """Payload normalization per input type."""
    if input_type == InputType.TEXT:
        return normalize_text(data)
    if input_type == InputType.BARCODE:
        return Barcode.normalize(data)
    return data


def preferences_hash(preferences: Optional[UserPreferences]) -> str:
    """Order-insensitive SHA-256 of diets and allergens."""
    prefs = preferences or UserPreferences()
    diets = sorted({d.strip().lower() for d in prefs.diet_preferences})
    allergens = sorted({a.strip().lower() for a in prefs.allergen_restrictions})
    material = "diets=" + ",".join(diets) + "|allergens=" + ",".join(allergens)
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def build_cache_key(analysis_input: FoodAnalysisInput) -> str:
    """
    Cache key of an analysis request.

    Example:
        >>> a = FoodAnalysisInput.create("text", "Chicken Breast")
        >>> b = FoodAnalysisInput.create("text", "  chicken   breast!!")
        >>> assert build_cache_key(a) == build_cache_key(b)
    """
    input_type = InputType(analysis_input.type)
    material = ":".join(
        (
            input_type.value,
            normalize_payload(input_type, analysis_input.data),
            preferences_hash(analysis_input.user_preferences),
        )
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


class AnalysisCache:
    """
    TTL cache of analysis results.

    Expired entries are evicted lazily on read; ``remove_expired`` sweeps
    them eagerly. Reads and the hit-count update run under one lock.
    """

    def __init__(
        self,
        store: Optional[ICacheStore] = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize cache.

        Args:
            store: Backing key/value store (in-memory by default)
            ttl_seconds: Entry lifetime (default 7 days)
            clock: Time source in epoch seconds
        """
        self.store: ICacheStore = store if store is not None else InMemoryCacheStore()
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.created_at > self.ttl_seconds

    def get(self, key: str) -> Optional[CacheEntry]:
        """Get an unexpired entry, counting the hit.

        Returns:
            Entry with its updated hit_count, or None
        """
        with self._lock:
            entry = self.store.get(key)
            if not isinstance(entry, CacheEntry):
                self._misses += 1
                logger.debug("Cache miss", key=key)
                return None

            if self._is_expired(entry):
                self.store.delete(key)
                self._misses += 1
                self._evictions += 1
                logger.debug("Cache expired", key=key)
                return None

            updated = entry.model_copy(update={"hit_count": entry.hit_count + 1})
            self.store.set(key, updated)
            self._hits += 1

        logger.debug("Cache hit", key=key, hit_count=updated.hit_count)
        return updated

    def get_result(self, key: str) -> Optional[FoodAnalysisResult]:
        """Get a fresh copy of a cached result.

        Raises:
            CacheError: If the stored entry cannot be deserialized
        """
        entry = self.get(key)
        if entry is None:
            return None
        try:
            return entry.result()
        except ValidationError as e:
            self.delete(key)
            raise CacheError(f"Corrupted cache entry for key {key}") from e

    def set(self, key: str, result: FoodAnalysisResult) -> CacheEntry:
        """Store a result; the last write wins."""
        entry = CacheEntry(result_json=result.model_dump_json(), created_at=self._clock())
        with self._lock:
            self.store.set(key, entry)
        logger.debug("Cached analysis", key=key, ttl=self.ttl_seconds)
        return entry

    def exists(self, key: str) -> bool:
        """True when an unexpired entry exists; does not count a hit."""
        with self._lock:
            entry = self.store.get(key)
            return isinstance(entry, CacheEntry) and not self._is_expired(entry)

    def delete(self, key: str) -> bool:
        """Remove one entry."""
        with self._lock:
            return self.store.delete(key)

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self.store.clear()
        logger.info("Cache cleared")

    def remove_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        removed = 0
        with self._lock:
            for key in self.store.keys():
                entry = self.store.get(key)
                if isinstance(entry, CacheEntry) and self._is_expired(entry):
                    self.store.delete(key)
                    removed += 1
            self._evictions += removed

        if removed:
            logger.info("Removed expired entries", count=removed)
        return removed

    def stats(self) -> dict[str, float]:
        """Counters for observability."""
        with self._lock:
            return {
                "entries": len(self.store.keys()),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "ttl_seconds": self.ttl_seconds,
            }
