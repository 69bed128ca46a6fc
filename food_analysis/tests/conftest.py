"""
Shared fixtures for food analysis tests.

Every external source is replaced by an in-process fake or a mock;
no test touches the network.
"""

from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from food_analysis.application.analysis.pipeline import FoodAnalysisPipeline
from food_analysis.application.nutrition.resolver import NutritionResolver, SourceChain
from food_analysis.domain.nutrition.models import NutrientSource, NutritionProfile, SourceMatch
from food_analysis.infrastructure.cache.analysis_cache import AnalysisCache
from food_analysis.infrastructure.sources.static_table_source import StaticTableSource


class FakeSource:
    """Nutrition source answering from a dict, counting lookups."""

    def __init__(
        self,
        name: str,
        matches: Optional[dict[str, SourceMatch]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.name = name
        self.matches = matches or {}
        self.error = error
        self.calls: list[str] = []

    async def lookup(self, query: str) -> Optional[SourceMatch]:
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return self.matches.get(query)


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def chicken_profile() -> NutritionProfile:
    """Chicken breast per 100 g."""
    return NutritionProfile(
        calories=165.0,
        protein_g=31.0,
        carbs_g=0.0,
        fat_g=3.6,
        saturated_fat_g=1.0,
        fiber_g=0.0,
        sugar_g=0.0,
        sodium_mg=74.0,
    )


@pytest.fixture
def cola_profile() -> NutritionProfile:
    """Sugary drink per 100 g, no protein."""
    return NutritionProfile(
        calories=42.0,
        protein_g=0.0,
        carbs_g=10.6,
        fat_g=0.0,
        saturated_fat_g=0.0,
        fiber_g=0.0,
        sugar_g=10.6,
        sodium_mg=4.0,
    )


@pytest.fixture
def make_match():
    """Factory for SourceMatch records."""

    def _make(
        profile: NutritionProfile,
        name: str = "matched food",
        source: NutrientSource = NutrientSource.USDA,
        confidence: float = 0.95,
    ) -> SourceMatch:
        return SourceMatch(profile=profile, matched_name=name, source=source, confidence=confidence)

    return _make


@pytest.fixture
def fake_source():
    """The FakeSource class, for building chains in tests."""
    return FakeSource


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# ═══════════════════════════════════════════════════════════
# PIPELINE FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def cache(fake_clock: FakeClock) -> AnalysisCache:
    """Empty in-memory cache on a fake clock."""
    return AnalysisCache(clock=fake_clock)


@pytest.fixture
def static_chain() -> SourceChain:
    """Offline text chain over the static table."""
    return SourceChain.of(StaticTableSource(), timeout_seconds=1.0)


@pytest.fixture
def mock_off_source() -> MagicMock:
    """OpenFoodFacts source finding nothing."""
    source = MagicMock()
    source.name = NutrientSource.OPENFOODFACTS.value
    source.lookup = AsyncMock(return_value=None)
    return source


@pytest.fixture
def offline_pipeline(
    static_chain: SourceChain, mock_off_source: MagicMock, cache: AnalysisCache
) -> FoodAnalysisPipeline:
    """Pipeline with no network sources."""
    return FoodAnalysisPipeline(
        text_chain=static_chain,
        barcode_chain=SourceChain.of(mock_off_source),
        cache=cache,
        resolver=NutritionResolver(),
    )
