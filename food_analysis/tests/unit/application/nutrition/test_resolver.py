"""
Unit tests for NutritionResolver.

Chains are built from in-process fake sources; the static table is the
only real source used.
"""

import asyncio
from typing import Optional

import pytest

from food_analysis.application.nutrition.resolver import (
    ChainLink,
    NutritionResolver,
    SourceChain,
    item_confidence,
    resolution_summary,
)
from food_analysis.domain.nutrition.models import (
    FoodItem,
    NutrientSource,
    NutritionProfile,
    SourceMatch,
)
from food_analysis.domain.shared.errors import (
    NoItemsResolvedError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from food_analysis.infrastructure.sources.static_table_source import StaticTableSource


class SlowSource:
    """Source that never answers within a test timeout."""

    name = "slow"

    async def lookup(self, query: str) -> Optional[SourceMatch]:
        await asyncio.sleep(5)
        return None


@pytest.fixture
def resolver() -> NutritionResolver:
    return NutritionResolver()


class TestSourceChain:
    """Test chain construction."""

    def test_of_uses_shared_timeout(self) -> None:
        chain = SourceChain.of(StaticTableSource(), timeout_seconds=2.0)

        assert chain.names() == ["static_table"]
        assert chain.links[0].timeout_seconds == 2.0
        assert len(chain) == 1

    def test_links_keep_order(self, fake_source) -> None:
        chain = SourceChain([ChainLink(fake_source("usda"), 5.0), ChainLink(fake_source("static_table"), 1.0)])

        assert chain.names() == ["usda", "static_table"]
        assert repr(chain) == "SourceChain(['usda', 'static_table'])"


class TestItemConfidence:
    """Test per-item confidence rules."""

    def test_minimum_of_item_and_source(self, chicken_profile: NutritionProfile, make_match) -> None:
        item = FoodItem(name="chicken", confidence=0.6)

        assert item_confidence(item, make_match(chicken_profile, confidence=0.95)) == 0.6

    def test_missing_nutrients_penalized(self, make_match) -> None:
        match = make_match(NutritionProfile(calories=100.0), confidence=0.95)

        # 7 of 8 core nutrients unknown
        assert item_confidence(FoodItem(name="x"), match) == 0.81

    def test_unknown_unit_penalized(self, chicken_profile: NutritionProfile, make_match) -> None:
        match = make_match(chicken_profile, confidence=0.8)

        assert item_confidence(FoodItem(name="x"), match, unit_recognized=False) == 0.64

    def test_never_negative(self, make_match) -> None:
        match = make_match(NutritionProfile(calories=1.0), confidence=0.1)

        assert item_confidence(FoodItem(name="x"), match) == 0.0


class TestNutritionResolver:
    """Test chain walking and aggregation."""

    @pytest.mark.asyncio
    async def test_scales_to_quantity(self, resolver: NutritionResolver, static_chain: SourceChain) -> None:
        outcome = await resolver.resolve([FoodItem(name="grilled chicken breast", quantity=150, unit="g")], static_chain)

        assert outcome.totals.calories == 247.5
        assert outcome.totals.protein_g == 46.5
        assert outcome.totals.quantity_g == 150.0
        assert outcome.source == NutrientSource.STATIC_TABLE.value
        assert outcome.confidence == 0.7
        assert outcome.summary == "1 of 1 resolved"

    @pytest.mark.asyncio
    async def test_partial_resolution(self, resolver: NutritionResolver, static_chain: SourceChain) -> None:
        items = [
            FoodItem(name="chicken breast", quantity=100, unit="g"),
            FoodItem(name="unobtainium stew"),
            FoodItem(name="moon cheese"),
        ]

        outcome = await resolver.resolve(items, static_chain)

        assert outcome.summary == "1 of 3 resolved"
        assert outcome.unresolved_names() == ["unobtainium stew", "moon cheese"]
        assert outcome.totals.calories == 165.0
        unresolved = outcome.per_item[1]
        assert unresolved.profile is None
        assert unresolved.note == "No nutrition data found for 'unobtainium stew'; excluded from totals"
        assert "No nutrition data found for 'moon cheese'" in outcome.warnings

    @pytest.mark.asyncio
    async def test_nothing_resolved_raises(self, resolver: NutritionResolver, static_chain: SourceChain) -> None:
        with pytest.raises(NoItemsResolvedError, match="0 of 2 resolved") as exc_info:
            await resolver.resolve([FoodItem(name="zzz"), FoodItem(name="qqq")], static_chain)

        assert exc_info.value.total_items == 2
        assert [r.item.name for r in exc_info.value.resolutions] == ["zzz", "qqq"]

    @pytest.mark.asyncio
    async def test_empty_item_list_raises(self, resolver: NutritionResolver, static_chain: SourceChain) -> None:
        with pytest.raises(NoItemsResolvedError):
            await resolver.resolve([], static_chain)

    @pytest.mark.asyncio
    async def test_first_hit_wins_and_rest_skipped(
        self, resolver: NutritionResolver, fake_source, chicken_profile, make_match
    ) -> None:
        primary = fake_source("usda", {"chicken": make_match(chicken_profile, "Chicken, roasted")})
        fallback = fake_source("static_table")

        outcome = await resolver.resolve([FoodItem(name="chicken", quantity=100, unit="g")], SourceChain.of(primary, fallback))

        resolution = outcome.per_item[0]
        assert resolution.source == "usda"
        assert resolution.matched_name == "Chicken, roasted"
        assert [(a.source, a.outcome) for a in resolution.attempts] == [("usda", "found"), ("static_table", "skipped")]
        assert fallback.calls == []

    @pytest.mark.asyncio
    async def test_falls_back_on_miss(
        self, resolver: NutritionResolver, fake_source, chicken_profile, make_match
    ) -> None:
        primary = fake_source("usda")
        fallback = fake_source(
            "static_table",
            {"chicken": make_match(chicken_profile, source=NutrientSource.STATIC_TABLE, confidence=0.8)},
        )

        outcome = await resolver.resolve([FoodItem(name="chicken", quantity=100, unit="g")], SourceChain.of(primary, fallback))

        attempts = outcome.per_item[0].attempts
        assert [(a.source, a.outcome) for a in attempts] == [("usda", "not_found"), ("static_table", "found")]
        assert outcome.source == "static_table"

    @pytest.mark.asyncio
    async def test_timeout_is_tagged_and_chain_continues(
        self, resolver: NutritionResolver, fake_source, chicken_profile, make_match
    ) -> None:
        fallback = fake_source(
            "static_table",
            {"chicken": make_match(chicken_profile, source=NutrientSource.STATIC_TABLE, confidence=0.8)},
        )
        chain = SourceChain([ChainLink(SlowSource(), 0.01), ChainLink(fallback, 1.0)])

        outcome = await resolver.resolve([FoodItem(name="chicken", quantity=100, unit="g")], chain)

        attempts = outcome.per_item[0].attempts
        assert attempts[0].outcome == "timeout"
        assert outcome.per_item[0].is_resolved()
        assert "slow timed out for 'chicken'" in outcome.warnings

    @pytest.mark.asyncio
    async def test_source_timeout_error_is_tagged_timeout(
        self, resolver: NutritionResolver, fake_source, static_chain: SourceChain
    ) -> None:
        failing = fake_source("usda", error=SourceTimeoutError("USDA API timeout"))
        chain = SourceChain([ChainLink(failing, 1.0), *static_chain.links])

        outcome = await resolver.resolve([FoodItem(name="banana")], chain)

        assert outcome.per_item[0].attempts[0].outcome == "timeout"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [SourceUnavailableError("USDA API error: 503"), RuntimeError("bug in adapter")],
    )
    async def test_failures_are_unavailable(
        self, resolver: NutritionResolver, fake_source, static_chain: SourceChain, error: Exception
    ) -> None:
        failing = fake_source("usda", error=error)
        chain = SourceChain([ChainLink(failing, 1.0), *static_chain.links])

        outcome = await resolver.resolve([FoodItem(name="banana")], chain)

        first = outcome.per_item[0].attempts[0]
        assert first.outcome == "unavailable"
        assert first.detail == str(error)
        assert outcome.per_item[0].source == "static_table"
        assert "usda unavailable for 'banana'" in outcome.warnings

    @pytest.mark.asyncio
    async def test_mixed_sources_are_hybrid(
        self, resolver: NutritionResolver, fake_source, chicken_profile, cola_profile, make_match
    ) -> None:
        usda = fake_source("usda", {"chicken": make_match(chicken_profile)})
        static = fake_source(
            "static_table",
            {"cola": make_match(cola_profile, source=NutrientSource.STATIC_TABLE, confidence=0.8)},
        )

        outcome = await resolver.resolve(
            [FoodItem(name="chicken", quantity=100, unit="g"), FoodItem(name="cola", quantity=330, unit="ml")],
            SourceChain.of(usda, static),
        )

        assert outcome.source == NutrientSource.HYBRID.value
        assert outcome.confidence == 0.8
        assert outcome.totals.calories == round(165.0 + 42.0 * 3.3, 2)

    @pytest.mark.asyncio
    async def test_unknown_unit_warns_and_penalizes(
        self, resolver: NutritionResolver, static_chain: SourceChain
    ) -> None:
        outcome = await resolver.resolve([FoodItem(name="almonds", quantity=3, unit="handfuls")], static_chain)

        resolution = outcome.per_item[0]
        assert resolution.grams == 300.0
        assert resolution.confidence == 0.64
        assert "Unknown unit 'handfuls' for 'almonds': assumed 100 g per handfuls" in outcome.warnings

    @pytest.mark.asyncio
    async def test_incomplete_nutrients_reported(
        self, resolver: NutritionResolver, fake_source, chicken_profile, make_match
    ) -> None:
        partial = NutritionProfile(calories=539.0, sugar_g=56.3)
        source = fake_source(
            "off",
            {
                "chicken": make_match(chicken_profile),
                "spread": make_match(partial, source=NutrientSource.OPENFOODFACTS, confidence=0.9),
            },
        )

        outcome = await resolver.resolve(
            [FoodItem(name="chicken", quantity=100, unit="g"), FoodItem(name="spread", quantity=20, unit="g")],
            SourceChain.of(source),
        )

        assert outcome.incomplete_nutrients == [
            "protein_g",
            "carbs_g",
            "fat_g",
            "saturated_fat_g",
            "fiber_g",
            "sodium_mg",
        ]
        # Known values still add up
        assert outcome.totals.sugar_g == round(0.0 + 56.3 * 0.2, 2)

    @pytest.mark.asyncio
    async def test_items_resolved_concurrently(self, resolver: NutritionResolver) -> None:
        started: list[str] = []
        release = asyncio.Event()

        class GatedSource:
            name = "gated"

            async def lookup(self, query: str) -> Optional[SourceMatch]:
                started.append(query)
                if len(started) == 2:
                    release.set()
                await release.wait()
                return None

        chain = SourceChain.of(GatedSource(), StaticTableSource(), timeout_seconds=1.0)

        outcome = await resolver.resolve([FoodItem(name="apple"), FoodItem(name="banana")], chain)

        assert sorted(started) == ["apple", "banana"]
        assert outcome.resolved_count == 2


def test_resolution_summary() -> None:
    assert resolution_summary(2, 5) == "2 of 5 resolved"
