"""Nutrition resolution over an ordered chain of sources.

Each food item is looked up source by source until one answers. Sources
that time out or fail are recorded on the item and the chain moves on;
items nobody knows are reported as unresolved, never estimated.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, NamedTuple, Optional, Sequence

import structlog
from pydantic import BaseModel, ConfigDict, Field

from food_analysis.domain.analysis.models import (
    AttemptOutcome,
    ItemResolution,
    ResolutionStatus,
    SourceAttempt,
)
from food_analysis.domain.analysis.ports import INutritionSource
from food_analysis.domain.nutrition.models import (
    CORE_NUTRIENT_FIELDS,
    FoodItem,
    NutrientSource,
    NutritionProfile,
    SourceMatch,
)
from food_analysis.domain.nutrition.units import (
    DEFAULT_SERVING_G,
    UNKNOWN_UNIT_CONFIDENCE_FACTOR,
    to_grams,
)
from food_analysis.domain.shared.errors import (
    ExternalServiceError,
    NoItemsResolvedError,
    SourceTimeoutError,
)

logger = structlog.get_logger(__name__)

DEFAULT_SOURCE_TIMEOUT_SECONDS = 5.0
MISSING_NUTRIENT_PENALTY = 0.02
MIN_GRAMS = 0.01


class ChainLink(NamedTuple):
    """A source and the time it is given per lookup."""

    source: INutritionSource
    timeout_seconds: float = DEFAULT_SOURCE_TIMEOUT_SECONDS


class SourceChain:
    """
    Ordered nutrition sources for one input type.

    Example:
        >>> chain = SourceChain.of(StaticTableSource())
        >>> chain.names()
        ['static_table']
    """

    def __init__(self, links: Iterable[ChainLink]) -> None:
        self.links: tuple[ChainLink, ...] = tuple(links)

    @classmethod
    def of(cls, *sources: INutritionSource, timeout_seconds: float = DEFAULT_SOURCE_TIMEOUT_SECONDS) -> SourceChain:
        """Chain with the same timeout for every source."""
        return cls(ChainLink(source, timeout_seconds) for source in sources)

    def names(self) -> list[str]:
        return [link.source.name for link in self.links]

    def __len__(self) -> int:
        return len(self.links)

    def __repr__(self) -> str:
        return f"SourceChain({self.names()!r})"


class ResolutionOutcome(BaseModel):
    """Per-item resolutions and the meal totals built from them."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    per_item: list[ItemResolution] = Field(default_factory=list)
    totals: NutritionProfile
    source: NutrientSource
    confidence: float = Field(..., ge=0.0, le=1.0)
    resolved_count: int = Field(..., ge=0)
    total_count: int = Field(..., ge=0)
    warnings: list[str] = Field(default_factory=list)
    incomplete_nutrients: list[str] = Field(default_factory=list)

    @property
    def summary(self) -> str:
        """Human-readable count, e.g. ``"1 of 3 resolved"``."""
        return resolution_summary(self.resolved_count, self.total_count)

    def unresolved_names(self) -> list[str]:
        return [r.item.name for r in self.per_item if not r.is_resolved()]


def resolution_summary(resolved: int, total: int) -> str:
    return f"{resolved} of {total} resolved"


def item_confidence(item: FoodItem, match: SourceMatch, unit_recognized: bool = True) -> float:
    """
    Confidence of one resolved item.

    Starts from the lower of the item and source confidence, loses 0.02
    per missing core nutrient and is scaled by 0.8 for an unknown unit.
    """
    confidence = min(item.confidence, match.confidence)
    confidence -= MISSING_NUTRIENT_PENALTY * len(match.profile.missing_fields(CORE_NUTRIENT_FIELDS))
    if not unit_recognized:
        confidence *= UNKNOWN_UNIT_CONFIDENCE_FACTOR
    return round(max(0.0, min(1.0, confidence)), 2)


class NutritionResolver:
    """
    Resolve food items to nutrition profiles.

    Items are resolved concurrently; within an item the chain is walked
    strictly in order and the first hit wins.

    Example:
        >>> resolver = NutritionResolver()
        >>> outcome = await resolver.resolve(
        ...     [FoodItem(name="chicken breast", quantity=150, unit="g")],
        ...     SourceChain.of(StaticTableSource()),
        ... )
        >>> outcome.totals.calories
        247.5
    """

    async def resolve(self, items: Sequence[FoodItem], chain: SourceChain) -> ResolutionOutcome:
        """
        Resolve every item against the chain.

        Args:
            items: Food items to resolve
            chain: Ordered sources to consult

        Returns:
            ResolutionOutcome with totals over resolved items only

        Raises:
            NoItemsResolvedError: If no item could be resolved
        """
        results = await asyncio.gather(*(self._resolve_item(item, chain) for item in items))
        per_item = [resolution for resolution, _ in results]
        warnings = [w for _, item_warnings in results for w in item_warnings]

        resolved = [r for r in per_item if r.is_resolved()]
        logger.info(
            "Items resolved",
            resolved=len(resolved),
            total=len(per_item),
            chain=chain.names(),
        )

        if not resolved:
            raise NoItemsResolvedError(
                f"{resolution_summary(0, len(per_item))}: no nutrition data found",
                total_items=len(per_item),
                resolutions=per_item,
            )

        profiles = [r.profile for r in resolved if r.profile is not None]
        return ResolutionOutcome(
            per_item=per_item,
            totals=NutritionProfile.combine(profiles),
            source=_combined_source(resolved),
            confidence=min(r.confidence for r in resolved),
            resolved_count=len(resolved),
            total_count=len(per_item),
            warnings=warnings,
            incomplete_nutrients=_incomplete_nutrients(profiles),
        )

    async def _resolve_item(self, item: FoodItem, chain: SourceChain) -> tuple[ItemResolution, list[str]]:
        warnings: list[str] = []
        conversion = to_grams(item.quantity, item.unit)
        grams = max(conversion.grams, MIN_GRAMS)
        if not conversion.recognized:
            warnings.append(
                f"Unknown unit '{item.unit}' for '{item.name}': "
                f"assumed {DEFAULT_SERVING_G:g} g per {item.unit}"
            )

        attempts: list[SourceAttempt] = []
        match: Optional[SourceMatch] = None
        for link in chain.links:
            name = link.source.name
            if match is not None:
                attempts.append(SourceAttempt(source=name, outcome=AttemptOutcome.SKIPPED))
                continue

            try:
                match = await asyncio.wait_for(link.source.lookup(item.name), timeout=link.timeout_seconds)
            except (asyncio.TimeoutError, SourceTimeoutError):
                logger.warning("Source timed out", source=name, item=item.name, timeout=link.timeout_seconds)
                attempts.append(SourceAttempt(source=name, outcome=AttemptOutcome.TIMEOUT))
                warnings.append(f"{name} timed out for '{item.name}'")
                continue
            except ExternalServiceError as e:
                logger.warning("Source unavailable", source=name, item=item.name, error=str(e))
                attempts.append(SourceAttempt(source=name, outcome=AttemptOutcome.UNAVAILABLE, detail=str(e)))
                warnings.append(f"{name} unavailable for '{item.name}'")
                continue
            except Exception as e:
                logger.exception("Source failed", source=name, item=item.name)
                attempts.append(SourceAttempt(source=name, outcome=AttemptOutcome.UNAVAILABLE, detail=str(e)))
                warnings.append(f"{name} unavailable for '{item.name}'")
                continue

            if match is None:
                attempts.append(SourceAttempt(source=name, outcome=AttemptOutcome.NOT_FOUND))
            else:
                attempts.append(SourceAttempt(source=name, outcome=AttemptOutcome.FOUND))

        if match is None:
            logger.info("Item unresolved", item=item.name, attempts=len(attempts))
            warnings.append(f"No nutrition data found for '{item.name}'")
            return (
                ItemResolution(
                    item=item,
                    grams=grams,
                    note=f"No nutrition data found for '{item.name}'; excluded from totals",
                    attempts=attempts,
                ),
                warnings,
            )

        confidence = item_confidence(item, match, conversion.recognized)
        logger.debug(
            "Item resolved",
            item=item.name,
            source=match.source,
            matched_name=match.matched_name,
            grams=grams,
            confidence=confidence,
        )
        return (
            ItemResolution(
                item=item,
                grams=grams,
                profile=match.profile.scale_to_quantity(grams),
                source=match.source,
                matched_name=match.matched_name,
                confidence=confidence,
                status=ResolutionStatus.RESOLVED,
                attempts=attempts,
            ),
            warnings,
        )


def _combined_source(resolved: Sequence[ItemResolution]) -> NutrientSource:
    tags = {NutrientSource(r.source) for r in resolved}
    if len(tags) == 1:
        return tags.pop()
    return NutrientSource.HYBRID


def _incomplete_nutrients(profiles: Sequence[NutritionProfile]) -> list[str]:
    """Core fields unknown for at least one resolved item, in field order."""
    missing = {name for p in profiles for name in p.missing_fields(CORE_NUTRIENT_FIELDS)}
    return [name for name in CORE_NUTRIENT_FIELDS if name in missing]
