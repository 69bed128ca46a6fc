"""Food analysis pipeline.

Turns one FoodAnalysisInput (image, barcode, text or voice) into a
FoodAnalysisResult:

1. Cache lookup on a content-addressed key
2. Food item extraction per input type
3. Nutrition resolution through the input type's source chain
4. Scoring, diet compatibility and health suggestions
5. Cache write of successful results

Only InvalidInputError reaches the caller; everything else ends up in
the result as warnings or as a failed status.
"""

from __future__ import annotations

import binascii
import time
from typing import Any, Callable, Mapping, Optional, Union

import structlog

from food_analysis.application.nutrition.resolver import (
    NutritionResolver,
    ResolutionOutcome,
    SourceChain,
    resolution_summary,
)
from food_analysis.domain.analysis.models import (
    AnalysisError,
    AnalysisMetadata,
    AnalysisStatus,
    FoodAnalysisInput,
    FoodAnalysisResult,
    InputType,
    PipelineStage,
)
from food_analysis.domain.analysis.ports import ISpeechToText, IVisionFoodExtractor
from food_analysis.domain.analysis.suggestions import generate_health_suggestions, no_items_message
from food_analysis.domain.analysis.text_parser import parse_food_text
from food_analysis.domain.diet.checker import DietCompatibilityChecker
from food_analysis.domain.nutrition.models import FoodItem, NutrientSource
from food_analysis.domain.scoring.scorer import NutritionScorer
from food_analysis.domain.shared.errors import CacheError, ExternalServiceError, NoItemsResolvedError
from food_analysis.infrastructure.cache.analysis_cache import AnalysisCache, build_cache_key

logger = structlog.get_logger(__name__)

# Barcode products are looked up as one 100 g reference portion.
BARCODE_PORTION_G = 100.0

# Voice payloads shorter than this are read as an already-transcribed string.
MIN_AUDIO_BYTES = 512

NO_ITEMS_RESOLVED = "NO_ITEMS_RESOLVED"

AnalysisRequest = Union[FoodAnalysisInput, Mapping[str, Any]]


class FoodAnalysisPipeline:
    """
    Orchestrate a complete food analysis.

    Example:
        >>> pipeline = FoodAnalysisPipeline(
        ...     text_chain=SourceChain.of(StaticTableSource()),
        ...     barcode_chain=SourceChain.of(),
        ... )
        >>> result = await pipeline.analyze(
        ...     FoodAnalysisInput.create("text", "grilled chicken breast 150g")
        ... )
        >>> result.total_calories
        247.5
    """

    def __init__(
        self,
        text_chain: SourceChain,
        barcode_chain: SourceChain,
        cache: Optional[AnalysisCache] = None,
        resolver: Optional[NutritionResolver] = None,
        scorer: Optional[NutritionScorer] = None,
        diet_checker: Optional[DietCompatibilityChecker] = None,
        vision_extractor: Optional[IVisionFoodExtractor] = None,
        speech_to_text: Optional[ISpeechToText] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """
        Initialize pipeline.

        Args:
            text_chain: Sources for text, voice and image items
            barcode_chain: Sources for barcodes
            cache: Result cache (fresh in-memory cache by default)
            resolver: Nutrition resolver
            scorer: Nutrition scorer
            diet_checker: Diet and allergen checker
            vision_extractor: Image recognition; images fail without it
            speech_to_text: Transcription; voice data is read as text without it
            clock: Monotonic clock in seconds, for processing time
        """
        self.text_chain = text_chain
        self.barcode_chain = barcode_chain
        self.cache = cache if cache is not None else AnalysisCache()
        self.resolver = resolver or NutritionResolver()
        self.scorer = scorer or NutritionScorer()
        self.diet_checker = diet_checker or DietCompatibilityChecker()
        self.vision_extractor = vision_extractor
        self.speech_to_text = speech_to_text
        self._clock = clock

    async def analyze(self, analysis_input: AnalysisRequest) -> FoodAnalysisResult:
        """
        Analyze one input.

        Args:
            analysis_input: FoodAnalysisInput or an equivalent mapping

        Returns:
            FoodAnalysisResult; status ``failed`` when nothing resolved

        Raises:
            InvalidInputError: If the input is malformed (before any I/O)
        """
        started = self._clock()
        request = (
            analysis_input
            if isinstance(analysis_input, FoodAnalysisInput)
            else FoodAnalysisInput.from_dict(analysis_input)
        )
        input_type = InputType(request.type)
        cache_key = build_cache_key(request)

        with structlog.contextvars.bound_contextvars(
            cache_key=cache_key[:16],
            input_type=input_type.value,
            user_id=request.user_id,
        ):
            self._stage(PipelineStage.RECEIVED)
            self._stage(PipelineStage.CACHE_LOOKUP)
            cached = self._cached_result(cache_key)
            if cached is not None:
                self._stage(PipelineStage.CACHE_HIT)
                self._stage(PipelineStage.DONE, cache_hit=True)
                return cached.with_cache_hit(self._elapsed_ms(started))
            self._stage(PipelineStage.CACHE_MISS)

            warnings: list[str] = []
            items = await self._extract_items(request, input_type, warnings)

            self._stage(PipelineStage.RESOLVING, items=len(items))
            chain = self.barcode_chain if input_type == InputType.BARCODE else self.text_chain
            try:
                outcome = await self.resolver.resolve(items, chain)
            except NoItemsResolvedError as e:
                self._stage(PipelineStage.FAILED, reason=str(e))
                return self._failed_result(items, e, warnings, self._elapsed_ms(started))

            result = self._build_result(request, input_type, outcome, warnings, started)

            self._stage(PipelineStage.CACHE_WRITE)
            self.cache.set(cache_key, result)
            self._stage(
                PipelineStage.DONE,
                status=result.status,
                processing_time_ms=result.analysis_metadata.processing_time_ms,
            )
            return result

    # ═══════════════════════════════════════════════════════════
    # ITEM EXTRACTION
    # ═══════════════════════════════════════════════════════════

    async def _extract_items(
        self, request: FoodAnalysisInput, input_type: InputType, warnings: list[str]
    ) -> list[FoodItem]:
        if input_type == InputType.BARCODE:
            return [
                FoodItem(name=request.barcode().value, quantity=BARCODE_PORTION_G, unit="g")
            ]
        if input_type == InputType.TEXT:
            return parse_food_text(request.data)
        if input_type == InputType.VOICE:
            transcript = await self._transcript(request, warnings)
            return parse_food_text(transcript) if transcript else []
        return await self._image_items(request, warnings)

    async def _transcript(self, request: FoodAnalysisInput, warnings: list[str]) -> str:
        """Transcribe base64 audio, or read the data as a transcript."""
        if self.speech_to_text is None:
            return request.data

        try:
            audio = request.payload_bytes()
        except (binascii.Error, ValueError):
            audio = b""
        if len(audio) < MIN_AUDIO_BYTES:
            return request.data

        try:
            return await self.speech_to_text.transcribe(audio)
        except ExternalServiceError as e:
            logger.warning("Transcription failed", error=str(e))
            warnings.append(f"Could not transcribe audio: {e}")
            return ""

    async def _image_items(self, request: FoodAnalysisInput, warnings: list[str]) -> list[FoodItem]:
        if self.vision_extractor is None:
            warnings.append("Image recognition is not configured")
            return []
        try:
            return await self.vision_extractor.extract(request.payload_bytes())
        except ExternalServiceError as e:
            logger.warning("Vision extraction failed", error=str(e))
            warnings.append(f"Could not recognize food in image: {e}")
            return []

    # ═══════════════════════════════════════════════════════════
    # RESULT ASSEMBLY
    # ═══════════════════════════════════════════════════════════

    def _build_result(
        self,
        request: FoodAnalysisInput,
        input_type: InputType,
        outcome: ResolutionOutcome,
        warnings: list[str],
        started: float,
    ) -> FoodAnalysisResult:
        resolutions = outcome.per_item
        if input_type == InputType.BARCODE:
            # The product name replaces the barcode digits.
            resolutions = [
                r.model_copy(update={"item": r.item.model_copy(update={"name": r.matched_name})})
                if r.matched_name
                else r
                for r in resolutions
            ]
        items = [r.item for r in resolutions]
        totals = outcome.totals

        self._stage(PipelineStage.SCORING)
        score = self.scorer.score(totals)

        self._stage(PipelineStage.COMPATIBILITY_CHECK)
        preferences = request.preferences()
        compatibility = self.diet_checker.check(
            [item.name for item in items],
            diets=preferences.diet_preferences,
            allergens=preferences.allergen_restrictions,
        )

        suggestions = generate_health_suggestions(
            score,
            diet_compatibility=compatibility,
            confidence=outcome.confidence,
            unresolved_items=outcome.unresolved_names(),
        )

        status = (
            AnalysisStatus.COMPLETED
            if outcome.resolved_count == outcome.total_count
            else AnalysisStatus.PARTIAL
        )
        return FoodAnalysisResult(
            status=status,
            items=items,
            item_resolutions=resolutions,
            total_calories=totals.calories,
            total_protein_g=totals.protein_g,
            total_carbs_g=totals.carbs_g,
            total_fat_g=totals.fat_g,
            total_weight_g=totals.quantity_g,
            detailed_nutrition=totals,
            nutrition_score=score,
            diet_compatibility=compatibility,
            health_suggestions=suggestions,
            analysis_metadata=AnalysisMetadata(
                source=outcome.source,
                processing_time_ms=self._elapsed_ms(started),
                confidence=outcome.confidence,
                resolved_items=outcome.resolved_count,
                total_items=outcome.total_count,
                resolution_summary=outcome.summary,
                warnings=warnings + outcome.warnings + compatibility.warnings,
                incomplete_nutrients=outcome.incomplete_nutrients,
            ),
        )

    @staticmethod
    def _failed_result(
        items: list[FoodItem],
        error: NoItemsResolvedError,
        warnings: list[str],
        processing_time_ms: int,
    ) -> FoodAnalysisResult:
        """Failed result: explanation only, no nutrition numbers, never cached."""
        resolutions = list(error.resolutions)
        resolution_warnings = [
            f"No nutrition data found for '{r.item.name}'" for r in resolutions
        ]
        message = no_items_message(error.total_items)
        return FoodAnalysisResult(
            status=AnalysisStatus.FAILED,
            items=items,
            item_resolutions=resolutions,
            health_suggestions=[message],
            analysis_metadata=AnalysisMetadata(
                source=NutrientSource.NONE,
                processing_time_ms=processing_time_ms,
                confidence=0.0,
                resolved_items=0,
                total_items=error.total_items,
                resolution_summary=resolution_summary(0, error.total_items),
                warnings=warnings + resolution_warnings,
            ),
            error=AnalysisError(code=NO_ITEMS_RESOLVED, message=message),
        )

    # ═══════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════

    def _cached_result(self, cache_key: str) -> Optional[FoodAnalysisResult]:
        try:
            return self.cache.get_result(cache_key)
        except CacheError as e:
            logger.warning("Ignoring unreadable cache entry", error=str(e))
            return None

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int((self._clock() - started) * 1000))

    @staticmethod
    def _stage(stage: PipelineStage, **context: Any) -> None:
        logger.info("Pipeline stage", stage=stage.value, **context)


async def analyze_food_input(
    analysis_input: AnalysisRequest,
    pipeline: Optional[FoodAnalysisPipeline] = None,
) -> FoodAnalysisResult:
    """
    Analyze food with the default (or a given) pipeline.

    Args:
        analysis_input: FoodAnalysisInput or a mapping with
            ``type``, ``data``, ``user_id`` and ``user_preferences``
        pipeline: Pipeline to use; the shared default when None

    Returns:
        FoodAnalysisResult

    Raises:
        InvalidInputError: If the input is malformed

    Example:
        >>> result = await analyze_food_input(
        ...     {"type": "text", "data": "grilled chicken breast 150g"}
        ... )
        >>> result.nutrition_score.grade
        'A'
    """
    if pipeline is None:
        # Deferred: the factory imports this module.
        from food_analysis.application.analysis.factory import get_pipeline

        pipeline = get_pipeline()
    return await pipeline.analyze(analysis_input)
