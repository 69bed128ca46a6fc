"""Pipeline Factory.

Environment-based assembly of the default FoodAnalysisPipeline.
Strategy:
- USDA_API_KEY set: USDA is the first text source
- OPENAI_API_KEY set: OpenAI estimates close the text chain, and image
  and voice inputs get vision extraction and transcription
- Always: static food table for text, OpenFoodFacts for barcodes

Usage:
    from food_analysis.application.analysis.factory import get_pipeline

    pipeline = get_pipeline()  # Built once from environment
    result = await pipeline.analyze(request)
"""

from typing import Optional

import structlog
from openai import AsyncOpenAI

from food_analysis.application.analysis.pipeline import FoodAnalysisPipeline
from food_analysis.application.nutrition.resolver import ChainLink, SourceChain
from food_analysis.infrastructure.ai.openai_client import OpenAIClient
from food_analysis.infrastructure.ai.speech_to_text import OpenAITranscriber
from food_analysis.infrastructure.ai.vision_extractor import OpenAIVisionExtractor
from food_analysis.infrastructure.cache.analysis_cache import AnalysisCache
from food_analysis.infrastructure.config import PipelineSettings
from food_analysis.infrastructure.logging_config import configure_logging
from food_analysis.infrastructure.sources.openai_estimate_source import OpenAIEstimateSource
from food_analysis.infrastructure.sources.openfoodfacts_source import OpenFoodFactsSource
from food_analysis.infrastructure.sources.static_table_source import StaticTableSource
from food_analysis.infrastructure.sources.usda_source import UsdaSource

logger = structlog.get_logger(__name__)

# Local lookups never block; the bound only guards against bugs.
STATIC_TABLE_TIMEOUT_SECONDS = 1.0


def create_openai_client(settings: PipelineSettings) -> Optional[OpenAIClient]:
    """
    Create the OpenAI client shared by estimates, vision and transcription.

    Returns:
        OpenAIClient, or None when OPENAI_API_KEY is not set
    """
    if not settings.openai_enabled:
        return None
    return OpenAIClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=settings.openai_timeout_seconds,
        client=AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout_seconds,
            max_retries=1,
        ),
    )


def create_text_chain(
    settings: PipelineSettings, openai_client: Optional[OpenAIClient] = None
) -> SourceChain:
    """
    Create the text source chain: USDA, static table, OpenAI estimate.

    Sources without credentials are left out.
    """
    links = []
    if settings.usda_enabled:
        links.append(
            ChainLink(
                UsdaSource.from_api_key(
                    settings.usda_api_key, timeout_seconds=settings.usda_timeout_seconds
                ),
                settings.usda_timeout_seconds,
            )
        )
    links.append(ChainLink(StaticTableSource(), STATIC_TABLE_TIMEOUT_SECONDS))
    if openai_client is not None:
        links.append(ChainLink(OpenAIEstimateSource(openai_client), settings.openai_timeout_seconds))
    return SourceChain(links)


def create_barcode_chain(settings: PipelineSettings) -> SourceChain:
    """Create the barcode source chain (OpenFoodFacts)."""
    return SourceChain(
        [
            ChainLink(
                OpenFoodFactsSource.from_settings(timeout_seconds=settings.off_timeout_seconds),
                settings.off_timeout_seconds,
            )
        ]
    )


def create_pipeline(
    settings: Optional[PipelineSettings] = None,
    cache: Optional[AnalysisCache] = None,
) -> FoodAnalysisPipeline:
    """
    Create a pipeline from settings.

    Args:
        settings: Pipeline settings (read from environment if None)
        cache: Result cache (new one with the configured TTL if None)

    Returns:
        FoodAnalysisPipeline

    Example:
        # In .env (production):
        USDA_API_KEY=abc123...
        OPENAI_API_KEY=sk-...

        # Offline (tests): no keys, static table and OpenFoodFacts only
    """
    settings = settings or PipelineSettings.from_env()
    openai_client = create_openai_client(settings)

    pipeline = FoodAnalysisPipeline(
        text_chain=create_text_chain(settings, openai_client),
        barcode_chain=create_barcode_chain(settings),
        cache=cache if cache is not None else AnalysisCache(ttl_seconds=settings.cache_ttl_seconds),
        vision_extractor=OpenAIVisionExtractor(openai_client) if openai_client else None,
        speech_to_text=OpenAITranscriber(openai_client) if openai_client else None,
    )
    logger.info(
        "Pipeline created",
        text_chain=pipeline.text_chain.names(),
        barcode_chain=pipeline.barcode_chain.names(),
        vision=pipeline.vision_extractor is not None,
        speech_to_text=pipeline.speech_to_text is not None,
    )
    return pipeline


# Singleton instance (lazy initialization)
_pipeline: Optional[FoodAnalysisPipeline] = None


def get_pipeline() -> FoodAnalysisPipeline:
    """
    Get singleton pipeline instance.

    Configures logging from the environment on first use.

    Returns:
        FoodAnalysisPipeline: Cached pipeline instance
    """
    global _pipeline
    if _pipeline is None:
        settings = PipelineSettings.from_env()
        configure_logging(settings.log_level, json=settings.log_json)
        _pipeline = create_pipeline(settings)
    return _pipeline


def reset_pipeline() -> None:
    """
    Reset the singleton pipeline.

    Useful for testing to force re-creation with different env vars.
    """
    global _pipeline
    _pipeline = None
