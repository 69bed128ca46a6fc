"""Configuration utilities for infrastructure layer."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

ENV_FILE = Path(os.getenv("FOOD_ANALYSIS_ENV_FILE", ".env"))

# Does not override variables already set in the process environment.
load_dotenv(ENV_FILE)


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def get_usda_api_key() -> Optional[str]:
    """
    Get USDA FoodData Central API key.

    Falls back to AI_USDA_API_KEY, the name used by older deployments.

    Returns:
        API key, or None when USDA lookups should be disabled
    """
    return os.getenv("USDA_API_KEY") or os.getenv("AI_USDA_API_KEY") or None


def get_openai_api_key() -> Optional[str]:
    """
    Get OpenAI API key.

    Returns:
        API key, or None when OpenAI features should be disabled
    """
    return os.getenv("OPENAI_API_KEY") or None


def get_openai_model() -> str:
    """OpenAI chat model, defaults to "gpt-4o-mini"."""
    return os.getenv("OPENAI_MODEL", "gpt-4o-mini")


def get_usda_timeout() -> float:
    """Per-lookup USDA timeout in seconds."""
    return _get_float("USDA_TIMEOUT_SECONDS", 5.0)


def get_off_timeout() -> float:
    """Per-lookup OpenFoodFacts timeout in seconds."""
    return _get_float("OFF_TIMEOUT_SECONDS", 5.0)


def get_openai_timeout() -> float:
    """Per-call OpenAI timeout in seconds."""
    return _get_float("OPENAI_TIMEOUT_SECONDS", 15.0)


def get_cache_ttl_seconds() -> float:
    """Analysis cache TTL, defaults to 7 days."""
    return _get_float("ANALYSIS_CACHE_TTL_SECONDS", 604800.0)


def get_log_level() -> str:
    """Log level name, defaults to INFO."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_json() -> bool:
    """True to render logs as JSON lines."""
    return _get_bool("LOG_JSON", False)


class PipelineSettings(BaseModel):
    """
    Settings of the default analysis pipeline.

    Example:
        >>> settings = PipelineSettings(usda_api_key=None)
        >>> assert settings.usda_enabled is False
    """

    model_config = ConfigDict(frozen=True)

    usda_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    usda_timeout_seconds: float = Field(5.0, gt=0)
    off_timeout_seconds: float = Field(5.0, gt=0)
    openai_timeout_seconds: float = Field(15.0, gt=0)
    cache_ttl_seconds: float = Field(604800.0, gt=0)
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def usda_enabled(self) -> bool:
        """USDA lookups need an API key."""
        return bool(self.usda_api_key)

    @property
    def openai_enabled(self) -> bool:
        """OpenAI estimate, vision and speech need an API key."""
        return bool(self.openai_api_key)

    @classmethod
    def from_env(cls) -> "PipelineSettings":
        """Build settings from environment variables."""
        return cls(
            usda_api_key=get_usda_api_key(),
            openai_api_key=get_openai_api_key(),
            openai_model=get_openai_model(),
            usda_timeout_seconds=get_usda_timeout(),
            off_timeout_seconds=get_off_timeout(),
            openai_timeout_seconds=get_openai_timeout(),
            cache_ttl_seconds=get_cache_ttl_seconds(),
            log_level=get_log_level(),
            log_json=get_log_json(),
        )
