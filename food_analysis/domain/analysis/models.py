"""
Food analysis domain models.

Input and result records of the analysis pipeline.
"""

from __future__ import annotations

import base64
import binascii
import re
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from food_analysis.domain.diet.models import DietCompatibilityResult
from food_analysis.domain.nutrition.models import FoodItem, NutrientSource, NutritionProfile
from food_analysis.domain.scoring.scorer import NutritionScore
from food_analysis.domain.shared.errors import InvalidInputError
from food_analysis.domain.shared.value_objects import Barcode

BARCODE_PATTERN = re.compile(r"^\d{8,14}$")


class InputType(str, Enum):
    """Kind of payload carried by a FoodAnalysisInput."""

    IMAGE = "image"  # base64 image
    BARCODE = "barcode"  # product barcode
    TEXT = "text"  # free-text description
    VOICE = "voice"  # base64 audio or an already-transcribed string


class PipelineStage(str, Enum):
    """Stages of a single analysis pass."""

    RECEIVED = "received"
    CACHE_LOOKUP = "cache_lookup"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    RESOLVING = "resolving"
    SCORING = "scoring"
    COMPATIBILITY_CHECK = "compatibility_check"
    CACHE_WRITE = "cache_write"
    DONE = "done"
    FAILED = "failed"


class AnalysisStatus(str, Enum):
    """Outcome of an analysis."""

    COMPLETED = "completed"  # Every item resolved
    PARTIAL = "partial"  # Some items unresolved
    FAILED = "failed"  # Nothing resolved


class AttemptOutcome(str, Enum):
    """Outcome of one source lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    SKIPPED = "skipped"


class ResolutionStatus(str, Enum):
    """Whether an item got nutrition data."""

    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


def _decode_base64(data: str) -> bytes:
    """Decode base64, accepting ``data:<mime>;base64,`` prefixes."""
    payload = data.split(",", 1)[1] if data.startswith("data:") and "," in data else data
    return base64.b64decode("".join(payload.split()), validate=True)


class UserPreferences(BaseModel):
    """
    Diet and allergen restrictions of the requesting user.

    Example:
        >>> prefs = UserPreferences(diet_preferences=["vegan"])
        >>> assert prefs.allergen_restrictions == []
    """

    model_config = ConfigDict(frozen=True)

    diet_preferences: list[str] = Field(default_factory=list)
    allergen_restrictions: list[str] = Field(default_factory=list)

    @field_validator("diet_preferences", "allergen_restrictions")
    @classmethod
    def drop_blank(cls, v: list[str]) -> list[str]:
        """Strip entries and drop empty ones."""
        return [item.strip() for item in v if item and item.strip()]

    def is_empty(self) -> bool:
        """True when no restriction is set."""
        return not self.diet_preferences and not self.allergen_restrictions


class FoodAnalysisInput(BaseModel):
    """
    A request to analyze food.

    Use ``create`` or ``from_dict`` to get an InvalidInputError instead of
    a pydantic ValidationError on malformed input.

    Example:
        >>> request = FoodAnalysisInput.create("text", "grilled chicken breast 150g")
        >>> assert request.type == InputType.TEXT
    """

    model_config = ConfigDict(frozen=True)

    type: InputType = Field(..., description="Payload kind")
    data: str = Field(..., description="base64 image/audio, barcode digits or free text")
    user_id: Optional[str] = Field(None, description="Requesting user")
    user_preferences: Optional[UserPreferences] = Field(None, description="Diet restrictions")

    @field_validator("data")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Ensure data is not empty or whitespace."""
        if not v or not v.strip():
            raise ValueError("Input data cannot be empty")
        return v

    @model_validator(mode="after")
    def check_payload(self) -> FoodAnalysisInput:
        """Validate the payload against its type."""
        if self.type == InputType.BARCODE:
            digits = Barcode.normalize(self.data)
            if not BARCODE_PATTERN.match(digits):
                raise ValueError(f"Barcode must contain 8-14 digits: {self.data!r}")
        elif self.type == InputType.IMAGE:
            try:
                decoded = _decode_base64(self.data)
            except (binascii.Error, ValueError) as e:
                raise ValueError(f"Image data is not valid base64: {e}") from e
            if not decoded:
                raise ValueError("Image payload is empty")
        return self

    @classmethod
    def create(
        cls,
        type: str,
        data: str,
        user_id: Optional[str] = None,
        user_preferences: Optional[UserPreferences | Mapping[str, Any]] = None,
    ) -> FoodAnalysisInput:
        """
        Build an input, raising InvalidInputError when malformed.

        Raises:
            InvalidInputError: If type is unknown or data is invalid
        """
        return cls.from_dict(
            {
                "type": type,
                "data": data,
                "user_id": user_id,
                "user_preferences": user_preferences,
            }
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> FoodAnalysisInput:
        """
        Validate a raw mapping (e.g. decoded JSON).

        Raises:
            InvalidInputError: If validation fails
        """
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as e:
            messages = "; ".join(err["msg"] for err in e.errors())
            raise InvalidInputError(f"Invalid analysis input: {messages}") from e

    def barcode(self) -> Barcode:
        """Barcode value object of a barcode input."""
        return Barcode.from_raw(self.data)

    def payload_bytes(self) -> bytes:
        """Decoded base64 payload of an image or audio input."""
        return _decode_base64(self.data)

    def preferences(self) -> UserPreferences:
        """User preferences, empty when none were given."""
        return self.user_preferences or UserPreferences()


class SourceAttempt(BaseModel):
    """One lookup against one nutrition source."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    source: str
    outcome: AttemptOutcome
    detail: Optional[str] = None


class ItemResolution(BaseModel):
    """
    Resolution of one food item.

    ``profile`` is scaled to ``grams``; it is None for unresolved items.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    item: FoodItem
    grams: float = Field(..., gt=0)
    profile: Optional[NutritionProfile] = None
    source: NutrientSource = NutrientSource.NONE
    matched_name: Optional[str] = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    status: ResolutionStatus = ResolutionStatus.UNRESOLVED
    note: Optional[str] = None
    attempts: list[SourceAttempt] = Field(default_factory=list)

    @field_validator("confidence")
    @classmethod
    def round_confidence(cls, v: float) -> float:
        """Round confidence to 2 decimal places."""
        return round(v, 2)

    def is_resolved(self) -> bool:
        """True when nutrition data was found."""
        return self.status == ResolutionStatus.RESOLVED


class AnalysisMetadata(BaseModel):
    """
    Provenance and quality of an analysis.

    Tracks sources, performance, and what could not be resolved.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    source: NutrientSource = Field(..., description="Single source tag or 'hybrid'")
    processing_time_ms: int = Field(..., ge=0, description="Processing time in milliseconds")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Minimum item confidence")
    cache_hit: bool = False
    resolved_items: int = Field(0, ge=0)
    total_items: int = Field(0, ge=0)
    resolution_summary: str = ""
    warnings: list[str] = Field(default_factory=list)
    incomplete_nutrients: list[str] = Field(default_factory=list)

    @field_validator("confidence")
    @classmethod
    def round_confidence(cls, v: float) -> float:
        """Round confidence to 2 decimal places."""
        return round(v, 2)


class AnalysisError(BaseModel):
    """User-visible failure of an analysis."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class FoodAnalysisResult(BaseModel):
    """
    Result of analyzing one input.

    Failed results carry ``error`` and no nutrition numbers.

    Example:
        >>> result = FoodAnalysisResult(
        ...     status=AnalysisStatus.FAILED,
        ...     analysis_metadata=AnalysisMetadata(
        ...         source=NutrientSource.NONE,
        ...         processing_time_ms=3,
        ...         confidence=0.0,
        ...     ),
        ...     error=AnalysisError(code="NO_ITEMS_RESOLVED", message="Nothing found"),
        ... )
        >>> assert result.is_failed()
        >>> assert result.total_calories is None
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    status: AnalysisStatus
    items: list[FoodItem] = Field(default_factory=list)
    item_resolutions: list[ItemResolution] = Field(default_factory=list)

    total_calories: Optional[float] = Field(None, ge=0)
    total_protein_g: Optional[float] = Field(None, ge=0)
    total_carbs_g: Optional[float] = Field(None, ge=0)
    total_fat_g: Optional[float] = Field(None, ge=0)
    total_weight_g: Optional[float] = Field(None, ge=0)

    detailed_nutrition: Optional[NutritionProfile] = None
    nutrition_score: Optional[NutritionScore] = None
    diet_compatibility: Optional[DietCompatibilityResult] = None
    health_suggestions: list[str] = Field(default_factory=list)

    analysis_metadata: AnalysisMetadata
    error: Optional[AnalysisError] = None

    def is_failed(self) -> bool:
        """True when the analysis produced no nutrition data."""
        return self.status == AnalysisStatus.FAILED

    def with_cache_hit(self, processing_time_ms: int) -> FoodAnalysisResult:
        """Copy marked as served from cache with a fresh timing."""
        metadata = self.analysis_metadata.model_copy(
            update={"cache_hit": True, "processing_time_ms": processing_time_ms}
        )
        return self.model_copy(update={"analysis_metadata": metadata})
