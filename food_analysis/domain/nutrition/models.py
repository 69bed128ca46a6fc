"""
Nutrition domain models.

Core domain models for nutrition data and resolution.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Nutrient fields carried by every NutritionProfile, in presentation order.
NUTRIENT_FIELDS: tuple[str, ...] = (
    "calories",
    "protein_g",
    "carbs_g",
    "fat_g",
    "saturated_fat_g",
    "fiber_g",
    "sugar_g",
    "sodium_mg",
    "cholesterol_mg",
    "vitamin_c_mg",
    "iron_mg",
    "calcium_mg",
)

# Fields whose absence lowers confidence (they drive totals and scoring).
CORE_NUTRIENT_FIELDS: tuple[str, ...] = (
    "calories",
    "protein_g",
    "carbs_g",
    "fat_g",
    "saturated_fat_g",
    "fiber_g",
    "sugar_g",
    "sodium_mg",
)


class NutrientSource(str, Enum):
    """
    Source of nutrient data.

    Indicates origin and reliability of nutritional information.
    """

    USDA = "usda"  # Verified, FoodData Central
    OPENFOODFACTS = "off"  # Verified, barcode database
    STATIC_TABLE = "static_table"  # Curated reference table
    OPENAI = "openai"  # LLM estimate, low confidence
    HYBRID = "hybrid"  # Several sources merged
    NONE = "none"  # Nothing resolved


class NutritionProfile(BaseModel):
    """
    Nutrient profile for a food item or a whole meal.

    Values describe ``quantity_g`` grams of food (100 g for source data,
    the total weight for aggregated meals). ``None`` means the value is
    unknown; ``0.0`` is a real, known zero.

    Example:
        >>> profile = NutritionProfile(
        ...     calories=165.0,
        ...     protein_g=31.0,
        ...     carbs_g=0.0,
        ...     fat_g=3.6,
        ... )
        >>> scaled = profile.scale_to_quantity(150.0)
        >>> assert scaled.calories == 247.5
        >>> assert scaled.sugar_g is None
    """

    model_config = ConfigDict(frozen=True)

    calories: Optional[float] = Field(None, ge=0, description="Energy in kcal")
    protein_g: Optional[float] = Field(None, ge=0, description="Protein in g")
    carbs_g: Optional[float] = Field(None, ge=0, description="Carbohydrates in g")
    fat_g: Optional[float] = Field(None, ge=0, description="Total fat in g")
    saturated_fat_g: Optional[float] = Field(None, ge=0, description="Saturated fat in g")
    fiber_g: Optional[float] = Field(None, ge=0, description="Dietary fiber in g")
    sugar_g: Optional[float] = Field(None, ge=0, description="Total sugars in g")
    sodium_mg: Optional[float] = Field(None, ge=0, description="Sodium in mg")
    cholesterol_mg: Optional[float] = Field(None, ge=0, description="Cholesterol in mg")
    vitamin_c_mg: Optional[float] = Field(None, ge=0, description="Vitamin C in mg")
    iron_mg: Optional[float] = Field(None, ge=0, description="Iron in mg")
    calcium_mg: Optional[float] = Field(None, ge=0, description="Calcium in mg")

    micronutrients_percent_dv: dict[str, float] = Field(
        default_factory=dict,
        description="Percent daily value per micronutrient for quantity_g",
    )
    quantity_g: float = Field(100.0, gt=0, description="Reference quantity in grams")

    def scale_to_quantity(self, target_g: float) -> NutritionProfile:
        """
        Scale nutrients to target quantity.

        Unknown values stay unknown.

        Args:
            target_g: Target quantity in grams

        Returns:
            New NutritionProfile scaled to target_g

        Raises:
            ValueError: If target_g is not positive
        """
        if target_g <= 0:
            raise ValueError(f"Target quantity must be positive: {target_g}")

        factor = target_g / self.quantity_g
        values: dict[str, Any] = {
            name: _scale(getattr(self, name), factor) for name in NUTRIENT_FIELDS
        }
        values["micronutrients_percent_dv"] = {
            key: round(dv * factor, 2) for key, dv in self.micronutrients_percent_dv.items()
        }
        values["quantity_g"] = target_g
        return NutritionProfile(**values)

    def per_100g(self) -> NutritionProfile:
        """Same profile expressed per 100 g."""
        if self.quantity_g == 100.0:
            return self
        return self.scale_to_quantity(100.0)

    def missing_fields(self, fields: Iterable[str] = CORE_NUTRIENT_FIELDS) -> list[str]:
        """Names of the given nutrient fields that are unknown."""
        return [name for name in fields if getattr(self, name) is None]

    def is_empty(self) -> bool:
        """True when no nutrient value is known."""
        return len(self.missing_fields(NUTRIENT_FIELDS)) == len(NUTRIENT_FIELDS)

    @classmethod
    def combine(cls, profiles: Iterable[NutritionProfile]) -> NutritionProfile:
        """
        Field-wise sum of several profiles.

        A field is None only when every contributor lacks it.

        Raises:
            ValueError: If no profile is given
        """
        items = list(profiles)
        if not items:
            raise ValueError("Cannot combine an empty list of profiles")

        values: dict[str, Any] = {}
        for name in NUTRIENT_FIELDS:
            known = [getattr(p, name) for p in items if getattr(p, name) is not None]
            values[name] = round(sum(known), 2) if known else None

        dv: dict[str, float] = {}
        for p in items:
            for key, amount in p.micronutrients_percent_dv.items():
                dv[key] = round(dv.get(key, 0.0) + amount, 2)
        values["micronutrients_percent_dv"] = dv
        values["quantity_g"] = round(sum(p.quantity_g for p in items), 2)
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage/serialization."""
        return self.model_dump()


def _scale(value: Optional[float], factor: float) -> Optional[float]:
    if value is None:
        return None
    return round(value * factor, 2)


class FoodItem(BaseModel):
    """
    A food the user ate, as described by the user or a vision model.

    ``name`` keeps the original phrasing; it is never translated.

    Example:
        >>> item = FoodItem(name="grilled chicken breast", quantity=150, unit="g")
        >>> assert item.confidence == 1.0
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=200, description="Food name")
    quantity: float = Field(1.0, gt=0, description="Amount in ``unit``")
    unit: str = Field("serving", min_length=1, description="Unit of quantity")
    confidence: float = Field(1.0, ge=0.0, le=1.0, description="Confidence (0-1)")

    @field_validator("name", "unit")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Ensure not just whitespace."""
        if not v.strip():
            raise ValueError("Field cannot be empty or whitespace")
        return v.strip()

    @field_validator("confidence")
    @classmethod
    def round_confidence(cls, v: float) -> float:
        """Round confidence to 2 decimal places."""
        return round(v, 2)


class SourceMatch(BaseModel):
    """
    What a nutrition source found for one query.

    ``profile`` is always per 100 g.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    profile: NutritionProfile
    matched_name: str = Field(..., description="Name of the matched record")
    source: NutrientSource
    confidence: float = Field(..., ge=0.0, le=1.0)
