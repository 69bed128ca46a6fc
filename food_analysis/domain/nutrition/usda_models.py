"""
USDA domain models.

These models represent USDA FoodData Central API responses
before they are mapped to a NutritionProfile.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class USDADataType(str, Enum):
    """USDA food database types."""

    BRANDED = "Branded"
    SR_LEGACY = "SR Legacy"
    SURVEY = "Survey (FNDDS)"
    FOUNDATION = "Foundation"
    EXPERIMENTAL = "Experimental"


class USDANutrient(BaseModel):
    """Single nutrient from USDA response.

    FoodData Central identifies nutrients both by legacy number
    ("208") and by id (1008); either may be missing.

    Example:
        >>> nutrient = USDANutrient(
        ...     number="208",
        ...     nutrient_id=1008,
        ...     name="Energy",
        ...     amount=150.0,
        ...     unit="KCAL",
        ... )
        >>> assert nutrient.amount == 150.0
    """

    model_config = ConfigDict(frozen=True)

    number: Optional[str] = Field(None, description="USDA nutrient number")
    nutrient_id: Optional[int] = Field(None, description="USDA nutrient id")
    name: str = Field("", description="Nutrient name")
    amount: float = Field(..., ge=0, description="Amount per 100g")
    unit: str = Field("", description="Unit of measurement")


class USDAFoodItem(BaseModel):
    """USDA food item response.

    Example:
        >>> food = USDAFoodItem(
        ...     fdc_id="171077",
        ...     description="Chicken, broilers or fryers, breast, meat only, cooked, roasted",
        ...     data_type=USDADataType.SR_LEGACY,
        ...     nutrients=[],
        ... )
        >>> assert food.fdc_id == "171077"
    """

    model_config = ConfigDict(frozen=True)

    fdc_id: str = Field(..., description="FoodData Central ID")
    description: str = Field(..., min_length=1, description="Food description")
    data_type: Optional[USDADataType] = Field(None, description="Database type")
    nutrients: list[USDANutrient] = Field(default_factory=list, description="Nutrient list")
    brand_owner: Optional[str] = Field(None, description="Brand name (branded foods)")
    gtin_upc: Optional[str] = Field(None, description="Barcode (branded foods)")


class USDASearchResult(BaseModel):
    """USDA search API response.

    Example:
        >>> result = USDASearchResult(total_hits=0, current_page=1, total_pages=0)
        >>> assert result.foods == []
    """

    model_config = ConfigDict(frozen=True)

    total_hits: int = Field(..., ge=0, description="Total results")
    current_page: int = Field(1, ge=0, description="Current page")
    total_pages: int = Field(0, ge=0, description="Total pages")
    foods: list[USDAFoodItem] = Field(default_factory=list, description="Food items")

    def best_match(self) -> Optional[USDAFoodItem]:
        """First food that carries at least one nutrient."""
        for food in self.foods:
            if food.nutrients:
                return food
        return None
