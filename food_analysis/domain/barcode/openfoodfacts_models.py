"""
OpenFoodFacts domain models.

Models for OpenFoodFacts API responses mapped to our domain.
All nutriment amounts are per 100g, in grams, as OpenFoodFacts reports them.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NutriscoreGrade(str, Enum):
    """Nutriscore grade classification."""

    A = "a"  # Best
    B = "b"
    C = "c"
    D = "d"
    E = "e"  # Worst
    UNKNOWN = "unknown"


class NovaGroup(str, Enum):
    """NOVA food processing classification."""

    GROUP_1 = "1"  # Unprocessed or minimally processed
    GROUP_2 = "2"  # Processed culinary ingredients
    GROUP_3 = "3"  # Processed foods
    GROUP_4 = "4"  # Ultra-processed foods
    UNKNOWN = "unknown"


class OFFNutriments(BaseModel):
    """OpenFoodFacts nutriments (per 100g).

    Example:
        >>> nutriments = OFFNutriments(
        ...     energy_kcal=150.0,
        ...     proteins=3.0,
        ...     carbohydrates=25.0,
        ...     fat=5.0,
        ... )
        >>> assert nutriments.energy_kcal == 150.0
        >>> assert nutriments.sodium is None
    """

    model_config = ConfigDict(frozen=True)

    energy_kcal: Optional[float] = Field(None, ge=0, description="Energy in kcal per 100g")
    proteins: Optional[float] = Field(None, ge=0, description="Protein in g per 100g")
    carbohydrates: Optional[float] = Field(None, ge=0, description="Carbohydrates in g per 100g")
    fat: Optional[float] = Field(None, ge=0, description="Fat in g per 100g")
    saturated_fat: Optional[float] = Field(None, ge=0, description="Saturated fat in g per 100g")
    fiber: Optional[float] = Field(None, ge=0, description="Fiber in g per 100g")
    sugars: Optional[float] = Field(None, ge=0, description="Sugars in g per 100g")
    sodium: Optional[float] = Field(None, ge=0, description="Sodium in g per 100g")
    salt: Optional[float] = Field(None, ge=0, description="Salt in g per 100g")
    cholesterol: Optional[float] = Field(None, ge=0, description="Cholesterol in g per 100g")
    vitamin_c: Optional[float] = Field(None, ge=0, description="Vitamin C in g per 100g")
    iron: Optional[float] = Field(None, ge=0, description="Iron in g per 100g")
    calcium: Optional[float] = Field(None, ge=0, description="Calcium in g per 100g")


class OFFProduct(BaseModel):
    """OpenFoodFacts product response.

    Example:
        >>> product = OFFProduct(
        ...     code="3017620422003",
        ...     product_name="Nutella",
        ...     brands="Ferrero",
        ...     nutriments=OFFNutriments(
        ...         energy_kcal=539.0,
        ...         proteins=6.3,
        ...         carbohydrates=57.5,
        ...         fat=30.9,
        ...     ),
        ... )
        >>> assert product.display_name() == "Nutella"
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Product barcode")
    product_name: Optional[str] = Field(None, description="Product name")
    brands: Optional[str] = Field(None, description="Brand names")
    categories: Optional[str] = Field(None, description="Product categories")
    quantity: Optional[str] = Field(None, description="Product quantity (e.g., '750g')")
    serving_size: Optional[str] = Field(None, description="Serving size (e.g., '30g')")
    image_url: Optional[str] = Field(None, description="Product image URL")
    nutriments: Optional[OFFNutriments] = Field(None, description="Nutritional values")
    nutriscore_grade: Optional[NutriscoreGrade] = Field(None, description="Nutriscore grade (a-e)")
    nova_group: Optional[NovaGroup] = Field(None, description="NOVA processing group (1-4)")
    ingredients_text: Optional[str] = Field(None, description="Ingredients list")
    allergens: Optional[str] = Field(None, description="Allergens list")

    def display_name(self) -> str:
        """Product name, falling back to the barcode."""
        if self.product_name and self.product_name.strip():
            return self.product_name.strip()
        return self.code


class OFFSearchResult(BaseModel):
    """OpenFoodFacts search response.

    Example:
        >>> result = OFFSearchResult(
        ...     status=1,
        ...     product=OFFProduct(code="3017620422003", product_name="Nutella"),
        ... )
        >>> assert result.is_found()
    """

    model_config = ConfigDict(frozen=True)

    status: int = Field(..., description="API status (1=found, 0=not)")
    product: Optional[OFFProduct] = Field(None, description="Product data (if found)")

    def is_found(self) -> bool:
        """Check if product was found.

        Returns:
            True if product exists in database
        """
        return self.status == 1 and self.product is not None
