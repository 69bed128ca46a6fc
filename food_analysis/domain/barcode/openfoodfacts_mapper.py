"""
OpenFoodFacts data mapper.

Transforms OpenFoodFacts API responses to domain models.
"""

from typing import Any, Optional

from pydantic import ValidationError

from food_analysis.domain.nutrition.daily_values import percent_daily_values
from food_analysis.domain.nutrition.models import NutritionProfile
from food_analysis.domain.barcode.openfoodfacts_models import (
    NovaGroup,
    NutriscoreGrade,
    OFFNutriments,
    OFFProduct,
    OFFSearchResult,
)

# Sodium is 40% of salt by mass.
SALT_TO_SODIUM_RATIO = 2.5


def _number(value: Any) -> Optional[float]:
    """Coerce an OFF nutriment to a non-negative float, None if unusable."""
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def _g_to_mg(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(value * 1000.0, 2)


class OpenFoodFactsMapper:
    """Maps OpenFoodFacts API data to domain models."""

    @staticmethod
    def parse_nutriments(nutriments_data: dict[str, Any]) -> OFFNutriments:
        """Parse the ``nutriments`` object of a product (per 100g keys)."""
        energy = _number(nutriments_data.get("energy-kcal_100g"))
        if energy is None:
            # Some products only carry energy in kJ.
            kj = _number(nutriments_data.get("energy_100g"))
            energy = round(kj / 4.184, 2) if kj is not None else None

        return OFFNutriments(
            energy_kcal=energy,
            proteins=_number(nutriments_data.get("proteins_100g")),
            carbohydrates=_number(nutriments_data.get("carbohydrates_100g")),
            fat=_number(nutriments_data.get("fat_100g")),
            saturated_fat=_number(nutriments_data.get("saturated-fat_100g")),
            fiber=_number(nutriments_data.get("fiber_100g")),
            sugars=_number(nutriments_data.get("sugars_100g")),
            sodium=_number(nutriments_data.get("sodium_100g")),
            salt=_number(nutriments_data.get("salt_100g")),
            cholesterol=_number(nutriments_data.get("cholesterol_100g")),
            vitamin_c=_number(nutriments_data.get("vitamin-c_100g")),
            iron=_number(nutriments_data.get("iron_100g")),
            calcium=_number(nutriments_data.get("calcium_100g")),
        )

    @staticmethod
    def parse_product_response(response_data: dict[str, Any]) -> OFFSearchResult:
        """Parse OpenFoodFacts product API response.

        Args:
            response_data: Raw API response JSON

        Returns:
            Parsed OFFSearchResult

        Example:
            >>> response = {
            ...     "status": 1,
            ...     "product": {
            ...         "code": "3017620422003",
            ...         "product_name": "Nutella",
            ...         "nutriments": {"energy-kcal_100g": 539.0},
            ...     },
            ... }
            >>> result = OpenFoodFactsMapper.parse_product_response(response)
            >>> assert result.product.product_name == "Nutella"
        """
        status = response_data.get("status", 0)

        if status != 1 or not isinstance(response_data.get("product"), dict):
            return OFFSearchResult(status=0, product=None)

        product_data = response_data["product"]
        nutriments = OpenFoodFactsMapper.parse_nutriments(product_data.get("nutriments") or {})

        nutriscore_raw = product_data.get("nutriscore_grade")
        nutriscore = None
        if nutriscore_raw:
            try:
                nutriscore = NutriscoreGrade(str(nutriscore_raw).lower())
            except ValueError:
                nutriscore = NutriscoreGrade.UNKNOWN

        nova_raw = product_data.get("nova_group")
        nova = None
        if nova_raw:
            try:
                nova = NovaGroup(str(nova_raw))
            except ValueError:
                nova = NovaGroup.UNKNOWN

        try:
            product = OFFProduct(
                code=str(product_data.get("code") or response_data.get("code") or ""),
                product_name=product_data.get("product_name"),
                brands=product_data.get("brands"),
                categories=product_data.get("categories"),
                quantity=product_data.get("quantity"),
                serving_size=product_data.get("serving_size"),
                image_url=product_data.get("image_url"),
                nutriments=nutriments,
                nutriscore_grade=nutriscore,
                nova_group=nova,
                ingredients_text=product_data.get("ingredients_text"),
                allergens=product_data.get("allergens"),
            )
        except ValidationError:
            return OFFSearchResult(status=0, product=None)

        return OFFSearchResult(status=1, product=product)

    @staticmethod
    def to_nutrition_profile(product: OFFProduct) -> NutritionProfile:
        """Convert OpenFoodFacts product to a per-100g NutritionProfile.

        Sodium and the mineral/vitamin amounts are reported in grams and
        converted to mg. Salt-only products derive sodium as salt / 2.5.

        Example:
            >>> product = OFFProduct(
            ...     code="3017620422003",
            ...     nutriments=OFFNutriments(energy_kcal=539.0, salt=0.107),
            ... )
            >>> profile = OpenFoodFactsMapper.to_nutrition_profile(product)
            >>> assert profile.calories == 539.0
            >>> assert profile.sodium_mg == 42.8
        """
        n = product.nutriments if product.nutriments else OFFNutriments()

        sodium_g = n.sodium
        if sodium_g is None and n.salt is not None:
            sodium_g = n.salt / SALT_TO_SODIUM_RATIO

        vitamin_c_mg = _g_to_mg(n.vitamin_c)
        iron_mg = _g_to_mg(n.iron)
        calcium_mg = _g_to_mg(n.calcium)

        return NutritionProfile(
            calories=n.energy_kcal,
            protein_g=n.proteins,
            carbs_g=n.carbohydrates,
            fat_g=n.fat,
            saturated_fat_g=n.saturated_fat,
            fiber_g=n.fiber,
            sugar_g=n.sugars,
            sodium_mg=_g_to_mg(sodium_g),
            cholesterol_mg=_g_to_mg(n.cholesterol),
            vitamin_c_mg=vitamin_c_mg,
            iron_mg=iron_mg,
            calcium_mg=calcium_mg,
            micronutrients_percent_dv=percent_daily_values(
                {"vitamin_c": vitamin_c_mg, "iron": iron_mg, "calcium": calcium_mg}
            ),
            quantity_g=100.0,
        )

    @staticmethod
    def calculate_completeness(product: OFFProduct) -> float:
        """Calculate data completeness score.

        Args:
            product: OpenFoodFacts product

        Returns:
            Completeness score (0-1)
        """
        n = product.nutriments if product.nutriments else OFFNutriments()

        fields_to_check = [
            product.product_name,
            n.energy_kcal,
            n.proteins,
            n.carbohydrates,
            n.fat,
            n.saturated_fat,
            n.fiber,
            n.sugars,
            n.sodium if n.sodium is not None else n.salt,
        ]

        filled = sum(1 for field in fields_to_check if field is not None)
        return round(filled / len(fields_to_check), 2)
