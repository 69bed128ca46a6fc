"""
USDA data mapper.

Transforms USDA API responses to domain models.
"""

from typing import Any, Optional

import structlog
from pydantic import ValidationError

from food_analysis.domain.nutrition.daily_values import percent_daily_values
from food_analysis.domain.nutrition.models import NutritionProfile
from food_analysis.domain.nutrition.usda_models import (
    USDADataType,
    USDAFoodItem,
    USDANutrient,
    USDASearchResult,
)

logger = structlog.get_logger(__name__)


class USDAMapper:
    """Maps USDA API data to domain models."""

    # USDA nutrient number -> profile field
    NUTRIENT_MAP = {
        "208": "calories",  # Energy (kcal)
        "203": "protein_g",  # Protein (g)
        "205": "carbs_g",  # Carbohydrate, by difference (g)
        "204": "fat_g",  # Total lipid (fat) (g)
        "606": "saturated_fat_g",  # Fatty acids, total saturated (g)
        "291": "fiber_g",  # Fiber, total dietary (g)
        "269": "sugar_g",  # Sugars, total (g)
        "307": "sodium_mg",  # Sodium, Na (mg)
        "601": "cholesterol_mg",  # Cholesterol (mg)
        "401": "vitamin_c_mg",  # Vitamin C, total ascorbic acid (mg)
        "303": "iron_mg",  # Iron, Fe (mg)
        "301": "calcium_mg",  # Calcium, Ca (mg)
    }

    # USDA nutrient number -> daily value key
    MICRONUTRIENT_MAP = {
        "401": "vitamin_c",
        "303": "iron",
        "301": "calcium",
        "306": "potassium",
        "304": "magnesium",
        "309": "zinc",
        "305": "phosphorus",
        "323": "vitamin_e",
        "320": "vitamin_a_ug",
        "328": "vitamin_d_ug",
        "418": "vitamin_b12_ug",
        "435": "folate_ug",
        "430": "vitamin_k_ug",
    }

    # FoodData Central nutrient id -> legacy nutrient number
    NUTRIENT_ID_TO_NUMBER = {
        1008: "208",
        1003: "203",
        1005: "205",
        1004: "204",
        1258: "606",
        1079: "291",
        2000: "269",
        1093: "307",
        1253: "601",
        1162: "401",
        1089: "303",
        1087: "301",
        1092: "306",
        1090: "304",
        1095: "309",
        1091: "305",
        1109: "323",
        1106: "320",
        1114: "328",
        1178: "418",
        1190: "435",
        1185: "430",
    }

    @staticmethod
    def _number_of(nutrient: USDANutrient) -> Optional[str]:
        if nutrient.number:
            return nutrient.number
        if nutrient.nutrient_id is not None:
            return USDAMapper.NUTRIENT_ID_TO_NUMBER.get(nutrient.nutrient_id)
        return None

    @staticmethod
    def map_nutrients_to_dict(nutrients: list[USDANutrient]) -> dict[str, float]:
        """Convert USDA nutrients to a profile-field dict.

        Only nutrients present in the payload appear in the result.

        Example:
            >>> nutrients = [
            ...     USDANutrient(number="208", name="Energy", amount=52.0, unit="KCAL"),
            ...     USDANutrient(nutrient_id=1003, name="Protein", amount=0.3, unit="G"),
            ... ]
            >>> result = USDAMapper.map_nutrients_to_dict(nutrients)
            >>> assert result == {"calories": 52.0, "protein_g": 0.3}
        """
        nutrient_dict: dict[str, float] = {}

        for nutrient in nutrients:
            field_name = USDAMapper.NUTRIENT_MAP.get(USDAMapper._number_of(nutrient) or "")
            if field_name and field_name not in nutrient_dict:
                nutrient_dict[field_name] = nutrient.amount

        return nutrient_dict

    @staticmethod
    def map_micronutrients(nutrients: list[USDANutrient]) -> dict[str, float]:
        """Micronutrient amounts keyed by daily value name."""
        amounts: dict[str, float] = {}
        for nutrient in nutrients:
            key = USDAMapper.MICRONUTRIENT_MAP.get(USDAMapper._number_of(nutrient) or "")
            if key and key not in amounts:
                amounts[key] = nutrient.amount
        return amounts

    @staticmethod
    def to_nutrition_profile(food_item: USDAFoodItem) -> NutritionProfile:
        """Convert USDA food item to a per-100g NutritionProfile.

        Nutrients missing from the payload stay None.
        """
        nutrient_dict = USDAMapper.map_nutrients_to_dict(food_item.nutrients)
        micronutrients = USDAMapper.map_micronutrients(food_item.nutrients)

        return NutritionProfile(
            **nutrient_dict,
            micronutrients_percent_dv=percent_daily_values(micronutrients),
            quantity_g=100.0,
        )

    @staticmethod
    def _parse_nutrient(raw: dict[str, Any]) -> Optional[USDANutrient]:
        value = raw.get("value", raw.get("amount"))
        if value is None:
            return None

        number = raw.get("nutrientNumber") or (raw.get("nutrient") or {}).get("number")
        nutrient_id = raw.get("nutrientId") or (raw.get("nutrient") or {}).get("id")
        try:
            return USDANutrient(
                number=str(number) if number is not None else None,
                nutrient_id=int(nutrient_id) if nutrient_id is not None else None,
                name=raw.get("nutrientName", ""),
                amount=float(value),
                unit=raw.get("unitName", ""),
            )
        except (ValueError, TypeError, ValidationError):
            return None

    @staticmethod
    def _parse_data_type(raw: Any) -> Optional[USDADataType]:
        try:
            return USDADataType(raw)
        except ValueError:
            return None

    @staticmethod
    def parse_search_response(response_data: dict[str, Any]) -> USDASearchResult:
        """Parse USDA search API response.

        Malformed foods and nutrients are dropped rather than defaulted.

        Example:
            >>> response = {
            ...     "totalHits": 1,
            ...     "currentPage": 1,
            ...     "totalPages": 1,
            ...     "foods": [
            ...         {
            ...             "fdcId": 123,
            ...             "description": "Apple, raw",
            ...             "dataType": "SR Legacy",
            ...             "foodNutrients": [
            ...                 {"nutrientNumber": "208", "value": 52.0},
            ...             ],
            ...         }
            ...     ],
            ... }
            >>> result = USDAMapper.parse_search_response(response)
            >>> assert result.total_hits == 1
        """
        foods = []
        for food_data in response_data.get("foods") or []:
            if not isinstance(food_data, dict):
                continue

            nutrients = []
            for raw in food_data.get("foodNutrients") or []:
                if isinstance(raw, dict):
                    nutrient = USDAMapper._parse_nutrient(raw)
                    if nutrient is not None:
                        nutrients.append(nutrient)

            try:
                foods.append(
                    USDAFoodItem(
                        fdc_id=str(food_data.get("fdcId", "")),
                        description=food_data.get("description") or "",
                        data_type=USDAMapper._parse_data_type(food_data.get("dataType")),
                        nutrients=nutrients,
                        brand_owner=food_data.get("brandOwner"),
                        gtin_upc=food_data.get("gtinUpc"),
                    )
                )
            except ValidationError as e:
                logger.warning("Skipping malformed USDA food", error=str(e))

        return USDASearchResult(
            total_hits=int(response_data.get("totalHits") or len(foods)),
            current_page=int(response_data.get("currentPage") or 1),
            total_pages=int(response_data.get("totalPages") or 0),
            foods=foods,
        )
