"""
Unit normalization.

Converts user quantities to grams with a fixed conversion table.
Unknown units fall back to one serving (100 g) instead of failing.
"""

from __future__ import annotations

from typing import Final, NamedTuple

DEFAULT_SERVING_G: Final[float] = 100.0

# Penalty factor applied to confidence when the unit was not recognized.
UNKNOWN_UNIT_CONFIDENCE_FACTOR: Final[float] = 0.8

GRAMS_PER_UNIT: Final[dict[str, float]] = {
    "g": 1.0,
    "gr": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "kg": 1000.0,
    "kilogram": 1000.0,
    "kilograms": 1000.0,
    "mg": 0.001,
    "oz": 28.35,
    "ounce": 28.35,
    "ounces": 28.35,
    "lb": 453.59,
    "lbs": 453.59,
    "pound": 453.59,
    "pounds": 453.59,
    "ml": 1.0,
    "milliliter": 1.0,
    "milliliters": 1.0,
    "l": 1000.0,
    "liter": 1000.0,
    "liters": 1000.0,
    "cup": 240.0,
    "cups": 240.0,
    "tbsp": 15.0,
    "tablespoon": 15.0,
    "tablespoons": 15.0,
    "tsp": 5.0,
    "teaspoon": 5.0,
    "teaspoons": 5.0,
    "piece": 100.0,
    "pieces": 100.0,
    "pc": 100.0,
    "pcs": 100.0,
    "slice": 30.0,
    "slices": 30.0,
    "serving": DEFAULT_SERVING_G,
    "servings": DEFAULT_SERVING_G,
    "portion": DEFAULT_SERVING_G,
    "portions": DEFAULT_SERVING_G,
}


class GramConversion(NamedTuple):
    """Result of converting a quantity to grams."""

    grams: float
    recognized: bool


def normalize_unit(unit: str) -> str:
    """Lowercase and strip a unit, dropping a trailing dot (``oz.``)."""
    return unit.strip().lower().rstrip(".")


def is_known_unit(unit: str) -> bool:
    """True when the unit is in the conversion table."""
    return normalize_unit(unit) in GRAMS_PER_UNIT


def to_grams(quantity: float, unit: str) -> GramConversion:
    """
    Convert a quantity to grams.

    Example:
        >>> to_grams(2, "cups")
        GramConversion(grams=480.0, recognized=True)
        >>> to_grams(3, "handful")
        GramConversion(grams=300.0, recognized=False)
    """
    factor = GRAMS_PER_UNIT.get(normalize_unit(unit))
    if factor is None:
        return GramConversion(grams=round(quantity * DEFAULT_SERVING_G, 2), recognized=False)
    return GramConversion(grams=round(quantity * factor, 2), recognized=True)
