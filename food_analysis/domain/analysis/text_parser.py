"""
Free-text food parser.

Deterministic splitting of a meal description into FoodItems:

    "grilled chicken breast 150g, 2 cups rice and a banana"
    -> [grilled chicken breast 150 g] [rice 2 cups] [banana 1 piece]

Food names keep the user's wording; only quantities, units and
leading fillers ("I had") are taken out.
"""

from __future__ import annotations

import re
from fractions import Fraction
from typing import Optional

from pydantic import ValidationError

from food_analysis.domain.nutrition.models import FoodItem
from food_analysis.domain.nutrition.units import GRAMS_PER_UNIT

# A comma between two digits is a decimal comma ("1,5 kg"), not a separator
SEPARATORS = re.compile(
    r"\s*(?:[\n;+&]|(?<!\d),|,(?!\d)|\band\b|\bwith\b|\bplus\b)\s*", re.IGNORECASE
)

FILLERS = re.compile(
    r"^(?:(?:for\s+(?:breakfast|lunch|dinner)\s+)?(?:i\s+(?:ate|had|have|eat)|i've\s+had|ate|had)\s+)",
    re.IGNORECASE,
)

WORD_NUMBERS = {
    "a": 1.0,
    "an": 1.0,
    "one": 1.0,
    "two": 2.0,
    "three": 3.0,
    "four": 4.0,
    "five": 5.0,
    "six": 6.0,
    "seven": 7.0,
    "eight": 8.0,
    "nine": 9.0,
    "ten": 10.0,
    "half": 0.5,
    "some": 1.0,
}

_NUMBER = r"\d+(?:[.,]\d+)?(?:/\d+)?"
_WORD_NUMBER = "|".join(sorted(WORD_NUMBERS, key=len, reverse=True))
_UNIT = "|".join(re.escape(u) for u in sorted(GRAMS_PER_UNIT, key=len, reverse=True))

# "150 g of rice", "2 cups rice", "150g rice", "a cup of rice", "two eggs"
LEADING = re.compile(
    rf"^(?P<qty>{_NUMBER}|(?:{_WORD_NUMBER})(?=\s))\s*"
    rf"(?:(?P<unit>{_UNIT})\.?(?=\s|$))?\s*(?:of\s+)?(?P<name>.+)$",
    re.IGNORECASE,
)

# "3 handfuls of nuts": a word unit we do not know, kept for the resolver
LEADING_UNKNOWN_UNIT = re.compile(
    rf"^(?P<qty>{_NUMBER}|{_WORD_NUMBER})\s+(?P<unit>[a-z]+)\s+of\s+(?P<name>.+)$",
    re.IGNORECASE,
)

# "chicken 150g", "grilled chicken breast 150 g", "eggs 2"
TRAILING = re.compile(
    rf"^(?P<name>.+?)\s+(?P<qty>{_NUMBER})\s*(?:(?P<unit>{_UNIT})\.?)?$",
    re.IGNORECASE,
)


def parse_quantity(raw: str) -> Optional[float]:
    """
    Parse "2", "1.5", "1,5", "1/2" or a number word.

    Returns:
        Positive quantity, or None when unparseable or zero
    """
    text = raw.strip().lower()
    if text in WORD_NUMBERS:
        return WORD_NUMBERS[text]
    try:
        value = float(Fraction(text.replace(",", ".")))
    except (ValueError, ZeroDivisionError):
        return None
    return value if value > 0 else None


def split_segments(description: str) -> list[str]:
    """Split a description on commas, "and", "with", "+" and newlines."""
    segments = []
    for part in SEPARATORS.split(description):
        cleaned = " ".join(re.sub(r"[()\[\]]", " ", part).split()).strip(" .!?:")
        if cleaned:
            segments.append(cleaned)
    return segments


def parse_segment(segment: str) -> Optional[FoodItem]:
    """
    Parse one segment into a FoodItem.

    Example:
        >>> parse_segment("chicken 150g")
        FoodItem(name='chicken', quantity=150.0, unit='g', confidence=1.0)
    """
    text = FILLERS.sub("", segment).strip()
    if not text:
        return None

    quantity: Optional[float] = None
    unit: Optional[str] = None
    name = text

    for pattern in (LEADING_UNKNOWN_UNIT, LEADING, TRAILING):
        match = pattern.match(text)
        if not match or not match.group("name").strip():
            continue
        if pattern is LEADING_UNKNOWN_UNIT and match.group("unit").lower() in WORD_NUMBERS:
            continue
        parsed = parse_quantity(match.group("qty"))
        if parsed is None:
            continue
        quantity = parsed
        unit = match.group("unit")
        name = match.group("name").strip()
        break

    if quantity is None:
        quantity, unit = 1.0, "serving"
    elif not unit:
        unit = "piece"

    try:
        return FoodItem(name=name[:200], quantity=quantity, unit=unit.lower())
    except ValidationError:
        return None


def parse_food_text(description: str) -> list[FoodItem]:
    """
    Split a meal description into food items.

    Segments without a quantity become one serving.

    Example:
        >>> items = parse_food_text("grilled chicken breast 150g")
        >>> assert items[0].name == "grilled chicken breast"
        >>> assert items[0].quantity == 150.0 and items[0].unit == "g"
    """
    items = []
    for segment in split_segments(description):
        item = parse_segment(segment)
        if item is not None:
            items.append(item)
    return items
