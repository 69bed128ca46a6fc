"""
Static food composition table.

Curated per-100g values for common foods (USDA SR Legacy reference
values, rounded). Used when USDA is unavailable or has no match.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

from food_analysis.domain.nutrition.daily_values import percent_daily_values
from food_analysis.domain.nutrition.descriptors import unexplained_words
from food_analysis.domain.nutrition.models import NutritionProfile


class StaticFood(NamedTuple):
    """One row of the static table."""

    name: str
    aliases: tuple[str, ...]
    profile: NutritionProfile


class StaticMatch(NamedTuple):
    """A table row matched by a query."""

    food: StaticFood
    matched_alias: str
    exact: bool


def _food(
    name: str,
    aliases: tuple[str, ...],
    calories: float,
    protein_g: float,
    carbs_g: float,
    fat_g: float,
    saturated_fat_g: float,
    fiber_g: float,
    sugar_g: float,
    sodium_mg: float,
    vitamin_c_mg: Optional[float] = None,
    iron_mg: Optional[float] = None,
    calcium_mg: Optional[float] = None,
) -> StaticFood:
    profile = NutritionProfile(
        calories=calories,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        saturated_fat_g=saturated_fat_g,
        fiber_g=fiber_g,
        sugar_g=sugar_g,
        sodium_mg=sodium_mg,
        vitamin_c_mg=vitamin_c_mg,
        iron_mg=iron_mg,
        calcium_mg=calcium_mg,
        micronutrients_percent_dv=percent_daily_values(
            {"vitamin_c": vitamin_c_mg, "iron": iron_mg, "calcium": calcium_mg}
        ),
        quantity_g=100.0,
    )
    return StaticFood(name=name, aliases=(name, *aliases), profile=profile)


# Per 100g: kcal, protein, carbs, fat, sat fat, fiber, sugar (g), sodium (mg),
# then vitamin C, iron, calcium (mg)
STATIC_FOODS: tuple[StaticFood, ...] = (
    # Meat and poultry
    _food("chicken breast", ("chicken breasts", "chicken"), 165, 31, 0, 3.6, 1.0, 0, 0, 74, 0, 1.0, 15),
    _food("chicken thigh", ("chicken thighs",), 209, 26, 0, 10.9, 3.0, 0, 0, 84, 0, 1.3, 12),
    _food("turkey breast", ("turkey",), 135, 30, 0, 1.0, 0.3, 0, 0, 52, 0, 0.7, 10),
    _food("beef steak", ("steak", "beef", "sirloin"), 271, 25, 0, 19, 7.7, 0, 0, 54, 0, 2.6, 18),
    _food("ground beef", ("minced beef", "beef mince"), 254, 17, 0, 20, 7.7, 0, 0, 66, 0, 1.9, 18),
    _food("pork chop", ("pork", "pork loin"), 231, 26, 0, 14, 4.8, 0, 0, 62, 0.6, 0.9, 19),
    _food("bacon", (), 541, 37, 1.4, 42, 14, 0, 0, 1717, 0, 1.4, 11),
    _food("ham", (), 145, 21, 1.5, 5.5, 1.8, 0, 0, 1203, 0, 0.8, 8),
    _food("hamburger", ("burger", "cheeseburger"), 254, 14, 24, 11, 4.1, 1.3, 5.8, 412, 0, 2.4, 85),
    # Fish and seafood
    _food("salmon", ("salmon fillet",), 208, 20, 0, 13, 3.1, 0, 0, 59, 3.9, 0.3, 9),
    _food("tuna", ("canned tuna", "tuna fish"), 116, 26, 0, 0.8, 0.2, 0, 0, 247, 0, 1.0, 11),
    _food("cod", ("cod fillet", "white fish"), 82, 18, 0, 0.7, 0.1, 0, 0, 54, 1.0, 0.4, 16),
    _food("shrimp", ("prawns", "prawn", "shrimps"), 99, 24, 0.2, 0.3, 0.1, 0, 0, 111, 0, 0.5, 70),
    # Eggs
    _food("egg", ("eggs", "boiled egg", "boiled eggs", "whole egg", "hard boiled egg"), 155, 13, 1.1, 11, 3.3, 0, 1.1, 124, 0, 1.2, 50),
    _food("egg white", ("egg whites",), 52, 11, 0.7, 0.2, 0, 0, 0.7, 166, 0, 0.1, 7),
    # Plant proteins
    _food("tofu", (), 76, 8, 1.9, 4.8, 0.7, 0.3, 0.6, 7, 0.1, 5.4, 350),
    _food("lentils", ("lentil",), 116, 9, 20, 0.4, 0.1, 7.9, 1.8, 2, 1.5, 3.3, 19),
    _food("chickpeas", ("chickpea", "garbanzo beans"), 164, 8.9, 27, 2.6, 0.3, 7.6, 4.8, 7, 1.3, 2.9, 49),
    _food("black beans", ("beans", "black bean"), 132, 8.9, 24, 0.5, 0.1, 8.7, 0.3, 1, 0, 2.1, 27),
    # Grains
    _food("white rice", ("rice", "cooked rice", "steamed rice"), 130, 2.7, 28, 0.3, 0.1, 0.4, 0.1, 1, 0, 0.2, 10),
    _food("brown rice", (), 112, 2.3, 24, 0.8, 0.2, 1.8, 0.4, 5, 0, 0.4, 10),
    _food("pasta", ("spaghetti", "penne", "macaroni", "noodles"), 158, 5.8, 31, 0.9, 0.2, 1.8, 0.6, 1, 0, 1.3, 7),
    _food("white bread", ("bread", "toast"), 265, 9, 49, 3.2, 0.7, 2.7, 5, 491, 0, 3.6, 260),
    _food("whole wheat bread", ("wholemeal bread", "whole grain bread"), 252, 12, 43, 3.5, 0.7, 6, 4.4, 450, 0, 2.5, 161),
    _food("oats", ("rolled oats", "oat flakes"), 389, 17, 66, 6.9, 1.2, 10.6, 0, 2, 0, 4.7, 54),
    _food("oatmeal", ("porridge",), 71, 2.5, 12, 1.5, 0.3, 1.7, 0.3, 49, 0, 0.9, 9),
    _food("quinoa", (), 120, 4.4, 21, 1.9, 0.2, 2.8, 0.9, 7, 0, 1.5, 17),
    _food("granola", ("muesli",), 471, 10, 64, 20, 3.7, 7, 24, 26, 1.2, 3.0, 76),
    _food("croissant", ("croissants",), 406, 8.2, 46, 21, 12, 2.6, 11, 467, 0.2, 2.0, 37),
    _food("pizza", ("cheese pizza", "margherita pizza"), 266, 11, 33, 10, 4.5, 2.3, 3.6, 598, 0, 2.5, 188),
    # Starches
    _food("potato", ("potatoes", "baked potato", "boiled potato"), 93, 2.5, 21, 0.1, 0, 2.2, 1.2, 10, 9.6, 1.1, 15),
    _food("sweet potato", ("sweet potatoes",), 90, 2.0, 21, 0.2, 0.1, 3.3, 6.5, 36, 19.6, 0.7, 38),
    _food("french fries", ("fries", "chips"), 312, 3.4, 41, 15, 2.3, 3.8, 0.3, 210, 4.7, 0.8, 18),
    _food("corn", ("sweet corn", "sweetcorn"), 96, 3.4, 21, 1.5, 0.2, 2.4, 4.5, 1, 5.5, 0.5, 3),
    # Vegetables
    _food("broccoli", (), 34, 2.8, 7, 0.4, 0, 2.6, 1.7, 33, 89.2, 0.7, 47),
    _food("spinach", (), 23, 2.9, 3.6, 0.4, 0.1, 2.2, 0.4, 79, 28.1, 2.7, 99),
    _food("carrot", ("carrots",), 41, 0.9, 10, 0.2, 0, 2.8, 4.7, 69, 5.9, 0.3, 33),
    _food("tomato", ("tomatoes", "cherry tomatoes"), 18, 0.9, 3.9, 0.2, 0, 1.2, 2.6, 5, 13.7, 0.3, 10),
    _food("lettuce", ("salad", "green salad", "mixed greens"), 15, 1.4, 2.9, 0.2, 0, 1.3, 0.8, 28, 9.2, 0.9, 36),
    _food("cucumber", ("cucumbers",), 15, 0.7, 3.6, 0.1, 0, 0.5, 1.7, 2, 2.8, 0.3, 16),
    _food("bell pepper", ("bell peppers", "red pepper", "green pepper"), 31, 1.0, 6, 0.3, 0, 2.1, 4.2, 4, 127.7, 0.4, 7),
    _food("onion", ("onions",), 40, 1.1, 9.3, 0.1, 0, 1.7, 4.2, 4, 7.4, 0.2, 23),
    _food("mushrooms", ("mushroom",), 22, 3.1, 3.3, 0.3, 0, 1.0, 2.0, 5, 2.1, 0.5, 3),
    _food("avocado", ("avocados",), 160, 2.0, 8.5, 14.7, 2.1, 6.7, 0.7, 7, 10, 0.6, 12),
    # Fruit
    _food("apple", ("apples",), 52, 0.3, 14, 0.2, 0, 2.4, 10.4, 1, 4.6, 0.1, 6),
    _food("banana", ("bananas",), 89, 1.1, 23, 0.3, 0.1, 2.6, 12.2, 1, 8.7, 0.3, 5),
    _food("orange", ("oranges",), 47, 0.9, 12, 0.1, 0, 2.4, 9.4, 0, 53.2, 0.1, 40),
    _food("strawberries", ("strawberry",), 32, 0.7, 7.7, 0.3, 0, 2.0, 4.9, 1, 58.8, 0.4, 16),
    _food("blueberries", ("blueberry",), 57, 0.7, 14, 0.3, 0, 2.4, 10, 1, 9.7, 0.3, 6),
    _food("grapes", ("grape",), 69, 0.7, 18, 0.2, 0.1, 0.9, 15.5, 2, 3.2, 0.4, 10),
    # Dairy
    _food("milk", ("whole milk",), 61, 3.2, 4.8, 3.3, 1.9, 0, 5.1, 43, 0, 0, 113),
    _food("yogurt", ("plain yogurt", "yoghurt"), 61, 3.5, 4.7, 3.3, 2.1, 0, 4.7, 46, 0.5, 0.1, 121),
    _food("greek yogurt", ("greek yoghurt",), 59, 10, 3.6, 0.4, 0.1, 0, 3.2, 36, 0, 0.1, 110),
    _food("cheddar cheese", ("cheese", "cheddar"), 403, 25, 1.3, 33, 21, 0, 0.5, 621, 0, 0.7, 721),
    _food("mozzarella", ("mozzarella cheese",), 254, 24, 2.8, 16, 10, 0, 1.1, 619, 0, 0.2, 782),
    _food("butter", (), 717, 0.9, 0.1, 81, 51, 0, 0.1, 11, 0, 0, 24),
    # Fats, nuts and seeds
    _food("olive oil", ("extra virgin olive oil",), 884, 0, 0, 100, 14, 0, 0, 2, 0, 0.6, 1),
    _food("almonds", ("almond",), 579, 21, 22, 50, 3.8, 12.5, 4.4, 1, 0, 3.7, 269),
    _food("walnuts", ("walnut",), 654, 15, 14, 65, 6.1, 6.7, 2.6, 2, 1.3, 2.9, 98),
    _food("peanut butter", (), 588, 25, 20, 50, 10.3, 6, 9.2, 459, 0, 1.9, 43),
    # Sweets and drinks
    _food("dark chocolate", ("chocolate",), 546, 4.9, 61, 31, 19, 7, 48, 24, 0, 8.0, 56),
    _food("honey", (), 304, 0.3, 82, 0, 0, 0.2, 82, 4, 0.5, 0.4, 6),
    _food("sugar", ("white sugar",), 387, 0, 100, 0, 0, 0, 100, 1, 0, 0, 1),
    _food("orange juice", ("juice",), 45, 0.7, 10.4, 0.2, 0, 0.2, 8.4, 1, 50, 0.2, 11),
    _food("cola", ("soda", "coke", "soft drink"), 42, 0, 10.6, 0, 0, 0, 10.6, 4, 0, 0, 2),
    _food("coffee", ("black coffee",), 1, 0.1, 0, 0, 0, 0, 0, 2, 0, 0, 2),
    _food("water", (), 0, 0, 0, 0, 0, 0, 0, 4, 0, 0, 3),
)


def normalize_food_name(text: str) -> str:
    """Lowercase, keep letters, digits and spaces, collapse whitespace."""
    return " ".join(re.sub(r"[^a-z0-9\s]", " ", text.lower()).split())


def _build_alias_index() -> dict[str, StaticFood]:
    index: dict[str, StaticFood] = {}
    for food in STATIC_FOODS:
        for alias in food.aliases:
            # First row wins when aliases collide
            index.setdefault(normalize_food_name(alias), food)
    return index


ALIAS_INDEX: dict[str, StaticFood] = _build_alias_index()


def find_static_food(query: str) -> Optional[StaticMatch]:
    """
    Find the table row for a food name.

    Exact name/alias matches win; otherwise the longest alias
    contained in the query as whole words, provided every other word
    of the query is a descriptor ("grilled", "fresh", ...).

    Example:
        >>> match = find_static_food("grilled chicken breast")
        >>> assert match.food.name == "chicken breast"
        >>> assert match.exact is False
        >>> assert find_static_food("unobtainium stew") is None
        >>> assert find_static_food("moon cheese") is None
    """
    normalized = normalize_food_name(query)
    if not normalized:
        return None

    food = ALIAS_INDEX.get(normalized)
    if food is not None:
        return StaticMatch(food=food, matched_alias=normalized, exact=True)

    words = normalized.split()
    best: Optional[str] = None
    for alias in ALIAS_INDEX:
        if best is not None and len(alias) <= len(best):
            continue
        leftover = _remove_phrase(words, alias.split())
        if leftover is not None and not unexplained_words(leftover):
            best = alias

    if best is None:
        return None
    return StaticMatch(food=ALIAS_INDEX[best], matched_alias=best, exact=False)


def _remove_phrase(words: list[str], phrase: list[str]) -> Optional[list[str]]:
    """Words left after removing the first whole-word occurrence of phrase."""
    size = len(phrase)
    for start in range(len(words) - size + 1):
        if words[start : start + size] == phrase:
            return words[:start] + words[start + size :]
    return None
