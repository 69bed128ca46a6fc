"""
Food name descriptor words.

Preparation, cut, size and filler words that may appear in a food
name without changing what the food is ("grilled chicken breast" is
still chicken). Any other word in a name must be explained by a known
food term, otherwise the name is treated as unknown.
"""

from __future__ import annotations

from typing import Final, Iterable

DESCRIPTOR_WORDS: Final[frozenset[str]] = frozenset(
    {
        # Preparation
        "grilled",
        "roasted",
        "roast",
        "baked",
        "boiled",
        "hard",
        "soft",
        "poached",
        "steamed",
        "fried",
        "sauteed",
        "scrambled",
        "toasted",
        "smoked",
        "cooked",
        "raw",
        "fresh",
        "frozen",
        "dried",
        "canned",
        "plain",
        "unsalted",
        "salted",
        "unsweetened",
        "homemade",
        "organic",
        "ripe",
        "hot",
        "cold",
        "warm",
        # Cut and form
        "sliced",
        "diced",
        "chopped",
        "minced",
        "mashed",
        "shredded",
        "grated",
        "whole",
        "half",
        "skinless",
        "boneless",
        "lean",
        "breast",
        "thigh",
        "wing",
        "leg",
        "fillet",
        "filet",
        "slice",
        "piece",
        "chunk",
        # Size and colour
        "small",
        "medium",
        "large",
        "big",
        "mini",
        "white",
        "brown",
        "red",
        "green",
        "yellow",
        # Fillers
        "a",
        "an",
        "the",
        "of",
        "some",
        "in",
        "on",
    }
)


def is_descriptor(word: str) -> bool:
    """True for a descriptor word or its plural ("slices")."""
    word = word.lower()
    if word in DESCRIPTOR_WORDS:
        return True
    return len(word) > 3 and word.endswith("s") and word[:-1] in DESCRIPTOR_WORDS


def unexplained_words(words: Iterable[str]) -> list[str]:
    """
    Words that are neither descriptors nor numbers.

    Example:
        >>> unexplained_words(["grilled", "korma"])
        ['korma']
    """
    return [w for w in words if w and not w.isdigit() and not is_descriptor(w)]
