"""
Diet compatibility checker.

Classifies ingredients through the static taxonomy, then runs two
independent passes: diets (forbidden food groups) and allergens.
An ingredient the taxonomy does not know is never assumed safe, and
neither is one with words no taxonomy term or descriptor explains.
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping, NamedTuple, Optional

import structlog

from food_analysis.domain.diet import taxonomy
from food_analysis.domain.nutrition.descriptors import unexplained_words
from food_analysis.domain.diet.models import (
    AllergenSafety,
    AllergenWarning,
    DietCompatibilityResult,
    DietVerdict,
    DietViolation,
    ViolationSeverity,
)

logger = structlog.get_logger(__name__)


def normalize_ingredient(text: str) -> str:
    """Lowercase, replace non-letters with spaces, collapse whitespace."""
    return " ".join(re.sub(r"[^a-z]+", " ", text.lower()).split())


def normalize_label(label: str) -> str:
    """Canonical form of a diet or allergen name ("Gluten Free" -> "gluten-free")."""
    return re.sub(r"[\s_]+", "-", label.strip().lower())


def _singular_forms(token: str) -> set[str]:
    forms = {token}
    if len(token) > 3 and token.endswith("s") and not token.endswith("ss"):
        forms.add(token[:-1])
        if token.endswith("es"):
            forms.add(token[:-2])
        if token.endswith("ies"):
            forms.add(token[:-3] + "y")
    return forms


class IngredientMatch(NamedTuple):
    """Classification of one ingredient."""

    groups: set[str]
    unexplained: list[str]

    def is_known(self) -> bool:
        """True when every significant word was claimed by a taxonomy term."""
        return bool(self.groups) and not self.unexplained


class IngredientClassifier:
    """Maps free-text ingredients to taxonomy food groups."""

    def __init__(self, ingredient_groups: Optional[Mapping[str, tuple[str, ...]]] = None) -> None:
        groups = ingredient_groups if ingredient_groups is not None else taxonomy.INGREDIENT_GROUPS
        # Longest phrases first so they claim their tokens before sub-words do
        self._terms = sorted(
            ((tuple(term.split()), tuple(g)) for term, g in groups.items()),
            key=lambda entry: len(entry[0]),
            reverse=True,
        )

    def classify(self, ingredient: str) -> set[str]:
        """
        Food groups of an ingredient; empty set when nothing matched.

        Example:
            >>> sorted(IngredientClassifier().classify("Peanut Butter"))
            ['legumes', 'peanuts']
        """
        return self.match(ingredient).groups

    def match(self, ingredient: str) -> IngredientMatch:
        """
        Food groups plus the words no taxonomy term claimed.

        Example:
            >>> IngredientClassifier().match("chicken korma").unexplained
            ['korma']
        """
        tokens = normalize_ingredient(ingredient).split()
        forms = [_singular_forms(t) for t in tokens]
        claimed = [False] * len(tokens)
        groups: set[str] = set()

        for phrase, phrase_groups in self._terms:
            size = len(phrase)
            for start in range(len(tokens) - size + 1):
                span = range(start, start + size)
                if any(claimed[i] for i in span):
                    continue
                if all(phrase[k] in forms[start + k] for k in range(size)):
                    groups.update(phrase_groups)
                    for i in span:
                        claimed[i] = True

        leftover = [token for token, used in zip(tokens, claimed) if not used]
        return IngredientMatch(groups=groups, unexplained=unexplained_words(leftover))


class DietCompatibilityChecker:
    """
    Checks a list of ingredients against diets and allergens.

    Example:
        >>> checker = DietCompatibilityChecker()
        >>> result = checker.check(["grilled chicken"], diets=["vegan"])
        >>> assert result.diets["vegan"].compatible is False
    """

    def __init__(self, classifier: Optional[IngredientClassifier] = None) -> None:
        self._classifier = classifier or IngredientClassifier()

    def check(
        self,
        ingredients: Iterable[str],
        diets: Iterable[str] = (),
        allergens: Iterable[str] = (),
    ) -> DietCompatibilityResult:
        """
        Check ingredients against requested diets and allergens.

        Args:
            ingredients: Ingredient names as the user wrote them
            diets: Requested diets (aliases accepted)
            allergens: Allergen restrictions (aliases accepted)

        Returns:
            DietCompatibilityResult
        """
        names = [i.strip() for i in ingredients if i and i.strip()]
        requested_diets = _dedupe(diets)
        requested_allergens = _dedupe(allergens)

        matches = {name: self._classifier.match(name) for name in names}
        classified = {name: m.groups for name, m in matches.items()}
        # "chicken korma" still counts as meat, but is not fully known
        unknown = [name for name, m in matches.items() if not m.is_known()]

        warnings: list[str] = []
        verdicts: dict[str, DietVerdict] = {}
        violations: list[DietViolation] = []

        for label in requested_diets:
            diet = taxonomy.DIET_ALIASES.get(normalize_label(label), normalize_label(label))
            if diet in verdicts:
                continue
            forbidden = taxonomy.DIET_FORBIDDEN_GROUPS.get(diet)
            if forbidden is None:
                warnings.append(f"Unsupported diet '{label}': compatibility not verified")
                verdicts[label] = DietVerdict(
                    compatible=False,
                    reason=f"Diet '{label}' is not supported",
                    verified=False,
                )
                continue

            if unknown:
                warnings.append(
                    f"Cannot verify {diet} compatibility for: {', '.join(unknown)}"
                )

            offending = [name for name, groups in classified.items() if groups & forbidden]
            if offending:
                violations.append(
                    DietViolation(
                        diet=diet,
                        violating_ingredients=offending,
                        severity=_severity(len(offending), len(classified)),
                    )
                )
                verdicts[diet] = DietVerdict(
                    compatible=False,
                    reason=f"Contains ingredients not allowed on a {diet} diet: "
                    + ", ".join(offending),
                    verified=not unknown,
                )
            elif unknown:
                verdicts[diet] = DietVerdict(
                    compatible=True,
                    reason="No forbidden ingredients found, but cannot verify: "
                    + ", ".join(unknown),
                    verified=False,
                )
            else:
                verdicts[diet] = DietVerdict(
                    compatible=True,
                    reason=f"All ingredients fit a {diet} diet",
                )

        allergen_warnings: list[AllergenWarning] = []
        allergen_unverified = False
        checked_allergens: set[str] = set()
        for label in requested_allergens:
            allergen = taxonomy.ALLERGEN_ALIASES.get(normalize_label(label), normalize_label(label))
            if allergen in checked_allergens:
                continue
            checked_allergens.add(allergen)
            if allergen not in taxonomy.SUPPORTED_ALLERGENS:
                warnings.append(f"Unsupported allergen '{label}': safety not verified")
                allergen_unverified = True
                continue

            found = [
                name
                for name, groups in classified.items()
                if any(taxonomy.GROUP_ALLERGENS.get(g) == allergen for g in groups)
            ]
            if found:
                allergen_warnings.append(AllergenWarning(allergen=allergen, ingredients=found))
            if unknown:
                allergen_unverified = True
                warnings.append(
                    f"Cannot verify absence of {allergen} in: {', '.join(unknown)}"
                )

        if allergen_warnings:
            safety = AllergenSafety.UNSAFE
        elif allergen_unverified:
            safety = AllergenSafety.UNVERIFIED
        else:
            safety = AllergenSafety.SAFE

        logger.debug(
            "Diet compatibility checked",
            ingredients=len(names),
            unknown=len(unknown),
            violations=len(violations),
            allergen_safety=safety.value,
        )

        return DietCompatibilityResult(
            diets=verdicts,
            violations=violations,
            allergen_warnings=allergen_warnings,
            unknown_ingredients=unknown,
            warnings=warnings,
            allergen_safety=safety,
        )


def _dedupe(labels: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for label in labels:
        key = normalize_label(label)
        if key and key not in seen:
            seen.add(key)
            result.append(label.strip())
    return result


def _severity(violating: int, total: int) -> ViolationSeverity:
    if violating > total / 2:
        return ViolationSeverity.HIGH
    if violating > 1:
        return ViolationSeverity.MEDIUM
    return ViolationSeverity.LOW
