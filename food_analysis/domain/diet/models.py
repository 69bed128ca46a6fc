"""
Diet compatibility models.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ViolationSeverity(str, Enum):
    """How much of a meal breaks a diet."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AllergenSafety(str, Enum):
    """Overall allergen verdict."""

    SAFE = "safe"
    UNSAFE = "unsafe"
    UNVERIFIED = "unverified"  # Some ingredient could not be classified


class DietVerdict(BaseModel):
    """
    Verdict for one requested diet.

    ``verified=False`` means the verdict rests on incomplete knowledge
    (unknown ingredient or unsupported diet).
    """

    model_config = ConfigDict(frozen=True)

    compatible: bool
    reason: str
    verified: bool = True


class DietViolation(BaseModel):
    """Ingredients that break a diet."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    diet: str
    violating_ingredients: list[str] = Field(default_factory=list)
    severity: ViolationSeverity


class AllergenWarning(BaseModel):
    """A requested allergen found in the meal."""

    model_config = ConfigDict(frozen=True)

    allergen: str
    ingredients: list[str] = Field(default_factory=list)


class DietCompatibilityResult(BaseModel):
    """
    Outcome of a diet and allergen check.

    Example:
        >>> result = DietCompatibilityResult()
        >>> assert result.is_compatible()
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    diets: dict[str, DietVerdict] = Field(default_factory=dict)
    violations: list[DietViolation] = Field(default_factory=list)
    allergen_warnings: list[AllergenWarning] = Field(default_factory=list)
    unknown_ingredients: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    allergen_safety: AllergenSafety = AllergenSafety.SAFE

    def is_compatible(self) -> bool:
        """True when every requested diet is compatible and verified."""
        return all(v.compatible and v.verified for v in self.diets.values())
