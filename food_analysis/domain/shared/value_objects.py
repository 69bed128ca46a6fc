"""
Shared value objects.

Immutable, validated domain primitives.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field


class Barcode(BaseModel):
    """
    Product barcode value object.

    Validates barcode format (8-14 digits, EAN-8 up to GTIN-14).
    Used for OpenFoodFacts lookups.

    Example:
        >>> barcode = Barcode.from_raw("3017-6204-22003")
        >>> assert barcode.value == "3017620422003"
        >>> assert barcode.is_valid()
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=r"^\d{8,14}$", description="Barcode digits")

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"Barcode('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)

    def is_valid(self) -> bool:
        """
        Validate barcode format.

        Returns:
            True if valid (8-14 digits)
        """
        return bool(re.match(r"^\d{8,14}$", self.value))

    @staticmethod
    def normalize(raw: str) -> str:
        """Strip every non-digit character."""
        return re.sub(r"\D", "", raw)

    @classmethod
    def from_string(cls, s: str) -> Barcode:
        """Create from string."""
        return cls(value=s)

    @classmethod
    def from_raw(cls, raw: str) -> Barcode:
        """Create from scanner/user input, dropping spaces and dashes."""
        return cls(value=cls.normalize(raw))
