"""
Unit tests for shared value objects and errors.
"""

import pytest
from pydantic import ValidationError

from food_analysis.domain.shared.errors import (
    ExternalServiceError,
    InvalidInputError,
    RateLimitError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from food_analysis.domain.shared.value_objects import Barcode


class TestBarcode:
    """Test Barcode value object."""

    def test_valid_ean13(self) -> None:
        barcode = Barcode(value="3017620422003")

        assert barcode.is_valid()
        assert repr(barcode) == "Barcode('3017620422003')"

    def test_from_raw_drops_separators(self) -> None:
        assert Barcode.from_raw(" 3017-6204 22003 ").value == "3017620422003"

    @pytest.mark.parametrize("value", ["1234567", "123456789012345", "abc12345"])
    def test_invalid_lengths_and_characters(self, value: str) -> None:
        with pytest.raises(ValidationError):
            Barcode(value=value)


class TestErrorHierarchy:
    """Test exception hierarchy used for fallback decisions."""

    def test_timeout_is_unavailable(self) -> None:
        assert issubclass(SourceTimeoutError, SourceUnavailableError)
        assert issubclass(RateLimitError, SourceUnavailableError)
        assert issubclass(SourceUnavailableError, ExternalServiceError)

    def test_invalid_input_is_value_error(self) -> None:
        assert issubclass(InvalidInputError, ValueError)
