"""
Unit tests for the free-text food parser.
"""

import pytest

from food_analysis.domain.analysis.text_parser import (
    parse_food_text,
    parse_quantity,
    parse_segment,
    split_segments,
)


class TestParseQuantity:
    """Test quantity parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [("2", 2.0), ("1.5", 1.5), ("1,5", 1.5), ("1/2", 0.5), ("two", 2.0), ("half", 0.5), ("a", 1.0)],
    )
    def test_valid(self, raw: str, expected: float) -> None:
        assert parse_quantity(raw) == expected

    @pytest.mark.parametrize("raw", ["0", "1/0", "lots", ""])
    def test_invalid(self, raw: str) -> None:
        assert parse_quantity(raw) is None


class TestSplitSegments:
    """Test description splitting."""

    def test_separators(self) -> None:
        segments = split_segments("grilled chicken breast 150g, 2 cups rice and a banana")

        assert segments == ["grilled chicken breast 150g", "2 cups rice", "a banana"]

    def test_with_plus_and_newlines(self) -> None:
        assert split_segments("pasta with tomato\n toast + butter") == [
            "pasta",
            "tomato",
            "toast",
            "butter",
        ]

    def test_and_inside_words_is_kept(self) -> None:
        assert split_segments("sandwich") == ["sandwich"]

    def test_decimal_comma_is_not_a_separator(self) -> None:
        assert split_segments("chicken 1,5 kg, rice") == ["chicken 1,5 kg", "rice"]


class TestParseSegment:
    """Test single segment parsing."""

    def test_trailing_quantity(self) -> None:
        item = parse_segment("grilled chicken breast 150g")

        assert item.name == "grilled chicken breast"
        assert item.quantity == 150.0
        assert item.unit == "g"

    def test_leading_quantity_with_unit(self) -> None:
        item = parse_segment("2 cups rice")

        assert (item.name, item.quantity, item.unit) == ("rice", 2.0, "cups")

    def test_leading_quantity_with_of(self) -> None:
        item = parse_segment("150 g of rice")

        assert (item.name, item.quantity, item.unit) == ("rice", 150.0, "g")

    def test_fraction(self) -> None:
        item = parse_segment("1/2 cup milk")

        assert (item.name, item.quantity, item.unit) == ("milk", 0.5, "cup")

    def test_count_without_unit_is_pieces(self) -> None:
        item = parse_segment("two eggs")

        assert (item.name, item.quantity, item.unit) == ("eggs", 2.0, "piece")

    def test_unknown_unit_is_kept(self) -> None:
        item = parse_segment("3 handfuls of almonds")

        assert (item.name, item.quantity, item.unit) == ("almonds", 3.0, "handfuls")

    def test_no_quantity_is_one_serving(self) -> None:
        item = parse_segment("I had pizza")

        assert (item.name, item.quantity, item.unit) == ("pizza", 1.0, "serving")

    def test_filler_only(self) -> None:
        assert parse_segment("I had ") is None


class TestParseFoodText:
    """Test full description parsing."""

    def test_meal_description(self) -> None:
        items = parse_food_text("grilled chicken breast 150g, 2 cups rice and a banana")

        assert [(i.name, i.quantity, i.unit) for i in items] == [
            ("grilled chicken breast", 150.0, "g"),
            ("rice", 2.0, "cups"),
            ("banana", 1.0, "piece"),
        ]

    def test_names_keep_original_wording(self) -> None:
        items = parse_food_text("pollo alla griglia 200g")

        assert items[0].name == "pollo alla griglia"

    def test_decimal_comma_quantity(self) -> None:
        items = parse_food_text("chicken 1,5 kg")

        assert [(i.name, i.quantity, i.unit) for i in items] == [("chicken", 1.5, "kg")]

    def test_empty_description(self) -> None:
        assert parse_food_text(" , and ") == []
