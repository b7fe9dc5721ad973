"""Tests for calendar, number formatting and emoji helpers."""
from datetime import date

from utils.dates import (
    month_bounds,
    month_name,
    selection_bounds,
    week_in_year,
    weekday_index,
    weeks_in_year,
    year_bounds,
)
from utils.formatting import NOT_AVAILABLE, average, format_decimal, format_percentage, percentage
from utils.ingredient_emojis import DEFAULT_EMOJI, get_ingredient_emoji, normalize_name


class TestDates:
    def test_sunday_is_zero(self):
        assert weekday_index(date(2025, 3, 2)) == 0
        assert weekday_index(date(2025, 3, 8)) == 6

    def test_weeks_in_year(self):
        assert weeks_in_year(2020) == 53
        assert weeks_in_year(2025) == 52

    def test_week_in_year_clamps_to_the_year(self):
        # Dec 30 2024 is ISO week 1 of 2025, Jan 1 2021 is week 53 of 2020
        assert week_in_year(date(2024, 12, 30), 2025) == 1
        assert week_in_year(date(2024, 12, 30), 2024) == 52
        assert week_in_year(date(2021, 1, 1), 2021) == 1
        assert week_in_year(date(2020, 12, 31), 2020) == 53
        assert week_in_year(date(2025, 3, 3), 2025) == 10

    def test_half_open_bounds(self):
        assert year_bounds(2025) == (date(2025, 1, 1), date(2026, 1, 1))
        assert month_bounds(2025, 2) == (date(2025, 2, 1), date(2025, 3, 1))
        assert month_bounds(2025, 12) == (date(2025, 12, 1), date(2026, 1, 1))
        assert selection_bounds(2025) == year_bounds(2025)
        assert selection_bounds(2025, 4) == month_bounds(2025, 4)

    def test_month_name(self):
        assert month_name(1) == "gennaio"
        assert month_name(12) == "dicembre"


class TestFormatting:
    def test_percentage_of_nothing(self):
        assert percentage(3, 0) == 0.0
        assert percentage(1, 4) == 25.0

    def test_average_of_nothing(self):
        assert average(0, 0) is None
        assert average(9, 2) == 4.5

    def test_decimal_comma(self):
        assert format_decimal(12.5) == "12,5"
        assert format_decimal(None) == NOT_AVAILABLE
        assert format_percentage(1, 8) == "12,5%"
        assert format_percentage(1, 0) == "0,0%"


class TestIngredientEmojis:
    def test_lookup_is_case_and_accent_insensitive(self):
        assert get_ingredient_emoji("  Funghi ") == "🍄"
        assert normalize_name("Würstel") == "wurstel"
        assert get_ingredient_emoji("Würstel") == "🌭"

    def test_unknown_ingredient(self):
        assert get_ingredient_emoji("Nduja") == DEFAULT_EMOJI
        assert get_ingredient_emoji(None) == DEFAULT_EMOJI
