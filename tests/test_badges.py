"""Tests for ingredient badges."""
from services.badge_service import (
    COLOR_AMBER,
    COLOR_BLUE,
    COLOR_EMERALD,
    COLOR_PURPLE,
    all_time_badge,
    dominant_weekday,
    ingredient_badges,
    ingredient_rank,
    month_badge,
    weekday_badge,
)


class TestIngredientRank:
    def test_rank_by_link_count(self):
        ids = [7, 7, 7, 2, 2, 9]
        assert ingredient_rank(ids, 7) == 1
        assert ingredient_rank(ids, 2) == 2
        assert ingredient_rank(ids, 9) == 3

    def test_ties_go_to_the_lower_id(self):
        assert ingredient_rank([9, 4], 4) == 1
        assert ingredient_rank([9, 4], 9) == 2

    def test_unused_ingredient(self):
        assert ingredient_rank([1, 2], 3) is None


class TestRankBadges:
    def test_all_time_colour_tiers(self):
        assert all_time_badge(3).color == COLOR_AMBER
        assert all_time_badge(4).color == COLOR_EMERALD
        assert all_time_badge(10).color == COLOR_EMERALD
        assert all_time_badge(11).color == COLOR_BLUE
        assert all_time_badge(None) is None

    def test_all_time_label(self):
        assert all_time_badge(2).label == "#2 più usato"

    def test_month_badge(self):
        badge = month_badge(2, 2025, 3)
        assert badge.label == "Top marzo"
        assert badge.color == COLOR_PURPLE
        assert "marzo 2025" in badge.tooltip
        assert month_badge(4, 2025, 3).color == COLOR_BLUE


class TestWeekdayBadge:
    def test_monday_king(self):
        counts = [0, 3, 0, 0, 0, 0, 0]

        badge = weekday_badge(counts)

        assert badge.label == "Re del Lunedì"
        assert "(3 volte)" in badge.tooltip
        assert badge.color == COLOR_EMERALD

    def test_first_weekday_wins_ties(self):
        assert dominant_weekday([0, 2, 0, 2, 0, 0, 0]) == (1, 2)
        assert dominant_weekday([1, 0, 0, 0, 0, 0, 1]) == (0, 1)

    def test_no_badge_without_pizzas(self):
        assert dominant_weekday([0] * 7) is None
        assert weekday_badge([0] * 7) is None


class TestIngredientBadges:
    def test_all_badges(self):
        badges = ingredient_badges(
            ingredient_id=5,
            all_time_ids=[5, 5, 6],
            month_ids=[5],
            weekday_counts=[0, 3, 0, 0, 0, 0, 0],
            year=2025,
            month=1,
        )

        assert [b.label for b in badges] == ["#1 più usato", "Top gennaio", "Re del Lunedì"]

    def test_missing_ranks_are_skipped(self):
        badges = ingredient_badges(5, [], [], [0] * 7, 2025, 1)
        assert badges == []
