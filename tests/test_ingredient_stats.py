"""Tests for ingredient usage, combinations and distributions."""
from datetime import date
from uuid import uuid4

from services.ingredient_stats_service import (
    ORIGIN_ALL,
    co_occurring,
    combinations,
    distinct_ingredient_counts,
    ingredient_leaderboard,
    ingredient_usage,
    month_distribution,
    normalize_origin,
    origin_distribution,
    top_by_count,
    top_by_rating,
    top_ingredient_for_period,
    weekday_by_origin,
    weekday_distribution,
    weekday_user_counts,
    weekly_average_per_user,
)
from services.rows import PizzaIngredientRow, PizzaRow

USER = uuid4()

NAMES = {1: "Pomodoro", 2: "Mozzarella", 3: "Funghi", 4: "Salame", 5: "Olive"}


def link(pizza_id, ingredient_id, user_id=USER, eaten_at=date(2025, 3, 3), rating=None, origin=None):
    return PizzaIngredientRow(
        pizza_id=pizza_id,
        ingredient_id=ingredient_id,
        ingredient_name=NAMES[ingredient_id],
        user_id=user_id,
        eaten_at=eaten_at,
        rating=rating,
        origin=origin,
    )


def pizza(pizza_id, eaten_at, user_id=USER, origin=None, rating=None):
    return PizzaRow(id=pizza_id, user_id=user_id, eaten_at=eaten_at, rating=rating, origin=origin)


class TestIngredientUsage:
    def test_average_only_counts_rated_pizzas(self):
        rows = [link(1, 3, rating=8), link(2, 3, rating=6), link(3, 3)]

        stats = ingredient_usage(rows)

        assert len(stats) == 1
        assert stats[0].count == 3
        assert stats[0].avg_rating == 7
        assert stats[0].avg_rating_label == "7,0"

    def test_unrated_ingredient_has_no_average(self):
        stats = ingredient_usage([link(1, 4)])
        assert stats[0].avg_rating is None
        assert stats[0].avg_rating_label == "n.d."

    def test_top_by_rating_requires_minimum_usage(self):
        rows = [link(n, 3, rating=9) for n in range(4)] + [link(10 + n, 4, rating=6) for n in range(5)]

        best = top_by_rating(ingredient_usage(rows))

        assert [s.name for s in best] == ["Salame"]

    def test_top_by_count(self):
        rows = [link(1, 3), link(2, 3), link(3, 4)]
        assert [s.name for s in top_by_count(ingredient_usage(rows))] == ["Funghi", "Salame"]


class TestIngredientLeaderboard:
    def test_ties_are_listed_by_id(self):
        rows = [link(1, 5), link(2, 3), link(3, 5), link(4, 3), link(5, 4)]

        board = ingredient_leaderboard(rows)

        assert [(i.ingredient_id, i.count) for i in board] == [(3, 2), (5, 2), (4, 1)]
        assert board[0].emoji == "🍄"


class TestCombinations:
    def test_key_is_independent_of_order(self):
        rows = [link(1, 4), link(1, 3), link(2, 3), link(2, 4)]

        result = combinations(rows, min_count=1)

        assert len(result) == 1
        assert result[0].key == "3,4"
        assert result[0].count == 2
        assert [i.name for i in result[0].ingredients] == ["Funghi", "Salame"]

    def test_duplicate_links_do_not_change_the_key(self):
        rows = [link(1, 3), link(1, 3), link(1, 4)]
        assert combinations(rows, min_count=1)[0].key == "3,4"

    def test_single_ingredient_pizzas_are_ignored(self):
        assert combinations([link(1, 3), link(2, 3)], min_count=1) == []

    def test_min_count_filters(self):
        rows = [link(1, 3), link(1, 4), link(2, 1), link(2, 2), link(3, 1), link(3, 2)]

        result = combinations(rows, min_count=2)

        assert [c.key for c in result] == ["1,2"]

    def test_co_occurring(self):
        rows = [link(1, 3), link(1, 1), link(2, 3), link(2, 1), link(2, 2)]

        others = co_occurring(rows, 3)

        assert [(i.ingredient_id, i.count) for i in others] == [(1, 2), (2, 1)]


class TestDistributions:
    def test_weekday_distribution_starts_on_sunday(self):
        # 2025-03-02 is a Sunday, 2025-03-03 a Monday
        counts = weekday_distribution([date(2025, 3, 2), date(2025, 3, 3), date(2025, 3, 3), None])
        assert counts == [1, 2, 0, 0, 0, 0, 0]

    def test_month_distribution(self):
        counts = month_distribution([date(2025, 1, 5), date(2025, 12, 31)])
        assert counts[0] == 1
        assert counts[11] == 1
        assert sum(counts) == 2

    def test_unknown_origin_is_other(self):
        assert normalize_origin(None) == "other"
        assert normalize_origin("spaceship") == "other"
        assert normalize_origin("frozen") == "frozen"

    def test_weekday_by_origin(self):
        pizzas = [
            pizza(1, date(2025, 3, 3), origin="takeaway"),
            pizza(2, date(2025, 3, 3)),
        ]

        series = weekday_by_origin(pizzas)

        assert series[ORIGIN_ALL][1] == 2
        assert series["takeaway"][1] == 1
        assert series["other"][1] == 1
        assert series["frozen"] == [0] * 7

    def test_origin_distribution_percentages(self):
        pizzas = [pizza(1, None, origin="frozen"), pizza(2, None, origin="frozen"), pizza(3, None, origin="bar"),
                  pizza(4, None)]

        slices = origin_distribution(pizzas)

        assert [(s.origin, s.count) for s in slices] == [("frozen", 2), ("bar", 1), ("other", 1)]
        assert slices[0].percentage == 50.0
        assert slices[0].percentage_label == "50,0%"
        assert slices[0].label == "Surgelata"

    def test_origin_distribution_of_nothing(self):
        assert origin_distribution([]) == []


class TestWeeklyAverages:
    def test_buckets_from_period_start(self):
        other = uuid4()
        start = date(2025, 3, 1)
        pizzas = [
            pizza(1, date(2025, 3, 1)),
            pizza(2, date(2025, 3, 2)),
            pizza(3, date(2025, 3, 7), user_id=other),
            pizza(4, date(2025, 3, 8)),
        ]

        weeks = weekly_average_per_user(pizzas, start)

        assert [(w.week, w.pizza_count, w.user_count) for w in weeks] == [(1, 3, 2), (2, 1, 1)]
        assert weeks[0].avg == 1.5


class TestUserBoards:
    def test_weekday_user_counts(self):
        other = uuid4()
        pizzas = [
            pizza(1, date(2025, 3, 3)),
            pizza(2, date(2025, 3, 10), user_id=other),
            pizza(3, date(2025, 3, 17), user_id=other),
            pizza(4, date(2025, 3, 4)),
        ]

        assert weekday_user_counts(pizzas, 1) == [(other, 2), (USER, 1)]

    def test_distinct_ingredients_needs_three_pizzas(self):
        other = uuid4()
        rows = [
            link(1, 1), link(1, 2), link(1, 2),
            link(2, 1), link(2, 3), link(2, 4),
            link(3, 1),
            link(4, 1, user_id=other), link(5, 1, user_id=other),
        ]

        result = distinct_ingredient_counts(rows)

        assert result == [(USER, 3, 6, 2.0)]


class TestIngredientOfTheMoment:
    def test_skips_tomato_and_mozzarella(self):
        rows = [link(1, 1), link(1, 2), link(2, 1), link(2, 2), link(1, 3)]

        top = top_ingredient_for_period(rows)

        assert top.name == "Funghi"
        assert top.count == 1

    def test_counts_distinct_pizzas(self):
        rows = [link(1, 4), link(1, 4), link(2, 3), link(3, 3)]
        assert top_ingredient_for_period(rows).name == "Funghi"

    def test_nothing_left(self):
        assert top_ingredient_for_period([link(1, 1), link(2, 2)]) is None
