"""
Ingredient usage, co-occurrence and distribution statistics.

Maps keyed by ingredient id are walked in ascending id order before the
stable sort, so equally used ingredients are listed by id. Maps keyed by
user keep first-seen order.
"""
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from config import settings
from models import Pizza
from services.leaderboard_service import (
    VIEW_ALL,
    VIEW_AROUND_ME,
    VIEW_TOP,
    index_of_user,
    rank_counts,
    select_view,
)
from services.queries import ProfileLoader, fetch_pizza_ingredients, fetch_pizzas
from services.rows import (
    Combination,
    DistinctIngredientsRow,
    IngredientCount,
    IngredientRef,
    IngredientStat,
    LeaderboardView,
    OriginSlice,
    PizzaIngredientRow,
    PizzaRow,
    UserCountRow,
    WeeklyAverage,
)
from utils.dates import selection_bounds, weekday_index
from utils.formatting import average, format_decimal, format_percentage, percentage
from utils.ingredient_emojis import get_ingredient_emoji

logger = logging.getLogger(__name__)

ORIGIN_LABELS = OrderedDict([
    (Pizza.ORIGIN_TAKEAWAY, "Da asporto"),
    (Pizza.ORIGIN_FROZEN, "Surgelata"),
    (Pizza.ORIGIN_RESTAURANT, "Ristorante"),
    (Pizza.ORIGIN_BAKERY, "Panificio"),
    (Pizza.ORIGIN_BAR, "Bar"),
    (Pizza.ORIGIN_OTHER, "Altro"),
])
ORIGIN_ALL = "all"

BORING_INGREDIENTS = ("pomodoro", "mozzarella")

DASHBOARD_COMBINATION_MIN_COUNT = 2
BOARD_COMBINATION_MIN_COUNT = 1
COMBINATIONS_TOP_VIEW_SIZE = 100


def _ingredient(ingredient_id: int, name: str, count: int) -> IngredientCount:
    return IngredientCount(
        ingredient_id=ingredient_id,
        name=name,
        count=count,
        emoji=get_ingredient_emoji(name),
    )


def normalize_origin(origin: Optional[str]) -> str:
    """Known origin, or 'other' for anything else (including None)."""
    return origin if origin in ORIGIN_LABELS else Pizza.ORIGIN_OTHER


def ingredient_usage(rows: Iterable[PizzaIngredientRow]) -> List[IngredientStat]:
    """
    Usage count and average pizza rating per ingredient.

    The average only covers rated pizzas and is None when none is rated.
    """
    by_id: Dict[int, dict] = {}
    for row in rows:
        if not row.ingredient_id or not row.ingredient_name:
            continue
        entry = by_id.setdefault(
            row.ingredient_id,
            {"name": row.ingredient_name, "count": 0, "sum": 0.0, "rated": 0},
        )
        entry["count"] += 1
        if row.rating is not None:
            entry["sum"] += row.rating
            entry["rated"] += 1

    stats = []
    for ingredient_id, entry in sorted(by_id.items()):
        avg = average(entry["sum"], entry["rated"])
        stats.append(IngredientStat(
            ingredient_id=ingredient_id,
            name=entry["name"],
            count=entry["count"],
            avg_rating=avg,
            avg_rating_label=format_decimal(avg),
        ))
    return stats


def top_by_count(stats: Sequence[IngredientStat], limit: int = 10) -> List[IngredientStat]:
    return sorted(stats, key=lambda s: s.count, reverse=True)[:limit]


def top_by_rating(stats: Sequence[IngredientStat], limit: int = 10, min_count: int = 5) -> List[IngredientStat]:
    """Best rated ingredients among those used at least min_count times."""
    eligible = [s for s in stats if s.count >= min_count and s.avg_rating is not None]
    return sorted(eligible, key=lambda s: s.avg_rating, reverse=True)[:limit]


def ingredient_leaderboard(rows: Iterable[PizzaIngredientRow]) -> List[IngredientCount]:
    """Ingredients ordered by the number of pizza links."""
    counts: Dict[int, int] = {}
    names: Dict[int, str] = {}
    for row in rows:
        if not row.ingredient_id or not row.ingredient_name:
            continue
        counts[row.ingredient_id] = counts.get(row.ingredient_id, 0) + 1
        names[row.ingredient_id] = row.ingredient_name

    ranked = rank_counts(dict(sorted(counts.items())))
    return [_ingredient(ingredient_id, names[ingredient_id], count) for ingredient_id, count in ranked]


def ingredients_by_pizza(rows: Iterable[PizzaIngredientRow]) -> Dict[int, Dict[int, str]]:
    """Distinct ingredients of each pizza, keyed by pizza id then ingredient id."""
    by_pizza: Dict[int, Dict[int, str]] = {}
    for row in rows:
        if not row.pizza_id or not row.ingredient_id or not row.ingredient_name:
            continue
        by_pizza.setdefault(row.pizza_id, {}).setdefault(row.ingredient_id, row.ingredient_name)
    return by_pizza


def combinations(rows: Iterable[PizzaIngredientRow], min_count: int) -> List[Combination]:
    """
    Count identical ingredient sets across pizzas.

    Each pizza's ingredients are deduplicated and sorted by id to build a
    canonical key, so {A, B} and {B, A} are the same combination. Pizzas
    with fewer than two ingredients are ignored.
    """
    found: Dict[str, dict] = {}
    for pizza_id, ingredients in sorted(ingredients_by_pizza(rows).items()):
        if len(ingredients) < 2:
            continue
        ids = sorted(ingredients)
        key = ",".join(str(i) for i in ids)
        entry = found.setdefault(key, {"ids": ids, "names": ingredients, "count": 0})
        entry["count"] += 1

    result = [
        Combination(
            key=key,
            ingredients=[
                IngredientRef(ingredient_id=i, name=entry["names"][i], emoji=get_ingredient_emoji(entry["names"][i]))
                for i in entry["ids"]
            ],
            count=entry["count"],
        )
        for key, entry in found.items()
        if entry["count"] >= min_count
    ]
    return sorted(result, key=lambda c: c.count, reverse=True)


def co_occurring(rows: Iterable[PizzaIngredientRow], ingredient_id: int, limit: int = 10) -> List[IngredientCount]:
    """Other ingredients found on the given pizza-ingredient rows, by frequency."""
    counts: Dict[int, int] = {}
    names: Dict[int, str] = {}
    for row in rows:
        if row.ingredient_id == ingredient_id or not row.ingredient_name:
            continue
        counts[row.ingredient_id] = counts.get(row.ingredient_id, 0) + 1
        names[row.ingredient_id] = row.ingredient_name

    ranked = rank_counts(dict(sorted(counts.items())))[:limit]
    return [_ingredient(i, names[i], count) for i, count in ranked]


def weekday_distribution(dates: Iterable[Optional[date]]) -> List[int]:
    """Counts per weekday, index 0 = Sunday."""
    buckets = [0] * 7
    for day in dates:
        if day is not None:
            buckets[weekday_index(day)] += 1
    return buckets


def month_distribution(dates: Iterable[Optional[date]]) -> List[int]:
    """Counts per month, index 0 = January."""
    buckets = [0] * 12
    for day in dates:
        if day is not None:
            buckets[day.month - 1] += 1
    return buckets


def weekday_by_origin(pizzas: Iterable[PizzaRow]) -> Dict[str, List[int]]:
    """Weekday series per origin plus an 'all' series."""
    series = {ORIGIN_ALL: [0] * 7}
    for origin in ORIGIN_LABELS:
        series[origin] = [0] * 7

    for pizza in pizzas:
        if pizza.eaten_at is None:
            continue
        weekday = weekday_index(pizza.eaten_at)
        series[ORIGIN_ALL][weekday] += 1
        series[normalize_origin(pizza.origin)][weekday] += 1
    return series


def origin_distribution(pizzas: Iterable[PizzaRow], by_frequency: bool = False) -> List[OriginSlice]:
    """
    Pizzas per origin with their share of the total.

    Slices with no pizza are left out. The default order is the fixed
    origin order; by_frequency sorts them by count instead.
    """
    counts = {origin: 0 for origin in ORIGIN_LABELS}
    for pizza in pizzas:
        counts[normalize_origin(pizza.origin)] += 1

    total = sum(counts.values())
    slices = [
        OriginSlice(
            origin=origin,
            label=ORIGIN_LABELS[origin],
            count=count,
            percentage=percentage(count, total),
            percentage_label=format_percentage(count, total),
        )
        for origin, count in counts.items()
        if count > 0
    ]
    if by_frequency:
        slices.sort(key=lambda s: s.count, reverse=True)
    return slices


def weekly_average_per_user(pizzas: Iterable[PizzaRow], period_start: date) -> List[WeeklyAverage]:
    """
    Average pizzas per active user in 7-day buckets from period_start.

    Buckets are counted from the period start, not ISO weeks. A bucket's
    average divides its pizzas by the distinct users who ate in it.
    """
    weeks: Dict[int, dict] = {}
    for pizza in pizzas:
        if pizza.eaten_at is None:
            continue
        diff = (pizza.eaten_at - period_start).days
        if diff < 0:
            continue
        week = diff // 7 + 1
        bucket = weeks.setdefault(week, {"count": 0, "users": set()})
        bucket["count"] += 1
        bucket["users"].add(pizza.user_id)

    return [
        WeeklyAverage(
            week=week,
            avg=bucket["count"] / (len(bucket["users"]) or 1),
            pizza_count=bucket["count"],
            user_count=len(bucket["users"]),
        )
        for week, bucket in sorted(weeks.items())
    ]


def distinct_ingredient_counts(rows: Iterable[PizzaIngredientRow], min_pizzas: int = 3) -> List[tuple]:
    """
    Average distinct ingredients per pizza for each user.

    Returns:
        (user_id, pizza_count, distinct_total, avg) tuples for users with at
        least min_pizzas pizzas carrying ingredients, best average first
    """
    rows = list(rows)
    owners: Dict[int, UUID] = {}
    for row in rows:
        owners.setdefault(row.pizza_id, row.user_id)
    rows_by_pizza = ingredients_by_pizza(rows)

    per_user: Dict[UUID, dict] = {}
    for pizza_id, ingredients in sorted(rows_by_pizza.items()):
        entry = per_user.setdefault(owners[pizza_id], {"distinct": 0, "pizzas": 0})
        entry["distinct"] += len(ingredients)
        entry["pizzas"] += 1

    result = [
        (user_id, entry["pizzas"], entry["distinct"], entry["distinct"] / entry["pizzas"])
        for user_id, entry in per_user.items()
        if entry["pizzas"] >= min_pizzas
    ]
    return sorted(result, key=lambda item: item[3], reverse=True)


def weekday_user_counts(pizzas: Iterable[PizzaRow], weekday: int) -> List[tuple]:
    """(user_id, count) of pizzas eaten on a weekday, most first."""
    counts: Dict[UUID, int] = {}
    for pizza in pizzas:
        if pizza.eaten_at is None or weekday_index(pizza.eaten_at) != weekday:
            continue
        counts[pizza.user_id] = counts.get(pizza.user_id, 0) + 1
    return rank_counts(counts)


def top_ingredient_for_period(
    rows: Iterable[PizzaIngredientRow],
    excluded: Sequence[str] = BORING_INGREDIENTS,
) -> Optional[IngredientCount]:
    """Ingredient found on the most distinct pizzas, skipping excluded names."""
    skip = {name.lower() for name in excluded}
    pizzas: Dict[int, set] = {}
    names: Dict[int, str] = {}
    for row in rows:
        if not row.ingredient_name or row.ingredient_name.strip().lower() in skip:
            continue
        pizzas.setdefault(row.ingredient_id, set()).add(row.pizza_id)
        names[row.ingredient_id] = row.ingredient_name

    if not pizzas:
        return None

    counts = {i: len(ids) for i, ids in sorted(pizzas.items())}
    best_id, best_count = rank_counts(counts)[0]
    return _ingredient(best_id, names[best_id], best_count)


def ingredient_name_fields(row) -> tuple:
    return (row.name,)


@dataclass(frozen=True)
class StatsOverview:
    """Global statistics dashboard for a year or one of its months."""
    year: int
    month: Optional[int]
    origin: str
    total_pizzas: int
    top_by_count: List[IngredientStat]
    top_by_rating: List[IngredientStat]
    top_combinations: List[Combination]
    weekday_series: List[int]
    weekday_max: int
    origins: List[OriginSlice]
    weekly_averages: List[WeeklyAverage]
    weekly_average_max: float


class IngredientStatsService:
    """Database-backed statistics pages."""

    @staticmethod
    def overview(db: Session, year: int, month: Optional[int] = None, origin: str = ORIGIN_ALL) -> StatsOverview:
        start, end = selection_bounds(year, month)
        links = fetch_pizza_ingredients(db, start, end)
        pizzas = fetch_pizzas(db, start, end)

        usage = ingredient_usage(links)
        weekday_series = weekday_by_origin(pizzas).get(origin, [0] * 7)
        weekly = weekly_average_per_user(pizzas, start)

        return StatsOverview(
            year=year,
            month=month,
            origin=origin,
            total_pizzas=len(pizzas),
            top_by_count=top_by_count(usage),
            top_by_rating=top_by_rating(usage),
            top_combinations=combinations(links, DASHBOARD_COMBINATION_MIN_COUNT)[:10],
            weekday_series=weekday_series,
            weekday_max=max(weekday_series + [0]),
            origins=origin_distribution(pizzas),
            weekly_averages=weekly,
            weekly_average_max=max([w.avg for w in weekly] + [0.0]),
        )

    @staticmethod
    def top_count_page(
        db: Session,
        year: int,
        month: Optional[int] = None,
        view: str = VIEW_TOP,
        page: int = 0,
        search: Optional[str] = None,
    ) -> LeaderboardView:
        """Most used ingredients; a missed search falls back to the full list."""
        start, end = selection_bounds(year, month)
        board = ingredient_leaderboard(fetch_pizza_ingredients(db, start, end))
        return select_view(
            board,
            mode=view,
            search=search,
            page=page,
            top_n=settings.LEADERBOARD_PAGE_SIZE,
            fallback_top=settings.LEADERBOARD_PAGE_SIZE,
            default_mode=VIEW_TOP,
            not_found_mode=VIEW_ALL,
            not_found_message="No ingredient found",
            fields=ingredient_name_fields,
        )

    @staticmethod
    def top_combinations_page(
        db: Session,
        year: int,
        month: Optional[int] = None,
        view: str = VIEW_TOP,
        page: int = 0,
    ) -> LeaderboardView:
        start, end = selection_bounds(year, month)
        board = combinations(fetch_pizza_ingredients(db, start, end), BOARD_COMBINATION_MIN_COUNT)
        if view != VIEW_ALL:
            view = VIEW_TOP
        return select_view(board, mode=view, page=page, top_n=COMBINATIONS_TOP_VIEW_SIZE)

    @staticmethod
    def top_weekday_users_page(
        db: Session,
        loader: ProfileLoader,
        year: int,
        month: Optional[int] = None,
        weekday: int = 1,
        viewer_id: Optional[UUID] = None,
        view: str = VIEW_TOP,
        page: int = 0,
        search: Optional[str] = None,
    ) -> LeaderboardView:
        """Users ranked by pizzas eaten on one weekday (0 = Sunday)."""
        start, end = selection_bounds(year, month)
        ranked = weekday_user_counts(fetch_pizzas(db, start, end), weekday)
        profiles = loader.load_many(uid for uid, _ in ranked)

        board = [
            UserCountRow(user_id=uid, profile=profiles.get(uid), count=count, is_me=uid == viewer_id)
            for uid, count in ranked
        ]
        return select_view(
            board,
            mode=view,
            anchor_index=index_of_user(board, viewer_id),
            search=search,
            page=page,
            top_n=settings.LEADERBOARD_PAGE_SIZE,
            fallback_top=settings.LEADERBOARD_PAGE_SIZE,
            default_mode=VIEW_TOP,
            not_found_mode=VIEW_ALL,
        )

    @staticmethod
    def top_distinct_page(
        db: Session,
        loader: ProfileLoader,
        year: int,
        month: Optional[int] = None,
        viewer_id: Optional[UUID] = None,
        view: str = VIEW_AROUND_ME,
        page: int = 0,
        search: Optional[str] = None,
    ) -> LeaderboardView:
        """Users ranked by the variety of ingredients on their pizzas."""
        start, end = selection_bounds(year, month)
        ranked = distinct_ingredient_counts(fetch_pizza_ingredients(db, start, end))
        profiles = loader.load_many(item[0] for item in ranked)

        board = [
            DistinctIngredientsRow(
                user_id=uid,
                profile=profiles.get(uid),
                pizza_count=pizza_count,
                distinct_total=distinct_total,
                avg_distinct=avg,
                is_me=uid == viewer_id,
            )
            for uid, pizza_count, distinct_total, avg in ranked
        ]
        return select_view(
            board,
            mode=view,
            anchor_index=index_of_user(board, viewer_id),
            search=search,
            page=page,
            top_n=settings.LEADERBOARD_PAGE_SIZE,
            fallback_top=settings.LEADERBOARD_PAGE_SIZE,
            default_mode=VIEW_AROUND_ME,
            not_found_mode=VIEW_ALL,
        )
