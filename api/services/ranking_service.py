"""
Service for a user's position in the global rankings.

Global rankings only count pizzas logged in the app; yearly base counts
never take part.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from config import settings
from services.leaderboard_service import rank_counts
from services.queries import fetch_pizza_ingredients, fetch_pizzas
from services.rows import GlobalRank, Highlight, IngredientCount, PizzaIngredientRow, PizzaRow, RankingItem
from utils.dates import month_name, weekday_index, year_bounds
from utils.ingredient_emojis import get_ingredient_emoji
from utils.sections import run_section

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ["domenica", "lunedì", "martedì", "mercoledì", "giovedì", "venerdì", "sabato"]

RANKING_REFERENCE_YEAR = "year_reference"
RANKING_CURRENT_MONTH = "current_month"
RANKING_WEEKDAY = "weekday"
RANKING_INGREDIENT = "ingredient"
RANKING_BEST_INGREDIENT = "best_ingredient"


@dataclass(frozen=True)
class IngredientRank:
    """A user's position among the users of one ingredient."""
    ingredient_id: int
    ingredient_name: str
    rank: int
    total_users: int
    count: int


@dataclass(frozen=True)
class PersonalRankings:
    """Global ranks, highlights and rankings list of one user."""
    year: int
    month: int
    year_rank: Optional[GlobalRank]
    month_rank: Optional[GlobalRank]
    favorite_ingredient: Optional[IngredientCount]
    highlights: List[Highlight] = field(default_factory=list)
    rankings: List[RankingItem] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def global_rank(user_ids: Iterable[UUID], viewer_id: UUID) -> GlobalRank:
    """
    Rank of the viewer among the owners of the given pizzas.

    Args:
        user_ids: Owner of each pizza in scope
        viewer_id: User to locate

    Returns:
        GlobalRank with rank None when the viewer has no pizza in scope
    """
    counts: Dict[UUID, int] = {}
    for uid in user_ids:
        counts[uid] = counts.get(uid, 0) + 1

    ranked = rank_counts(counts)
    rank = None
    for index, (uid, _) in enumerate(ranked):
        if uid == viewer_id:
            rank = index + 1
            break

    return GlobalRank(rank=rank, total_users=len(ranked), count=counts.get(viewer_id, 0))


def weekday_ranks(pizzas: Iterable[PizzaRow], viewer_id: UUID) -> List[Tuple[int, GlobalRank]]:
    """Viewer's global rank for each weekday (0 = Sunday)."""
    by_weekday: List[List[UUID]] = [[] for _ in range(7)]
    for pizza in pizzas:
        if pizza.eaten_at is not None:
            by_weekday[weekday_index(pizza.eaten_at)].append(pizza.user_id)
    return [(weekday, global_rank(owners, viewer_id)) for weekday, owners in enumerate(by_weekday)]


def ingredient_frequencies(rows: Iterable[PizzaIngredientRow], user_id: UUID) -> List[IngredientCount]:
    """Ingredients used by one user, most used first."""
    counts: Dict[int, int] = {}
    names: Dict[int, str] = {}
    for row in rows:
        if row.user_id != user_id or not row.ingredient_name:
            continue
        counts[row.ingredient_id] = counts.get(row.ingredient_id, 0) + 1
        names[row.ingredient_id] = row.ingredient_name

    return [
        IngredientCount(ingredient_id=i, name=names[i], count=count, emoji=get_ingredient_emoji(names[i]))
        for i, count in rank_counts(dict(sorted(counts.items())))
    ]


def ingredient_ranks(rows: Iterable[PizzaIngredientRow], viewer_id: UUID) -> List[IngredientRank]:
    """
    Viewer's rank among the users of every ingredient they used.

    Sorted by rank, best first.
    """
    rows = list(rows)
    owners_by_ingredient: Dict[int, List[UUID]] = {}
    for row in rows:
        owners_by_ingredient.setdefault(row.ingredient_id, []).append(row.user_id)

    result = []
    for used in sorted(ingredient_frequencies(rows, viewer_id), key=lambda i: i.ingredient_id):
        rank = global_rank(owners_by_ingredient.get(used.ingredient_id, []), viewer_id)
        if rank.rank is None:
            continue
        result.append(IngredientRank(
            ingredient_id=used.ingredient_id,
            ingredient_name=used.name,
            rank=rank.rank,
            total_users=rank.total_users,
            count=used.count,
        ))

    return sorted(result, key=lambda r: r.rank)


def build_highlights(
    year: int,
    month: int,
    year_rank: Optional[GlobalRank],
    month_rank: Optional[GlobalRank],
    favorite: Optional[IngredientCount],
    favorite_rank: Optional[GlobalRank],
    top_n: Optional[int] = None,
) -> List[Highlight]:
    """Highlights for ranks within the top N; anything lower is left out."""
    if top_n is None:
        top_n = settings.HIGHLIGHT_TOP_N

    def qualifies(rank: Optional[GlobalRank]) -> bool:
        return rank is not None and rank.rank is not None and rank.rank <= top_n and rank.total_users > 0

    highlights = []
    if qualifies(year_rank):
        highlights.append(Highlight(
            id="year-pizzas",
            label=f"Top {year_rank.rank} per pizze {year}",
            description=f"Hai registrato {year_rank.count} pizze nel {year}.",
            rank=year_rank.rank,
        ))
    if qualifies(month_rank):
        highlights.append(Highlight(
            id="month-pizzas",
            label=f"Top {month_rank.rank} a {month_name(month)}",
            description=f"Questo mese hai registrato {month_rank.count} pizze.",
            rank=month_rank.rank,
        ))
    if favorite is not None and qualifies(favorite_rank):
        highlights.append(Highlight(
            id="ingredient-year",
            label=f"Top {favorite_rank.rank} per {favorite.name}",
            description=f"Hai mangiato {favorite_rank.count} pizze con {favorite.name} nel {year}.",
            rank=favorite_rank.rank,
        ))
    return highlights


def weekday_rankings(ranks: Iterable[Tuple[int, GlobalRank]], top_n: Optional[int] = None) -> List[RankingItem]:
    """Weekdays where the viewer is in the top N with at least one pizza."""
    if top_n is None:
        top_n = settings.HIGHLIGHT_TOP_N
    return [
        RankingItem(
            type=RANKING_WEEKDAY,
            label=f"Pizze mangiate di {WEEKDAY_LABELS[weekday]}",
            rank=rank.rank,
            total_users=rank.total_users,
            count=rank.count,
        )
        for weekday, rank in ranks
        if rank.rank is not None and rank.rank <= top_n and rank.count > 0
    ]


def ingredient_rankings(ranks: List[IngredientRank], top_n: Optional[int] = None) -> List[RankingItem]:
    """
    Top N ingredient ranks, or the single best one when none qualifies.
    """
    if top_n is None:
        top_n = settings.HIGHLIGHT_TOP_N

    top = [r for r in ranks if r.rank <= top_n]
    if top:
        return [
            RankingItem(
                type=RANKING_INGREDIENT,
                label="Uso dell'ingrediente",
                rank=r.rank,
                total_users=r.total_users,
                count=r.count,
                ingredient_id=r.ingredient_id,
                ingredient_name=r.ingredient_name,
            )
            for r in top
        ]
    if ranks:
        best = ranks[0]
        return [RankingItem(
            type=RANKING_BEST_INGREDIENT,
            label="Miglior posizione per ingrediente",
            rank=best.rank,
            total_users=best.total_users,
            count=best.count,
            ingredient_id=best.ingredient_id,
            ingredient_name=best.ingredient_name,
        )]
    return []


class RankingService:
    """Service for calculating a user's global ranks."""

    PERIOD_WEEKLY = "weekly"
    PERIOD_MONTHLY = "monthly"
    PERIOD_YEARLY = "yearly"

    MONDAY = 0
    SUNDAY = 6

    @staticmethod
    def get_period_bounds(
        period: str,
        reference_date: Optional[date] = None,
        week_starts_on: int = MONDAY,
    ) -> Tuple[date, date]:
        """
        Get the start and end date for a given period.

        Args:
            period: Period type ('weekly', 'monthly', 'yearly')
            reference_date: Date to calculate period from (defaults to today)
            week_starts_on: First day of the week (date.weekday() numbering)

        Returns:
            Tuple of (period_start, period_end); the end is exclusive
        """
        if reference_date is None:
            reference_date = date.today()

        if period == RankingService.PERIOD_WEEKLY:
            offset = (reference_date.weekday() - week_starts_on) % 7
            period_start = reference_date - timedelta(days=offset)
            period_end = period_start + timedelta(days=7)

        elif period == RankingService.PERIOD_MONTHLY:
            period_start = reference_date.replace(day=1)
            if reference_date.month == 12:
                period_end = period_start.replace(year=reference_date.year + 1, month=1)
            else:
                period_end = period_start.replace(month=reference_date.month + 1)

        elif period == RankingService.PERIOD_YEARLY:
            period_start = reference_date.replace(month=1, day=1)
            period_end = period_start.replace(year=period_start.year + 1)

        else:
            raise ValueError(f"Invalid period: {period}")

        return period_start, period_end

    @staticmethod
    def get_previous_period_bounds(
        period: str,
        reference_date: Optional[date] = None,
        week_starts_on: int = MONDAY,
    ) -> Tuple[date, date]:
        """Bounds of the period right before the one containing reference_date."""
        start, _ = RankingService.get_period_bounds(period, reference_date, week_starts_on)
        return RankingService.get_period_bounds(period, start - timedelta(days=1), week_starts_on)

    @staticmethod
    def global_rank_for_period(db: Session, user_id: UUID, start: date, end: date) -> GlobalRank:
        pizzas = fetch_pizzas(db, start, end)
        return global_rank((p.user_id for p in pizzas), user_id)

    @staticmethod
    def personal_rankings(db: Session, user_id: UUID, today: Optional[date] = None) -> PersonalRankings:
        """
        Global ranks, highlights and the full rankings list for a user.

        Each block is computed independently: a failed query leaves its
        block out and records an error instead of failing the whole result.
        """
        if today is None:
            today = date.today()
        year, month = today.year, today.month
        year_start, year_end = RankingService.get_period_bounds(RankingService.PERIOD_YEARLY, today)
        month_start, month_end = RankingService.get_period_bounds(RankingService.PERIOD_MONTHLY, today)
        errors = []

        year_pizzas, error = run_section(db, "yearly ranking", lambda: fetch_pizzas(db, year_start, year_end), [])
        if error:
            errors.append(error)
        year_rank = global_rank((p.user_id for p in year_pizzas), user_id) if not error else None

        month_rank, error = run_section(
            db, "monthly ranking",
            lambda: RankingService.global_rank_for_period(db, user_id, month_start, month_end),
        )
        if error:
            errors.append(error)

        links, error = run_section(
            db, "ingredient rankings", lambda: fetch_pizza_ingredients(db, year_start, year_end), None
        )
        if error:
            errors.append(error)

        favorite = None
        favorite_rank = None
        ranks_by_ingredient: List[IngredientRank] = []
        if links is not None:
            favorites = ingredient_frequencies(links, user_id)
            if favorites:
                favorite = favorites[0]
                favorite_rank = global_rank(
                    (row.user_id for row in links if row.ingredient_id == favorite.ingredient_id),
                    user_id,
                )
            ranks_by_ingredient = ingredient_ranks(links, user_id)

        rankings: List[RankingItem] = []

        reference_rank, error = run_section(
            db, "reference year ranking",
            lambda: RankingService.reference_year_rank(db, user_id, year, year_rank),
        )
        if error:
            errors.append(error)
        elif reference_rank is not None and reference_rank.rank and reference_rank.total_users > 0:
            reference_year = settings.RANKING_REFERENCE_YEAR
            rankings.append(RankingItem(
                type=RANKING_REFERENCE_YEAR,
                label=f"Pizze mangiate nel {reference_year}",
                rank=reference_rank.rank,
                total_users=reference_rank.total_users,
                count=reference_rank.count,
            ))

        if month_rank is not None and month_rank.rank and month_rank.total_users > 0:
            rankings.append(RankingItem(
                type=RANKING_CURRENT_MONTH,
                label=f"Pizze mangiate a {month_name(month)} {year}",
                rank=month_rank.rank,
                total_users=month_rank.total_users,
                count=month_rank.count,
            ))

        if year_rank is not None:
            rankings.extend(weekday_rankings(weekday_ranks(year_pizzas, user_id)))

        rankings.extend(ingredient_rankings(ranks_by_ingredient))

        return PersonalRankings(
            year=year,
            month=month,
            year_rank=year_rank,
            month_rank=month_rank,
            favorite_ingredient=favorite,
            highlights=build_highlights(year, month, year_rank, month_rank, favorite, favorite_rank),
            rankings=rankings,
            errors=errors,
        )

    @staticmethod
    def reference_year_rank(
        db: Session,
        user_id: UUID,
        current_year: int,
        current_rank: Optional[GlobalRank],
    ) -> Optional[GlobalRank]:
        """Rank for the fixed reference year, reusing the current one when they match."""
        reference_year = settings.RANKING_REFERENCE_YEAR
        if reference_year == current_year:
            return current_rank
        start, end = year_bounds(reference_year)
        return RankingService.global_rank_for_period(db, user_id, start, end)
