"""
Ingredient badges and the ingredient profile page.
"""
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence
from uuid import UUID
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Ingredient, PizzaIngredient
from services.leaderboard_service import position_of, rank_counts
from services.ingredient_stats_service import co_occurring, origin_distribution, weekday_distribution
from services.queries import ProfileLoader, fetch_pizza_ingredients
from services.rows import Badge, IngredientCount, OriginSlice, PizzaRow, UserCountRow
from utils.dates import WEEKDAY_NAMES, month_bounds, month_name
from utils.formatting import average
from utils.ingredient_emojis import get_ingredient_emoji

logger = logging.getLogger(__name__)

COLOR_AMBER = "amber"
COLOR_EMERALD = "emerald"
COLOR_BLUE = "blue"
COLOR_PURPLE = "purple"


def ingredient_rank(ingredient_ids: Sequence[int], ingredient_id: int) -> Optional[int]:
    """
    1-based usage rank of an ingredient among the given link rows.

    Each element of ingredient_ids is one pizza-ingredient link.
    """
    counts: Dict[int, int] = {}
    for i in ingredient_ids:
        counts[i] = counts.get(i, 0) + 1
    return position_of(rank_counts(dict(sorted(counts.items()))), ingredient_id)


def all_time_badge(position: Optional[int]) -> Optional[Badge]:
    if position is None:
        return None
    if position <= 3:
        color = COLOR_AMBER
    elif position <= 10:
        color = COLOR_EMERALD
    else:
        color = COLOR_BLUE
    return Badge(
        label=f"#{position} più usato",
        tooltip=f"Questo ingrediente è al {position}° posto tra i più utilizzati di sempre",
        color=color,
    )


def month_badge(position: Optional[int], year: int, month: int) -> Optional[Badge]:
    if position is None:
        return None
    name = month_name(month)
    return Badge(
        label=f"Top {name}",
        tooltip=f"{position}° ingrediente più utilizzato nel mese di {name} {year}",
        color=COLOR_PURPLE if position <= 3 else COLOR_BLUE,
    )


def dominant_weekday(weekday_counts: Sequence[int]) -> Optional[tuple]:
    """
    Weekday with the strictly highest count, first one winning ties.

    Returns:
        (weekday, count), or None when every bucket is empty
    """
    if not weekday_counts:
        return None
    best = 0
    for weekday in range(1, len(weekday_counts)):
        if weekday_counts[weekday] > weekday_counts[best]:
            best = weekday
    if weekday_counts[best] <= 0:
        return None
    return best, weekday_counts[best]


def weekday_badge(weekday_counts: Sequence[int]) -> Optional[Badge]:
    dominant = dominant_weekday(weekday_counts)
    if dominant is None:
        return None
    weekday, count = dominant
    label = WEEKDAY_NAMES[weekday]
    return Badge(
        label=f"Re del {label}",
        tooltip=f"L'ingrediente viene utilizzato più spesso di {label.lower()} ({count} volte)",
        color=COLOR_EMERALD,
    )


def ingredient_badges(
    ingredient_id: int,
    all_time_ids: Sequence[int],
    month_ids: Sequence[int],
    weekday_counts: Sequence[int],
    year: int,
    month: int,
) -> List[Badge]:
    """All-time rank, current month rank and weekday dominance badges."""
    candidates = [
        all_time_badge(ingredient_rank(all_time_ids, ingredient_id)),
        month_badge(ingredient_rank(month_ids, ingredient_id), year, month),
        weekday_badge(weekday_counts),
    ]
    return [badge for badge in candidates if badge is not None]


@dataclass(frozen=True)
class IngredientProfile:
    """Everything shown on an ingredient page."""
    ingredient_id: int
    name: str
    emoji: str
    total_pizzas: int
    avg_rating: Optional[float]
    co_occurring: List[IngredientCount]
    top_users: List[UserCountRow]
    origins: List[OriginSlice]
    weekday_counts: List[int]
    badges: List[Badge]


class BadgeService:
    """Service for ingredient pages and their badges."""

    @staticmethod
    def ingredient_profile(
        db: Session,
        ingredient_id: int,
        loader: ProfileLoader,
        viewer_id: Optional[UUID] = None,
        today: Optional[date] = None,
    ) -> Optional[IngredientProfile]:
        """
        Build the ingredient page.

        Returns:
            The profile, or None if the ingredient does not exist
        """
        ingredient = db.query(Ingredient).filter(Ingredient.id == ingredient_id).first()
        if ingredient is None:
            return None

        if today is None:
            today = date.today()

        # Distinct pizzas carrying the ingredient
        pizzas: Dict[int, PizzaRow] = {}
        for row in fetch_pizza_ingredients(db, ingredient_id=ingredient_id):
            pizzas.setdefault(row.pizza_id, PizzaRow(
                id=row.pizza_id,
                user_id=row.user_id,
                eaten_at=row.eaten_at,
                rating=row.rating,
                origin=row.origin,
            ))
        pizza_list = list(pizzas.values())

        co_rows = fetch_pizza_ingredients(db, pizza_ids=pizzas.keys())

        user_counts: Dict[UUID, int] = {}
        for pizza in pizza_list:
            user_counts[pizza.user_id] = user_counts.get(pizza.user_id, 0) + 1
        top = rank_counts(user_counts)[:10]
        profiles = loader.load_many(uid for uid, _ in top)

        ratings = [p.rating for p in pizza_list if p.rating is not None]
        weekday_counts = weekday_distribution(p.eaten_at for p in pizza_list)

        return IngredientProfile(
            ingredient_id=ingredient.id,
            name=ingredient.name,
            emoji=get_ingredient_emoji(ingredient.name),
            total_pizzas=len(pizza_list),
            avg_rating=average(sum(ratings), len(ratings)),
            co_occurring=co_occurring(co_rows, ingredient.id),
            top_users=[
                UserCountRow(user_id=uid, profile=profiles.get(uid), count=count, is_me=uid == viewer_id)
                for uid, count in top
            ],
            origins=origin_distribution(pizza_list, by_frequency=True),
            weekday_counts=weekday_counts,
            badges=BadgeService.badges_for(db, ingredient.id, weekday_counts, today),
        )

    @staticmethod
    def badges_for(db: Session, ingredient_id: int, weekday_counts: List[int], today: date) -> List[Badge]:
        """
        Rank badges for an ingredient.

        A failed rank query drops that badge only.
        """
        all_time_ids: List[int] = []
        month_ids: List[int] = []

        try:
            all_time_ids = [row[0] for row in db.query(PizzaIngredient.ingredient_id).all()]
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"All-time ingredient ranking unavailable: {e}")

        try:
            start, end = month_bounds(today.year, today.month)
            month_ids = [row.ingredient_id for row in fetch_pizza_ingredients(db, start, end)]
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Monthly ingredient ranking unavailable: {e}")

        return ingredient_badges(ingredient_id, all_time_ids, month_ids, weekday_counts, today.year, today.month)
