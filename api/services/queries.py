"""
Data access shim.

Thin read helpers over the ORM that return typed rows. They hold no
aggregation logic; every caller passes its scope (dates, users) in
explicitly. Date ranges are half-open: start <= eaten_at < end.
"""
from datetime import date
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session

from models import Pizza, PizzaIngredient, Ingredient, Profile, UserYearlyCounter
from services.rows import PizzaRow, PizzaIngredientRow, ProfileRow


def _date_filters(start: Optional[date], end: Optional[date]) -> list:
    filters = []
    if start is not None:
        filters.append(Pizza.eaten_at >= start)
    if end is not None:
        filters.append(Pizza.eaten_at < end)
    return filters


def fetch_pizzas(
    db: Session,
    start: Optional[date] = None,
    end: Optional[date] = None,
    user_ids: Optional[Iterable[UUID]] = None,
) -> List[PizzaRow]:
    """Pizzas eaten in [start, end), optionally restricted to some users."""
    filters = _date_filters(start, end)
    if start is not None or end is not None:
        filters.append(Pizza.eaten_at.isnot(None))
    if user_ids is not None:
        ids = list(user_ids)
        if not ids:
            return []
        filters.append(Pizza.user_id.in_(ids))

    query = db.query(Pizza.id, Pizza.user_id, Pizza.eaten_at, Pizza.rating, Pizza.origin)
    if filters:
        query = query.filter(and_(*filters))

    return [
        PizzaRow(id=r.id, user_id=r.user_id, eaten_at=r.eaten_at, rating=r.rating, origin=r.origin)
        for r in query.order_by(Pizza.id.asc()).all()
    ]


def fetch_pizza_ingredients(
    db: Session,
    start: Optional[date] = None,
    end: Optional[date] = None,
    ingredient_id: Optional[int] = None,
    pizza_ids: Optional[Iterable[int]] = None,
    user_id: Optional[UUID] = None,
) -> List[PizzaIngredientRow]:
    """Pizza-ingredient links joined with their pizza and ingredient."""
    filters = _date_filters(start, end)
    if start is not None or end is not None:
        filters.append(Pizza.eaten_at.isnot(None))
    if ingredient_id is not None:
        filters.append(PizzaIngredient.ingredient_id == ingredient_id)
    if pizza_ids is not None:
        ids = list(pizza_ids)
        if not ids:
            return []
        filters.append(PizzaIngredient.pizza_id.in_(ids))
    if user_id is not None:
        filters.append(Pizza.user_id == user_id)

    query = db.query(
        PizzaIngredient.pizza_id,
        PizzaIngredient.ingredient_id,
        Ingredient.name,
        Pizza.user_id,
        Pizza.eaten_at,
        Pizza.rating,
        Pizza.origin,
    ).join(
        Pizza, PizzaIngredient.pizza_id == Pizza.id
    ).join(
        Ingredient, PizzaIngredient.ingredient_id == Ingredient.id
    )
    if filters:
        query = query.filter(and_(*filters))

    return [
        PizzaIngredientRow(
            pizza_id=r.pizza_id,
            ingredient_id=r.ingredient_id,
            ingredient_name=r.name,
            user_id=r.user_id,
            eaten_at=r.eaten_at,
            rating=r.rating,
            origin=r.origin,
        )
        for r in query.order_by(PizzaIngredient.id.asc()).all()
    ]


def fetch_base_counts(db: Session, year: int, user_ids: Iterable[UUID]) -> Dict[UUID, int]:
    """Manually entered yearly offsets keyed by user."""
    ids = list(user_ids)
    if not ids:
        return {}

    rows = db.query(UserYearlyCounter).filter(
        and_(
            UserYearlyCounter.year == year,
            UserYearlyCounter.user_id.in_(ids)
        )
    ).all()
    return {row.user_id: row.base_count or 0 for row in rows}


def to_profile_row(profile: Profile) -> ProfileRow:
    return ProfileRow(
        id=profile.id,
        username=profile.username,
        display_name=profile.display_name,
        avatar_url=profile.avatar_url,
    )


class ProfileLoader:
    """
    Request-scoped profile lookup.

    Identical lookups within one request hit the database once; ids already
    resolved (including missing profiles) are served from memory.
    """

    def __init__(self, db: Session):
        self.db = db
        self._cache: Dict[UUID, Optional[ProfileRow]] = {}

    def load_many(self, user_ids: Iterable[UUID]) -> Dict[UUID, Optional[ProfileRow]]:
        ids = list(dict.fromkeys(user_ids))
        missing = [uid for uid in ids if uid not in self._cache]

        if missing:
            for profile in self.db.query(Profile).filter(Profile.id.in_(missing)).all():
                self._cache[profile.id] = to_profile_row(profile)
            for uid in missing:
                self._cache.setdefault(uid, None)

        return {uid: self._cache[uid] for uid in ids}

    def load(self, user_id: UUID) -> Optional[ProfileRow]:
        return self.load_many([user_id])[user_id]
