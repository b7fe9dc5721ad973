"""
Pizza service - logging pizzas, their details and yearly counters.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from models import Pizza, PizzaIngredient, Ingredient, UserYearlyCounter
from schemas.pizza import PizzaDetailsUpdate
from services.queries import fetch_pizza_ingredients
from services.ranking_service import ingredient_frequencies
from utils.dates import year_bounds

logger = logging.getLogger(__name__)

USER_SUGGESTIONS = 6
GLOBAL_SUGGESTIONS = 12


@dataclass(frozen=True)
class YearCounter:
    """Displayed yearly total: base count plus pizzas logged in the app."""
    year: int
    base_count: int
    pizza_count: int
    total: int
    has_base_row: bool


class PizzaService:
    """Service for pizza operations."""

    @staticmethod
    def add_pizza(db: Session, user_id: UUID, eaten_at: Optional[date] = None) -> Pizza:
        """Log one pizza ("+1"), details to be filled in later."""
        pizza = Pizza(
            user_id=user_id,
            eaten_at=eaten_at or date.today(),
            has_details=False,
        )
        db.add(pizza)
        db.commit()
        db.refresh(pizza)

        logger.info(f"User {user_id} logged pizza {pizza.id}")
        return pizza

    @staticmethod
    def get_user_pizza(db: Session, pizza_id: int, user_id: UUID) -> Optional[Pizza]:
        return db.query(Pizza).filter(
            and_(Pizza.id == pizza_id, Pizza.user_id == user_id)
        ).first()

    @staticmethod
    def list_pizzas(db: Session, user_id: UUID, year: int, offset: int = 0, limit: Optional[int] = None) -> List[Pizza]:
        """A user's pizzas of one year, most recent first."""
        start, end = year_bounds(year)
        query = db.query(Pizza).filter(
            and_(
                Pizza.user_id == user_id,
                Pizza.eaten_at >= start,
                Pizza.eaten_at < end
            )
        ).order_by(Pizza.eaten_at.desc(), Pizza.id.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def count_pizzas(db: Session, user_id: UUID, year: int) -> int:
        start, end = year_bounds(year)
        return db.query(func.count(Pizza.id)).filter(
            and_(
                Pizza.user_id == user_id,
                Pizza.eaten_at >= start,
                Pizza.eaten_at < end
            )
        ).scalar() or 0

    @staticmethod
    def update_details(db: Session, pizza: Pizza, details: PizzaDetailsUpdate) -> Tuple[Optional[Pizza], Optional[str]]:
        """
        Save the detail form of a pizza.

        Returns:
            Tuple of (Pizza object, error message). If successful, error is None.
        """
        if details.rating is not None and not (0 <= details.rating <= 10):
            return None, "Rating must be a number between 0 and 10"

        if details.origin is not None and details.origin not in Pizza.ORIGINS:
            return None, f"Invalid origin. Must be one of: {', '.join(Pizza.ORIGINS)}"

        pizza.name = details.name
        if details.eaten_at is not None:
            pizza.eaten_at = details.eaten_at
        pizza.rating = details.rating
        pizza.origin = details.origin
        pizza.notes = details.notes
        if details.photo_url is not None:
            pizza.photo_url = details.photo_url or None
        pizza.has_details = True

        db.commit()
        db.refresh(pizza)
        return pizza, None

    @staticmethod
    def set_ingredient(db: Session, pizza: Pizza, ingredient_id: int, present: bool) -> Tuple[Optional[Pizza], Optional[str]]:
        """
        Add or remove one ingredient on a pizza.

        Adding an ingredient already on the pizza, or removing one that is
        not there, leaves the pizza unchanged.
        """
        ingredient = db.query(Ingredient).filter(Ingredient.id == ingredient_id).first()
        if ingredient is None:
            return None, "Ingredient not found"

        link = db.query(PizzaIngredient).filter(
            and_(
                PizzaIngredient.pizza_id == pizza.id,
                PizzaIngredient.ingredient_id == ingredient_id
            )
        ).first()

        if present and link is None:
            db.add(PizzaIngredient(pizza_id=pizza.id, ingredient_id=ingredient_id))
        elif not present and link is not None:
            db.delete(link)

        db.commit()
        db.refresh(pizza)
        return pizza, None

    @staticmethod
    def delete_pizza(db: Session, pizza: Pizza) -> None:
        """Delete a pizza and its ingredient links in one transaction."""
        pizza_id = pizza.id
        db.delete(pizza)
        db.commit()
        logger.info(f"Deleted pizza {pizza_id}")

    @staticmethod
    def undo_last_pizza(db: Session, user_id: UUID, year: int) -> Optional[int]:
        """
        Delete the user's most recently eaten pizza of the year.

        Returns:
            Id of the deleted pizza, or None if the user has no pizza that year
        """
        latest = PizzaService.list_pizzas(db, user_id, year, limit=1)
        if not latest:
            return None
        pizza_id = latest[0].id
        PizzaService.delete_pizza(db, latest[0])
        return pizza_id

    @staticmethod
    def get_counter(db: Session, user_id: UUID, year: int) -> YearCounter:
        row = db.query(UserYearlyCounter).filter(
            and_(
                UserYearlyCounter.user_id == user_id,
                UserYearlyCounter.year == year
            )
        ).first()
        base = row.base_count if row is not None and row.base_count is not None else 0
        count = PizzaService.count_pizzas(db, user_id, year)
        return YearCounter(year=year, base_count=base, pizza_count=count, total=base + count, has_base_row=row is not None)

    @staticmethod
    def set_base_count(db: Session, user_id: UUID, year: int, base_count: int) -> Tuple[Optional[YearCounter], Optional[str]]:
        """Insert or update the base count for (user, year)."""
        if base_count < 0:
            return None, "Base count cannot be negative"

        row = db.query(UserYearlyCounter).filter(
            and_(
                UserYearlyCounter.user_id == user_id,
                UserYearlyCounter.year == year
            )
        ).first()
        if row is None:
            row = UserYearlyCounter(user_id=user_id, year=year, base_count=base_count)
            db.add(row)
        else:
            row.base_count = base_count
        db.commit()

        logger.info(f"Base count for user {user_id} in {year} set to {base_count}")
        return PizzaService.get_counter(db, user_id, year), None

    @staticmethod
    def suggestions(db: Session, user_id: UUID, exclude_ids: Optional[List[int]] = None) -> Tuple[list, List[Ingredient]]:
        """
        Ingredient suggestions for the detail form.

        Returns:
            Tuple of (the user's most used ingredients, most recently created
            ingredients), both without the excluded ids
        """
        exclude = set(exclude_ids or [])

        used = ingredient_frequencies(fetch_pizza_ingredients(db, user_id=user_id), user_id)
        user_top = [i for i in used[:USER_SUGGESTIONS] if i.ingredient_id not in exclude]

        recent = db.query(Ingredient).order_by(
            Ingredient.created_at.desc(), Ingredient.id.desc()
        ).limit(GLOBAL_SUGGESTIONS).all()
        recent = [i for i in recent if i.id not in exclude]

        return user_top, recent
