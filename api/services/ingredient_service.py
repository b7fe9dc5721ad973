"""
Ingredient catalog service.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from models import Ingredient

logger = logging.getLogger(__name__)

BANNED_WORDS = [
    "cazzo",
    "cazzi",
    "merda",
    "stronzo",
    "stronzi",
    "vaffanculo",
    "puttana",
    "puttane",
    "troia",
    "troie",
    "dio cane",
    "dio porco",
    "dio merda",
    "porco dio",
    "porcodio",
    "gesù",
    "cristo",
    "madonna",
    "fuck",
    "shit",
    "bitch",
    "asshole",
]

SEARCH_LIMIT = 10
MAX_NAME_LENGTH = 100


def contains_banned_words(text: str) -> bool:
    lower = text.lower()
    return any(word in lower for word in BANNED_WORDS)


class IngredientService:
    """Service for looking up and creating catalog ingredients."""

    @staticmethod
    def search(db: Session, term: str, limit: int = SEARCH_LIMIT) -> List[Ingredient]:
        """Ingredients whose name contains term (case-insensitive), by name."""
        term = (term or "").strip()
        if not term:
            return []
        return db.query(Ingredient).filter(
            Ingredient.name.ilike(f"%{term}%")
        ).order_by(Ingredient.name.asc()).limit(limit).all()

    @staticmethod
    def find_by_name(db: Session, name: str) -> Optional[Ingredient]:
        """Case-insensitive exact name lookup."""
        return db.query(Ingredient).filter(
            func.lower(Ingredient.name) == name.strip().lower()
        ).order_by(Ingredient.id.asc()).first()

    @staticmethod
    def get_or_create(db: Session, name: str, created_by: Optional[UUID]) -> Tuple[Optional[Ingredient], Optional[str]]:
        """
        Return the ingredient with this name, creating it if needed.

        Args:
            db: Database session
            name: Ingredient name as typed by the user
            created_by: User creating the ingredient

        Returns:
            Tuple of (Ingredient object, error message). If successful, error is None.
        """
        name = (name or "").strip()
        if not name:
            return None, "Ingredient name is required"

        if len(name) > MAX_NAME_LENGTH:
            return None, f"Ingredient name must be at most {MAX_NAME_LENGTH} characters"

        if contains_banned_words(name):
            return None, "Ingredient name contains words that are not allowed"

        existing = IngredientService.find_by_name(db, name)
        if existing:
            return existing, None

        ingredient = Ingredient(name=name, created_by=created_by)
        db.add(ingredient)
        db.commit()
        db.refresh(ingredient)

        logger.info(f"Created ingredient {ingredient.id} ({ingredient.name}) by {created_by}")
        return ingredient, None
