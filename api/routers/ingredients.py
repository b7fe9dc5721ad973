"""
Ingredient catalog endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from models import User
from schemas import IngredientCreate, IngredientResponse, IngredientProfileResponse
from services.badge_service import BadgeService
from services.ingredient_service import IngredientService
from services.queries import ProfileLoader
from utils.dependencies import get_current_user, get_optional_current_user

router = APIRouter()


@router.get("", response_model=List[IngredientResponse])
async def search_ingredients(
    search: str = "",
    db: Session = Depends(get_db)
):
    """
    Search the catalog by name.

    - Public endpoint
    - Case-insensitive, at most 10 results ordered by name
    """
    return IngredientService.search(db, search)


@router.post("", response_model=IngredientResponse, status_code=status.HTTP_201_CREATED)
async def create_ingredient(
    ingredient_data: IngredientCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Add an ingredient to the catalog.

    - Requires authentication
    - An existing ingredient with the same name (any case) is returned instead
    - Names containing offensive words are rejected
    """
    ingredient, error = IngredientService.get_or_create(db, ingredient_data.name, current_user.id)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    return ingredient


@router.get("/{ingredient_id}/profile", response_model=IngredientProfileResponse)
async def get_ingredient_profile(
    ingredient_id: int,
    current_user: Optional[User] = Depends(get_optional_current_user),
    db: Session = Depends(get_db)
):
    """
    Get an ingredient page: badges, top users, co-occurring ingredients.

    - Public endpoint (authentication highlights your own row)
    """
    profile = BadgeService.ingredient_profile(
        db,
        ingredient_id,
        ProfileLoader(db),
        viewer_id=current_user.id if current_user else None,
    )

    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ingredient not found"
        )

    return profile
