"""
Public user pages.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from dataclasses import asdict
from typing import Optional

from database import get_db
from models import User
from schemas import PizzaResponse, PublicProfileResponse
from services.profile_service import ProfileService
from utils.dependencies import get_optional_current_user

router = APIRouter()


@router.get("/{username}", response_model=PublicProfileResponse)
async def get_public_profile(
    username: str,
    page: int = Query(0, ge=0),
    current_user: Optional[User] = Depends(get_optional_current_user),
    db: Session = Depends(get_db)
):
    """
    Get a user's public profile.

    - Public endpoint (authentication adds friendship status)
    - Pizzas and email follow the owner's visibility settings
    - Pizzas are paginated, newest first
    """
    public = ProfileService.public_profile(
        db, username, current_user.id if current_user else None, page
    )

    if public is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return PublicProfileResponse(
        profile=public.profile,
        email=public.email,
        friendship_status=public.friendship_status,
        highlights=[asdict(h) for h in public.highlights],
        pizzas_visible=public.pizzas_visible,
        pizzas=[PizzaResponse.model_validate(p) for p in public.pizzas],
        total_pizzas=public.total_pizzas,
        page=public.page,
        total_pages=public.total_pages,
        errors=public.errors,
    )
