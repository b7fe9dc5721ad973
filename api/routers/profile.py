"""
Profile management endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from database import get_db
from models import User, Profile
from schemas import (
    OnboardingRequest,
    ProfileUpdate,
    ProfileResponse,
    ProfileWithUser,
    ProfileStatsResponse,
    PersonalRankingsResponse,
    YearCounterResponse,
    YearlyCounterUpdate,
)
from services.pizza_service import PizzaService
from services.profile_service import ProfileService, USERNAME_TAKEN
from services.ranking_service import RankingService
from utils.dependencies import get_current_user

router = APIRouter()


def get_profile_or_404(db: Session, user: User) -> Profile:
    profile = ProfileService.get_profile(db, user.id)

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )

    return profile


def raise_profile_error(error: str):
    """Map a profile validation error to an HTTP error."""
    if error == USERNAME_TAKEN:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)


@router.get("/me", response_model=ProfileWithUser)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get current user's profile.

    - Requires authentication
    - Returns profile with user data
    """
    profile = get_profile_or_404(db, current_user)

    return ProfileWithUser(
        id=profile.id,
        username=profile.username,
        display_name=profile.display_name,
        avatar_url=profile.avatar_url,
        pizza_visibility=profile.pizza_visibility,
        email_visibility=profile.email_visibility,
        needs_onboarding=profile.needs_onboarding,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
        email=current_user.email,
    )


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update current user's profile.

    - Requires authentication
    - Updates nickname, display name and/or visibility settings
    - Nickname must be unique (409 otherwise)
    """
    profile = get_profile_or_404(db, current_user)

    updated, error = ProfileService.update_profile(db, profile, profile_data)
    if error:
        raise_profile_error(error)

    return updated


@router.post("/onboarding", response_model=ProfileResponse)
async def complete_onboarding(
    onboarding: OnboardingRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Choose a nickname on first login.

    - Requires authentication
    - Nickname: 3-20 characters, letters, numbers, underscores and dots
    - Display name defaults to the nickname
    """
    profile = get_profile_or_404(db, current_user)

    updated, error = ProfileService.complete_onboarding(
        db, profile, onboarding.username, onboarding.display_name
    )
    if error:
        raise_profile_error(error)

    return updated


@router.get("/me/stats", response_model=ProfileStatsResponse)
async def get_my_stats(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get personal statistics for a year (defaults to the current year).

    - Requires authentication
    - Global rank counts pizzas logged in the app only
    """
    return ProfileService.profile_stats(db, current_user.id, year or date.today().year)


@router.get("/me/rankings", response_model=PersonalRankingsResponse)
async def get_my_rankings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get highlights and the full personal rankings list.

    - Requires authentication
    - Sections that fail to load are listed in `errors`
    """
    return RankingService.personal_rankings(db, current_user.id)


@router.put("/me/yearly-counter", response_model=YearCounterResponse)
async def set_yearly_counter(
    counter: YearlyCounterUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Set the pizzas eaten in a year before using the app.

    - Requires authentication
    - Inserts or updates the base count for the year
    """
    result, error = PizzaService.set_base_count(db, current_user.id, counter.year, counter.base_count)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    return result
