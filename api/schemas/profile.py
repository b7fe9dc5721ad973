"""
Pydantic schemas for Profile model.
"""
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from .ingredient import IngredientCountResponse
from .leaderboard import GlobalRankResponse, HighlightResponse, ProfileSummary, RankingItemResponse
from .pizza import PizzaResponse


class ProfileBase(BaseModel):
    """Base profile schema."""
    username: Optional[str] = Field(None, max_length=20)
    display_name: Optional[str] = Field(None, max_length=100)


class OnboardingRequest(ProfileBase):
    """Schema for choosing a nickname on first login."""
    username: str = Field(..., max_length=20)


class ProfileUpdate(ProfileBase):
    """Schema for updating a profile."""
    pizza_visibility: Optional[str] = None
    email_visibility: Optional[str] = None


class ProfileResponse(ProfileBase):
    """Schema for profile responses."""
    id: UUID
    avatar_url: Optional[str]
    pizza_visibility: str
    email_visibility: str
    needs_onboarding: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileWithUser(ProfileResponse):
    """Schema for profile with user data."""
    email: Optional[str]


class TopIngredientResponse(IngredientCountResponse):
    """An ingredient with its share of the year's pizzas."""
    percentage: float


class ProfileStatsResponse(BaseModel):
    """Personal statistics for one year."""
    year: int
    year_count: int
    month_count: int
    week_count: int
    base_count: int
    by_month: List[int]
    by_weekday: List[int]
    top_ingredients: List[TopIngredientResponse]
    year_rank: Optional[GlobalRankResponse]
    favorite_ingredient_rank: Optional[GlobalRankResponse]


class PersonalRankingsResponse(BaseModel):
    """Global ranks, highlights and the rankings list of a user."""
    year: int
    month: int
    year_rank: Optional[GlobalRankResponse]
    month_rank: Optional[GlobalRankResponse]
    favorite_ingredient: Optional[IngredientCountResponse]
    highlights: List[HighlightResponse]
    rankings: List[RankingItemResponse]
    errors: List[str] = []


class PublicProfileResponse(BaseModel):
    """Another user's profile page."""
    profile: ProfileSummary
    email: Optional[str] = None
    friendship_status: str
    highlights: List[HighlightResponse]
    pizzas_visible: bool
    pizzas: List[PizzaResponse]
    total_pizzas: int
    page: int
    total_pages: int
    errors: List[str] = []
