"""
Pydantic schemas for ingredients and ingredient statistics.
"""
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from .leaderboard import ProfileSummary


class IngredientCreate(BaseModel):
    """Schema for creating (or reusing) a catalog ingredient."""
    name: str = Field(..., min_length=1, max_length=100)


class IngredientResponse(BaseModel):
    """Schema for catalog ingredients."""
    id: int
    name: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class IngredientCountResponse(BaseModel):
    """An ingredient ranked by usage."""
    ingredient_id: int
    name: str
    count: int
    emoji: str


class IngredientRefResponse(BaseModel):
    ingredient_id: int
    name: str
    emoji: str


class IngredientStatResponse(BaseModel):
    """Usage count and average rating of an ingredient."""
    ingredient_id: int
    name: str
    count: int
    avg_rating: Optional[float]
    avg_rating_label: str


class CombinationResponse(BaseModel):
    """Ingredients eaten together and how often."""
    key: str
    ingredients: List[IngredientRefResponse]
    count: int


class BadgeResponse(BaseModel):
    label: str
    tooltip: str
    color: str


class OriginSliceResponse(BaseModel):
    origin: str
    label: str
    count: int
    percentage: float
    percentage_label: str


class UserCountResponse(BaseModel):
    """A user ranked by a plain count."""
    user_id: UUID
    profile: Optional[ProfileSummary]
    count: int
    is_me: bool = False


class IngredientProfileResponse(BaseModel):
    """Everything shown on an ingredient page."""
    ingredient_id: int
    name: str
    emoji: str
    total_pizzas: int
    avg_rating: Optional[float]
    co_occurring: List[IngredientCountResponse]
    top_users: List[UserCountResponse]
    origins: List[OriginSliceResponse]
    weekday_counts: List[int]
    badges: List[BadgeResponse]
