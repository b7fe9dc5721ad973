"""
Pydantic schemas for the statistics pages and the home dashboard.
"""
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID

from .ingredient import (
    CombinationResponse,
    IngredientCountResponse,
    IngredientStatResponse,
    OriginSliceResponse,
    UserCountResponse,
)
from .leaderboard import BoardWindow, LeaderboardResponse, ProfileSummary
from .pizza import YearCounterResponse
from .profile import PersonalRankingsResponse


class WeeklyAverageResponse(BaseModel):
    week: int
    avg: float
    pizza_count: int
    user_count: int


class StatsOverviewResponse(BaseModel):
    """Global statistics dashboard for a year or one of its months."""
    year: int
    month: Optional[int]
    origin: str
    total_pizzas: int
    top_by_count: List[IngredientStatResponse]
    top_by_rating: List[IngredientStatResponse]
    top_combinations: List[CombinationResponse]
    weekday_series: List[int]
    weekday_max: int
    origins: List[OriginSliceResponse]
    weekly_averages: List[WeeklyAverageResponse]
    weekly_average_max: float


class IngredientBoardResponse(BoardWindow):
    rows: List[IngredientCountResponse]


class CombinationBoardResponse(BoardWindow):
    rows: List[CombinationResponse]


class UserCountBoardResponse(BoardWindow):
    rows: List[UserCountResponse]


class DistinctIngredientsEntry(BaseModel):
    """Average number of distinct ingredients per pizza for one user."""
    user_id: UUID
    profile: Optional[ProfileSummary]
    pizza_count: int
    distinct_total: int
    avg_distinct: float
    is_me: bool = False


class DistinctIngredientsBoardResponse(BoardWindow):
    rows: List[DistinctIngredientsEntry]


class GlobalCountersResponse(BaseModel):
    total_pizzas: int
    distinct_ingredients: int


class IngredientMomentResponse(BaseModel):
    """Ingredient of the moment for one period."""
    period: str
    label: str
    ingredient: Optional[IngredientCountResponse]


class GroupOptionResponse(BaseModel):
    group_id: int
    name: str


class GroupWidgetResponse(BaseModel):
    group_id: int
    group_name: str
    groups: List[GroupOptionResponse]
    leaderboard: LeaderboardResponse


class HomeResponse(BaseModel):
    """Home dashboard; failed sections are null and listed in errors."""
    year: int
    counter: Optional[YearCounterResponse]
    rankings: Optional[PersonalRankingsResponse]
    global_counters: Optional[GlobalCountersResponse]
    ingredient_moments: List[IngredientMomentResponse]
    friends_top: Optional[LeaderboardResponse]
    group_widget: Optional[GroupWidgetResponse]
    errors: List[str] = []
