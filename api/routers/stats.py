"""
Statistics endpoints - global dashboards, boards and the home page.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from dataclasses import asdict
from datetime import date
from typing import Optional

from database import get_db
from models import User, Pizza
from schemas import (
    StatsOverviewResponse,
    IngredientBoardResponse,
    CombinationBoardResponse,
    UserCountBoardResponse,
    DistinctIngredientsBoardResponse,
    HomeResponse,
    LeaderboardResponse,
)
from services.home_service import HomeService
from services.ingredient_stats_service import ORIGIN_ALL, IngredientStatsService
from services.leaderboard_service import VIEW_AROUND_ME, VIEW_MODES, VIEW_TOP
from services.queries import ProfileLoader
from utils.dependencies import get_current_user, get_optional_current_user

router = APIRouter()


def check_view(view: str) -> str:
    if view not in VIEW_MODES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid view. Must be one of: {', '.join(VIEW_MODES)}"
        )
    return view


@router.get("/overview", response_model=StatsOverviewResponse)
async def get_overview(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    origin: str = ORIGIN_ALL,
    db: Session = Depends(get_db)
):
    """
    Global statistics for a year, or one of its months.

    - Public endpoint
    - `origin` filters the weekday chart (all, takeaway, frozen, ...)
    """
    if origin != ORIGIN_ALL and origin not in Pizza.ORIGINS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid origin. Must be one of: {ORIGIN_ALL}, {', '.join(Pizza.ORIGINS)}"
        )

    return IngredientStatsService.overview(db, year or date.today().year, month, origin)


@router.get("/ingredients/top-count", response_model=IngredientBoardResponse)
async def get_top_ingredients(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    view: str = VIEW_TOP,
    page: int = Query(0, ge=0),
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """
    Most used ingredients.

    - Public endpoint
    - Views: top, all (paginated), search
    """
    return IngredientStatsService.top_count_page(
        db, year or date.today().year, month, check_view(view), page, search
    )


@router.get("/ingredients/top-combinations", response_model=CombinationBoardResponse)
async def get_top_combinations(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    view: str = VIEW_TOP,
    page: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """
    Most frequent ingredient combinations.

    - Public endpoint
    - Views: top (first 100), all (paginated)
    """
    return IngredientStatsService.top_combinations_page(
        db, year or date.today().year, month, check_view(view), page
    )


@router.get("/users/top-weekday", response_model=UserCountBoardResponse)
async def get_top_weekday_users(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    weekday: int = Query(1, ge=0, le=6),
    view: str = VIEW_TOP,
    page: int = Query(0, ge=0),
    search: Optional[str] = None,
    current_user: Optional[User] = Depends(get_optional_current_user),
    db: Session = Depends(get_db)
):
    """
    Users ranked by pizzas eaten on a weekday (0 = Sunday).

    - Public endpoint (authentication enables the around_me view)
    """
    return IngredientStatsService.top_weekday_users_page(
        db,
        ProfileLoader(db),
        year or date.today().year,
        month,
        weekday=weekday,
        viewer_id=current_user.id if current_user else None,
        view=check_view(view),
        page=page,
        search=search,
    )


@router.get("/users/top-distinct-ingredients", response_model=DistinctIngredientsBoardResponse)
async def get_top_distinct_users(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    view: str = VIEW_AROUND_ME,
    page: int = Query(0, ge=0),
    search: Optional[str] = None,
    current_user: Optional[User] = Depends(get_optional_current_user),
    db: Session = Depends(get_db)
):
    """
    Users ranked by the average number of distinct ingredients per pizza.

    - Public endpoint
    - Only users with at least 3 pizzas with ingredients are ranked
    """
    return IngredientStatsService.top_distinct_page(
        db,
        ProfileLoader(db),
        year or date.today().year,
        month,
        viewer_id=current_user.id if current_user else None,
        view=check_view(view),
        page=page,
        search=search,
    )


@router.get("/home", response_model=HomeResponse)
async def get_home(
    group_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Home dashboard.

    - Requires authentication
    - Counter, highlights, rankings, global counters, ingredients of the
      moment, friends top 10 and a group leaderboard window
    - Sections that fail to load are null and listed in `errors`
    """
    home = HomeService.dashboard(db, current_user.id, group_id)

    group_widget = None
    if home.group_widget is not None:
        widget = home.group_widget
        group_widget = {
            "group_id": widget.group_id,
            "group_name": widget.group_name,
            "groups": [asdict(g) for g in widget.groups],
            "leaderboard": LeaderboardResponse.from_view(widget.view, home.year),
        }

    return HomeResponse(
        year=home.year,
        counter=asdict(home.counter) if home.counter else None,
        rankings=asdict(home.rankings) if home.rankings else None,
        global_counters=asdict(home.global_counters) if home.global_counters else None,
        ingredient_moments=[asdict(m) for m in home.ingredient_moments],
        friends_top=LeaderboardResponse.from_view(home.friends_top, home.year) if home.friends_top else None,
        group_widget=group_widget,
        errors=home.errors,
    )
