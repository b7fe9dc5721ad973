"""
Home dashboard.

Every section is built independently; a failing section is reported in
`errors` and left empty while the others are still returned.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from services.group_service import GroupService
from services.ingredient_stats_service import top_ingredient_for_period
from services.leaderboard_service import VIEW_AROUND_ME, VIEW_TOP, LeaderboardService, index_of_user, select_view
from services.pizza_service import PizzaService, YearCounter
from services.queries import ProfileLoader, fetch_pizza_ingredients, fetch_pizzas
from services.ranking_service import PersonalRankings, RankingService
from services.rows import IngredientCount, LeaderboardView
from utils.dates import month_name
from utils.sections import run_section

logger = logging.getLogger(__name__)

FRIENDS_TOP = 10
GROUP_WIDGET_FALLBACK_TOP = 11

MOMENT_PREVIOUS_MONTH = "previous_month"
MOMENT_CURRENT_MONTH = "current_month"
MOMENT_PREVIOUS_WEEK = "previous_week"
MOMENT_CURRENT_WEEK = "current_week"


@dataclass(frozen=True)
class GlobalCounters:
    """Whole-community totals for the current year."""
    total_pizzas: int
    distinct_ingredients: int


@dataclass(frozen=True)
class IngredientMoment:
    """Ingredient of the moment for one period."""
    period: str
    label: str
    ingredient: Optional[IngredientCount]


@dataclass(frozen=True)
class GroupOption:
    group_id: int
    name: str


@dataclass(frozen=True)
class GroupWidget:
    """Leaderboard window of the selected group."""
    group_id: int
    group_name: str
    groups: List[GroupOption]
    view: LeaderboardView


@dataclass
class HomeDashboard:
    year: int
    counter: Optional[YearCounter] = None
    rankings: Optional[PersonalRankings] = None
    global_counters: Optional[GlobalCounters] = None
    ingredient_moments: List[IngredientMoment] = field(default_factory=list)
    friends_top: Optional[LeaderboardView] = None
    group_widget: Optional[GroupWidget] = None
    errors: List[str] = field(default_factory=list)


def ingredient_moment_periods(today: date) -> List[tuple]:
    """(period id, label, start, end) of the four ingredient-of-the-moment cards."""
    monthly = RankingService.PERIOD_MONTHLY
    weekly = RankingService.PERIOD_WEEKLY

    prev_month = RankingService.get_previous_period_bounds(monthly, today)
    this_month = RankingService.get_period_bounds(monthly, today)
    prev_week = RankingService.get_previous_period_bounds(weekly, today)
    this_week = RankingService.get_period_bounds(weekly, today)

    return [
        (MOMENT_PREVIOUS_MONTH, f"Mese di {month_name(prev_month[0].month)}", *prev_month),
        (MOMENT_CURRENT_MONTH, f"Mese di {month_name(this_month[0].month)}", *this_month),
        (MOMENT_PREVIOUS_WEEK, "Settimana scorsa", *prev_week),
        (MOMENT_CURRENT_WEEK, "Questa settimana", *this_week),
    ]


class HomeService:
    """Service for the home dashboard."""

    @staticmethod
    def global_counters(db: Session, year: int) -> GlobalCounters:
        start, end = RankingService.get_period_bounds(RankingService.PERIOD_YEARLY, date(year, 1, 1))
        links = fetch_pizza_ingredients(db, start, end)
        return GlobalCounters(
            total_pizzas=len(fetch_pizzas(db, start, end)),
            distinct_ingredients=len({row.ingredient_id for row in links}),
        )

    @staticmethod
    def ingredient_moments(db: Session, today: date) -> List[IngredientMoment]:
        return [
            IngredientMoment(
                period=period,
                label=label,
                ingredient=top_ingredient_for_period(fetch_pizza_ingredients(db, start, end)),
            )
            for period, label, start, end in ingredient_moment_periods(today)
        ]

    @staticmethod
    def friends_top(db: Session, user_id: UUID, year: int, loader: ProfileLoader) -> LeaderboardView:
        rows = LeaderboardService.friends_leaderboard(db, user_id, year, loader)
        return select_view(rows, mode=VIEW_TOP, top_n=FRIENDS_TOP)

    @staticmethod
    def group_widget(
        db: Session,
        user_id: UUID,
        year: int,
        loader: ProfileLoader,
        group_id: Optional[int] = None,
    ) -> Optional[GroupWidget]:
        """
        Around-me window of a group leaderboard.

        Defaults to the user's first group; None when the user has no group.
        """
        groups = GroupService.my_groups(db, user_id)
        if not groups:
            return None

        selected = groups[0]
        for group in groups:
            if group.id == group_id:
                selected = group
                break

        rows = LeaderboardService.group_leaderboard(db, selected, year, user_id, loader)
        view = select_view(
            rows,
            mode=VIEW_AROUND_ME,
            anchor_index=index_of_user(rows, user_id),
            fallback_top=GROUP_WIDGET_FALLBACK_TOP,
        )
        return GroupWidget(
            group_id=selected.id,
            group_name=selected.name,
            groups=[GroupOption(group_id=g.id, name=g.name) for g in groups],
            view=view,
        )

    @staticmethod
    def dashboard(
        db: Session,
        user_id: UUID,
        group_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> HomeDashboard:
        if today is None:
            today = date.today()
        year = today.year
        loader = ProfileLoader(db)
        home = HomeDashboard(year=year)

        def section(name, build, default=None):
            value, error = run_section(db, name, build, default)
            if error:
                home.errors.append(error)
            return value

        home.counter = section("counter", lambda: PizzaService.get_counter(db, user_id, year))
        home.rankings = section("rankings", lambda: RankingService.personal_rankings(db, user_id, today))
        if home.rankings is not None:
            home.errors.extend(home.rankings.errors)
        home.global_counters = section("global counters", lambda: HomeService.global_counters(db, year))
        home.ingredient_moments = section(
            "ingredients of the moment", lambda: HomeService.ingredient_moments(db, today), []
        )
        home.friends_top = section(
            "friends leaderboard", lambda: HomeService.friends_top(db, user_id, year, loader)
        )
        home.group_widget = section(
            "group leaderboard", lambda: HomeService.group_widget(db, user_id, year, loader, group_id)
        )

        logger.debug(f"Home dashboard for {user_id}: {len(home.errors)} degraded sections")
        return home
