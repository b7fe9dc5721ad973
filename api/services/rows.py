"""
Typed rows returned by the query layer and the aggregation routines.

Query results are narrowed to these immutable records at the boundary so
the aggregation code never touches ORM objects.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID


@dataclass(frozen=True)
class ProfileRow:
    """Public fields of a profile."""
    id: UUID
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class PizzaRow:
    """A pizza as seen by the aggregations."""
    id: int
    user_id: UUID
    eaten_at: Optional[date]
    rating: Optional[float] = None
    origin: Optional[str] = None


@dataclass(frozen=True)
class PizzaIngredientRow:
    """A pizza-ingredient link joined with its pizza and ingredient."""
    pizza_id: int
    ingredient_id: int
    ingredient_name: str
    user_id: UUID
    eaten_at: Optional[date]
    rating: Optional[float] = None
    origin: Optional[str] = None


@dataclass(frozen=True)
class LeaderboardRow:
    """Single leaderboard row."""
    user_id: UUID
    profile: Optional[ProfileRow]
    base_count: int
    pizza_count: int
    total: int
    is_me: bool


@dataclass(frozen=True)
class UserCountRow:
    """A user ranked by a plain count (weekday boards, top users)."""
    user_id: UUID
    profile: Optional[ProfileRow]
    count: int
    is_me: bool = False


@dataclass(frozen=True)
class DistinctIngredientsRow:
    """Average number of distinct ingredients per pizza for one user."""
    user_id: UUID
    profile: Optional[ProfileRow]
    pizza_count: int
    distinct_total: int
    avg_distinct: float
    is_me: bool = False


@dataclass(frozen=True)
class IngredientCount:
    """An ingredient ranked by usage."""
    ingredient_id: int
    name: str
    count: int
    emoji: str = "🍕"


@dataclass(frozen=True)
class IngredientRef:
    """An ingredient without counts."""
    ingredient_id: int
    name: str
    emoji: str = "🍕"


@dataclass(frozen=True)
class IngredientStat:
    """Usage count and average rating of an ingredient."""
    ingredient_id: int
    name: str
    count: int
    avg_rating: Optional[float]
    avg_rating_label: str = "n.d."


@dataclass(frozen=True)
class Combination:
    """A canonical set of ingredients eaten together."""
    key: str
    ingredients: List[IngredientRef]
    count: int


@dataclass(frozen=True)
class LeaderboardView:
    """A window over a sorted leaderboard plus its 1-based range."""
    mode: str
    rows: list
    start_pos: int
    end_pos: int
    total: int
    page: int = 0
    total_pages: int = 0
    search_error: Optional[str] = None


@dataclass(frozen=True)
class WeekPoint:
    """One point of the weekly progression chart."""
    week_number: int
    week_label: str
    data: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class GlobalRank:
    """Position of a user among everyone who ate at least one pizza."""
    rank: Optional[int]
    total_users: int
    count: int


@dataclass(frozen=True)
class Badge:
    """Qualitative achievement shown on an ingredient page."""
    label: str
    tooltip: str
    color: str


@dataclass(frozen=True)
class OriginSlice:
    """Share of pizzas coming from one origin."""
    origin: str
    label: str
    count: int
    percentage: float
    percentage_label: str = "0,0%"


@dataclass(frozen=True)
class WeeklyAverage:
    """Average pizzas per active user in one 7-day bucket."""
    week: int
    avg: float
    pizza_count: int
    user_count: int


@dataclass(frozen=True)
class Highlight:
    """A top-10 achievement shown on the home page."""
    id: str
    label: str
    description: str
    rank: int


@dataclass(frozen=True)
class RankingItem:
    """One line of a user's personal rankings list."""
    type: str
    label: str
    rank: int
    total_users: int
    count: int
    ingredient_id: Optional[int] = None
    ingredient_name: Optional[str] = None
