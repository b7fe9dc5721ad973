"""
Pydantic schemas for request/response validation.
"""
from .leaderboard import (
    ProfileSummary,
    LeaderboardEntry,
    LeaderboardResponse,
    WeekPointResponse,
    WeeklyChartResponse,
    GlobalRankResponse,
    HighlightResponse,
    RankingItemResponse,
)
from .ingredient import (
    IngredientCreate,
    IngredientResponse,
    IngredientCountResponse,
    IngredientProfileResponse,
)
from .pizza import (
    PizzaCreate,
    PizzaDetailsUpdate,
    PizzaResponse,
    PizzaListResponse,
    YearCounterResponse,
    YearlyCounterUpdate,
    UndoResponse,
    SuggestionsResponse,
)
from .profile import (
    OnboardingRequest,
    ProfileUpdate,
    ProfileResponse,
    ProfileWithUser,
    ProfileStatsResponse,
    PersonalRankingsResponse,
    PublicProfileResponse,
)
from .stats import (
    StatsOverviewResponse,
    IngredientBoardResponse,
    CombinationBoardResponse,
    UserCountBoardResponse,
    DistinctIngredientsBoardResponse,
    HomeResponse,
)
from .group import (
    GroupCreate,
    GroupResponse,
    GroupDetailResponse,
    GroupListResponse,
    GroupMemberResponse,
    AddMemberRequest,
    InviteCandidatesResponse,
)
from .friendship import (
    FriendRequestCreate,
    FriendshipResponse,
    FriendEntry,
    FriendsOverviewResponse,
    FriendSearchResponse,
)

__all__ = [
    # Leaderboard schemas
    "ProfileSummary",
    "LeaderboardEntry",
    "LeaderboardResponse",
    "WeekPointResponse",
    "WeeklyChartResponse",
    "GlobalRankResponse",
    "HighlightResponse",
    "RankingItemResponse",
    # Ingredient schemas
    "IngredientCreate",
    "IngredientResponse",
    "IngredientCountResponse",
    "IngredientProfileResponse",
    # Pizza schemas
    "PizzaCreate",
    "PizzaDetailsUpdate",
    "PizzaResponse",
    "PizzaListResponse",
    "YearCounterResponse",
    "YearlyCounterUpdate",
    "UndoResponse",
    "SuggestionsResponse",
    # Profile schemas
    "OnboardingRequest",
    "ProfileUpdate",
    "ProfileResponse",
    "ProfileWithUser",
    "ProfileStatsResponse",
    "PersonalRankingsResponse",
    "PublicProfileResponse",
    # Stats schemas
    "StatsOverviewResponse",
    "IngredientBoardResponse",
    "CombinationBoardResponse",
    "UserCountBoardResponse",
    "DistinctIngredientsBoardResponse",
    "HomeResponse",
    # Group schemas
    "GroupCreate",
    "GroupResponse",
    "GroupDetailResponse",
    "GroupListResponse",
    "GroupMemberResponse",
    "AddMemberRequest",
    "InviteCandidatesResponse",
    # Friendship schemas
    "FriendRequestCreate",
    "FriendshipResponse",
    "FriendEntry",
    "FriendsOverviewResponse",
    "FriendSearchResponse",
]
