"""
Pydantic schemas for leaderboards, rankings and charts.
"""
from dataclasses import asdict
from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional
from uuid import UUID


class ProfileSummary(BaseModel):
    """Public fields of a profile shown next to a ranked user."""
    id: UUID
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LeaderboardEntry(BaseModel):
    """Single entry in a group or friends leaderboard."""
    position: int
    user_id: UUID
    profile: Optional[ProfileSummary]
    base_count: int
    pizza_count: int
    total: int
    is_me: bool
    is_podium: bool = False


class LeaderboardResponse(BaseModel):
    """A window over a leaderboard plus its 1-based range."""
    year: int
    mode: str
    entries: List[LeaderboardEntry]
    start_pos: int
    end_pos: int
    total: int
    page: int = 0
    total_pages: int = 0
    search_error: Optional[str] = None

    @classmethod
    def from_view(cls, view, year: int) -> "LeaderboardResponse":
        """Number the rows of a leaderboard window; ranks 1 to 3 are the podium."""
        entries = []
        for offset, row in enumerate(view.rows):
            position = view.start_pos + offset
            entries.append(LeaderboardEntry(position=position, is_podium=position <= 3, **asdict(row)))
        return cls(
            year=year,
            mode=view.mode,
            entries=entries,
            start_pos=view.start_pos,
            end_pos=view.end_pos,
            total=view.total,
            page=view.page,
            total_pages=view.total_pages,
            search_error=view.search_error,
        )


class WeekPointResponse(BaseModel):
    week_number: int
    week_label: str
    data: Dict[str, int]


class WeeklyChartResponse(BaseModel):
    """Weekly progression of the users plotted on a group chart."""
    year: int
    mode: str
    view: str
    participants: List[ProfileSummary]
    points: List[WeekPointResponse]


class GlobalRankResponse(BaseModel):
    rank: Optional[int]
    total_users: int
    count: int


class HighlightResponse(BaseModel):
    id: str
    label: str
    description: str
    rank: int


class RankingItemResponse(BaseModel):
    """One line of a user's personal rankings list."""
    type: str
    label: str
    rank: int
    total_users: int
    count: int
    ingredient_id: Optional[int] = None
    ingredient_name: Optional[str] = None


class BoardWindow(BaseModel):
    """Common fields of a windowed board."""
    mode: str
    start_pos: int
    end_pos: int
    total: int
    page: int = 0
    total_pages: int = 0
    search_error: Optional[str] = None
