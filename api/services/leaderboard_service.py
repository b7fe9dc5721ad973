"""
Leaderboard aggregation shared by group, friends and global boards.

The pure functions at module level take rows and return ranked, windowed
view models. Sorting is always a stable descending sort on the count, so
ties keep the order of the participant list they were built from.
"""
from math import ceil
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID
import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from config import settings
from models import Group, GroupMember, Friendship
from services.queries import ProfileLoader, fetch_base_counts, fetch_pizzas
from services.rows import LeaderboardRow, LeaderboardView, PizzaRow, ProfileRow, WeekPoint
from utils.dates import week_in_year, weeks_in_year, year_bounds

logger = logging.getLogger(__name__)

VIEW_AROUND_ME = "around_me"
VIEW_TOP = "top"
VIEW_ALL = "all"
VIEW_SEARCH = "search"
VIEW_MODES = (VIEW_AROUND_ME, VIEW_TOP, VIEW_ALL, VIEW_SEARCH)

CHART_PIZZAS = "pizzas"
CHART_POSITIONS = "positions"


def build_leaderboard(
    participant_ids: Sequence[UUID],
    pizza_user_ids: Iterable[UUID],
    base_counts: Dict[UUID, int],
    viewer_id: Optional[UUID],
    profiles: Dict[UUID, Optional[ProfileRow]],
) -> List[LeaderboardRow]:
    """
    Rank participants by base count plus pizzas eaten.

    Args:
        participant_ids: Users to include, even with zero pizzas
        pizza_user_ids: Owner of each counted pizza; non-participants are ignored
        base_counts: Manually entered offsets per user
        viewer_id: User viewing the board (sets is_me)
        profiles: Profiles keyed by user id

    Returns:
        Rows sorted by total, descending
    """
    counts = {uid: 0 for uid in participant_ids}
    for uid in pizza_user_ids:
        if uid in counts:
            counts[uid] += 1

    rows = []
    for uid in counts:
        base = base_counts.get(uid, 0)
        rows.append(LeaderboardRow(
            user_id=uid,
            profile=profiles.get(uid),
            base_count=base,
            pizza_count=counts[uid],
            total=base + counts[uid],
            is_me=uid == viewer_id,
        ))

    return sorted(rows, key=lambda r: r.total, reverse=True)


def rank_counts(counts: Dict[Hashable, int]) -> List[Tuple[Hashable, int]]:
    """Sort a count map descending, keeping insertion order for ties."""
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def position_of(ranked: Sequence[Tuple[Hashable, int]], key: Hashable) -> Optional[int]:
    """1-based position of a key in a ranked list, or None."""
    for index, (candidate, _) in enumerate(ranked):
        if candidate == key:
            return index + 1
    return None


def index_of_user(rows: Sequence, user_id: Optional[UUID]) -> Optional[int]:
    """Index of a user's row in a ranked board, or None."""
    if user_id is None:
        return None
    for index, row in enumerate(rows):
        if row.user_id == user_id:
            return index
    return None


def around_index(rows: Sequence, index: int, window: Optional[int] = None) -> Tuple[int, list]:
    """
    Slice of rows centred on an index.

    Returns:
        Tuple of (offset of the first row, rows); at most 2 * window + 1 rows
    """
    if window is None:
        window = settings.LEADERBOARD_WINDOW_SIZE
    start = max(0, index - window)
    end = min(len(rows), index + window + 1)
    return start, list(rows[start:end])


def top_slice(rows: Sequence, n: int) -> list:
    return list(rows[:n])


def page_slice(rows: Sequence, page: int, page_size: Optional[int] = None) -> Tuple[int, list]:
    """Zero-based page of rows; returns (offset, rows)."""
    if page_size is None:
        page_size = settings.LEADERBOARD_PAGE_SIZE
    start = max(0, page) * page_size
    return start, list(rows[start:start + page_size])


def total_pages(count: int, page_size: Optional[int] = None) -> int:
    if page_size is None:
        page_size = settings.LEADERBOARD_PAGE_SIZE
    return ceil(count / page_size) if count else 0


def profile_search_fields(row) -> Tuple[Optional[str], ...]:
    """Searchable names of a row that carries a profile."""
    profile = getattr(row, "profile", None)
    if profile is None:
        return ()
    return (profile.username, profile.display_name)


def find_in_leaderboard(
    rows: Sequence,
    term: str,
    fields: Callable[[object], Iterable[Optional[str]]] = profile_search_fields,
) -> Optional[int]:
    """
    Case-insensitive substring search over a ranked board.

    Returns:
        Index of the first matching row in sort order, or None
    """
    needle = (term or "").strip().lower()
    if not needle:
        return None
    for index, row in enumerate(rows):
        for value in fields(row):
            if value and needle in value.lower():
                return index
    return None


def select_view(
    rows: Sequence,
    mode: str = VIEW_AROUND_ME,
    anchor_index: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 0,
    top_n: int = 10,
    fallback_top: int = 10,
    default_mode: str = VIEW_AROUND_ME,
    not_found_mode: Optional[str] = None,
    not_found_message: str = "No user found",
    fields: Callable[[object], Iterable[Optional[str]]] = profile_search_fields,
) -> LeaderboardView:
    """
    Apply a view mode to a sorted board.

    - around_me: window around anchor_index, or the top fallback_top rows
      when the anchor is not on the board
    - top: the first top_n rows
    - all: one page of the board
    - search: window around the first match; an empty term resets to
      default_mode, a missed term reports not_found_message and shows
      not_found_mode (default_mode when unset)
    """
    search_error = None

    if mode == VIEW_SEARCH:
        term = (search or "").strip()
        if not term:
            mode = default_mode
        else:
            found = find_in_leaderboard(rows, term, fields)
            if found is None:
                search_error = not_found_message
                mode = not_found_mode or default_mode
            else:
                offset, window = around_index(rows, found)
                return _view(VIEW_SEARCH, rows, offset, window)

    if mode == VIEW_TOP:
        view = _view(VIEW_TOP, rows, 0, top_slice(rows, top_n), search_error=search_error)
    elif mode == VIEW_ALL:
        offset, window = page_slice(rows, page)
        view = _view(
            VIEW_ALL, rows, offset, window,
            page=max(0, page), pages=total_pages(len(rows)), search_error=search_error,
        )
    elif anchor_index is None:
        view = _view(VIEW_AROUND_ME, rows, 0, top_slice(rows, fallback_top), search_error=search_error)
    else:
        offset, window = around_index(rows, anchor_index)
        view = _view(VIEW_AROUND_ME, rows, offset, window, search_error=search_error)

    return view


def full_view(rows: Sequence) -> LeaderboardView:
    """The whole board as a single page of the all view."""
    return _view(VIEW_ALL, rows, 0, list(rows), pages=1 if rows else 0)


def _view(mode, rows, offset, window, page=0, pages=0, search_error=None) -> LeaderboardView:
    return LeaderboardView(
        mode=mode,
        rows=window,
        start_pos=offset + 1 if window else 0,
        end_pos=offset + len(window),
        total=len(rows),
        page=page,
        total_pages=pages,
        search_error=search_error,
    )


def chart_participants(rows: Sequence[LeaderboardRow], viewer_id: UUID, view: str) -> List[UUID]:
    """
    Users plotted on the weekly chart.

    The top view takes the first ten plus the viewer when missing; the
    around-me view takes the viewer's window (the first 11 without one).
    """
    if view == VIEW_TOP:
        ids = [r.user_id for r in rows[:10]]
        if viewer_id not in ids:
            ids.append(viewer_id)
        return ids

    index = index_of_user(rows, viewer_id)
    if index is None:
        return [r.user_id for r in rows[:11]]
    _, window = around_index(rows, index)
    return [r.user_id for r in window]


def weekly_progression(
    participant_ids: Sequence[UUID],
    pizzas: Iterable[PizzaRow],
    year: int,
    mode: str = CHART_PIZZAS,
) -> List[WeekPoint]:
    """
    Week-by-week cumulative standings of the participants.

    Pizzas are bucketed by ISO week number, clamped to the weeks of the
    year so that every pizza of the year lands on the chart. Leading and
    trailing weeks with no pizza at all are dropped. In pizzas mode each
    point holds cumulative pizza counts; in positions mode it holds the
    1-based rank of those cumulative counts.
    """
    last_week = weeks_in_year(year)
    weekly = {w: {uid: 0 for uid in participant_ids} for w in range(1, 54)}

    for pizza in pizzas:
        if pizza.eaten_at is None or pizza.user_id not in weekly[1]:
            continue
        weekly[week_in_year(pizza.eaten_at, year)][pizza.user_id] += 1

    active_weeks = [w for w in range(1, last_week + 1) if any(weekly[w].values())]
    if not active_weeks:
        return []

    cumulative = {uid: 0 for uid in participant_ids}
    for w in range(1, active_weeks[0]):
        for uid in participant_ids:
            cumulative[uid] += weekly[w][uid]

    points = []
    for w in range(active_weeks[0], active_weeks[-1] + 1):
        for uid in participant_ids:
            cumulative[uid] += weekly[w][uid]

        if mode == CHART_POSITIONS:
            ranked = rank_counts(cumulative)
            data = {str(uid): index + 1 for index, (uid, _) in enumerate(ranked)}
        else:
            data = {str(uid): count for uid, count in cumulative.items()}

        points.append(WeekPoint(week_number=w, week_label=f"S{w}", data=data))

    return points


class LeaderboardService:
    """Database-backed leaderboards."""

    @staticmethod
    def group_participants(db: Session, group: Group) -> List[UUID]:
        """Owner first, then active members in join order."""
        members = db.query(GroupMember).filter(
            and_(
                GroupMember.group_id == group.id,
                GroupMember.status == GroupMember.STATUS_ACTIVE
            )
        ).order_by(GroupMember.id.asc()).all()

        ids = [group.owner_id]
        for member in members:
            if member.user_id not in ids:
                ids.append(member.user_id)
        return ids

    @staticmethod
    def friend_ids(db: Session, user_id: UUID) -> List[UUID]:
        """Users with an accepted friendship with user_id, either direction."""
        friendships = db.query(Friendship).filter(
            and_(
                Friendship.status == Friendship.STATUS_ACCEPTED,
                or_(Friendship.requester_id == user_id, Friendship.addressee_id == user_id)
            )
        ).order_by(Friendship.id.asc()).all()

        ids = []
        for friendship in friendships:
            other = friendship.other_user_id(user_id)
            if other not in ids:
                ids.append(other)
        return ids

    @staticmethod
    def leaderboard_for(
        db: Session,
        participant_ids: List[UUID],
        year: int,
        viewer_id: Optional[UUID],
        loader: ProfileLoader,
    ) -> List[LeaderboardRow]:
        """Leaderboard of the given participants for a year, base counts included."""
        if not participant_ids:
            return []

        start, end = year_bounds(year)
        pizzas = fetch_pizzas(db, start, end, user_ids=participant_ids)
        base_counts = fetch_base_counts(db, year, participant_ids)
        profiles = loader.load_many(participant_ids)

        return build_leaderboard(
            participant_ids,
            (p.user_id for p in pizzas),
            base_counts,
            viewer_id,
            profiles,
        )

    @staticmethod
    def group_leaderboard(
        db: Session,
        group: Group,
        year: int,
        viewer_id: Optional[UUID],
        loader: ProfileLoader,
    ) -> List[LeaderboardRow]:
        participants = LeaderboardService.group_participants(db, group)
        rows = LeaderboardService.leaderboard_for(db, participants, year, viewer_id, loader)
        logger.debug(f"Group {group.id} leaderboard for {year}: {len(rows)} participants")
        return rows

    @staticmethod
    def friends_leaderboard(
        db: Session,
        user_id: UUID,
        year: int,
        loader: ProfileLoader,
    ) -> List[LeaderboardRow]:
        participants = [user_id] + [
            uid for uid in LeaderboardService.friend_ids(db, user_id) if uid != user_id
        ]
        return LeaderboardService.leaderboard_for(db, participants, year, user_id, loader)

    @staticmethod
    def group_weekly_chart(
        db: Session,
        rows: List[LeaderboardRow],
        year: int,
        viewer_id: UUID,
        view: str,
        mode: str,
    ) -> Tuple[List[UUID], List[WeekPoint]]:
        """Weekly progression of the chart participants of a group board."""
        if not rows:
            return [], []

        participants = chart_participants(rows, viewer_id, view)
        start, end = year_bounds(year)
        pizzas = fetch_pizzas(db, start, end, user_ids=participants)
        return participants, weekly_progression(participants, pizzas, year, mode)
