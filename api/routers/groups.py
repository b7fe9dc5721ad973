"""
Group endpoints - membership, leaderboard and weekly chart.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from database import get_db
from models import User, Group
from schemas import (
    GroupCreate,
    GroupResponse,
    GroupDetailResponse,
    GroupListResponse,
    GroupMemberResponse,
    AddMemberRequest,
    InviteCandidatesResponse,
    LeaderboardResponse,
    WeeklyChartResponse,
)
from services.group_service import GroupService
from services.leaderboard_service import (
    CHART_PIZZAS,
    CHART_POSITIONS,
    VIEW_AROUND_ME,
    VIEW_MODES,
    VIEW_TOP,
    LeaderboardService,
    index_of_user,
    select_view,
)
from services.queries import ProfileLoader
from services.rows import ProfileRow
from utils.dependencies import get_current_user

router = APIRouter()


def get_visible_group_or_404(db: Session, group_id: int, user: User) -> Group:
    """Private groups are reported as missing to non-members."""
    group = GroupService.get_group(db, group_id)

    if not group or not GroupService.can_view(db, group, user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found"
        )

    return group


def require_owner(group: Group, user: User):
    if group.owner_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the group owner can do this"
        )


@router.get("", response_model=GroupListResponse)
async def list_groups(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List my groups and the groups I can join.

    - Requires authentication
    - Private groups never appear in `explore`
    """
    return GroupListResponse(
        my_groups=[GroupResponse.model_validate(g) for g in GroupService.my_groups(db, current_user.id)],
        explore=[GroupResponse.model_validate(g) for g in GroupService.explore_groups(db, current_user.id)],
    )


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a group.

    - Requires authentication
    - The creator becomes owner and active admin
    - Visibility: public, closed or private
    """
    group, error = GroupService.create_group(
        db, current_user.id, group_data.name, group_data.description, group_data.visibility
    )
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    return group


@router.get("/{group_id}", response_model=GroupDetailResponse)
async def get_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get group details and my membership status.

    - Requires authentication
    - The owner also sees pending join requests
    """
    group = get_visible_group_or_404(db, group_id, current_user)
    membership = GroupService.get_membership(db, group.id, current_user.id)
    is_owner = group.owner_id == current_user.id

    member_count = len(LeaderboardService.group_participants(db, group))
    pending = GroupService.pending_members(db, group) if is_owner else []

    return GroupDetailResponse(
        id=group.id,
        name=group.name,
        description=group.description,
        visibility=group.visibility,
        owner_id=group.owner_id,
        created_at=group.created_at,
        is_owner=is_owner,
        membership_status=membership.status if membership else None,
        member_count=member_count,
        pending_requests=[GroupMemberResponse.model_validate(m) for m in pending],
    )


@router.post("/{group_id}/join", response_model=GroupMemberResponse)
async def join_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Join a group.

    - Requires authentication
    - Public groups: active immediately; closed groups: pending approval
    """
    group = get_visible_group_or_404(db, group_id, current_user)

    membership, error = GroupService.join_group(db, group, current_user.id)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    return membership


@router.post("/{group_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Leave a group.

    - Requires authentication
    - The owner cannot leave
    """
    group = get_visible_group_or_404(db, group_id, current_user)

    error = GroupService.leave_group(db, group, current_user.id)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    return None


@router.get("/{group_id}/leaderboard", response_model=LeaderboardResponse)
async def get_group_leaderboard(
    group_id: int,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    view: str = VIEW_AROUND_ME,
    page: int = Query(0, ge=0),
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get the group leaderboard for a year.

    - Requires authentication
    - Totals include each member's base count
    - Views: around_me (default), top, all (paginated), search
    - Positions 1-3 are flagged as podium
    """
    if view not in VIEW_MODES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid view. Must be one of: {', '.join(VIEW_MODES)}"
        )

    group = get_visible_group_or_404(db, group_id, current_user)
    year = year or date.today().year

    rows = LeaderboardService.group_leaderboard(db, group, year, current_user.id, ProfileLoader(db))
    leaderboard = select_view(
        rows,
        mode=view,
        anchor_index=index_of_user(rows, current_user.id),
        search=search,
        page=page,
    )
    return LeaderboardResponse.from_view(leaderboard, year)


@router.get("/{group_id}/weekly", response_model=WeeklyChartResponse)
async def get_group_weekly_chart(
    group_id: int,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    mode: str = CHART_PIZZAS,
    view: str = VIEW_TOP,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Week-by-week progression of the group.

    - Requires authentication
    - mode: pizzas (cumulative count) or positions (cumulative rank)
    - view: top (top 10 plus you) or around_me
    """
    if mode not in (CHART_PIZZAS, CHART_POSITIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid mode. Must be one of: {CHART_PIZZAS}, {CHART_POSITIONS}"
        )
    if view not in (VIEW_TOP, VIEW_AROUND_ME):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid view. Must be one of: {VIEW_TOP}, {VIEW_AROUND_ME}"
        )

    group = get_visible_group_or_404(db, group_id, current_user)
    year = year or date.today().year
    loader = ProfileLoader(db)

    rows = LeaderboardService.group_leaderboard(db, group, year, current_user.id, loader)
    participants, points = LeaderboardService.group_weekly_chart(db, rows, year, current_user.id, view, mode)
    profiles = loader.load_many(participants)

    return {
        "year": year,
        "mode": mode,
        "view": view,
        "participants": [profiles.get(uid) or ProfileRow(id=uid) for uid in participants],
        "points": points,
    }


@router.get("/{group_id}/invite-candidates", response_model=InviteCandidatesResponse)
async def get_invite_candidates(
    group_id: int,
    q: str = "",
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Search users to add to the group.

    - Requires authentication, owner only
    - Matches nickname or display name; current members are left out
    """
    group = get_visible_group_or_404(db, group_id, current_user)
    require_owner(group, current_user)

    return {"candidates": GroupService.invite_candidates(db, group, q)}


@router.post("/{group_id}/members", response_model=GroupMemberResponse)
async def add_member(
    member_data: AddMemberRequest,
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Add a user to the group, or approve their pending request.

    - Requires authentication, owner only
    - The membership becomes active
    """
    group = get_visible_group_or_404(db, group_id, current_user)
    require_owner(group, current_user)

    membership, error = GroupService.add_member(db, group, member_data.user_id)
    if error:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error)

    return membership
