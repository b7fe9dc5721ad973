"""
Friend endpoints - requests, friend list and friends leaderboard.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from uuid import UUID

from database import get_db
from models import User, Friendship
from schemas import (
    FriendRequestCreate,
    FriendshipResponse,
    FriendEntry,
    FriendsOverviewResponse,
    FriendSearchResponse,
    LeaderboardResponse,
)
from services.friendship_service import FriendshipService
from services.leaderboard_service import LeaderboardService, full_view
from services.queries import ProfileLoader
from utils.dependencies import get_current_user

router = APIRouter()


def friend_entries(friendships: List[Friendship], user_id: UUID, loader: ProfileLoader) -> List[FriendEntry]:
    others = [f.other_user_id(user_id) for f in friendships]
    profiles = loader.load_many(others)
    return [
        FriendEntry(
            friendship_id=f.id,
            user_id=other,
            profile=profiles.get(other),
            status=f.status,
        )
        for f, other in zip(friendships, others)
    ]


@router.get("", response_model=FriendsOverviewResponse)
async def list_friends(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List friends and pending requests.

    - Requires authentication
    - `incoming`: requests waiting for your answer
    - `outgoing`: requests you sent
    """
    loader = ProfileLoader(db)
    user_id = current_user.id

    return FriendsOverviewResponse(
        friends=friend_entries(FriendshipService.accepted(db, user_id), user_id, loader),
        incoming=friend_entries(FriendshipService.incoming(db, user_id), user_id, loader),
        outgoing=friend_entries(FriendshipService.outgoing(db, user_id), user_id, loader),
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_friends_leaderboard(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Leaderboard of you and your friends for a year.

    - Requires authentication
    - Totals include each user's base count
    - Every friend is listed, without pagination
    """
    year = year or date.today().year
    rows = LeaderboardService.friends_leaderboard(db, current_user.id, year, ProfileLoader(db))

    leaderboard = full_view(rows)
    return LeaderboardResponse.from_view(leaderboard, year)


@router.get("/search", response_model=FriendSearchResponse)
async def search_users(
    q: str = "",
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Search users by nickname to send a friend request.

    - Requires authentication
    - Users you are already linked to are left out
    """
    return {"results": FriendshipService.search_profiles(db, current_user.id, q)}


@router.post("/requests", response_model=FriendshipResponse, status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    request_data: FriendRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Send a friend request.

    - Requires authentication
    """
    friendship, error = FriendshipService.send_request(db, current_user.id, request_data.addressee_id)
    if error:
        if error == "User not found":
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    return friendship


@router.post("/requests/{request_id}/accept", response_model=FriendshipResponse)
async def accept_friend_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Accept a friend request addressed to you.

    - Requires authentication
    """
    friendship, error = FriendshipService.accept_request(db, request_id, current_user.id)
    if error:
        if error == "Friend request not found":
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error)

    return friendship
