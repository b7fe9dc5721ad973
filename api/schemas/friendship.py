"""
Pydantic schemas for friendships.
"""
from pydantic import BaseModel, ConfigDict
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from .leaderboard import ProfileSummary


class FriendRequestCreate(BaseModel):
    """Schema for sending a friend request."""
    addressee_id: UUID


class FriendshipResponse(BaseModel):
    id: int
    requester_id: UUID
    addressee_id: UUID
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FriendEntry(BaseModel):
    """A friendship row with the profile of the other user."""
    friendship_id: int
    user_id: UUID
    profile: Optional[ProfileSummary]
    status: str


class FriendsOverviewResponse(BaseModel):
    friends: List[FriendEntry]
    incoming: List[FriendEntry]
    outgoing: List[FriendEntry]


class FriendSearchResponse(BaseModel):
    results: List[ProfileSummary]
