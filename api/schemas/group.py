"""
Pydantic schemas for groups and memberships.
"""
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from .leaderboard import ProfileSummary


class GroupCreate(BaseModel):
    """Schema for creating a group."""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    visibility: str = "public"


class GroupResponse(BaseModel):
    """Schema for group responses."""
    id: int
    name: str
    description: Optional[str]
    visibility: str
    owner_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GroupMemberResponse(BaseModel):
    id: int
    group_id: int
    user_id: UUID
    role: str
    status: str

    model_config = ConfigDict(from_attributes=True)


class GroupDetailResponse(GroupResponse):
    """A group with the caller's relation to it."""
    is_owner: bool
    membership_status: Optional[str] = None
    member_count: int
    pending_requests: List[GroupMemberResponse] = []


class GroupListResponse(BaseModel):
    my_groups: List[GroupResponse]
    explore: List[GroupResponse]


class AddMemberRequest(BaseModel):
    """Owner adds (or approves) a user."""
    user_id: UUID


class InviteCandidatesResponse(BaseModel):
    candidates: List[ProfileSummary]
