"""
Group membership service.
"""
from typing import List, Optional, Set, Tuple
from uuid import UUID
import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from models import Group, GroupMember, Profile, User

logger = logging.getLogger(__name__)

INVITE_SEARCH_LIMIT = 10


class GroupService:
    """Service for creating groups and managing their members."""

    @staticmethod
    def get_group(db: Session, group_id: int) -> Optional[Group]:
        return db.query(Group).filter(Group.id == group_id).first()

    @staticmethod
    def get_membership(db: Session, group_id: int, user_id: UUID) -> Optional[GroupMember]:
        return db.query(GroupMember).filter(
            and_(
                GroupMember.group_id == group_id,
                GroupMember.user_id == user_id
            )
        ).first()

    @staticmethod
    def is_participant(db: Session, group: Group, user_id: Optional[UUID]) -> bool:
        """Owner or active member."""
        if user_id is None:
            return False
        if group.owner_id == user_id:
            return True
        membership = GroupService.get_membership(db, group.id, user_id)
        return membership is not None and membership.status == GroupMember.STATUS_ACTIVE

    @staticmethod
    def can_view(db: Session, group: Group, user_id: Optional[UUID]) -> bool:
        """Private groups are only visible to their participants."""
        if group.visibility != Group.VISIBILITY_PRIVATE:
            return True
        return GroupService.is_participant(db, group, user_id)

    @staticmethod
    def create_group(
        db: Session,
        owner_id: UUID,
        name: str,
        description: Optional[str] = None,
        visibility: str = Group.VISIBILITY_PUBLIC,
    ) -> Tuple[Optional[Group], Optional[str]]:
        """
        Create a group with its owner as active admin.

        The group and the owner's membership are written in one commit.

        Returns:
            Tuple of (Group object, error message). If successful, error is None.
        """
        name = (name or "").strip()
        if not name:
            return None, "Group name is required"

        if visibility not in Group.VISIBILITY_VALUES:
            return None, f"Invalid visibility. Must be one of: {', '.join(Group.VISIBILITY_VALUES)}"

        group = Group(
            name=name,
            description=(description or "").strip() or None,
            visibility=visibility,
            owner_id=owner_id,
        )
        group.members.append(GroupMember(
            user_id=owner_id,
            role=GroupMember.ROLE_ADMIN,
            status=GroupMember.STATUS_ACTIVE,
        ))
        db.add(group)
        db.commit()
        db.refresh(group)

        logger.info(f"User {owner_id} created group {group.id} ({group.visibility})")
        return group, None

    @staticmethod
    def join_group(db: Session, group: Group, user_id: UUID) -> Tuple[Optional[GroupMember], Optional[str]]:
        """
        Join a group: active right away for public groups, pending otherwise.
        """
        if group.owner_id == user_id or GroupService.get_membership(db, group.id, user_id) is not None:
            return None, "You are already a member of this group"

        if group.visibility == Group.VISIBILITY_PUBLIC:
            membership_status = GroupMember.STATUS_ACTIVE
        else:
            membership_status = GroupMember.STATUS_PENDING

        membership = GroupMember(
            group_id=group.id,
            user_id=user_id,
            role=GroupMember.ROLE_MEMBER,
            status=membership_status,
        )
        db.add(membership)
        db.commit()
        db.refresh(membership)

        logger.info(f"User {user_id} joined group {group.id} as {membership_status}")
        return membership, None

    @staticmethod
    def leave_group(db: Session, group: Group, user_id: UUID) -> Optional[str]:
        """
        Leave a group.

        Returns:
            Error message, or None on success
        """
        if group.owner_id == user_id:
            return "The owner cannot leave the group"

        membership = GroupService.get_membership(db, group.id, user_id)
        if membership is None:
            return "You are not a member of this group"

        db.delete(membership)
        db.commit()

        logger.info(f"User {user_id} left group {group.id}")
        return None

    @staticmethod
    def add_member(db: Session, group: Group, user_id: UUID) -> Tuple[Optional[GroupMember], Optional[str]]:
        """
        Add a user to a group on behalf of its owner.

        A pending request is approved; otherwise a new active membership is
        created.
        """
        if db.query(User).filter(User.id == user_id).first() is None:
            return None, "User not found"

        membership = GroupService.get_membership(db, group.id, user_id)
        if membership is None:
            membership = GroupMember(
                group_id=group.id,
                user_id=user_id,
                role=GroupMember.ROLE_MEMBER,
                status=GroupMember.STATUS_ACTIVE,
            )
            db.add(membership)
        else:
            membership.status = GroupMember.STATUS_ACTIVE

        db.commit()
        db.refresh(membership)

        logger.info(f"User {user_id} added to group {group.id}")
        return membership, None

    @staticmethod
    def participant_group_ids(db: Session, user_id: UUID) -> List[int]:
        """Ids of groups the user owns or is an active member of, oldest first."""
        owned = db.query(Group.id).filter(Group.owner_id == user_id).all()
        joined = db.query(GroupMember.group_id).filter(
            and_(
                GroupMember.user_id == user_id,
                GroupMember.status == GroupMember.STATUS_ACTIVE
            )
        ).all()
        return sorted({row[0] for row in owned} | {row[0] for row in joined})

    @staticmethod
    def my_groups(db: Session, user_id: UUID) -> List[Group]:
        ids = GroupService.participant_group_ids(db, user_id)
        if not ids:
            return []
        return db.query(Group).filter(Group.id.in_(ids)).order_by(Group.id.asc()).all()

    @staticmethod
    def explore_groups(db: Session, user_id: UUID) -> List[Group]:
        """Public and closed groups the user has no membership in."""
        member_of: Set[int] = {
            row[0] for row in db.query(GroupMember.group_id).filter(GroupMember.user_id == user_id).all()
        }
        groups = db.query(Group).filter(
            and_(
                Group.owner_id != user_id,
                or_(
                    Group.visibility == Group.VISIBILITY_PUBLIC,
                    Group.visibility == Group.VISIBILITY_CLOSED
                )
            )
        ).order_by(Group.created_at.desc(), Group.id.desc()).all()
        return [g for g in groups if g.id not in member_of]

    @staticmethod
    def share_group(db: Session, user_a: UUID, user_b: UUID) -> bool:
        """Whether two users take part in at least one common group."""
        return bool(
            set(GroupService.participant_group_ids(db, user_a))
            & set(GroupService.participant_group_ids(db, user_b))
        )

    @staticmethod
    def invite_candidates(db: Session, group: Group, term: str, limit: int = INVITE_SEARCH_LIMIT) -> List[Profile]:
        """Profiles matching term by username or display name, minus current members."""
        term = (term or "").strip()
        if not term:
            return []

        excluded = {group.owner_id}
        for member in db.query(GroupMember).filter(GroupMember.group_id == group.id).all():
            if member.status == GroupMember.STATUS_ACTIVE:
                excluded.add(member.user_id)

        candidates = db.query(Profile).filter(
            or_(
                Profile.username.ilike(f"%{term}%"),
                Profile.display_name.ilike(f"%{term}%")
            )
        ).order_by(Profile.username.asc()).all()

        return [p for p in candidates if p.id not in excluded][:limit]

    @staticmethod
    def pending_members(db: Session, group: Group) -> List[GroupMember]:
        return db.query(GroupMember).filter(
            and_(
                GroupMember.group_id == group.id,
                GroupMember.status == GroupMember.STATUS_PENDING
            )
        ).order_by(GroupMember.id.asc()).all()
