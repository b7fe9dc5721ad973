"""
Friend requests and friendship lookups.
"""
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from models import Friendship, Profile, User

logger = logging.getLogger(__name__)

STATUS_NONE = "none"
STATUS_SELF = "self"
STATUS_FRIENDS = "friends"
STATUS_PENDING_OUTGOING = "pending_outgoing"
STATUS_PENDING_INCOMING = "pending_incoming"

SEARCH_LIMIT = 20


class FriendshipService:
    """Service for friend requests."""

    @staticmethod
    def find_between(db: Session, user_a: UUID, user_b: UUID) -> Optional[Friendship]:
        """Friendship row between two users, in either direction."""
        return db.query(Friendship).filter(
            or_(
                and_(Friendship.requester_id == user_a, Friendship.addressee_id == user_b),
                and_(Friendship.requester_id == user_b, Friendship.addressee_id == user_a)
            )
        ).first()

    @staticmethod
    def status_between(db: Session, viewer_id: Optional[UUID], other_id: UUID) -> str:
        """Friendship status as seen by the viewer."""
        if viewer_id is None:
            return STATUS_NONE
        if viewer_id == other_id:
            return STATUS_SELF

        friendship = FriendshipService.find_between(db, viewer_id, other_id)
        if friendship is None:
            return STATUS_NONE
        if friendship.status == Friendship.STATUS_ACCEPTED:
            return STATUS_FRIENDS
        if friendship.requester_id == viewer_id:
            return STATUS_PENDING_OUTGOING
        return STATUS_PENDING_INCOMING

    @staticmethod
    def are_friends(db: Session, user_a: UUID, user_b: UUID) -> bool:
        friendship = FriendshipService.find_between(db, user_a, user_b)
        return friendship is not None and friendship.status == Friendship.STATUS_ACCEPTED

    @staticmethod
    def send_request(db: Session, requester_id: UUID, addressee_id: UUID) -> Tuple[Optional[Friendship], Optional[str]]:
        """
        Send a friend request.

        Returns:
            Tuple of (Friendship object, error message). If successful, error is None.
        """
        if requester_id == addressee_id:
            return None, "You cannot send a friend request to yourself"

        if db.query(User).filter(User.id == addressee_id).first() is None:
            return None, "User not found"

        if FriendshipService.find_between(db, requester_id, addressee_id) is not None:
            return None, "A friend request already exists between these users"

        friendship = Friendship(
            requester_id=requester_id,
            addressee_id=addressee_id,
            status=Friendship.STATUS_PENDING,
        )
        db.add(friendship)
        db.commit()
        db.refresh(friendship)

        logger.info(f"Friend request {friendship.id} from {requester_id} to {addressee_id}")
        return friendship, None

    @staticmethod
    def accept_request(db: Session, request_id: int, user_id: UUID) -> Tuple[Optional[Friendship], Optional[str]]:
        """Accept a pending request; only its addressee may do so."""
        friendship = db.query(Friendship).filter(Friendship.id == request_id).first()
        if friendship is None:
            return None, "Friend request not found"

        if friendship.addressee_id != user_id:
            return None, "Only the recipient can accept this request"

        if friendship.status != Friendship.STATUS_ACCEPTED:
            friendship.status = Friendship.STATUS_ACCEPTED
            db.commit()
            db.refresh(friendship)
            logger.info(f"Friend request {friendship.id} accepted by {user_id}")

        return friendship, None

    @staticmethod
    def incoming(db: Session, user_id: UUID) -> List[Friendship]:
        return db.query(Friendship).filter(
            and_(
                Friendship.addressee_id == user_id,
                Friendship.status == Friendship.STATUS_PENDING
            )
        ).order_by(Friendship.created_at.desc(), Friendship.id.desc()).all()

    @staticmethod
    def outgoing(db: Session, user_id: UUID) -> List[Friendship]:
        return db.query(Friendship).filter(
            and_(
                Friendship.requester_id == user_id,
                Friendship.status == Friendship.STATUS_PENDING
            )
        ).order_by(Friendship.created_at.desc(), Friendship.id.desc()).all()

    @staticmethod
    def accepted(db: Session, user_id: UUID) -> List[Friendship]:
        return db.query(Friendship).filter(
            and_(
                Friendship.status == Friendship.STATUS_ACCEPTED,
                or_(Friendship.requester_id == user_id, Friendship.addressee_id == user_id)
            )
        ).order_by(Friendship.id.asc()).all()

    @staticmethod
    def search_profiles(db: Session, user_id: UUID, term: str, limit: int = SEARCH_LIMIT) -> List[Profile]:
        """
        Profiles whose username contains term.

        The caller and users already linked to them by a request or a
        friendship are left out.
        """
        term = (term or "").strip()
        if not term:
            return []

        linked = {user_id}
        for friendship in db.query(Friendship).filter(
            or_(Friendship.requester_id == user_id, Friendship.addressee_id == user_id)
        ).all():
            linked.add(friendship.other_user_id(user_id))

        candidates = db.query(Profile).filter(
            and_(
                Profile.username.isnot(None),
                Profile.username.ilike(f"%{term}%")
            )
        ).order_by(Profile.username.asc()).all()

        return [p for p in candidates if p.id not in linked][:limit]
