"""
Friendship model - a friend request between two users.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Index
from sqlalchemy.dialects.postgresql import UUID
from database import Base
from datetime import datetime


class Friendship(Base):
    """Friend request; only accepted rows count as friends."""
    __tablename__ = "friendships"

    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    addressee_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=STATUS_PENDING)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_friendship_pair_unique', 'requester_id', 'addressee_id', unique=True),
    )

    def other_user_id(self, user_id):
        """Return the id on the other side of the friendship."""
        return self.addressee_id if self.requester_id == user_id else self.requester_id

    def __repr__(self):
        return f"<Friendship(requester_id={self.requester_id}, addressee_id={self.addressee_id}, status={self.status})>"
