"""
Group models - groups of users competing on a shared leaderboard.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime


class Group(Base):
    """A group owned by one user."""
    __tablename__ = "groups"

    VISIBILITY_PUBLIC = "public"
    VISIBILITY_CLOSED = "closed"
    VISIBILITY_PRIVATE = "private"
    VISIBILITY_VALUES = (VISIBILITY_PUBLIC, VISIBILITY_CLOSED, VISIBILITY_PRIVATE)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    visibility = Column(String(20), nullable=False, default=VISIBILITY_PUBLIC)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Group(id={self.id}, name={self.name}, visibility={self.visibility})>"


class GroupMember(Base):
    """Membership of a user in a group."""
    __tablename__ = "group_members"

    ROLE_MEMBER = "member"
    ROLE_ADMIN = "admin"

    STATUS_PENDING = "pending"
    STATUS_ACTIVE = "active"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=ROLE_MEMBER)
    status = Column(String(20), nullable=False, default=STATUS_PENDING)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    group = relationship("Group", back_populates="members")

    __table_args__ = (
        Index('idx_group_member_unique', 'group_id', 'user_id', unique=True),
    )

    def __repr__(self):
        return f"<GroupMember(group_id={self.group_id}, user_id={self.user_id}, status={self.status})>"
