"""
Profile model - public identity of a user.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime


class Profile(Base):
    """User profile model. Shares its primary key with the user."""
    __tablename__ = "profiles"

    VISIBILITY_EVERYONE = "everyone"
    VISIBILITY_FRIENDS = "friends"
    VISIBILITY_GROUPS = "groups"
    VISIBILITY_NONE = "none"
    VISIBILITY_VALUES = (VISIBILITY_EVERYONE, VISIBILITY_FRIENDS, VISIBILITY_GROUPS, VISIBILITY_NONE)

    id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    username = Column(String(20), nullable=True, unique=True, index=True)
    display_name = Column(String(100), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    pizza_visibility = Column(String(20), nullable=False, default=VISIBILITY_EVERYONE)
    email_visibility = Column(String(20), nullable=False, default=VISIBILITY_FRIENDS)
    needs_onboarding = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile(id={self.id}, username={self.username})>"
