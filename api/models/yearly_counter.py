"""
UserYearlyCounter model - pizzas eaten before the user joined, per year.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime


class UserYearlyCounter(Base):
    """Manually entered offset added to a user's yearly total."""
    __tablename__ = "user_yearly_counters"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    year = Column(Integer, primary_key=True)
    base_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="yearly_counters")

    def __repr__(self):
        return f"<UserYearlyCounter(user_id={self.user_id}, year={self.year}, base_count={self.base_count})>"
