"""
Pizza model - a single pizza-eating event and its ingredient links.
"""
from sqlalchemy import Column, String, Boolean, Date, DateTime, Float, ForeignKey, Integer, Text, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime, date


class Pizza(Base):
    """A pizza eaten by a user."""
    __tablename__ = "pizzas"

    ORIGIN_TAKEAWAY = "takeaway"
    ORIGIN_FROZEN = "frozen"
    ORIGIN_RESTAURANT = "restaurant"
    ORIGIN_BAKERY = "bakery"
    ORIGIN_BAR = "bar"
    ORIGIN_OTHER = "other"
    ORIGINS = (ORIGIN_TAKEAWAY, ORIGIN_FROZEN, ORIGIN_RESTAURANT, ORIGIN_BAKERY, ORIGIN_BAR, ORIGIN_OTHER)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=True, default="Pizza")
    eaten_at = Column(Date, nullable=True, default=date.today, index=True)
    rating = Column(Float, nullable=True)
    origin = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    photo_url = Column(String(500), nullable=True)
    has_details = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="pizzas")
    ingredient_links = relationship(
        "PizzaIngredient",
        back_populates="pizza",
        cascade="all, delete-orphan",
        order_by="PizzaIngredient.id",
    )

    __table_args__ = (
        # Yearly leaderboard scans
        Index('idx_pizzas_user_eaten_at', 'user_id', 'eaten_at'),
    )

    @property
    def ingredients(self):
        """Ingredients on this pizza in the order they were added."""
        return [link.ingredient for link in self.ingredient_links]

    def __repr__(self):
        return f"<Pizza(id={self.id}, user_id={self.user_id}, eaten_at={self.eaten_at})>"


class PizzaIngredient(Base):
    """Join row linking a pizza to one ingredient."""
    __tablename__ = "pizza_ingredients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pizza_id = Column(Integer, ForeignKey("pizzas.id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    pizza = relationship("Pizza", back_populates="ingredient_links")
    ingredient = relationship("Ingredient")

    __table_args__ = (
        Index('idx_pizza_ingredient_unique', 'pizza_id', 'ingredient_id', unique=True),
    )

    def __repr__(self):
        return f"<PizzaIngredient(pizza_id={self.pizza_id}, ingredient_id={self.ingredient_id})>"
