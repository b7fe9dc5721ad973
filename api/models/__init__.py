"""
SQLAlchemy database models.
"""
from .user import User
from .profile import Profile
from .pizza import Pizza, PizzaIngredient
from .ingredient import Ingredient
from .group import Group, GroupMember
from .friendship import Friendship
from .yearly_counter import UserYearlyCounter

__all__ = [
    "User",
    "Profile",
    "Pizza",
    "PizzaIngredient",
    "Ingredient",
    "Group",
    "GroupMember",
    "Friendship",
    "UserYearlyCounter",
]
