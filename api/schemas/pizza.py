"""
Pydantic schemas for Pizza model.
"""
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from datetime import date, datetime
from typing import List, Optional

from .ingredient import IngredientResponse, IngredientCountResponse


class PizzaCreate(BaseModel):
    """Schema for logging a pizza (+1). The date defaults to today."""
    eaten_at: Optional[date] = None


class PizzaDetailsUpdate(BaseModel):
    """Schema for the pizza detail form."""
    name: str = Field("Pizza", min_length=1, max_length=100)
    eaten_at: Optional[date] = None
    rating: Optional[float] = None
    origin: Optional[str] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = Field(None, max_length=500)


class PizzaResponse(BaseModel):
    """Schema for pizza responses."""
    id: int
    user_id: UUID
    name: Optional[str]
    eaten_at: Optional[date]
    rating: Optional[float]
    origin: Optional[str]
    notes: Optional[str]
    photo_url: Optional[str]
    has_details: bool
    created_at: datetime
    ingredients: List[IngredientResponse] = []

    model_config = ConfigDict(from_attributes=True)


class PizzaListResponse(BaseModel):
    """A user's pizzas for one year."""
    year: int
    pizzas: List[PizzaResponse]
    total: int


class YearCounterResponse(BaseModel):
    """Displayed yearly total: base count plus pizzas logged in the app."""
    year: int
    base_count: int
    pizza_count: int
    total: int
    has_base_row: bool

    model_config = ConfigDict(from_attributes=True)


class YearlyCounterUpdate(BaseModel):
    """Schema for setting the base count of a year."""
    year: int = Field(..., ge=1900, le=2100)
    base_count: int = Field(..., ge=0)


class UndoResponse(BaseModel):
    """Result of undoing the last pizza of a year."""
    deleted_pizza_id: int
    counter: YearCounterResponse


class SuggestionsResponse(BaseModel):
    """Ingredient suggestions for the pizza detail form."""
    user_top: List[IngredientCountResponse]
    recent: List[IngredientResponse]
