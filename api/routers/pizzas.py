"""
Pizza endpoints - logging, details, ingredients and yearly counter.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from database import get_db
from models import User, Pizza
from schemas import (
    PizzaCreate,
    PizzaDetailsUpdate,
    PizzaResponse,
    PizzaListResponse,
    YearCounterResponse,
    UndoResponse,
    SuggestionsResponse,
)
from services.pizza_service import PizzaService
from utils.dependencies import get_current_user

router = APIRouter()


def get_pizza_or_404(db: Session, pizza_id: int, user: User) -> Pizza:
    pizza = PizzaService.get_user_pizza(db, pizza_id, user.id)

    if not pizza:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pizza not found"
        )

    return pizza


@router.post("", response_model=PizzaResponse, status_code=status.HTTP_201_CREATED)
async def add_pizza(
    pizza_data: Optional[PizzaCreate] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Log a pizza (+1).

    - Requires authentication
    - Date defaults to today; details can be added later
    """
    eaten_at = pizza_data.eaten_at if pizza_data else None
    return PizzaService.add_pizza(db, current_user.id, eaten_at)


@router.get("", response_model=PizzaListResponse)
async def list_pizzas(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the current user's pizzas of a year, newest first.

    - Requires authentication
    - Each pizza includes its ingredients
    """
    year = year or date.today().year
    pizzas = PizzaService.list_pizzas(db, current_user.id, year)

    return PizzaListResponse(
        year=year,
        pizzas=[PizzaResponse.model_validate(p) for p in pizzas],
        total=len(pizzas),
    )


@router.get("/counter", response_model=YearCounterResponse)
async def get_counter(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get the yearly counter: base count plus pizzas logged in the app.

    - Requires authentication
    """
    return PizzaService.get_counter(db, current_user.id, year or date.today().year)


@router.post("/undo", response_model=UndoResponse)
async def undo_last_pizza(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete the most recently eaten pizza of the year (-1).

    - Requires authentication
    - Pizza and ingredient links are removed together
    """
    year = year or date.today().year
    deleted_id = PizzaService.undo_last_pizza(db, current_user.id, year)

    if deleted_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No pizza to remove in {year}"
        )

    return UndoResponse(
        deleted_pizza_id=deleted_id,
        counter=YearCounterResponse.model_validate(PizzaService.get_counter(db, current_user.id, year)),
    )


@router.get("/suggestions", response_model=SuggestionsResponse)
async def get_suggestions(
    pizza_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Ingredient suggestions for the detail form.

    - Requires authentication
    - Your most used ingredients and the newest catalog entries
    - Ingredients already on `pizza_id` are left out
    """
    exclude = []
    if pizza_id is not None:
        pizza = get_pizza_or_404(db, pizza_id, current_user)
        exclude = [link.ingredient_id for link in pizza.ingredient_links]

    user_top, recent = PizzaService.suggestions(db, current_user.id, exclude)
    return {"user_top": user_top, "recent": recent}


@router.get("/{pizza_id}", response_model=PizzaResponse)
async def get_pizza(
    pizza_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get one of the current user's pizzas.

    - Requires authentication
    """
    return get_pizza_or_404(db, pizza_id, current_user)


@router.put("/{pizza_id}", response_model=PizzaResponse)
async def update_pizza(
    pizza_id: int,
    details: PizzaDetailsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Save pizza details.

    - Requires authentication
    - Rating: 0-10
    - Origin: takeaway, frozen, restaurant, bakery, bar or other
    """
    pizza = get_pizza_or_404(db, pizza_id, current_user)

    updated, error = PizzaService.update_details(db, pizza, details)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    return updated


@router.delete("/{pizza_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pizza(
    pizza_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a pizza.

    - Requires authentication
    - Ingredient links are deleted in the same transaction
    """
    pizza = get_pizza_or_404(db, pizza_id, current_user)
    PizzaService.delete_pizza(db, pizza)
    return None


@router.post("/{pizza_id}/ingredients/{ingredient_id}", response_model=PizzaResponse)
async def add_ingredient(
    pizza_id: int,
    ingredient_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Put an ingredient on a pizza.

    - Requires authentication
    - Adding an ingredient twice has no effect
    """
    pizza = get_pizza_or_404(db, pizza_id, current_user)

    updated, error = PizzaService.set_ingredient(db, pizza, ingredient_id, present=True)
    if error:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error)

    return updated


@router.delete("/{pizza_id}/ingredients/{ingredient_id}", response_model=PizzaResponse)
async def remove_ingredient(
    pizza_id: int,
    ingredient_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Take an ingredient off a pizza.

    - Requires authentication
    """
    pizza = get_pizza_or_404(db, pizza_id, current_user)

    updated, error = PizzaService.set_ingredient(db, pizza, ingredient_id, present=False)
    if error:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error)

    return updated
