"""
Shared fixtures: in-memory database, API client and signed access tokens.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")

from datetime import date, datetime, timedelta
from uuid import UUID, uuid4

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings
from database import Base, get_db
from main import app
from models import Ingredient, Pizza, PizzaIngredient, Profile, User


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def make_token(user_id: UUID, email: str = None, expires_in: int = 3600) -> str:
    payload = {
        "sub": str(user_id),
        "aud": settings.AUTH_JWT_AUDIENCE,
        "exp": datetime.utcnow() + timedelta(seconds=expires_in),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def auth_headers(user_id: UUID, email: str = None) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, email)}"}


def make_user(db, username: str = None, email: str = None, **profile_fields) -> User:
    """Create a user with an onboarded profile (or a fresh one without username)."""
    user = User(id=uuid4(), email=email or (f"{username}@example.com" if username else None))
    db.add(user)
    db.flush()
    db.add(Profile(
        id=user.id,
        username=username,
        display_name=username,
        needs_onboarding=username is None,
        **profile_fields,
    ))
    db.commit()
    return user


def make_ingredient(db, name: str) -> Ingredient:
    ingredient = Ingredient(name=name)
    db.add(ingredient)
    db.commit()
    return ingredient


def make_pizza(db, user: User, eaten_at: date, ingredients=(), rating=None, origin=None) -> Pizza:
    pizza = Pizza(user_id=user.id, eaten_at=eaten_at, rating=rating, origin=origin)
    db.add(pizza)
    db.flush()
    for ingredient in ingredients:
        db.add(PizzaIngredient(pizza_id=pizza.id, ingredient_id=ingredient.id))
    db.commit()
    return pizza
