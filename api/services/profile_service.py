"""
Profile service - onboarding, settings, personal stats and public pages.
"""
from dataclasses import dataclass, field
from datetime import date
from math import ceil
from typing import List, Optional, Tuple
from uuid import UUID
import logging
import re

from sqlalchemy import and_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from models import Pizza, Profile, User
from schemas.profile import ProfileUpdate
from services.friendship_service import FriendshipService
from services.group_service import GroupService
from services.ingredient_stats_service import month_distribution, weekday_distribution
from services.pizza_service import PizzaService
from services.queries import fetch_pizza_ingredients, fetch_pizzas, to_profile_row
from services.ranking_service import RankingService, global_rank, ingredient_frequencies
from services.rows import GlobalRank, Highlight, ProfileRow
from utils.dates import year_bounds
from utils.formatting import percentage
from utils.sections import run_section

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.]+$")
USERNAME_TAKEN = "Nickname already in use"

TOP_INGREDIENTS = 6


def validate_username(username: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Trim and validate a nickname.

    Returns:
        Tuple of (trimmed username, error message). If valid, error is None.
    """
    username = (username or "").strip()
    if len(username) < USERNAME_MIN_LENGTH:
        return None, f"Nickname must be at least {USERNAME_MIN_LENGTH} characters long"
    if len(username) > USERNAME_MAX_LENGTH:
        return None, f"Nickname must be at most {USERNAME_MAX_LENGTH} characters long"
    if not USERNAME_PATTERN.match(username):
        return None, "Nickname can only contain letters, numbers, underscores and dots"
    return username, None


@dataclass(frozen=True)
class TopIngredient:
    ingredient_id: int
    name: str
    count: int
    emoji: str
    percentage: float


@dataclass(frozen=True)
class ProfileStats:
    """Personal statistics for one year."""
    year: int
    year_count: int
    month_count: int
    week_count: int
    base_count: int
    by_month: List[int]
    by_weekday: List[int]
    top_ingredients: List[TopIngredient]
    year_rank: Optional[GlobalRank]
    favorite_ingredient_rank: Optional[GlobalRank]


@dataclass
class PublicProfile:
    """Another user's profile as seen by the viewer."""
    profile: ProfileRow
    email: Optional[str]
    friendship_status: str
    highlights: List[Highlight]
    pizzas_visible: bool
    pizzas: List[Pizza]
    total_pizzas: int
    page: int
    total_pages: int
    errors: List[str] = field(default_factory=list)


class ProfileService:
    """Service for profile operations."""

    @staticmethod
    def get_profile(db: Session, user_id: UUID) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.id == user_id).first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[Profile]:
        return db.query(Profile).filter(
            func.lower(Profile.username) == (username or "").strip().lower()
        ).first()

    @staticmethod
    def username_taken(db: Session, username: str, exclude_id: Optional[UUID] = None) -> bool:
        """Case-insensitive uniqueness check, ignoring the caller's own profile."""
        query = db.query(Profile).filter(func.lower(Profile.username) == username.lower())
        if exclude_id is not None:
            query = query.filter(Profile.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def _save(db: Session, profile: Profile) -> Tuple[Optional[Profile], Optional[str]]:
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            return None, USERNAME_TAKEN
        db.refresh(profile)
        return profile, None

    @staticmethod
    def complete_onboarding(
        db: Session,
        profile: Profile,
        username: str,
        display_name: Optional[str] = None,
    ) -> Tuple[Optional[Profile], Optional[str]]:
        """
        Pick a nickname and clear the onboarding flag.

        The display name defaults to the nickname.

        Returns:
            Tuple of (Profile object, error message). If successful, error is None.
        """
        username, error = validate_username(username)
        if error:
            return None, error

        if ProfileService.username_taken(db, username, exclude_id=profile.id):
            return None, USERNAME_TAKEN

        profile.username = username
        profile.display_name = (display_name or "").strip() or username
        profile.needs_onboarding = False

        saved, error = ProfileService._save(db, profile)
        if saved is not None:
            logger.info(f"User {profile.id} completed onboarding as {username}")
        return saved, error

    @staticmethod
    def update_profile(db: Session, profile: Profile, data: ProfileUpdate) -> Tuple[Optional[Profile], Optional[str]]:
        """Update nickname, display name and visibility settings."""
        if data.username is not None:
            username, error = validate_username(data.username)
            if error:
                return None, error
            if ProfileService.username_taken(db, username, exclude_id=profile.id):
                return None, USERNAME_TAKEN
            profile.username = username

        for value in (data.pizza_visibility, data.email_visibility):
            if value is not None and value not in Profile.VISIBILITY_VALUES:
                return None, f"Invalid visibility. Must be one of: {', '.join(Profile.VISIBILITY_VALUES)}"

        if data.display_name is not None:
            profile.display_name = data.display_name.strip() or profile.username
        if data.pizza_visibility is not None:
            profile.pizza_visibility = data.pizza_visibility
        if data.email_visibility is not None:
            profile.email_visibility = data.email_visibility

        return ProfileService._save(db, profile)

    @staticmethod
    def profile_stats(db: Session, user_id: UUID, year: int, today: Optional[date] = None) -> ProfileStats:
        """Totals, distributions, top ingredients and global ranks for a year."""
        if today is None:
            today = date.today()

        start, end = year_bounds(year)
        everyone = fetch_pizzas(db, start, end)
        mine = [p for p in everyone if p.user_id == user_id]

        month_start, month_end = RankingService.get_period_bounds(RankingService.PERIOD_MONTHLY, today)
        # Weeks on the profile page start on Sunday
        week_start, week_end = RankingService.get_period_bounds(
            RankingService.PERIOD_WEEKLY, today, week_starts_on=RankingService.SUNDAY
        )

        links = fetch_pizza_ingredients(db, start, end)
        favorites = ingredient_frequencies(links, user_id)
        top = [
            TopIngredient(
                ingredient_id=i.ingredient_id,
                name=i.name,
                count=i.count,
                emoji=i.emoji,
                percentage=percentage(i.count, len(mine)),
            )
            for i in favorites[:TOP_INGREDIENTS]
        ]

        favorite_rank = None
        if favorites:
            favorite_id = favorites[0].ingredient_id
            favorite_rank = global_rank((r.user_id for r in links if r.ingredient_id == favorite_id), user_id)

        return ProfileStats(
            year=year,
            year_count=len(mine),
            month_count=sum(1 for p in mine if month_start <= p.eaten_at < month_end),
            week_count=sum(1 for p in mine if week_start <= p.eaten_at < week_end),
            base_count=PizzaService.get_counter(db, user_id, year).base_count,
            by_month=month_distribution(p.eaten_at for p in mine),
            by_weekday=weekday_distribution(p.eaten_at for p in mine),
            top_ingredients=top,
            year_rank=global_rank((p.user_id for p in everyone), user_id),
            favorite_ingredient_rank=favorite_rank,
        )

    @staticmethod
    def can_see(db: Session, visibility: str, owner_id: UUID, viewer_id: Optional[UUID]) -> bool:
        """Apply a visibility setting of owner_id to a viewer (None when anonymous)."""
        if viewer_id is not None and viewer_id == owner_id:
            return True
        if visibility == Profile.VISIBILITY_EVERYONE:
            return True
        if viewer_id is None:
            return False
        if visibility == Profile.VISIBILITY_FRIENDS:
            return FriendshipService.are_friends(db, owner_id, viewer_id)
        if visibility == Profile.VISIBILITY_GROUPS:
            return GroupService.share_group(db, owner_id, viewer_id)
        return False

    @staticmethod
    def public_profile(
        db: Session,
        username: str,
        viewer_id: Optional[UUID],
        page: int = 0,
    ) -> Optional[PublicProfile]:
        """
        Build a user's public page.

        Returns:
            The page, or None if no profile has this username
        """
        profile = ProfileService.get_by_username(db, username)
        if profile is None:
            return None

        owner_id = profile.id
        status = FriendshipService.status_between(db, viewer_id, owner_id)
        errors = []

        email = None
        if ProfileService.can_see(db, profile.email_visibility, owner_id, viewer_id):
            user = db.query(User).filter(User.id == owner_id).first()
            email = user.email if user else None

        rankings, error = run_section(db, "highlights", lambda: RankingService.personal_rankings(db, owner_id))
        if error:
            errors.append(error)
        highlights = rankings.highlights if rankings is not None else []

        visible = ProfileService.can_see(db, profile.pizza_visibility, owner_id, viewer_id)
        pizzas: List[Pizza] = []
        total = 0
        page_size = settings.PUBLIC_PROFILE_PAGE_SIZE
        page = max(0, page)
        if visible:
            query = db.query(Pizza).filter(
                and_(Pizza.user_id == owner_id, Pizza.eaten_at.isnot(None))
            )
            total = query.count()
            pizzas = query.order_by(Pizza.eaten_at.desc(), Pizza.id.desc()).offset(
                page * page_size
            ).limit(page_size).all()

        return PublicProfile(
            profile=to_profile_row(profile),
            email=email,
            friendship_status=status,
            highlights=highlights,
            pizzas_visible=visible,
            pizzas=pizzas,
            total_pizzas=total,
            page=page,
            total_pages=ceil(total / page_size) if total else 0,
            errors=errors,
        )

