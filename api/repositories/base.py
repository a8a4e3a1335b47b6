"""
Storage contract shared by every persistence backend.

Routers and services receive a Storage instance and never import a concrete
implementation, so MemoryStorage and SQLStorage can be swapped at startup.

Lookups that find nothing return None (or an empty list); they never raise.
Constraint violations are only possible on backends that enforce them and are
propagated unchanged.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Mapping, Optional

from api.domain.entities import (
    DEFAULT_DAILY_WATER_GOAL,
    USER_UPDATABLE_FIELDS,
    Activity,
    Comment,
    Like,
    Post,
    Route,
    User,
    WaterIntake,
)
from api.domain.schemas import (
    ActivityCreate,
    CommentCreate,
    LikeCreate,
    PostCreate,
    RouteCreate,
    UserCreate,
    WaterIntakeCreate,
)


class Storage(ABC):
    """Persistence operations available to the request handlers."""

    name = "abstract"

    # -------------------------- users --------------------------
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    def create_user(self, data: UserCreate) -> User:
        """Insert a user without checking username uniqueness first."""

    @abstractmethod
    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        """Apply a partial update; returns None when the user does not exist."""

    # -------------------------- water intake --------------------------
    @abstractmethod
    def add_water_intake(self, data: WaterIntakeCreate) -> WaterIntake:
        ...

    @abstractmethod
    def get_water_intake_by_user_id(self, user_id: int) -> list[WaterIntake]:
        """Newest first."""

    @abstractmethod
    def get_water_intake_by_user_id_and_date(self, user_id: int, day: date | datetime) -> list[WaterIntake]:
        """Records inside the local calendar day, oldest first."""

    # -------------------------- activities --------------------------
    @abstractmethod
    def create_activity(self, data: ActivityCreate) -> Activity:
        ...

    @abstractmethod
    def get_activity_by_id(self, activity_id: int) -> Optional[Activity]:
        ...

    @abstractmethod
    def get_activities_by_user_id(self, user_id: int) -> list[Activity]:
        """Newest first."""

    @abstractmethod
    def get_recent_activities(self, limit: int) -> list[Activity]:
        """Up to ``limit`` public activities, newest first."""

    @abstractmethod
    def get_public_activities_nearby(self, lat: float, lng: float, radius_km: float) -> list[Activity]:
        """
        Stub: location is not indexed, so the coordinates and radius are
        ignored and the most recent public activities are returned instead.
        """

    # -------------------------- routes --------------------------
    @abstractmethod
    def save_route(self, data: RouteCreate) -> Route:
        ...

    @abstractmethod
    def get_route_by_activity_id(self, activity_id: int) -> Optional[Route]:
        """First matching route, if any."""

    # -------------------------- social --------------------------
    @abstractmethod
    def create_post(self, data: PostCreate) -> Post:
        ...

    @abstractmethod
    def get_posts(self, limit: int, offset: int) -> list[Post]:
        """Window [offset, offset + limit) of all posts, newest first."""

    @abstractmethod
    def get_posts_by_user_id(self, user_id: int) -> list[Post]:
        """Newest first."""

    @abstractmethod
    def add_like(self, data: LikeCreate) -> Like:
        """Return the existing like for (user, post) or create it."""

    @abstractmethod
    def remove_like(self, user_id: int, post_id: int) -> None:
        """No-op when the like does not exist."""

    @abstractmethod
    def get_likes_by_post_id(self, post_id: int) -> list[Like]:
        ...

    @abstractmethod
    def add_comment(self, data: CommentCreate) -> Comment:
        ...

    @abstractmethod
    def get_comments_by_post_id(self, post_id: int) -> list[Comment]:
        """Oldest first."""


# -------------------------- insert defaults --------------------------
def user_fields(data: UserCreate) -> dict:
    return {
        "username": data.username,
        "password": data.password,
        "email": data.email,
        "profile_picture": data.profile_picture or None,
        "daily_water_goal": data.daily_water_goal or DEFAULT_DAILY_WATER_GOAL,
    }


def user_changes(changes: Mapping[str, Any]) -> dict:
    """Keep only the columns a partial update may touch."""
    values = {key: value for key, value in changes.items() if key in USER_UPDATABLE_FIELDS}
    if "profile_picture" in values:
        values["profile_picture"] = values["profile_picture"] or None
    return values


def activity_fields(data: ActivityCreate) -> dict:
    return {
        "user_id": data.user_id,
        "title": data.title,
        "type": data.type,
        "distance": data.distance,
        "duration": data.duration,
        "elevation_gain": data.elevation_gain,
        "weather": data.weather or None,
        "temperature": data.temperature,
        "is_public": True if data.is_public is None else data.is_public,
    }


def post_fields(data: PostCreate) -> dict:
    return {
        "user_id": data.user_id,
        "activity_id": data.activity_id or None,
        "content": data.content,
        "image_path": data.image_path or None,
    }
