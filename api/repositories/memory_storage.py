"""
In-memory Storage backed by one dict per entity.

Ids come from a per-entity counter starting at 1 and are never reused, even
after a like is removed. Every query is a full scan, which is fine for
development and tests but not for production volumes.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional

from api.core.security import hash_password
from api.domain.entities import (
    NEARBY_ACTIVITY_LIMIT,
    Activity,
    Comment,
    Like,
    Post,
    Route,
    User,
    WaterIntake,
    day_bounds,
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
from api.repositories.base import Storage, activity_fields, post_fields, user_changes, user_fields

logger = logging.getLogger(__name__)

_TABLES = ("users", "water_intake", "activities", "routes", "posts", "likes", "comments")

# Development fixture created on construction when seeding is enabled.
SEED_USER = UserCreate(
    username="testuser",
    password="password",
    email="test@example.com",
    profile_picture="",
    daily_water_goal=2000,
)


def _newest_first(rows):
    return sorted(rows, key=lambda r: (r.timestamp, r.id), reverse=True)


def _oldest_first(rows):
    return sorted(rows, key=lambda r: (r.timestamp, r.id))


class MemoryStorage(Storage):
    """Process-local store for development and tests."""

    name = "memory"

    def __init__(self, *, seed: bool = True, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._rows: dict[str, dict[int, Any]] = {table: {} for table in _TABLES}
        self._counters: dict[str, int] = {table: 1 for table in _TABLES}
        if seed:
            self.create_user(SEED_USER.model_copy(update={"password": hash_password(SEED_USER.password)}))

    def _insert(self, table: str, factory: Callable[[int], Any]):
        with self._lock:
            row_id = self._counters[table]
            self._counters[table] = row_id + 1
            row = factory(row_id)
            self._rows[table][row_id] = row
        logger.debug("memory: inserted %s id=%s", table, row_id)
        return row

    def _scan(self, table: str, predicate: Callable[[Any], bool] = lambda _row: True) -> list:
        return [row for row in list(self._rows[table].values()) if predicate(row)]

    # -------------------------- users --------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        return self._rows["users"].get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return next(iter(self._scan("users", lambda u: u.username == username)), None)

    def create_user(self, data: UserCreate) -> User:
        fields = user_fields(data)
        return self._insert("users", lambda row_id: User(id=row_id, **fields))

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        with self._lock:
            user = self._rows["users"].get(user_id)
            if not user:
                return None
            updated = replace(user, **user_changes(changes))
            self._rows["users"][user_id] = updated
            return updated

    # -------------------------- water intake --------------------------
    def add_water_intake(self, data: WaterIntakeCreate) -> WaterIntake:
        now = self._clock()
        return self._insert(
            "water_intake",
            lambda row_id: WaterIntake(id=row_id, user_id=data.user_id, amount=data.amount, timestamp=now),
        )

    def get_water_intake_by_user_id(self, user_id: int) -> list[WaterIntake]:
        return _newest_first(self._scan("water_intake", lambda w: w.user_id == user_id))

    def get_water_intake_by_user_id_and_date(self, user_id: int, day: date | datetime) -> list[WaterIntake]:
        start, end = day_bounds(day)
        rows = self._scan("water_intake", lambda w: w.user_id == user_id and start <= w.timestamp <= end)
        return _oldest_first(rows)

    # -------------------------- activities --------------------------
    def create_activity(self, data: ActivityCreate) -> Activity:
        fields = activity_fields(data)
        now = self._clock()
        return self._insert("activities", lambda row_id: Activity(id=row_id, timestamp=now, **fields))

    def get_activity_by_id(self, activity_id: int) -> Optional[Activity]:
        return self._rows["activities"].get(activity_id)

    def get_activities_by_user_id(self, user_id: int) -> list[Activity]:
        return _newest_first(self._scan("activities", lambda a: a.user_id == user_id))

    def get_recent_activities(self, limit: int) -> list[Activity]:
        return _newest_first(self._scan("activities", lambda a: a.is_public))[: max(limit, 0)]

    def get_public_activities_nearby(self, lat: float, lng: float, radius_km: float) -> list[Activity]:
        logger.debug("nearby search is a stub; ignoring lat=%s lng=%s radius_km=%s", lat, lng, radius_km)
        return self.get_recent_activities(NEARBY_ACTIVITY_LIMIT)

    # -------------------------- routes --------------------------
    def save_route(self, data: RouteCreate) -> Route:
        return self._insert(
            "routes",
            lambda row_id: Route(id=row_id, activity_id=data.activity_id, coordinates=data.coordinates),
        )

    def get_route_by_activity_id(self, activity_id: int) -> Optional[Route]:
        matches = sorted(self._scan("routes", lambda r: r.activity_id == activity_id), key=lambda r: r.id)
        return matches[0] if matches else None

    # -------------------------- social --------------------------
    def create_post(self, data: PostCreate) -> Post:
        fields = post_fields(data)
        now = self._clock()
        return self._insert("posts", lambda row_id: Post(id=row_id, timestamp=now, **fields))

    def get_posts(self, limit: int, offset: int) -> list[Post]:
        offset = max(offset, 0)
        return _newest_first(self._scan("posts"))[offset : offset + max(limit, 0)]

    def get_posts_by_user_id(self, user_id: int) -> list[Post]:
        return _newest_first(self._scan("posts", lambda p: p.user_id == user_id))

    def _find_like(self, user_id: int, post_id: int) -> Optional[Like]:
        return next(iter(self._scan("likes", lambda l: l.user_id == user_id and l.post_id == post_id)), None)

    def add_like(self, data: LikeCreate) -> Like:
        # check and insert under one lock so concurrent requests cannot both insert
        with self._lock:
            existing = self._find_like(data.user_id, data.post_id)
            if existing:
                return existing
            return self._insert("likes", lambda row_id: Like(id=row_id, user_id=data.user_id, post_id=data.post_id))

    def remove_like(self, user_id: int, post_id: int) -> None:
        with self._lock:
            like = self._find_like(user_id, post_id)
            if like:
                del self._rows["likes"][like.id]

    def get_likes_by_post_id(self, post_id: int) -> list[Like]:
        return self._scan("likes", lambda l: l.post_id == post_id)

    def add_comment(self, data: CommentCreate) -> Comment:
        now = self._clock()
        return self._insert(
            "comments",
            lambda row_id: Comment(
                id=row_id, user_id=data.user_id, post_id=data.post_id, content=data.content, timestamp=now
            ),
        )

    def get_comments_by_post_id(self, post_id: int) -> list[Comment]:
        return _oldest_first(self._scan("comments", lambda c: c.post_id == post_id))
