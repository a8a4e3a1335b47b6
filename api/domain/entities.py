"""
Persisted records handed out by every Storage implementation.

Records are frozen dataclasses: both stores return plain values detached from
any session, so callers can compare results across backends and cannot mutate
stored state by accident. Timestamps are naive datetimes in local server time.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

DEFAULT_DAILY_WATER_GOAL = 2000
NEARBY_ACTIVITY_LIMIT = 10
END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class User:
    id: int
    username: str
    password: str
    email: str
    profile_picture: Optional[str] = None
    daily_water_goal: Optional[int] = DEFAULT_DAILY_WATER_GOAL


@dataclass(frozen=True)
class WaterIntake:
    id: int
    user_id: int
    amount: int
    timestamp: datetime


@dataclass(frozen=True)
class Activity:
    id: int
    user_id: int
    title: str
    type: str
    distance: float
    duration: int
    timestamp: datetime
    elevation_gain: Optional[int] = None
    weather: Optional[str] = None
    temperature: Optional[float] = None
    is_public: bool = True


@dataclass(frozen=True)
class Route:
    id: int
    activity_id: int
    coordinates: str


@dataclass(frozen=True)
class Post:
    id: int
    user_id: int
    content: str
    timestamp: datetime
    activity_id: Optional[int] = None
    image_path: Optional[str] = None


@dataclass(frozen=True)
class Like:
    id: int
    user_id: int
    post_id: int


@dataclass(frozen=True)
class Comment:
    id: int
    user_id: int
    post_id: int
    content: str
    timestamp: datetime


# Fields a partial user update may touch.
USER_UPDATABLE_FIELDS = frozenset({"username", "password", "email", "profile_picture", "daily_water_goal"})


def day_bounds(day: date | datetime) -> tuple[datetime, datetime]:
    """Return the inclusive [00:00:00.000, 23:59:59.999] window of a calendar day."""
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, time.min), datetime.combine(day, END_OF_DAY)
