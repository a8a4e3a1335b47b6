"""Storage implementation backed by SQLAlchemy."""
from __future__ import annotations

import logging
from dataclasses import fields
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, TypeVar

from sqlalchemy import and_, asc, delete, desc, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from api.db import models
from api.db.session import get_sessionmaker
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

T = TypeVar("T")


def _detach(row: Any, entity_cls: type[T]) -> T:
    """Copy an ORM row into its frozen domain record."""
    return entity_cls(**{f.name: getattr(row, f.name) for f in fields(entity_cls)})


class SQLStorage(Storage):
    """CRUD helpers wrapping SQLAlchemy sessions; engine errors propagate unchanged."""

    name = "sql"

    def __init__(
        self,
        session_factory: sessionmaker | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def _session(self):
        factory = self._session_factory or get_sessionmaker()
        return factory()

    def _add(self, entity: Any, entity_cls: type[T]) -> T:
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            logger.debug("sql: inserted %s id=%s", entity.__tablename__, entity.id)
            return _detach(entity, entity_cls)

    def _one(self, stmt, entity_cls: type[T]) -> Optional[T]:
        with self._session() as session:
            row = session.execute(stmt).scalars().first()
            return _detach(row, entity_cls) if row is not None else None

    def _all(self, stmt, entity_cls: type[T]) -> list[T]:
        with self._session() as session:
            return [_detach(row, entity_cls) for row in session.execute(stmt).scalars().all()]

    # -------------------------- users --------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        with self._session() as session:
            row = session.get(models.User, user_id)
            return _detach(row, User) if row else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._one(select(models.User).where(models.User.username == username), User)

    def create_user(self, data: UserCreate) -> User:
        return self._add(models.User(**user_fields(data)), User)

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        values = user_changes(changes)
        with self._session() as session:
            if values:
                session.execute(update(models.User).where(models.User.id == user_id).values(**values))
                session.commit()
            row = session.get(models.User, user_id)
            return _detach(row, User) if row else None

    # -------------------------- water intake --------------------------
    def add_water_intake(self, data: WaterIntakeCreate) -> WaterIntake:
        entity = models.WaterIntake(user_id=data.user_id, amount=data.amount, timestamp=self._clock())
        return self._add(entity, WaterIntake)

    def get_water_intake_by_user_id(self, user_id: int) -> list[WaterIntake]:
        stmt = (
            select(models.WaterIntake)
            .where(models.WaterIntake.user_id == user_id)
            .order_by(desc(models.WaterIntake.timestamp), desc(models.WaterIntake.id))
        )
        return self._all(stmt, WaterIntake)

    def get_water_intake_by_user_id_and_date(self, user_id: int, day: date | datetime) -> list[WaterIntake]:
        start, end = day_bounds(day)
        stmt = (
            select(models.WaterIntake)
            .where(
                and_(
                    models.WaterIntake.user_id == user_id,
                    models.WaterIntake.timestamp >= start,
                    models.WaterIntake.timestamp <= end,
                )
            )
            .order_by(asc(models.WaterIntake.timestamp), asc(models.WaterIntake.id))
        )
        return self._all(stmt, WaterIntake)

    # -------------------------- activities --------------------------
    def create_activity(self, data: ActivityCreate) -> Activity:
        entity = models.Activity(timestamp=self._clock(), **activity_fields(data))
        return self._add(entity, Activity)

    def get_activity_by_id(self, activity_id: int) -> Optional[Activity]:
        with self._session() as session:
            row = session.get(models.Activity, activity_id)
            return _detach(row, Activity) if row else None

    def get_activities_by_user_id(self, user_id: int) -> list[Activity]:
        stmt = (
            select(models.Activity)
            .where(models.Activity.user_id == user_id)
            .order_by(desc(models.Activity.timestamp), desc(models.Activity.id))
        )
        return self._all(stmt, Activity)

    def get_recent_activities(self, limit: int) -> list[Activity]:
        stmt = (
            select(models.Activity)
            .where(models.Activity.is_public.is_(True))
            .order_by(desc(models.Activity.timestamp), desc(models.Activity.id))
            .limit(max(limit, 0))
        )
        return self._all(stmt, Activity)

    def get_public_activities_nearby(self, lat: float, lng: float, radius_km: float) -> list[Activity]:
        logger.debug("nearby search is a stub; ignoring lat=%s lng=%s radius_km=%s", lat, lng, radius_km)
        return self.get_recent_activities(NEARBY_ACTIVITY_LIMIT)

    # -------------------------- routes --------------------------
    def save_route(self, data: RouteCreate) -> Route:
        return self._add(models.Route(activity_id=data.activity_id, coordinates=data.coordinates), Route)

    def get_route_by_activity_id(self, activity_id: int) -> Optional[Route]:
        stmt = (
            select(models.Route)
            .where(models.Route.activity_id == activity_id)
            .order_by(asc(models.Route.id))
        )
        return self._one(stmt, Route)

    # -------------------------- social --------------------------
    def create_post(self, data: PostCreate) -> Post:
        return self._add(models.Post(timestamp=self._clock(), **post_fields(data)), Post)

    def get_posts(self, limit: int, offset: int) -> list[Post]:
        stmt = (
            select(models.Post)
            .order_by(desc(models.Post.timestamp), desc(models.Post.id))
            .limit(max(limit, 0))
            .offset(max(offset, 0))
        )
        return self._all(stmt, Post)

    def get_posts_by_user_id(self, user_id: int) -> list[Post]:
        stmt = (
            select(models.Post)
            .where(models.Post.user_id == user_id)
            .order_by(desc(models.Post.timestamp), desc(models.Post.id))
        )
        return self._all(stmt, Post)

    @staticmethod
    def _find_like(session, user_id: int, post_id: int) -> Optional[models.Like]:
        stmt = select(models.Like).where(and_(models.Like.user_id == user_id, models.Like.post_id == post_id))
        return session.execute(stmt).scalars().first()

    def add_like(self, data: LikeCreate) -> Like:
        with self._session() as session:
            existing = self._find_like(session, data.user_id, data.post_id)
            if existing:
                return _detach(existing, Like)
            entity = models.Like(user_id=data.user_id, post_id=data.post_id)
            session.add(entity)
            try:
                session.commit()
            except IntegrityError:
                # a concurrent request inserted the same pair first
                session.rollback()
                existing = self._find_like(session, data.user_id, data.post_id)
                if existing is None:
                    raise
                return _detach(existing, Like)
            session.refresh(entity)
            return _detach(entity, Like)

    def remove_like(self, user_id: int, post_id: int) -> None:
        with self._session() as session:
            session.execute(
                delete(models.Like).where(and_(models.Like.user_id == user_id, models.Like.post_id == post_id))
            )
            session.commit()

    def get_likes_by_post_id(self, post_id: int) -> list[Like]:
        return self._all(select(models.Like).where(models.Like.post_id == post_id), Like)

    def add_comment(self, data: CommentCreate) -> Comment:
        entity = models.Comment(
            user_id=data.user_id,
            post_id=data.post_id,
            content=data.content,
            timestamp=self._clock(),
        )
        return self._add(entity, Comment)

    def get_comments_by_post_id(self, post_id: int) -> list[Comment]:
        stmt = (
            select(models.Comment)
            .where(models.Comment.post_id == post_id)
            .order_by(asc(models.Comment.timestamp), asc(models.Comment.id))
        )
        return self._all(stmt, Comment)
