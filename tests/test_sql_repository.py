"""
Smoke tests for the SQLStorage against a temporary SQLite database.
"""
from __future__ import annotations

from dataclasses import replace

import pytest
from sqlalchemy.exc import IntegrityError

from api.db import models
from api.db.create_tables import create_all
from api.db.session import get_sessionmaker, make_engine, make_sessionmaker
from api.domain.schemas import (
    ActivityCreate,
    CommentCreate,
    LikeCreate,
    PostCreate,
    RouteCreate,
    UserCreate,
    WaterIntakeCreate,
)
from api.repositories import build_storage
from api.repositories.sql_repository import SQLStorage


def test_duplicate_username_violates_constraint(sql_store):
    sql_store.create_user(UserCreate(username="dup", password="x", email="a@example.com"))
    with pytest.raises(IntegrityError):
        sql_store.create_user(UserCreate(username="dup", password="y", email="b@example.com"))
    # the failed insert left nothing behind
    assert sql_store.get_user_by_username("dup").email == "a@example.com"


def test_likes_table_rejects_duplicate_pairs(sql_store):
    user = sql_store.create_user(UserCreate(username="alice", password="x", email="a@example.com"))
    post = sql_store.create_post(PostCreate(user_id=user.id, content="hello"))
    like = sql_store.add_like(LikeCreate(user_id=user.id, post_id=post.id))

    with get_sessionmaker()() as session:
        session.add(models.Like(user_id=user.id, post_id=post.id))
        with pytest.raises(IntegrityError):
            session.commit()

    assert sql_store.get_likes_by_post_id(post.id) == [like]


def test_add_like_returns_row_inserted_concurrently(sql_store, monkeypatch):
    user = sql_store.create_user(UserCreate(username="alice", password="x", email="a@example.com"))
    post = sql_store.create_post(PostCreate(user_id=user.id, content="hello"))
    winner = sql_store.add_like(LikeCreate(user_id=user.id, post_id=post.id))

    # the pre-insert read misses, as if another request inserted in between
    original = SQLStorage._find_like
    calls = []

    def racing_find(session, user_id, post_id):
        calls.append((user_id, post_id))
        if len(calls) == 1:
            return None
        return original(session, user_id, post_id)

    monkeypatch.setattr(SQLStorage, "_find_like", staticmethod(racing_find))
    loser = sql_store.add_like(LikeCreate(user_id=user.id, post_id=post.id))
    assert len(calls) == 2
    assert loser == winner
    assert sql_store.get_likes_by_post_id(post.id) == [winner]


@pytest.mark.parametrize(
    "insert",
    [
        lambda s: s.add_water_intake(WaterIntakeCreate(user_id=404, amount=100)),
        lambda s: s.create_activity(
            ActivityCreate(user_id=404, title="Run", type="run", distance=1.0, duration=60)
        ),
        lambda s: s.save_route(RouteCreate(activity_id=404, coordinates="[]")),
        lambda s: s.create_post(PostCreate(user_id=404, content="hello")),
        lambda s: s.add_like(LikeCreate(user_id=7, post_id=9)),
        lambda s: s.add_comment(CommentCreate(user_id=404, post_id=404, content="hi")),
    ],
    ids=["water_intake", "activity", "route", "post", "like", "comment"],
)
def test_rows_for_unknown_parents_violate_foreign_keys(sql_store, insert):
    with pytest.raises(IntegrityError):
        insert(sql_store)
    assert sql_store.get_posts(10, 0) == []
    assert sql_store.get_likes_by_post_id(9) == []


def test_like_for_unknown_post_is_rejected(sql_store):
    user = sql_store.create_user(UserCreate(username="alice", password="x", email="a@example.com"))
    with pytest.raises(IntegrityError):
        sql_store.add_like(LikeCreate(user_id=user.id, post_id=9))
    assert sql_store.get_likes_by_post_id(9) == []


def test_update_user_without_changes_returns_current_row(sql_store):
    user = sql_store.create_user(UserCreate(username="alice", password="x", email="a@example.com"))
    assert sql_store.update_user(user.id, {}) == user


def test_build_storage_creates_schema(temp_db, test_settings):
    settings = replace(test_settings, storage_backend="sql")
    storage = build_storage(settings)
    assert isinstance(storage, SQLStorage)
    created = storage.create_user(UserCreate(username="alice", password="x", email="a@example.com"))
    assert storage.get_user(created.id) == created


def test_build_storage_rejects_unknown_backend(test_settings):
    settings = replace(test_settings, storage_backend="redis")
    with pytest.raises(ValueError):
        build_storage(settings)


def test_storage_with_its_own_engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'isolated.db'}")
    try:
        create_all(engine)
        create_all(engine)  # idempotent
        storage = SQLStorage(make_sessionmaker(engine))
        user = storage.create_user(UserCreate(username="solo", password="x", email="s@example.com"))
        assert user.id == 1
        assert storage.get_user_by_username("solo") == user
        with engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
    finally:
        engine.dispose()


def test_missing_database_url_is_reported():
    with pytest.raises(RuntimeError):
        make_engine("  ")
