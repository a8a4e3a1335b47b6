"""
The same scripted session must produce identical results on both backends.
"""
from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime

import pytest
from sqlalchemy.exc import IntegrityError

from api.domain.schemas import (
    ActivityCreate,
    CommentCreate,
    LikeCreate,
    PostCreate,
    RouteCreate,
    UserCreate,
    WaterIntakeCreate,
)
from api.repositories.memory_storage import MemoryStorage
from api.repositories.sql_repository import SQLStorage

from conftest import FakeClock


def _script(store):
    alice = store.create_user(UserCreate(username="alice", password="h1", email="alice@example.com"))
    bob = store.create_user(UserCreate(username="bob", password="h2", email="bob@example.com", daily_water_goal=3000))
    store.update_user(bob.id, {"profile_picture": "bob.png"})
    for amount in (250, 500, 330):
        store.add_water_intake(WaterIntakeCreate(user_id=alice.id, amount=amount))
    run = store.create_activity(
        ActivityCreate(user_id=alice.id, title="Run", type="run", distance=10.5, duration=3600, weather="sunny")
    )
    store.create_activity(
        ActivityCreate(user_id=bob.id, title="Ride", type="ride", distance=40.0, duration=5400, is_public=False)
    )
    store.save_route(RouteCreate(activity_id=run.id, coordinates=[[1.0, 2.0], [1.5, 2.5]]))
    post = store.create_post(PostCreate(user_id=alice.id, activity_id=run.id, content="10k done"))
    store.create_post(PostCreate(user_id=bob.id, content="rest day"))
    store.add_like(LikeCreate(user_id=bob.id, post_id=post.id))
    store.add_like(LikeCreate(user_id=bob.id, post_id=post.id))
    store.add_like(LikeCreate(user_id=alice.id, post_id=post.id))
    store.remove_like(alice.id, post.id)
    store.add_comment(CommentCreate(user_id=bob.id, post_id=post.id, content="nice"))
    store.add_comment(CommentCreate(user_id=alice.id, post_id=post.id, content="thanks"))

    def dump(rows):
        return [asdict(r) for r in rows]

    return {
        "users": [asdict(store.get_user(alice.id)), asdict(store.get_user(bob.id))],
        "water": dump(store.get_water_intake_by_user_id(alice.id)),
        "water_day": dump(store.get_water_intake_by_user_id_and_date(alice.id, date(2024, 3, 10))),
        "activities": dump(store.get_activities_by_user_id(alice.id)),
        "recent": dump(store.get_recent_activities(5)),
        "nearby": dump(store.get_public_activities_nearby(0.0, 0.0, 1.0)),
        "route": asdict(store.get_route_by_activity_id(run.id)),
        "posts": dump(store.get_posts(10, 0)),
        "user_posts": dump(store.get_posts_by_user_id(bob.id)),
        "likes": sorted(dump(store.get_likes_by_post_id(post.id)), key=lambda r: r["id"]),
        "comments": dump(store.get_comments_by_post_id(post.id)),
    }


def test_backends_produce_identical_results(temp_db):
    start = datetime(2024, 3, 10, 9, 30)
    memory = _script(MemoryStorage(seed=False, clock=FakeClock(start)))
    sql = _script(SQLStorage(clock=FakeClock(start)))
    assert memory == sql
    assert len(memory["water_day"]) == 3
    assert [c["content"] for c in memory["comments"]] == ["nice", "thanks"]


def test_username_uniqueness_is_only_enforced_by_sql(memory_store, sql_store):
    for store in (memory_store, sql_store):
        store.create_user(UserCreate(username="dup", password="x", email="a@example.com"))

    memory_store.create_user(UserCreate(username="dup", password="y", email="b@example.com"))
    with pytest.raises(IntegrityError):
        sql_store.create_user(UserCreate(username="dup", password="y", email="b@example.com"))


def test_foreign_keys_are_only_enforced_by_sql(memory_store, sql_store):
    orphan = WaterIntakeCreate(user_id=404, amount=100)
    assert memory_store.add_water_intake(orphan).user_id == 404
    with pytest.raises(IntegrityError):
        sql_store.add_water_intake(orphan)
    assert sql_store.get_water_intake_by_user_id(404) == []

    assert memory_store.add_like(LikeCreate(user_id=7, post_id=9)).post_id == 9
    with pytest.raises(IntegrityError):
        sql_store.add_like(LikeCreate(user_id=7, post_id=9))
