from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from api.domain.schemas import CommentCreate, LikeCreate, LikeDelete, PostCreate
from api.repositories.base import Storage
from api.routers.deps import get_storage

router = APIRouter(prefix="/api", tags=["social"])


@router.post("/posts", status_code=201)
def create_post(payload: PostCreate, storage: Storage = Depends(get_storage)):
    return storage.create_post(payload)


@router.get("/posts")
def list_posts(
    limit: int = Query(10, ge=0, le=100),
    offset: int = Query(0, ge=0),
    storage: Storage = Depends(get_storage),
):
    return storage.get_posts(limit, offset)


@router.post("/likes", status_code=201)
def add_like(payload: LikeCreate, storage: Storage = Depends(get_storage)):
    return storage.add_like(payload)


@router.delete("/likes", status_code=204)
def remove_like(payload: LikeDelete, storage: Storage = Depends(get_storage)):
    storage.remove_like(payload.user_id, payload.post_id)
    return Response(status_code=204)


@router.get("/posts/{post_id}/likes")
def post_likes(post_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_likes_by_post_id(post_id)


@router.post("/comments", status_code=201)
def add_comment(payload: CommentCreate, storage: Storage = Depends(get_storage)):
    return storage.add_comment(payload)


@router.get("/posts/{post_id}/comments")
def post_comments(post_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_comments_by_post_id(post_id)
