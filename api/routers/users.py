from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from api.domain.schemas import LoginRequest, UserCreate, UserUpdate
from api.repositories.base import Storage
from api.routers.deps import get_auth_service, get_storage, limit_auth_attempts, public_user
from api.services.auth_service import AccountExistsError, AuthService, InvalidCredentialsError

router = APIRouter(prefix="/api", tags=["users"])


@router.post("/register", status_code=201, dependencies=[Depends(limit_auth_attempts)])
def register(payload: UserCreate, auth: AuthService = Depends(get_auth_service)):
    try:
        user = auth.register(payload)
    except AccountExistsError as exc:
        raise HTTPException(400, str(exc))
    return public_user(user)


@router.post("/login", dependencies=[Depends(limit_auth_attempts)])
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    try:
        user = auth.login(payload.username, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(401, str(exc))
    return public_user(user)


@router.get("/users/{user_id}")
def get_user(user_id: int, storage: Storage = Depends(get_storage)):
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(404, "User not found")
    return public_user(user)


@router.patch("/users/{user_id}")
def update_user(
    user_id: int,
    payload: UserUpdate,
    storage: Storage = Depends(get_storage),
    auth: AuthService = Depends(get_auth_service),
):
    if not storage.get_user(user_id):
        raise HTTPException(404, "User not found")
    try:
        user = auth.update_profile(user_id, payload.model_dump(exclude_unset=True))
    except AccountExistsError as exc:
        raise HTTPException(400, str(exc))
    if not user:
        raise HTTPException(404, "User not found")
    return public_user(user)


@router.get("/users/{user_id}/posts")
def user_posts(user_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_posts_by_user_id(user_id)
