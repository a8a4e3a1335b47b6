"""Request dependencies shared by the routers."""
from __future__ import annotations

from dataclasses import asdict

from fastapi import Depends, Request

from api.core.config import Settings
from api.core.rate_limiter import rate_limit_ip
from api.domain.entities import User
from api.repositories.base import Storage
from api.services.auth_service import AuthService


def get_storage(request: Request) -> Storage:
    storage = getattr(getattr(request.app, "state", None), "storage", None)
    if storage is None:
        raise RuntimeError("Storage not configured")
    return storage


def get_app_settings(request: Request) -> Settings:
    settings = getattr(getattr(request.app, "state", None), "settings", None)
    if settings is None:
        raise RuntimeError("Settings not configured")
    return settings


def get_auth_service(storage: Storage = Depends(get_storage)) -> AuthService:
    return AuthService(storage)


def limit_auth_attempts(request: Request, settings: Settings = Depends(get_app_settings)) -> None:
    rate_limit_ip(
        request,
        f"auth:{request.url.path}",
        limit=settings.auth_rate_limit,
        window_seconds=settings.auth_rate_window_seconds,
    )


def public_user(user: User) -> dict:
    """Serialize a user without the password hash."""
    data = asdict(user)
    data.pop("password", None)
    return data
