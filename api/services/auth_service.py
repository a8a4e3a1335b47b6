"""
Registration, login and profile updates.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from api.core.security import hash_password, verify_password
from api.domain.entities import User
from api.domain.schemas import UserCreate
from api.repositories.base import Storage

logger = logging.getLogger(__name__)

# Columns that cannot be cleared by a partial update.
_REQUIRED_FIELDS = ("username", "password", "email")


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class AuthService:
    """Handles registration, login and password changes on top of a Storage."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def register(self, data: UserCreate) -> User:
        # the relational store still rejects a concurrent duplicate with IntegrityError
        if self.storage.get_user_by_username(data.username):
            raise AccountExistsError("Username already exists")
        user = self.storage.create_user(data.model_copy(update={"password": hash_password(data.password)}))
        logger.info("registered user id=%s", user.id)
        return user

    def login(self, username: str, password: str) -> User:
        user = self.storage.get_user_by_username(username)
        if not user or not verify_password(password, user.password):
            logger.warning("failed login for username=%r", username)
            raise InvalidCredentialsError("Invalid credentials")
        return user

    def update_profile(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        values = {k: v for k, v in changes.items() if not (k in _REQUIRED_FIELDS and v is None)}
        if values.get("password"):
            values["password"] = hash_password(values["password"])
        username = values.get("username")
        if username:
            owner = self.storage.get_user_by_username(username)
            if owner and owner.id != user_id:
                raise AccountExistsError("Username already exists")
        return self.storage.update_user(user_id, values)
