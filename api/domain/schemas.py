"""Validated input payloads accepted by the routers and the stores."""
from __future__ import annotations

import json
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, max_length=255)
    profile_picture: Optional[str] = None
    daily_water_goal: Optional[int] = Field(None, gt=0, le=20000, description="Daily goal in ml")


class UserUpdate(BaseModel):
    """Partial update; only the fields present in the request are applied."""

    username: Optional[str] = Field(None, min_length=1, max_length=64)
    password: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    profile_picture: Optional[str] = None
    daily_water_goal: Optional[int] = Field(None, gt=0, le=20000)


class LoginRequest(BaseModel):
    username: str
    password: str


class WaterIntakeCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    amount: int = Field(..., gt=0, le=10000, description="Amount in ml")


class ActivityCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, description="run / ride / walk ...")
    distance: float = Field(..., ge=0, description="Distance in km")
    duration: int = Field(..., ge=0, description="Duration in seconds")
    elevation_gain: Optional[int] = Field(None, description="Elevation gain in metres")
    weather: Optional[str] = None
    temperature: Optional[float] = None
    is_public: Optional[bool] = None


class RouteCreate(BaseModel):
    activity_id: int = Field(..., gt=0)
    coordinates: Union[str, list] = Field(..., description="JSON array of points, or the list itself")

    @field_validator("coordinates")
    @classmethod
    def _encode_coordinates(cls, value):
        if isinstance(value, list):
            return json.dumps(value)
        try:
            decoded = json.loads(value)
        except ValueError as exc:
            raise ValueError("coordinates must be a JSON array") from exc
        if not isinstance(decoded, list):
            raise ValueError("coordinates must be a JSON array")
        return value


class PostCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    activity_id: Optional[int] = Field(None, gt=0)
    content: str = Field(..., min_length=1)
    image_path: Optional[str] = None


class LikeCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    post_id: int = Field(..., gt=0)


class LikeDelete(LikeCreate):
    """Body of DELETE /api/likes."""


class CommentCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    post_id: int = Field(..., gt=0)
    content: str = Field(..., min_length=1)
