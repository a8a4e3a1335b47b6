from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.domain.schemas import WaterIntakeCreate
from api.repositories.base import Storage
from api.routers.deps import get_storage

router = APIRouter(prefix="/api", tags=["water"])


@router.post("/water-intake", status_code=201)
def add_water_intake(payload: WaterIntakeCreate, storage: Storage = Depends(get_storage)):
    return storage.add_water_intake(payload)


@router.get("/users/{user_id}/water-intake")
def list_water_intake(
    user_id: int,
    day: Optional[dt.date] = Query(None, alias="date", description="Calendar day, YYYY-MM-DD"),
    storage: Storage = Depends(get_storage),
):
    if day is not None:
        return storage.get_water_intake_by_user_id_and_date(user_id, day)
    return storage.get_water_intake_by_user_id(user_id)
