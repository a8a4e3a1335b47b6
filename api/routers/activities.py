from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from api.domain.schemas import ActivityCreate, RouteCreate
from api.repositories.base import Storage
from api.routers.deps import get_storage

router = APIRouter(prefix="/api", tags=["activities"])


@router.post("/activities", status_code=201)
def create_activity(payload: ActivityCreate, storage: Storage = Depends(get_storage)):
    return storage.create_activity(payload)


@router.post("/routes", status_code=201)
def save_route(payload: RouteCreate, storage: Storage = Depends(get_storage)):
    return storage.save_route(payload)


# fixed paths must be declared before /activities/{activity_id}
@router.get("/activities/nearby")
def nearby_activities(
    lat: float = Query(...),
    lng: float = Query(...),
    radius: float = Query(5, description="Radius in km (currently ignored)"),
    storage: Storage = Depends(get_storage),
):
    return storage.get_public_activities_nearby(lat, lng, radius)


@router.get("/activities/recent")
def recent_activities(limit: int = Query(10, ge=0, le=100), storage: Storage = Depends(get_storage)):
    return storage.get_recent_activities(limit)


@router.get("/activities/{activity_id}")
def get_activity(activity_id: int, storage: Storage = Depends(get_storage)):
    activity = storage.get_activity_by_id(activity_id)
    if not activity:
        raise HTTPException(404, "Activity not found")
    return {"activity": activity, "route": storage.get_route_by_activity_id(activity_id)}


@router.get("/users/{user_id}/activities")
def user_activities(user_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_activities_by_user_id(user_id)
