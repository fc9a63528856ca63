from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from typing import Optional

from activities import catalog
from auth import get_current_user
from dependencies import get_cache, get_store
from services.checkin_service import CheckinService
from services.snapshot_cache import SnapshotCache
from snapshot import strip_credentials
from stores.base import CheckinStore

router = APIRouter(prefix="/api/v1", tags=["Checkins"])


class CheckinRequest(BaseModel):
    activity: Optional[str] = None
    date: Optional[str] = None  # YYYY-MM-DD, defaults to today


@router.get("/activities")
async def list_activities():
    return {"status": "success", "data": catalog()}


@router.get("/checkins")
async def my_checkins(
    username: str = Depends(get_current_user),
    store: CheckinStore = Depends(get_store),
):
    return {"status": "success", "data": CheckinService.user_checkins(store, username)}


@router.post("/checkins")
async def add_checkin(
    body: CheckinRequest,
    username: str = Depends(get_current_user),
    store: CheckinStore = Depends(get_store),
    cache: SnapshotCache = Depends(get_cache),
):
    result = CheckinService.add(store, username, body.activity, body.date, cache)
    return {"status": "success", "data": result}


@router.delete("/checkins")
async def remove_checkin(
    body: CheckinRequest,
    username: str = Depends(get_current_user),
    store: CheckinStore = Depends(get_store),
    cache: SnapshotCache = Depends(get_cache),
):
    result = CheckinService.remove(store, username, body.activity, body.date, cache)
    return {"status": "success", "data": result}


@router.post("/checkins/toggle")
async def toggle_checkin(
    body: CheckinRequest,
    username: str = Depends(get_current_user),
    store: CheckinStore = Depends(get_store),
    cache: SnapshotCache = Depends(get_cache),
):
    result = CheckinService.toggle(store, username, body.activity, body.date, cache)
    return {"status": "success", "data": result}


@router.get("/checkins/today")
async def today_status(
    username: str = Depends(get_current_user),
    store: CheckinStore = Depends(get_store),
):
    return {"status": "success", "data": CheckinService.today_status(store, username)}


@router.get("/checkins/feed")
async def activity_feed(
    date: Optional[str] = None,
    username: str = Depends(get_current_user),
    store: CheckinStore = Depends(get_store),
):
    """Everyone who checked in on the day, the caller marked with is_you."""
    return {"status": "success", "data": CheckinService.feed(store, username, date)}


@router.get("/checkins/calendar")
async def calendar_month(
    year: int = Query(...),
    month: int = Query(...),
    username: str = Depends(get_current_user),
    store: CheckinStore = Depends(get_store),
):
    return {"status": "success", "data": CheckinService.calendar_month(store, username, year, month)}


@router.get("/users")
async def all_users(
    username: str = Depends(get_current_user),
    cache: SnapshotCache = Depends(get_cache),
):
    """Every user's check-in history, served from the read-through cache."""
    return {"status": "success", "data": strip_credentials(cache.get())}
