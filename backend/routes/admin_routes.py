import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from auth import check_admin_password, create_admin_token, require_admin
from dependencies import get_cache, get_store
from services.admin_service import AdminService
from services.checkin_service import CheckinService
from services.snapshot_cache import SnapshotCache
from stores.base import CheckinStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


class AdminLoginRequest(BaseModel):
    password: str = ""


@router.post("/login")
async def admin_login(body: AdminLoginRequest):
    """Open the admin panel with the shared admin secret."""
    if not check_admin_password(body.password):
        logger.warning("Rejected admin login")
        raise HTTPException(status_code=401, detail="Incorrect password. Please try again.")
    return {"status": "success", "data": {"token": create_admin_token()}}


@router.get("/stats")
async def stats(
    admin: dict = Depends(require_admin),
    store: CheckinStore = Depends(get_store),
    cache: SnapshotCache = Depends(get_cache),
):
    data = AdminService.stats(store)
    data["cache"] = cache.stats()
    return {"status": "success", "data": data}


@router.get("/users")
async def list_users(admin: dict = Depends(require_admin), store: CheckinStore = Depends(get_store)):
    return {"status": "success", "data": AdminService.list_users(store)}


@router.get("/users/{username}")
async def user_detail(
    username: str,
    admin: dict = Depends(require_admin),
    store: CheckinStore = Depends(get_store),
):
    return {"status": "success", "data": AdminService.user_detail(store, username)}


@router.delete("/users/{username}")
async def delete_user(
    username: str,
    admin: dict = Depends(require_admin),
    store: CheckinStore = Depends(get_store),
    cache: SnapshotCache = Depends(get_cache),
):
    AdminService.delete_user(store, username, cache)
    return {"status": "success", "message": f'User "{username}" has been deleted.'}


@router.get("/export")
async def export_data(admin: dict = Depends(require_admin), store: CheckinStore = Depends(get_store)):
    """The raw snapshot, served as a download that /import accepts unchanged."""
    filename = f"checkin-data-{CheckinService.today()}.json"
    return JSONResponse(
        content=AdminService.export(store),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_data(
    data: Any = Body(...),
    admin: dict = Depends(require_admin),
    store: CheckinStore = Depends(get_store),
    cache: SnapshotCache = Depends(get_cache),
):
    """Replace ALL data with the uploaded snapshot."""
    summary = AdminService.import_data(store, data, cache)
    return {"status": "success", "message": "Data imported successfully!", "data": summary}


@router.post("/clear")
async def clear_all(
    admin: dict = Depends(require_admin),
    store: CheckinStore = Depends(get_store),
    cache: SnapshotCache = Depends(get_cache),
):
    AdminService.clear_all(store, cache)
    return {"status": "success", "message": "All data has been cleared."}
