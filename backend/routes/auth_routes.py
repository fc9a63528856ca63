from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional

from auth import create_user_token, get_current_user
from dependencies import get_cache, get_store
from services.checkin_service import CheckinService
from services.snapshot_cache import SnapshotCache
from stores.base import CheckinStore

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class AuthRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None  # client-side digest of the password, never the raw secret


# ── Routes ────────────────────────────────────────────────────────
@router.post("/login")
async def login(
    body: AuthRequest,
    store: CheckinStore = Depends(get_store),
    cache: SnapshotCache = Depends(get_cache),
):
    """Log in with username + password digest. Unknown usernames are registered."""
    result = CheckinService.login(store, body.username, body.password, cache)
    message = "User created and logged in" if result["created"] else "Login successful"
    return {
        "status": "success",
        "message": message,
        "data": {
            "token": create_user_token(result["username"]),
            "username": result["username"],
            "created": result["created"],
        },
    }


@router.get("/me")
async def me(username: str = Depends(get_current_user)):
    return {"status": "success", "data": {"username": username}}


@router.post("/logout")
async def logout(username: str = Depends(get_current_user)):
    """Logout - client should discard the token."""
    return {"status": "success", "data": {"message": "Logged out"}}
