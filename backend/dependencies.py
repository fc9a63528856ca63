from fastapi import Request

from services.snapshot_cache import SnapshotCache
from stores.base import CheckinStore


def get_store(request: Request) -> CheckinStore:
    """FastAPI dependency - the store created at startup."""
    return request.app.state.store


def get_cache(request: Request) -> SnapshotCache:
    """FastAPI dependency - the snapshot cache bound to the same store."""
    return request.app.state.snapshot_cache
