import os
import sys
import logging
from contextlib import asynccontextmanager

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import SNAPSHOT_CACHE_TTL
from errors import CheckmateError, InvalidInput
from routes.admin_routes import router as admin_router
from routes.auth_routes import router as auth_router
from routes.checkin_routes import router as checkin_router
from services.snapshot_cache import SnapshotCache
from stores import CheckinStore, get_store

logger = logging.getLogger(__name__)


def _attach_store(app: FastAPI, store: CheckinStore):
    app.state.store = store
    app.state.snapshot_cache = SnapshotCache(store, ttl_seconds=SNAPSHOT_CACHE_TTL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    owned = not hasattr(app.state, "store")
    if owned:
        _attach_store(app, get_store())
    yield
    if owned:
        app.state.store.close()


def create_app(store: CheckinStore | None = None) -> FastAPI:
    """Build the API. Without a store, the configured one is opened at startup."""
    app = FastAPI(title="Checkmate Check-in Tracker", lifespan=lifespan)
    if store is not None:
        _attach_store(app, store)

    @app.exception_handler(CheckmateError)
    async def checkmate_error_handler(request: Request, exc: CheckmateError):
        return JSONResponse(status_code=exc.status_code, content={"status": "error", "message": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid input at '{where}': {first.get('msg')}" if where else InvalidInput.default_message
        return JSONResponse(status_code=InvalidInput.status_code, content={"status": "error", "message": message})

    @app.get("/api/v1/health-check")
    async def health(request: Request):
        store = getattr(request.app.state, "store", None)
        return {"status": "ok", "message": "Backend is alive!", "store": store.name if store else None}

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(checkin_router)
    app.include_router(admin_router)

    @app.get("/")
    async def fallback():
        return {"status": "Checkmate backend is running."}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "3000")), reload=True)
