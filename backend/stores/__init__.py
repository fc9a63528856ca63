import logging

from stores.base import Account, CheckinStore
from stores.json_store import JsonFileStore
from stores.sql_store import SqlStore

logger = logging.getLogger(__name__)


def get_store(backend: str | None = None) -> CheckinStore:
    """Build the store selected by STORE_BACKEND and make sure its schema exists."""
    from config import STORE_BACKEND, JSON_STORE_PATH

    backend = (backend or STORE_BACKEND).lower()
    if backend == "json":
        store = JsonFileStore(JSON_STORE_PATH)
    elif backend == "sql":
        store = SqlStore()
    else:
        raise ValueError(f"Unknown STORE_BACKEND '{backend}', expected 'sql' or 'json'")

    store.create_schema()
    logger.info(f"Using {store.name} store")
    return store


__all__ = [
    "Account",
    "CheckinStore",
    "JsonFileStore",
    "SqlStore",
    "get_store",
]
