import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from auth import digest_secret
from database import build_engine
from main import create_app
from services.snapshot_cache import SnapshotCache
from stores.json_store import JsonFileStore
from stores.sql_store import SqlStore

ALICE_DIGEST = digest_secret("alice-pass")
BOB_DIGEST = digest_secret("bob-pass")


@pytest.fixture
def sql_store(tmp_path):
    store = SqlStore(build_engine(f"sqlite:///{tmp_path / 'checkmate.db'}"))
    store.create_schema()
    yield store
    store.close()


@pytest.fixture
def json_store(tmp_path):
    store = JsonFileStore(str(tmp_path / "data" / "checkmate.json"))
    store.create_schema()
    yield store
    store.close()


@pytest.fixture(params=["sql", "json"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def cache(store):
    return SnapshotCache(store, ttl_seconds=60)


@pytest.fixture
def client(store):
    app = create_app(store)
    with TestClient(app) as c:
        yield c


def login(client, username="alice", password_digest=ALICE_DIGEST):
    resp = client.post("/api/v1/auth/login", json={"username": username, "password": password_digest})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


def admin_login(client, secret="admin123"):
    resp = client.post("/api/v1/admin/login", json={"password": secret})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}
