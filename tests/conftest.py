import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("POS_STORE", "memory")

from store import MemoryStore  # noqa: E402


@pytest.fixture()
def store():
    """
    Fresh in-memory store per test. Seed data appears on first read.
    """
    return MemoryStore()


@pytest.fixture()
def client(store):
    """
    TestClient with the store dependency pointed at the per-test store.
    """
    from main import app, get_store

    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
