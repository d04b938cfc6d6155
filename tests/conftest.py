"""
Shared fixtures: an in-memory SQLite directory store with two seeded
organisations, and a FastAPI TestClient built on top of it.
"""

import pytest
from fastapi.testclient import TestClient

from scim_directory.config import SCIMDirectorySettings
from scim_directory.main import create_app
from scim_directory.services.user_store import DirectoryStore

BASE_URL = "https://scim.test"


@pytest.fixture
def store():
    """Fresh in-memory store with all tables created"""
    directory_store = DirectoryStore.from_url("sqlite://")
    directory_store.create_schema()
    yield directory_store
    directory_store.engine.dispose()


@pytest.fixture
def tenants(store):
    """Two organisations, T1 holding tok-A and T2 holding tok-B"""
    t1 = store.create_organisation("T1")
    store.create_organisation_token(t1.id, "tok-A")
    t2 = store.create_organisation("T2")
    store.create_organisation_token(t2.id, "tok-B")
    return {"T1": t1.id, "T2": t2.id}


@pytest.fixture
def settings():
    return SCIMDirectorySettings(database_url="sqlite://", base_url=BASE_URL, log_level="DEBUG")


@pytest.fixture
def client(settings, store, tenants):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
