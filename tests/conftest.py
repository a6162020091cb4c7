"""Shared test fixtures."""
import os

# Settings are read once at import of the API server
os.environ["STORE_BACKEND"] = "memory"
os.environ["ADMIN_AUTH_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from hospital_cms.config import get_settings
from hospital_cms.store.memory import InMemoryDocumentStore

get_settings.cache_clear()

DOCTORS = "doctors"
TIME_SLOTS = "timeSlots"


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Fresh in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def client(store):
    """API client wired to the in-memory store."""
    from hospital_cms.api.dependencies import get_store
    from hospital_cms.api_server import app

    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_doctor(store):
    """Insert a doctor document directly into the store."""
    def _create(name: str = "Dr. Test", specialty: str = "Cardiology", **extra):
        data = {"name": name, "specialty": specialty, "hourlyRate": 100, "specialties": []}
        data.update(extra)
        return store.create_document(DOCTORS, data)
    return _create


@pytest.fixture
def make_slot(store):
    """Insert a time-slot record directly into the store, in any shape."""
    def _create(**data):
        return store.create_document(TIME_SLOTS, data)
    return _create
