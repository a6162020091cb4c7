"""Integration tests for server-level behavior: health, errors, admin keys."""
from unittest.mock import Mock

import pytest

from hospital_cms.api import dependencies
from hospital_cms.auth import APIKeyManager
from hospital_cms.circuit_breaker import CircuitBreakerOpen
from hospital_cms.config import Settings, get_settings
from hospital_cms.repositories import DoctorRepository
from hospital_cms.store import StoreError, StoreRequestError


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "hospital-cms-api"
    assert body["store"]["backend"] == "InMemoryDocumentStore"


def test_root(client):
    assert client.get("/").json()["docs"] == "/docs"


def test_responses_carry_request_id(client):
    response = client.get("/health", headers={"X-Request-ID": "req-test"})
    assert response.headers["X-Request-ID"] == "req-test"


class TestStoreFailures:
    """Store failures map to static messages, never raw store errors."""

    @pytest.fixture
    def failing_doctors(self, client):
        from hospital_cms.api_server import app

        repository = Mock(spec=DoctorRepository)
        app.dependency_overrides[dependencies.get_doctor_repository] = lambda: repository
        yield repository
        app.dependency_overrides.pop(dependencies.get_doctor_repository, None)

    def test_store_outage_is_500(self, client, failing_doctors):
        failing_doctors.list.side_effect = StoreError("connection reset by peer", code=503)

        response = client.get("/api/doctors")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch doctors", "detail": None, "code": "STORE_ERROR"}

    def test_open_circuit_is_500(self, client, failing_doctors):
        failing_doctors.specialties.side_effect = CircuitBreakerOpen("document-store", 30)

        response = client.get("/api/specialties")

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to fetch specialties"

    def test_doctor_update_exposes_store_detail(self, client, failing_doctors):
        failing_doctors.update.side_effect = StoreError("Attribute hourlyRate invalid", code=500)

        response = client.put("/api/doctors/d1", json={"hourlyRate": 5})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to update doctor"
        assert response.json()["detail"] == "Attribute hourlyRate invalid"

    def test_rejected_request_is_400(self, client, failing_doctors):
        failing_doctors.create.side_effect = StoreRequestError("Unknown attribute: nickname", code=400)

        response = client.post("/api/doctors", json={"name": "Dr. A", "specialty": "ENT", "hourlyRate": 1})

        assert response.status_code == 400
        assert response.json()["code"] == "STORE_REJECTED"


class TestAdminKeys:

    @pytest.fixture
    def key_manager(self, client, monkeypatch, tmp_path):
        from hospital_cms.api_server import app

        # File-backed: requests are served from another thread
        manager = APIKeyManager(database_url=f"sqlite:///{tmp_path / 'keys.db'}")
        monkeypatch.setattr(dependencies, "get_api_key_manager", lambda: manager)
        app.dependency_overrides[get_settings] = lambda: Settings(store_backend="memory", admin_auth_enabled=True)
        yield manager
        app.dependency_overrides.pop(get_settings, None)

    def test_missing_key_is_401(self, client, key_manager):
        response = client.get("/api/doctors")

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing API key"

    def test_invalid_key_is_401(self, client, key_manager):
        response = client.get("/api/doctors", headers={"X-API-Key": "ak_not_a_real_key"})
        assert response.status_code == 401

    def test_valid_key_is_accepted(self, client, key_manager):
        api_key = key_manager.generate_api_key("tests")

        response = client.get("/api/doctors", headers={"X-API-Key": api_key})

        assert response.status_code == 200

    def test_health_needs_no_key(self, client, key_manager):
        assert client.get("/health").status_code == 200
