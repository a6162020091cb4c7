"""FastAPI dependency injection functions."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, status

from hospital_cms.auth import APIKeyManager, InvalidAPIKeyError
from hospital_cms.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Settings, get_settings
from hospital_cms.repositories import (
    DoctorRepository,
    ScheduleService,
    TimeSlotRepository,
    UserRepository,
)
from hospital_cms.store import DocumentStore, create_store


@lru_cache(maxsize=1)
def get_store() -> DocumentStore:
    """
    Get the document store (cached singleton).

    One store per process so the HTTP connection pool and the circuit
    breaker are shared by every request.
    """
    return create_store(get_settings())


@lru_cache(maxsize=1)
def get_api_key_manager() -> APIKeyManager:
    """Get API key manager singleton."""
    return APIKeyManager(database_url=get_settings().admin_database_url)


def get_doctor_repository(
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> DoctorRepository:
    return DoctorRepository(store, settings.doctors_collection_id, settings.fetch_batch_size)


def get_user_repository(
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> UserRepository:
    return UserRepository(store, settings.users_collection_id)


def get_time_slot_repository(
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> TimeSlotRepository:
    return TimeSlotRepository(store, settings.time_slots_collection_id, settings.fetch_batch_size)


def get_schedule_service(
    doctors: DoctorRepository = Depends(get_doctor_repository),
    time_slots: TimeSlotRepository = Depends(get_time_slot_repository),
) -> ScheduleService:
    return ScheduleService(doctors, time_slots)


async def require_admin_key(
    x_api_key: Optional[str] = Header(None, description="Admin API key"),
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """
    Validate the X-API-Key header when admin auth is enabled.

    Returns:
        Key prefix of the caller, or None when auth is disabled

    Raises:
        HTTPException 401: If the key is missing, invalid or inactive
    """
    if not settings.admin_auth_enabled:
        return None

    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    try:
        return get_api_key_manager().validate_api_key(x_api_key)
    except InvalidAPIKeyError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "ApiKey"}
        )


class Pagination:
    """``page``/``limit`` query parameters and the derived offset."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="1-based page number"),
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
    ):
        self.page = page
        self.limit = limit
        self.offset = (page - 1) * limit
