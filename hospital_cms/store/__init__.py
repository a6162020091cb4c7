"""Document store backends."""
from hospital_cms.circuit_breaker import CircuitBreaker
from hospital_cms.config import Settings
from hospital_cms.http_client import create_http_session
from hospital_cms.store.base import (
    UNIQUE_ID,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    StoreError,
    StoreRequestError,
)
from hospital_cms.store.query import Query

__all__ = [
    "UNIQUE_ID",
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "Query",
    "StoreError",
    "StoreRequestError",
    "create_store",
]


def create_store(settings: Settings) -> DocumentStore:
    """
    Build the document store selected by STORE_BACKEND.

    Raises:
        ValueError: If the backend is unknown or misconfigured
    """
    settings.validate_store()

    if settings.store_backend == "memory":
        from hospital_cms.store.memory import InMemoryDocumentStore
        return InMemoryDocumentStore()

    from hospital_cms.store.appwrite import AppwriteDocumentStore

    return AppwriteDocumentStore(
        endpoint=settings.appwrite_endpoint,
        project_id=settings.appwrite_project_id,
        database_id=settings.appwrite_database_id,
        api_key=settings.appwrite_api_key,
        session=create_http_session(
            max_retries=settings.http_max_retries,
            timeout=settings.http_timeout,
        ),
        circuit_breaker=CircuitBreaker(
            failure_threshold=settings.circuit_failure_threshold,
            timeout=settings.circuit_timeout,
            ignored_exceptions=(StoreRequestError,),
        ),
    )
