"""Appwrite Databases REST client.

Talks to ``{endpoint}/databases/{databaseId}/collections/{collectionId}/documents``
through the shared resilient HTTP session, behind a circuit breaker.
"""
import logging
from typing import Any, Dict, Optional, Sequence

import requests

from hospital_cms.circuit_breaker import CircuitBreaker
from hospital_cms.http_client import create_http_session
from hospital_cms.store.base import (
    UNIQUE_ID,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    StoreError,
    StoreRequestError,
)

logger = logging.getLogger(__name__)


class AppwriteDocumentStore(DocumentStore):
    """DocumentStore backed by a hosted Appwrite project."""

    def __init__(
        self,
        endpoint: str,
        project_id: str,
        database_id: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        """
        Args:
            endpoint: API root, e.g. https://cloud.appwrite.io/v1
            project_id: Appwrite project id
            database_id: Database holding the CMS collections
            api_key: Server API key (omit for public collections)
            session: HTTP session; defaults to a resilient pooled session
            circuit_breaker: Breaker shared by every call of this store
        """
        self.endpoint = endpoint.rstrip("/")
        self.project_id = project_id
        self.database_id = database_id
        self.session = session or create_http_session()
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            ignored_exceptions=(StoreRequestError,)
        )

        self.session.headers.update({
            "Content-Type": "application/json",
            "X-Appwrite-Project": project_id,
        })
        if api_key:
            self.session.headers["X-Appwrite-Key"] = api_key

    def _documents_url(self, collection_id: str, document_id: Optional[str] = None) -> str:
        url = f"{self.endpoint}/databases/{self.database_id}/collections/{collection_id}/documents"
        if document_id is not None:
            url = f"{url}/{document_id}"
        return url

    def _request(self, method: str, url: str, **kwargs) -> Any:
        def make_request():
            try:
                response = self.session.request(method, url, **kwargs)
            except requests.exceptions.RequestException as e:
                raise StoreError(f"Document store unreachable: {e}", code=503) from e
            return self._handle_response(response)

        return self.circuit_breaker.call(make_request)

    @staticmethod
    def _handle_response(response: requests.Response) -> Any:
        if response.status_code == 204 or not response.content:
            if response.ok:
                return None

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.ok:
            return body

        message = body.get("message") or response.reason or "Document store error"
        error_type = body.get("type")

        if response.status_code == 404:
            raise DocumentNotFoundError(message)

        logger.warning(
            "Document store returned %s (%s): %s",
            response.status_code, error_type, message
        )
        if response.status_code < 500:
            raise StoreRequestError(message, code=response.status_code, type=error_type)
        raise StoreError(message, code=response.status_code, type=error_type)

    def list_documents(self, collection_id: str, queries: Sequence[str] = ()) -> Dict[str, Any]:
        body = self._request(
            "GET",
            self._documents_url(collection_id),
            params={"queries[]": list(queries)},
        )
        return {
            "documents": body.get("documents", []),
            "total": body.get("total", 0),
        }

    def get_document(self, collection_id: str, document_id: str) -> Document:
        return self._request("GET", self._documents_url(collection_id, document_id))

    def create_document(self, collection_id: str, data: Dict[str, Any], document_id: str = UNIQUE_ID) -> Document:
        return self._request(
            "POST",
            self._documents_url(collection_id),
            json={"documentId": document_id, "data": data},
        )

    def update_document(self, collection_id: str, document_id: str, data: Dict[str, Any]) -> Document:
        return self._request(
            "PATCH",
            self._documents_url(collection_id, document_id),
            json={"data": data},
        )

    def delete_document(self, collection_id: str, document_id: str) -> None:
        self._request("DELETE", self._documents_url(collection_id, document_id))
