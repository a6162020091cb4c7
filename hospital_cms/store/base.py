"""Document store interface and errors."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence

from hospital_cms.store.query import Query

Document = Dict[str, Any]

# Appwrite's own placeholder for "generate an id server-side"
UNIQUE_ID = "unique()"


class StoreError(Exception):
    """Raised when the document store rejects or fails a request."""

    def __init__(self, message: str, code: int = 500, type: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.type = type


class StoreRequestError(StoreError):
    """Raised when the store rejects a request as invalid (4xx)."""


class DocumentNotFoundError(StoreRequestError):
    """Raised when a document id does not exist in the collection."""

    def __init__(self, message: str = "Document with the requested ID could not be found."):
        super().__init__(message, code=404, type="document_not_found")


class DocumentStore(ABC):
    """
    Minimal document-database contract used by the repositories.

    list_documents returns ``{"documents": [...], "total": int}`` where
    total counts every match, ignoring limit/offset.
    """

    @abstractmethod
    def list_documents(self, collection_id: str, queries: Sequence[str] = ()) -> Dict[str, Any]:
        ...

    @abstractmethod
    def get_document(self, collection_id: str, document_id: str) -> Document:
        ...

    @abstractmethod
    def create_document(self, collection_id: str, data: Dict[str, Any], document_id: str = UNIQUE_ID) -> Document:
        ...

    @abstractmethod
    def update_document(self, collection_id: str, document_id: str, data: Dict[str, Any]) -> Document:
        ...

    @abstractmethod
    def delete_document(self, collection_id: str, document_id: str) -> None:
        ...

    def iter_documents(
        self,
        collection_id: str,
        queries: Sequence[str] = (),
        batch_size: int = 100,
    ) -> Iterator[Document]:
        """
        Yield every matching document, paging with limit/offset.

        ``queries`` must not contain limit or offset.
        """
        offset = 0
        while True:
            page = self.list_documents(
                collection_id,
                [*queries, Query.limit(batch_size), Query.offset(offset)],
            )
            documents = page["documents"]
            yield from documents

            offset += len(documents)
            if not documents or offset >= page["total"]:
                break

    def list_all_documents(
        self,
        collection_id: str,
        queries: Sequence[str] = (),
        batch_size: int = 100,
    ) -> List[Document]:
        return list(self.iter_documents(collection_id, queries, batch_size))
