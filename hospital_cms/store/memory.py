"""In-memory document store.

Backs local development (STORE_BACKEND=memory) and the test suite with the
same query semantics as the hosted store: equal, search, limit, offset,
orderAsc and orderDesc.
"""
import copy
import threading
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence

from hospital_cms.store.base import (
    UNIQUE_ID,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    StoreRequestError,
)
from hospital_cms.store.query import parse_query

DEFAULT_LIST_LIMIT = 25


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def _matches_search(value: Any, term: str) -> bool:
    """Every word of the term must appear in the attribute (case-insensitive)."""
    if value is None:
        return False
    haystack = str(value).lower()
    return all(word in haystack for word in term.lower().split())


def _relationship_id(value: Any) -> Any:
    """Expanded relationship documents compare by their id."""
    if isinstance(value, dict):
        return value.get("$id")
    return value


def _matches_equal(value: Any, candidates: List[Any]) -> bool:
    if isinstance(value, list):
        return any(_relationship_id(item) in candidates for item in value)
    return _relationship_id(value) in candidates


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe dict-of-dicts store keyed by collection then document id."""

    def __init__(self, database_id: str = "memory"):
        self.database_id = database_id
        self._collections: Dict[str, Dict[str, Document]] = defaultdict(dict)
        self._sequence = 0
        self._lock = threading.Lock()

    def list_documents(self, collection_id: str, queries: Sequence[str] = ()) -> Dict[str, Any]:
        parsed = []
        for query in queries:
            try:
                parsed.append(parse_query(query))
            except ValueError as e:
                raise StoreRequestError(str(e), code=400, type="general_query_invalid") from e

        with self._lock:
            documents = [copy.deepcopy(doc) for doc in self._collections[collection_id].values()]

        limit = DEFAULT_LIST_LIMIT
        offset = 0
        orderings = []

        for query in parsed:
            method = query["method"]
            attribute = query.get("attribute")
            values = query["values"]

            if method == "equal":
                documents = [d for d in documents if _matches_equal(d.get(attribute), values)]
            elif method == "search":
                documents = [d for d in documents if _matches_search(d.get(attribute), values[0])]
            elif method == "limit":
                limit = int(values[0])
            elif method == "offset":
                offset = int(values[0])
            elif method in ("orderAsc", "orderDesc"):
                orderings.append((attribute, method == "orderDesc"))
            else:
                raise StoreRequestError(
                    f"Unsupported query method: {method}", code=400, type="general_query_invalid"
                )

        # Insertion order is the default; apply orderings last-to-first so the
        # first ordering query wins (stable sort).
        documents.sort(key=lambda d: d["$sequence"])
        for attribute, descending in reversed(orderings):
            documents.sort(
                key=lambda d: (d.get(attribute) is None, d.get(attribute), d["$sequence"]),
                reverse=descending,
            )

        total = len(documents)
        return {
            "documents": documents[offset:offset + limit],
            "total": total,
        }

    def get_document(self, collection_id: str, document_id: str) -> Document:
        with self._lock:
            document = self._collections[collection_id].get(document_id)
            if document is None:
                raise DocumentNotFoundError()
            return copy.deepcopy(document)

    def create_document(self, collection_id: str, data: Dict[str, Any], document_id: str = UNIQUE_ID) -> Document:
        if document_id == UNIQUE_ID:
            document_id = uuid.uuid4().hex[:20]

        now = _timestamp()
        with self._lock:
            collection = self._collections[collection_id]
            if document_id in collection:
                raise StoreRequestError(
                    "Document with the requested ID already exists.",
                    code=409,
                    type="document_already_exists",
                )

            self._sequence += 1
            document = {
                **copy.deepcopy(data),
                "$id": document_id,
                "$sequence": self._sequence,
                "$createdAt": now,
                "$updatedAt": now,
                "$permissions": [],
                "$databaseId": self.database_id,
                "$collectionId": collection_id,
            }
            collection[document_id] = document
            return copy.deepcopy(document)

    def update_document(self, collection_id: str, document_id: str, data: Dict[str, Any]) -> Document:
        with self._lock:
            document = self._collections[collection_id].get(document_id)
            if document is None:
                raise DocumentNotFoundError()

            document.update(copy.deepcopy(
                {k: v for k, v in data.items() if not k.startswith("$")}
            ))
            document["$updatedAt"] = _timestamp()
            return copy.deepcopy(document)

    def delete_document(self, collection_id: str, document_id: str) -> None:
        with self._lock:
            if self._collections[collection_id].pop(document_id, None) is None:
                raise DocumentNotFoundError()

    def clear(self):
        """Drop every collection."""
        with self._lock:
            self._collections.clear()
            self._sequence = 0
