"""Document query builder.

Queries are JSON strings in the format the Appwrite Databases API expects
in ``queries[]`` (``{"method": ..., "attribute": ..., "values": [...]}``).
The in-memory store parses the same strings, so callers build queries once
and stay backend-agnostic.
"""
import json
from typing import Any, Dict, List, Optional


class Query:
    """Factory for query strings (mirrors the vendor SDK's Query helpers)."""

    @staticmethod
    def _build(method: str, attribute: Optional[str] = None, values: Optional[List[Any]] = None) -> str:
        payload: Dict[str, Any] = {"method": method}
        if attribute is not None:
            payload["attribute"] = attribute
        if values is not None:
            payload["values"] = values
        return json.dumps(payload, separators=(",", ":"))

    @staticmethod
    def equal(attribute: str, value: Any) -> str:
        values = value if isinstance(value, list) else [value]
        return Query._build("equal", attribute, values)

    @staticmethod
    def search(attribute: str, value: str) -> str:
        return Query._build("search", attribute, [value])

    @staticmethod
    def limit(limit: int) -> str:
        return Query._build("limit", values=[limit])

    @staticmethod
    def offset(offset: int) -> str:
        return Query._build("offset", values=[offset])

    @staticmethod
    def order_desc(attribute: str) -> str:
        return Query._build("orderDesc", attribute)

    @staticmethod
    def order_asc(attribute: str) -> str:
        return Query._build("orderAsc", attribute)


def parse_query(query: str) -> Dict[str, Any]:
    """
    Decode a query string.

    Raises:
        ValueError: If the string is not a query object with a method
    """
    try:
        parsed = json.loads(query)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid query: {query!r}") from e

    if not isinstance(parsed, dict) or "method" not in parsed:
        raise ValueError(f"Invalid query: {query!r}")

    parsed.setdefault("values", [])
    return parsed
