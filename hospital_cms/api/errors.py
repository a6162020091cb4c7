"""API error type and store-error translation."""
from contextlib import contextmanager
from typing import Optional

from hospital_cms.circuit_breaker import CircuitBreakerOpen
from hospital_cms.logging_config import get_logger
from hospital_cms.repositories import SlotConflictError, SlotShapeError
from hospital_cms.store import DocumentNotFoundError, StoreError, StoreRequestError

logger = get_logger(__name__)


class APIError(Exception):
    """Raised by handlers; rendered as an ErrorResponse body."""

    def __init__(
        self,
        status_code: int,
        error: str,
        detail: Optional[str] = None,
        code: Optional[str] = None,
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.detail = detail
        self.code = code


@contextmanager
def store_errors(message: str, resource: str = "Document", expose_detail: bool = False):
    """
    Translate store failures raised inside the block into APIError.

    Args:
        message: Static message for failures, e.g. "Failed to fetch doctors"
        resource: Name used in the 404 message ("Doctor not found")
        expose_detail: Return the store's own message in ``detail``
    """
    try:
        yield
    except DocumentNotFoundError as e:
        raise APIError(404, f"{resource} not found", code="NOT_FOUND") from e
    except SlotConflictError as e:
        raise APIError(409, "Time slot conflict", detail=str(e), code="SLOT_CONFLICT") from e
    except SlotShapeError as e:
        raise APIError(400, "Day is required", detail=str(e), code="VALIDATION_ERROR") from e
    except StoreRequestError as e:
        logger.warning(message, store_code=e.code, store_type=e.type, error=e.message)
        raise APIError(400, message, detail=e.message, code="STORE_REJECTED") from e
    except (StoreError, CircuitBreakerOpen) as e:
        logger.error(message, error=str(e), exc_info=True)
        raise APIError(
            500,
            message,
            detail=str(e) if expose_detail else None,
            code="STORE_ERROR",
        ) from e
