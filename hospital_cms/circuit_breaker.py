"""Circuit breaker guarding calls to the hosted document database.

Purpose: Fail fast while the document store is unreachable instead of
stacking up slow, retried requests behind every dashboard action.

States:
- CLOSED: Normal operation, calls pass through
- OPEN: Store failing, calls fail immediately
- HALF_OPEN: Timeout elapsed, one trial call decides the next state
"""
import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpen(Exception):
    """Raised when circuit breaker is open (fail fast)."""

    def __init__(self, name: str, retry_after: float):
        super().__init__(
            f"Circuit breaker '{name}' is OPEN. Retry after {retry_after:.1f}s"
        )
        self.name = name
        self.retry_after = retry_after


class CircuitBreaker:
    """
    Thread-safe circuit breaker.

    Exceptions listed in ``ignored_exceptions`` pass through without being
    counted: a 404 from the store means the store is healthy.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        timeout: int = 60,
        name: str = "document-store",
        ignored_exceptions: Tuple[Type[BaseException], ...] = (),
    ):
        """
        Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive failures before opening circuit
            timeout: Seconds to wait before attempting half-open
            name: Label used in logs and errors
            ignored_exceptions: Exception types that do not count as failures
        """
        self.failure_threshold = failure_threshold
        self.timeout = timeout
        self.name = name
        self.ignored_exceptions = ignored_exceptions
        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self._state = CircuitState.CLOSED
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        """Get current state as string."""
        return self._state.value

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute function with circuit breaker protection.

        Raises:
            CircuitBreakerOpen: If circuit is open (fail fast)
            Exception: Whatever the wrapped function raises
        """
        with self._lock:
            if self._state == CircuitState.OPEN:
                if self._should_attempt_reset():
                    self._state = CircuitState.HALF_OPEN
                    logger.info("Circuit breaker '%s' transitioning to HALF_OPEN", self.name)
                else:
                    raise CircuitBreakerOpen(self.name, self._time_until_retry())

        try:
            result = func(*args, **kwargs)
        except self.ignored_exceptions:
            self._on_success()
            raise
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def reset(self):
        """Force the circuit back to CLOSED."""
        with self._lock:
            self.failure_count = 0
            self.last_failure_time = None
            self._state = CircuitState.CLOSED

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return time.time() - self.last_failure_time >= self.timeout

    def _time_until_retry(self) -> float:
        if self.last_failure_time is None:
            return 0
        return max(0, self.timeout - (time.time() - self.last_failure_time))

    def _on_success(self):
        with self._lock:
            self.failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.CLOSED
                logger.info("Circuit breaker '%s' closed after successful half-open attempt", self.name)

    def _on_failure(self):
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = time.time()

            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.OPEN
                logger.warning("Circuit breaker '%s' opened after failed half-open attempt", self.name)
            elif self.failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN
                logger.error(
                    "Circuit breaker '%s' opened after %d failures. Timeout: %ss",
                    self.name, self.failure_count, self.timeout
                )
