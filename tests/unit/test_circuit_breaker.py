"""Tests for the document-store circuit breaker."""
import time

import pytest

from hospital_cms.circuit_breaker import CircuitBreaker, CircuitBreakerOpen


class NotFound(Exception):
    pass


class TestCircuitBreaker:
    """Test circuit breaker behavior."""

    def test_allows_requests_when_closed(self):
        """Should allow requests when circuit is closed."""
        cb = CircuitBreaker(failure_threshold=3, timeout=1)

        result = cb.call(lambda: "success")

        assert result == "success"
        assert cb.state == "closed"

    def test_opens_after_threshold_failures(self):
        """Should open circuit after 3 consecutive failures."""
        cb = CircuitBreaker(failure_threshold=3, timeout=1)
        calls = []

        def failing_call():
            calls.append(1)
            raise RuntimeError("store failed")

        for _ in range(3):
            with pytest.raises(RuntimeError):
                cb.call(failing_call)

        assert cb.state == "open"

        # Next call fails fast without reaching the store
        with pytest.raises(CircuitBreakerOpen) as exc_info:
            cb.call(failing_call)
        assert len(calls) == 3
        assert exc_info.value.retry_after > 0

    def test_success_resets_failure_count(self):
        cb = CircuitBreaker(failure_threshold=2, timeout=1)

        with pytest.raises(RuntimeError):
            cb.call(self._raise, RuntimeError)
        cb.call(lambda: "ok")
        with pytest.raises(RuntimeError):
            cb.call(self._raise, RuntimeError)

        assert cb.state == "closed"

    def test_half_open_failure_reopens(self):
        """Should reopen after a failed half-open attempt."""
        cb = CircuitBreaker(failure_threshold=1, timeout=1)

        with pytest.raises(RuntimeError):
            cb.call(self._raise, RuntimeError)
        assert cb.state == "open"

        time.sleep(1.1)

        with pytest.raises(RuntimeError):
            cb.call(self._raise, RuntimeError)
        assert cb.state == "open"

    def test_half_open_success_closes(self):
        """Should close circuit on successful half-open attempt."""
        cb = CircuitBreaker(failure_threshold=1, timeout=1)

        with pytest.raises(RuntimeError):
            cb.call(self._raise, RuntimeError)

        time.sleep(1.1)

        assert cb.call(lambda: "recovered") == "recovered"
        assert cb.state == "closed"
        assert cb.failure_count == 0

    def test_ignored_exceptions_do_not_count(self):
        """A not-found answer means the store is up."""
        cb = CircuitBreaker(failure_threshold=1, timeout=60, ignored_exceptions=(NotFound,))

        for _ in range(3):
            with pytest.raises(NotFound):
                cb.call(self._raise, NotFound)

        assert cb.state == "closed"

    def test_reset_closes_circuit(self):
        cb = CircuitBreaker(failure_threshold=1, timeout=60)
        with pytest.raises(RuntimeError):
            cb.call(self._raise, RuntimeError)

        cb.reset()

        assert cb.state == "closed"
        assert cb.call(lambda: 1) == 1

    @staticmethod
    def _raise(exc_type):
        raise exc_type("failure")
