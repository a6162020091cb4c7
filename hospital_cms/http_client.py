"""HTTP session with retry and connection pooling for the document store.

Pattern: requests.Session with a urllib3 Retry adapter for status-level
retries on idempotent methods, plus a tenacity wrapper for connection-level
failures (refused connections, timeouts, 5xx that survive the adapter).

Client errors (4xx) are returned to the caller untouched so the store layer
can turn them into not-found / validation errors.
"""
import logging

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES = (429, 500, 502, 503, 504)
IDEMPOTENT_METHODS = ("GET", "PUT", "DELETE", "HEAD", "OPTIONS")


class RetryableStatusError(requests.exceptions.HTTPError):
    """Raised for a 429/5xx response so tenacity can retry it."""


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, (
        requests.exceptions.ConnectionError,
        requests.exceptions.Timeout,
        RetryableStatusError,
    ))


class ResilientSession(requests.Session):
    """
    requests.Session whose ``request`` retries transient failures.

    POST is only retried for connection errors raised before the request
    reached the server; a 5xx on POST is returned as-is since the document
    may already exist.
    """

    def __init__(
        self,
        max_retries: int = 3,
        backoff_factor: float = 1.0,
        timeout: int = 15,
    ):
        super().__init__()
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.timeout = timeout

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=list(RETRY_STATUS_CODES),
            allowed_methods=list(IDEMPOTENT_METHODS),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=10,
            pool_maxsize=10,
        )
        self.mount("http://", adapter)
        self.mount("https://", adapter)

    def request(self, method, url, *args, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        send = super().request
        retry_status = method.upper() in IDEMPOTENT_METHODS

        def attempt():
            response = send(method, url, *args, **kwargs)
            if retry_status and response.status_code in RETRY_STATUS_CODES:
                raise RetryableStatusError(
                    f"{response.status_code} from {method.upper()} {url}",
                    response=response,
                )
            return response

        retryer = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff_factor, min=0, max=8),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            return retryer(attempt)
        except RetryableStatusError as e:
            # Out of retries: hand the last response back to the caller
            return e.response


def create_http_session(
    max_retries: int = 3,
    backoff_factor: float = 1.0,
    timeout: int = 15
) -> ResilientSession:
    """
    Create HTTP session with retry and connection pooling.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        backoff_factor: Backoff multiplier; delays grow 1s, 2s, 4s at 1.0
        timeout: Request timeout in seconds (default: 15)

    Returns:
        Configured ResilientSession
    """
    return ResilientSession(
        max_retries=max_retries,
        backoff_factor=backoff_factor,
        timeout=timeout,
    )
