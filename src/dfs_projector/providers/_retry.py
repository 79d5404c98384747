import logging
from collections.abc import Callable
from typing import Any

import httpx
from tenacity import RetryCallState, retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({408, 429})


def is_transient(error: BaseException) -> bool:
    """Transport failures, server errors, timeouts and rate limits are worth another attempt."""
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return status >= 500 or status in _RETRYABLE_STATUS
    return False


def http_retry(label: str, *, attempts: int = 3) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Retry decorator for provider HTTP calls, sync or async.

    A 404 or other client error fails on the first attempt; the last
    transient failure is re-raised unchanged.
    """

    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "Retrying %s (attempt %d of %d): %s", label, retry_state.attempt_number, attempts, retry_state.outcome
        )

    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential_jitter(initial=1, max=10),
        retry=retry_if_exception(is_transient),
        before_sleep=_log_retry,
        reraise=True,
    )
