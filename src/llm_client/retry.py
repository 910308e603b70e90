"""
Error categorization, backoff schedule, and the retry wrapper used by the
model invoker.

Schedule: attempt 1 → wait 10 s, attempt 2 → wait 30 s, attempt 3 → 90 s.
The wrapper re-raises the last exception once attempts are exhausted or the
error is permanent, so the analysis service sees a single failure.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from .config import BACKOFF_SCHEDULE, MAX_ATTEMPTS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class APIError:
    """
    Error category constants and classification logic for model-call
    failures.

    Transient categories are retried with backoff; permanent ones fail
    immediately.
    """

    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit_exceeded"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INVALID_RESPONSE = "invalid_response"
    API_ERROR = "api_error"
    OTHER = "other"

    RETRIABLE: frozenset[str] = frozenset({TIMEOUT, RATE_LIMIT, SERVICE_UNAVAILABLE})
    PERMANENT: frozenset[str] = frozenset({API_ERROR, INVALID_RESPONSE})

    @staticmethod
    def categorize(error: Exception) -> tuple[str, str]:
        """
        Classify an exception into ``(category, message)``.

        Uses the HTTP status of a ``requests`` error when one is attached,
        otherwise keywords in the stringified exception.
        """
        message = str(error)
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)

        if status == 429:
            return APIError.RATE_LIMIT, message
        if status in (500, 502, 503, 504):
            return APIError.SERVICE_UNAVAILABLE, message
        if status in (400, 401, 403, 404):
            return APIError.API_ERROR, message

        err = message.lower()
        if "timeout" in err or "timed out" in err:
            return APIError.TIMEOUT, message
        if "rate limit" in err or "429" in err:
            return APIError.RATE_LIMIT, message
        if any(tok in err for tok in ("503", "502", "service unavailable", "unavailable")):
            return APIError.SERVICE_UNAVAILABLE, message
        if any(tok in err for tok in ("json", "parse", "decode", "missing required")):
            return APIError.INVALID_RESPONSE, message
        if any(tok in err for tok in ("400", "401", "403", "api error", "api key")):
            return APIError.API_ERROR, message

        return APIError.OTHER, message


def exponential_backoff(attempt: int) -> int:
    """Seconds to wait after the 1-based ``attempt`` failed."""
    return BACKOFF_SCHEDULE.get(attempt, max(BACKOFF_SCHEDULE.values()))


def should_retry(category: str, attempt: int, max_attempts: int = MAX_ATTEMPTS) -> bool:
    """
    Decide whether a failed call is worth another attempt.

    Unknown categories are retried once only.
    """
    if attempt >= max_attempts:
        return False
    if category in APIError.RETRIABLE:
        return True
    if category in APIError.PERMANENT:
        return False
    return attempt == 1


def call_with_retry(
    func: Callable[[], T],
    max_attempts: int = MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``func`` until it succeeds or the retry policy gives up.

    Args:
        func: Zero-argument callable performing one model call.
        max_attempts: Total attempts allowed (initial call + retries).
        sleep: Injected for tests.

    Returns:
        Whatever ``func`` returns.

    Raises:
        Exception: The last exception raised by ``func``.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return func()
        except Exception as exc:
            category, message = APIError.categorize(exc)
            logger.warning(
                "Model call attempt %d/%d failed [%s]: %s",
                attempt, max_attempts, category, message[:200],
            )
            if not should_retry(category, attempt, max_attempts):
                raise
            wait = exponential_backoff(attempt)
            logger.info("Retrying in %ds", wait)
            sleep(wait)

    raise RuntimeError("max_attempts must be at least 1")
