"""Bounded retry with linear backoff.

Every network call made by a storage backend goes through :func:`with_retry`,
so the attempt budget and the sleep schedule live in exactly one place.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from tenacity import RetryCallState, Retrying, stop_after_attempt, wait_incrementing

from bucketcopy.infra.observability.metrics import ATTEMPTS, LATENCY

DEFAULT_ATTEMPTS = 3

T = TypeVar("T")

logger = logging.getLogger("storage")


def _log_retry(name: str, attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "storage_retry operation=%s attempt=%s/%s delay_s=%.2f error=%s",
            name,
            retry_state.attempt_number,
            attempts,
            delay,
            exc,
            extra={
                "extra": {
                    "operation": name,
                    "attempt": retry_state.attempt_number,
                    "budget": attempts,
                    "delay_s": delay,
                    "exception": repr(exc),
                }
            },
        )

    return before_sleep


def _make_retrying(
    *,
    attempts: int,
    backoff_seconds: float,
    name: str,
    sleep: Callable[[float], None],
) -> Retrying:
    """Create the tenacity controller for one retried call."""
    return Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_incrementing(start=backoff_seconds, increment=backoff_seconds),
        sleep=sleep,
        before_sleep=_log_retry(name, attempts),
        reraise=True,
    )


def with_retry(
    operation: Callable[[], T],
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff_seconds: float = 1.0,
    name: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation`` until it succeeds or ``attempts`` calls have failed.

    Args:
        operation: Zero-argument callable performing one attempt.
        attempts: Total number of calls allowed, including the first.
        backoff_seconds: Base delay; attempt ``n`` failing waits ``n * backoff_seconds``.
        name: Operation label used for logs and metrics.
        sleep: Sleep function, replaceable in tests.

    Returns:
        The value returned by the first successful attempt.

    Raises:
        ValueError: If ``attempts`` is lower than one.
        Exception: Whatever the final attempt raised, unchanged.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    def attempt_once() -> T:
        try:
            result = operation()
        except Exception:
            ATTEMPTS.labels(name, "failure").inc()
            raise
        ATTEMPTS.labels(name, "success").inc()
        return result

    retrying = _make_retrying(
        attempts=attempts, backoff_seconds=backoff_seconds, name=name, sleep=sleep
    )
    start = time.perf_counter()
    try:
        return retrying(attempt_once)
    except Exception as exc:
        logger.error(
            "storage_retry_exhausted operation=%s attempts=%s error=%s",
            name,
            attempts,
            exc,
            extra={
                "extra": {
                    "operation": name,
                    "attempt": attempts,
                    "budget": attempts,
                    "exception": repr(exc),
                }
            },
        )
        raise
    finally:
        LATENCY.labels(name).observe(time.perf_counter() - start)
