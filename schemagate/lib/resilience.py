"""Retry helpers for schemagate.

Opt-in retry decorator for transient failures when delivering outcome
notifications. Store access is never retried here; callers that fetch live
metadata own their own retry policy.

Implementation: Uses tenacity library internally.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

import tenacity
from tenacity.wait import wait_base

logger = logging.getLogger(__name__)

__all__ = ["with_retry", "build_wait_strategy"]

F = TypeVar("F", bound=Callable[..., Any])


def build_wait_strategy(
    backoff_seconds: float,
    exponential: bool = True,
    jitter: bool = True,
) -> wait_base:
    """Build the tenacity wait strategy used between attempts."""
    wait_strategy: wait_base
    if exponential:
        # backoff_seconds * 2^(attempt-1)
        wait_strategy = tenacity.wait_exponential(multiplier=backoff_seconds, min=backoff_seconds)
    else:
        wait_strategy = tenacity.wait_fixed(backoff_seconds)

    if jitter:
        # 0-50% of the base delay
        wait_strategy = wait_strategy + tenacity.wait_random(0, backoff_seconds * 0.5)
    return wait_strategy


def with_retry(
    max_attempts: int = 3,
    backoff_seconds: float = 1.0,
    exponential: bool = True,
    jitter: bool = True,
    retry_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
) -> Callable[[F], F]:
    """Retry decorator for flaky operations.

    Args:
        max_attempts: Maximum number of attempts (default 3)
        backoff_seconds: Base delay between attempts (default 1.0)
        exponential: Use exponential backoff (default True)
        jitter: Add random jitter to backoff (default True)
        retry_exceptions: Only retry on these exceptions (default: all)

    Example:
        @with_retry(max_attempts=3, retry_exceptions=(requests.RequestException,))
        def post(url: str, body: bytes) -> None:
            ...
    """
    wait_strategy = build_wait_strategy(backoff_seconds, exponential, jitter)

    if retry_exceptions:
        retry_condition = tenacity.retry_if_exception_type(retry_exceptions)
    else:
        retry_condition = tenacity.retry_if_exception_type(Exception)

    def decorator(fn: F) -> F:
        fn_logger = logging.getLogger(fn.__module__)

        def before_sleep_handler(retry_state: tenacity.RetryCallState) -> None:
            """Log retry attempts."""
            exception = retry_state.outcome.exception() if retry_state.outcome else None
            fn_logger.warning(
                "Attempt %d/%d failed: %s. Retrying in %.1fs...",
                retry_state.attempt_number,
                max_attempts,
                exception,
                retry_state.next_action.sleep if retry_state.next_action else 0,
            )

        tenacity_decorator = tenacity.retry(
            stop=tenacity.stop_after_attempt(max_attempts),
            wait=wait_strategy,
            retry=retry_condition,
            before_sleep=before_sleep_handler,
            reraise=True,
        )

        retrying_fn = tenacity_decorator(fn)

        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return retrying_fn(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
