"""
Retry logic with backoff for resilient HTTP calls.
"""

import time
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from vro_docs.exceptions import RetryableError

T = TypeVar("T")


def retry_with_backoff(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[Exception, int, int], None] | None = None,
):
    """
    Decorator to retry a function with exponential backoff.

    A ``backoff_factor`` of 1.0 gives a fixed delay between attempts.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        initial_delay: Initial delay in seconds (default: 1.0)
        backoff_factor: Multiplier for delay after each failure (default: 2.0)
        max_delay: Maximum delay between retries (default: 60.0)
        retryable_exceptions: Tuple of exception types to retry (default: all)
        on_retry: Optional callback called on each retry: (error, attempt, max_attempts)

    Returns:
        Decorated function with retry logic

    Raises:
        RetryableError: When every attempt failed with a retryable exception

    Example:
        @retry_with_backoff(max_attempts=3, initial_delay=5.0, backoff_factor=1.0)
        def start_execution():
            response = session.post(url, json=payload)
            response.raise_for_status()
            return response.json()
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            delay = initial_delay
            last_exception = None

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    last_exception = e

                    if attempt == max_attempts:
                        break

                    if on_retry is not None:
                        on_retry(e, attempt, max_attempts)

                    time.sleep(min(delay, max_delay))
                    delay *= backoff_factor

            assert last_exception is not None  # Always set in the except block
            raise RetryableError(last_exception, max_attempts, max_attempts)

        return wrapper

    return decorator
