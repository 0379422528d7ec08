"""
Retry decorator with capped exponential backoff for transport failures.
"""

from __future__ import annotations

import functools
import time
from typing import Any, Callable, Optional, Tuple, TypeVar

from infra.logger import get_logger

T = TypeVar("T")


def retry(
    max_retries: int = 3,
    backoff_factor: float = 0.5,
    max_delay: float = 8.0,
    retry_on: Tuple[type[BaseException], ...] = (Exception,),
    sleep: Optional[Callable[[float], None]] = None,
):
    """
    Decorator to retry a function with exponential backoff.

    Args:
        max_retries: Number of retry attempts before re-raising.
        backoff_factor: First sleep in seconds; doubles each retry up to max_delay.
        retry_on: Exception types that trigger a retry. Anything else propagates at once.
        sleep: Sleep function; time.sleep when omitted.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        logger = get_logger("Retry")

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delay = backoff_factor
            for attempt in range(1, max_retries + 2):
                try:
                    return func(*args, **kwargs)
                except retry_on as exc:  # type: ignore[misc]
                    if attempt > max_retries:
                        logger.error("%s: giving up after %s retries: %s", func.__name__, max_retries, exc)
                        raise
                    logger.warning(
                        "%s: attempt %s/%s failed (%s); retrying in %.2fs",
                        func.__name__,
                        attempt,
                        max_retries,
                        exc,
                        delay,
                    )
                    (sleep or time.sleep)(delay)
                    delay = min(delay * 2, max_delay)
            raise AssertionError("unreachable")

        return wrapper

    return decorator
