"""
Retry helpers for calls to the remote task service.

Transient failures (5xx responses, timeouts, dropped connections) are retried
with exponential backoff and jitter; client errors are raised immediately.
"""

import functools
import logging
import random
import time
from typing import Any, Callable, Optional, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Backoff parameters for retried calls."""

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        multiplier: float = 2.0,
        jitter_ratio: float = 0.2,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if base_delay < 0:
            raise ValueError("base_delay must not be negative")
        if multiplier < 1.0:
            raise ValueError("multiplier must be >= 1.0")
        if not 0.0 <= jitter_ratio <= 1.0:
            raise ValueError("jitter_ratio must be between 0.0 and 1.0")

        self.max_retries = max_retries
        self.base_delay = base_delay
        self.multiplier = multiplier
        self.jitter_ratio = jitter_ratio

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt`` (0-indexed)."""
        delay = self.base_delay * (self.multiplier ** attempt)
        if self.jitter_ratio:
            variance = delay * self.jitter_ratio
            delay += random.uniform(-variance, variance)
        return max(0.0, delay)


def is_retryable_error(exception: BaseException) -> bool:
    """
    Whether an exception is worth another attempt.

    Only 5xx status errors are retried; 4xx responses are permanent. Timeouts
    and other transport errors are retried.
    """
    # HTTPStatusError is an HTTPError too, so check it first
    if isinstance(exception, httpx.HTTPStatusError):
        return 500 <= exception.response.status_code < 600

    if isinstance(exception, (httpx.TimeoutException, httpx.TransportError)):
        return True

    return False


def with_retry(
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator retrying the wrapped call on transient HTTP failures.

    Args:
        policy: Backoff parameters, ``RetryPolicy()`` by default
        sleep: Wait function, replaceable in tests

    Example:
        >>> @with_retry(RetryPolicy(max_retries=2))
        ... def fetch(client, url):
        ...     response = client.get(url)
        ...     response.raise_for_status()
        ...     return response
    """
    policy = policy or RetryPolicy()

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            name = getattr(func, "__name__", repr(func))
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except httpx.HTTPError as exc:
                    if not is_retryable_error(exc):
                        raise
                    if attempt >= policy.max_retries:
                        logger.warning(f"{name}: giving up after {policy.max_retries} retries: {exc}")
                        raise
                    delay = policy.delay_for(attempt)
                    logger.info(
                        f"{name}: retry {attempt + 1}/{policy.max_retries} in {delay:.2f}s after: {exc}"
                    )
                    sleep(delay)
                    attempt += 1

        return wrapper

    return decorator
