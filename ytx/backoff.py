"""Retry with exponential backoff."""

import functools
import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 3
BASE_DELAY = 0.5  # seconds before the second attempt; doubles after that

ExceptionTypes = Union[Type[BaseException], Tuple[Type[BaseException], ...]]


def backoff_delay(attempt: int, base: float = BASE_DELAY) -> float:
    """Delay to wait before 1-indexed `attempt` (no delay before the first)."""
    if attempt < 2:
        return 0.0
    return base * (2 ** (attempt - 2))


def retry(
    operation: Callable[[], T],
    max_attempts: int = MAX_ATTEMPTS,
    on_exceptions: ExceptionTypes = Exception,
    base: float = BASE_DELAY,
    sleep: Optional[Callable[[float], None]] = None,
    label: str = "operation",
) -> T:
    """
    Call `operation` until it succeeds or `max_attempts` calls have failed.

    Waits base, 2*base, 4*base, ... seconds between attempts and never after
    the last one. Only exceptions matching `on_exceptions` are retried, and an
    exception whose `retryable` attribute is False is re-raised at once. When
    every attempt fails, the last exception is raised.
    """
    sleep = sleep or time.sleep
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        if attempt > 1:
            sleep(backoff_delay(attempt, base))
        try:
            return operation()
        except on_exceptions as e:
            if not getattr(e, "retryable", True) or attempt == max_attempts:
                raise
            logger.warning(
                "%s failed (attempt %d/%d): %s", label, attempt, max_attempts, e
            )
    raise AssertionError("unreachable")


def backoff(
    on_exceptions: ExceptionTypes = Exception,
    tries: int = MAX_ATTEMPTS,
    base: float = BASE_DELAY,
    sleep: Optional[Callable[[float], None]] = None,
):
    """Decorator form of retry()."""
    def deco(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            return retry(
                lambda: fn(*args, **kwargs),
                max_attempts=tries,
                on_exceptions=on_exceptions,
                base=base,
                sleep=sleep,
                label=fn.__name__,
            )
        return wrapper
    return deco
