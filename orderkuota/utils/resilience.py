"""Transport retries and request throttling for the HTTP clients."""

import functools
import time
from collections import deque
from threading import Lock
from typing import Callable, ParamSpec, TypeVar

from orderkuota.utils.logging import get_logger


P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger("orderkuota.resilience")

# Upper bound on a single backoff sleep
MAX_BACKOFF = 30.0


class RetryError(Exception):
    """Every attempt failed; the last failure is chained as __cause__."""


class RateLimitExceeded(Exception):
    """No request slot became free in time."""


def with_retry(
    max_attempts: int = 3,
    backoff_base: float = 2.0,
    exceptions: tuple = (Exception,),
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Retry a call that fails with one of `exceptions`.

    Attempt n (0-based) that fails sleeps backoff_base ** n seconds, capped
    at MAX_BACKOFF, before the next one. At least one attempt is always
    made. Anything not listed in `exceptions` propagates immediately.
    """
    attempts = max(1, max_attempts)

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == attempts - 1:
                        logger.error(f"{func.__name__} gave up after {attempts} attempt(s): {type(e).__name__}")
                        raise RetryError(f"All {attempts} attempts failed") from e
                    delay = min(backoff_base ** attempt, MAX_BACKOFF)
                    logger.warning(
                        f"{func.__name__} attempt {attempt + 1}/{attempts} failed with "
                        f"{type(e).__name__}, retrying in {delay:.1f}s"
                    )
                    time.sleep(delay)

        return wrapper
    return decorator


class RateLimiter:
    """At most `requests_per_minute` acquisitions in any 60 second window."""

    window = 60.0

    def __init__(self, requests_per_minute: int = 60):
        self.requests_per_minute = requests_per_minute
        self._requests: deque[float] = deque()
        self._lock = Lock()

    def _next_free(self, now: float) -> float:
        """Seconds until a slot frees up; 0 when one is free now."""
        while self._requests and self._requests[0] <= now - self.window:
            self._requests.popleft()
        if len(self._requests) < self.requests_per_minute:
            return 0.0
        return self._requests[0] + self.window - now

    def acquire(self, block: bool = True, timeout: float | None = None) -> bool:
        """Take a slot, waiting for one if `block` is set.

        Raises:
            RateLimitExceeded: the window is full and block is False, or
                no slot freed up within `timeout` seconds
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            with self._lock:
                now = time.monotonic()
                wait = self._next_free(now)
                if wait <= 0:
                    self._requests.append(now)
                    return True

            if not block:
                raise RateLimitExceeded(f"Rate limit of {self.requests_per_minute}/min reached")
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise RateLimitExceeded(f"No request slot within {timeout}s")
                wait = min(wait, remaining)

            logger.debug(f"Rate limit reached, waiting {wait:.2f}s")
            time.sleep(min(wait, 0.1))

    def __call__(self, func: Callable[P, T]) -> Callable[P, T]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            self.acquire()
            return func(*args, **kwargs)
        return wrapper
