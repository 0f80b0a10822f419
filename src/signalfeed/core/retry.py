"""Bounded retry with exponential backoff and simple rate limiting.

Only transient backend failures are retried by default; auth errors and
malformed responses fail fast so the feed can surface them.
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections.abc import Callable
from typing import Any, TypeVar

from signalfeed.core.exceptions import BackendUnavailableError, RateLimitError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (BackendUnavailableError, RateLimitError)


# ---------------------------------------------------------------------------
# Bounded retry decorator
# ---------------------------------------------------------------------------


def retry(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    backoff_factor: float = 2.0,
    exceptions: tuple[type[BaseException], ...] = TRANSIENT_ERRORS,
) -> Callable[[F], F]:
    """Decorator that retries a function on failure with exponential backoff.

    Parameters
    ----------
    max_retries:
        Maximum number of retry attempts (0 = no retries, just the initial call).
        An instance attribute ``_max_retries`` on the decorated method's
        ``self`` overrides this value, so clients can honour their config.
    base_delay:
        Initial delay in seconds before the first retry.
    max_delay:
        Upper bound on the delay between retries.
    backoff_factor:
        Multiplier applied to the delay after each failure.
    exceptions:
        Exception types that trigger a retry.  Anything else propagates
        immediately.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            retries = max_retries
            if args and isinstance(getattr(args[0], "_max_retries", None), int):
                retries = args[0]._max_retries
            delay = base_delay
            last_exc: BaseException | None = None
            for attempt in range(1, retries + 2):  # 1 initial + retries
                try:
                    return func(*args, **kwargs)
                except exceptions as exc:
                    last_exc = exc
                    if attempt > retries:
                        break
                    logger.warning(
                        "%s attempt %d/%d failed: %s; retrying in %.1fs",
                        func.__qualname__,
                        attempt,
                        retries + 1,
                        exc,
                        delay,
                    )
                    time.sleep(delay)
                    delay = min(delay * backoff_factor, max_delay)
            logger.error(
                "%s failed after %d attempts: %s",
                func.__qualname__,
                retries + 1,
                last_exc,
            )
            raise last_exc  # type: ignore[misc]

        return wrapper  # type: ignore[return-value]

    return decorator


# ---------------------------------------------------------------------------
# Simple token-bucket rate limiter
# ---------------------------------------------------------------------------


class RateLimiter:
    """Thread-safe minimum-interval rate limiter.

    Backend calls run on worker threads (``asyncio.to_thread``), so two
    concurrent direction fetches share one limiter and are spaced out.

    Parameters
    ----------
    calls_per_second:
        Maximum sustained call rate.  ``5.0`` means a 200 ms minimum gap.
    """

    def __init__(self, calls_per_second: float = 5.0) -> None:
        if calls_per_second <= 0:
            raise ValueError("calls_per_second must be positive")
        self._min_interval = 1.0 / calls_per_second
        self._last_call = 0.0
        self._lock = threading.Lock()

    def acquire(self) -> None:
        """Block until a call is allowed."""
        with self._lock:
            now = time.monotonic()
            wait = self._min_interval - (now - self._last_call)
            if wait > 0:
                time.sleep(wait)
            self._last_call = time.monotonic()
