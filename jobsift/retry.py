"""Retry decorator with exponential backoff for calls to external services."""
from __future__ import annotations

import functools
import random
import time
from typing import Any, Callable, Tuple, Type

from jobsift.log import get_logger

log = get_logger(__name__)


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    give_up: Callable[[BaseException], bool] | None = None,
    sleep: Callable[[float], None] | None = None,
) -> Callable:
    """Decorator: retries the wrapped function with exponential backoff.

    ``give_up`` lets callers stop early on errors that are retryable by type
    but permanent by content (a 401 from an HTTP API, say). ``sleep`` is
    looked up at call time when omitted so tests can patch ``time.sleep``.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            pause = sleep or time.sleep
            for attempt in range(1, max_attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if attempt == max_attempts or (give_up is not None and give_up(exc)):
                        log.error(
                            "%s failed after %d attempt(s): %s",
                            fn.__qualname__,
                            attempt,
                            exc,
                        )
                        raise
                    delay = min(base_delay * (backoff_factor ** (attempt - 1)), max_delay)
                    if jitter:
                        delay *= 0.5 + random.random()
                    log.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        fn.__qualname__,
                        attempt,
                        max_attempts,
                        exc,
                        delay,
                    )
                    pause(delay)
            raise AssertionError("unreachable")  # pragma: no cover

        return wrapper

    return decorator


def is_client_error(exc: BaseException) -> bool:
    """True for HTTP 4xx responses other than 429; retrying them is pointless."""
    response = getattr(exc, "response", None)
    code = getattr(response, "status_code", None)
    return isinstance(code, int) and 400 <= code < 500 and code != 429
