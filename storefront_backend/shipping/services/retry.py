# shipping/services/retry.py

"""
RETRY POLICY (COURIER HTTP)

Retries transient courier failures:
- HTTP 429 and 5xx
- network errors (CourierConnectionError)

Delay before retry N (0-based):
- Retry-After header (seconds, at least 1) when present and honored
- otherwise base_delay * 2**N + random jitter in [0, jitter)

Everything else is raised immediately. sleep/random are injectable so the
policy can be driven by a fake clock.
"""

from __future__ import annotations

import logging
import random as _random
import time
from typing import Callable, TypeVar

from shipping.services.exceptions import CourierConnectionError, CourierHTTPError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable_status(status: int) -> bool:
    return status == 429 or 500 <= status < 600


def parse_retry_after(value) -> float | None:
    """
    Seconds form only. HTTP-date values fall back to exponential backoff.
    """
    if value is None:
        return None
    try:
        seconds = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return float(max(seconds, 1))


class RetryPolicy:
    def __init__(
        self,
        *,
        max_retries: int = 5,
        base_delay: float = 0.6,
        jitter: float = 0.25,
        honor_retry_after: bool = True,
        sleep: Callable[[float], None] = time.sleep,
        random: Callable[[], float] = _random.random,
    ):
        self.max_retries = max(int(max_retries), 0)
        self.base_delay = float(base_delay)
        self.jitter = float(jitter)
        self.honor_retry_after = honor_retry_after
        self._sleep = sleep
        self._random = random

    @classmethod
    def from_settings(cls, courier_settings, **overrides) -> "RetryPolicy":
        kwargs = {
            "max_retries": courier_settings.max_retries,
            "base_delay": courier_settings.base_backoff_seconds,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    def is_retryable(self, exc: BaseException) -> bool:
        if isinstance(exc, CourierHTTPError):
            return is_retryable_status(exc.status)
        return isinstance(exc, CourierConnectionError)

    def delay_for(self, attempt: int, retry_after=None) -> float:
        if self.honor_retry_after:
            seconds = parse_retry_after(retry_after)
            if seconds is not None:
                return seconds
        return self.base_delay * (2 ** attempt) + self._random() * self.jitter

    def run(self, operation: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                return operation()
            except (CourierHTTPError, CourierConnectionError) as exc:
                if not self.is_retryable(exc) or attempt >= self.max_retries:
                    raise

                delay = self.delay_for(attempt, getattr(exc, "retry_after", None))
                logger.warning(
                    "Courier call failed, retrying",
                    extra={
                        "attempt": attempt + 1,
                        "max_retries": self.max_retries,
                        "delay": delay,
                        "error": str(exc),
                    },
                )
                self._sleep(delay)
                attempt += 1
