"""Bounded retry with backoff for flaky filesystem operations."""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def linear_backoff(step: float) -> Callable[[int], float]:
    """Backoff of ``attempt * step`` seconds after the given failed attempt."""
    return lambda attempt: attempt * step


def retry_with_backoff(
    operation: Callable[[], T],
    max_attempts: int = 3,
    backoff: Callable[[int], float] = linear_backoff(0.5),
    retry_on: tuple[type[BaseException], ...] = (OSError,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``operation`` until it succeeds or ``max_attempts`` is exhausted.

    Only exceptions in ``retry_on`` are retried; the last one is re-raised
    once attempts run out. ``backoff(attempt)`` gives the delay after the
    1-based ``attempt`` that failed.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except retry_on as exc:
            if attempt == max_attempts:
                raise
            delay = backoff(attempt)
            logger.debug(f"Attempt {attempt}/{max_attempts} failed ({exc}), retrying in {delay:.2f}s")
            sleep(delay)
    raise AssertionError("unreachable")
