# uiauto_wda/waits.py
"""
@file waits.py
@brief Deadline object and sleep-free polling loops.

Resolution polls back to back: every iteration performs at least one
remote round trip, which paces the loop. Cancellation is cooperative:
loops and strategies check the deadline before starting work.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from .exceptions import DeadlineExceededError, UIAutoError
from .timinglogger import TIMING_LOGGER

T = TypeVar("T")


def _now() -> float:
    """Monotonic time source for deterministic timeout calculations."""
    return time.monotonic()


class Deadline:
    """
    Absolute deadline with a cancel flag.

    Safe to share with another thread that may call cancel(); the
    polling side only reads it.
    """

    def __init__(self, timeout: float):
        self.timeout = max(float(timeout), 0.0)
        self.start = _now()
        self.end = self.start + self.timeout
        self._cancelled = threading.Event()

    @classmethod
    def after_ms(cls, timeout_ms: int) -> Deadline:
        return cls(timeout_ms / 1000.0)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._cancelled.is_set() or _now() >= self.end

    def remaining(self) -> float:
        if self._cancelled.is_set():
            return 0.0
        return max(self.end - _now(), 0.0)

    def elapsed(self) -> float:
        return _now() - self.start

    def __repr__(self) -> str:
        return f"Deadline(timeout={self.timeout}, remaining={self.remaining():.3f}, cancelled={self.cancelled})"


def poll_until_resolved(
    attempt: Callable[[], T],
    deadline: Deadline,
    description: str = "element",
    exceptions: Tuple[Type[BaseException], ...] = (UIAutoError,),
) -> T:
    """
    Call attempt() back to back until it returns or the deadline passes.

    Exceptions listed in `exceptions` count as a failed iteration; the last
    one is wrapped in DeadlineExceededError. Anything else propagates.
    """
    last_exception: Optional[BaseException] = None
    attempt_count = 0

    if TIMING_LOGGER.is_enabled():
        TIMING_LOGGER.poll_started(description, deadline)

    while not deadline.expired:
        attempt_count += 1
        try:
            result = attempt()
        except exceptions as e:
            last_exception = e
            continue

        if TIMING_LOGGER.is_enabled():
            TIMING_LOGGER.poll_succeeded(description, deadline, attempt_count)
        return result

    elapsed = deadline.elapsed()
    if TIMING_LOGGER.is_enabled():
        TIMING_LOGGER.poll_failed(description, deadline, attempt_count, last_exception)

    reason = "cancelled" if deadline.cancelled else "deadline exceeded"
    if last_exception is not None:
        message = f"{reason} after {deadline.timeout}s: {last_exception}"
    else:
        message = f"element '{description}' not found: {reason}"

    raise DeadlineExceededError(
        message,
        original_exception=last_exception,
        description=description,
        timeout=deadline.timeout,
        attempt_count=attempt_count,
        elapsed_time=elapsed,
    ) from last_exception


def poll_until_false(
    predicate: Callable[[], bool],
    deadline: Deadline,
    description: str = "condition to become false",
) -> None:
    """Call predicate() back to back until it returns False or the deadline passes."""
    attempt_count = 0

    if TIMING_LOGGER.is_enabled():
        TIMING_LOGGER.poll_started(description, deadline)

    while not deadline.expired:
        attempt_count += 1
        if not predicate():
            if TIMING_LOGGER.is_enabled():
                TIMING_LOGGER.poll_succeeded(description, deadline, attempt_count)
            return

    elapsed = deadline.elapsed()
    if TIMING_LOGGER.is_enabled():
        TIMING_LOGGER.poll_failed(description, deadline, attempt_count)
    raise DeadlineExceededError(
        f"Timed out waiting for {description} after {deadline.timeout}s (condition kept returning true)",
        description=description,
        timeout=deadline.timeout,
        attempt_count=attempt_count,
        elapsed_time=elapsed,
    )
