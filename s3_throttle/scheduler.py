from __future__ import annotations
"""Staggered request scheduling to keep S3 from answering 503 SlowDown."""
import logging
import threading
import time
from typing import Callable, Optional, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_INCREMENT_MS = 750


class DelayScheduler:
    """Delays each request by the wait already reserved by earlier ones.

    Every call to :meth:`schedule` reserves ``base_increment_ms`` on the shared
    queued-delay counter before sleeping, so a burst of N callers waits
    0, 1, ..., N-1 increments. The reservation is released when the wait
    elapses, not when the request completes.
    """

    def __init__(
        self,
        base_increment_ms: int = DEFAULT_BASE_INCREMENT_MS,
        initial_delay_ms: int = 0,
        *,
        client_name: str = "S3",
        sleep: Callable[[float], None] | None = None,
    ):
        if base_increment_ms < 0:
            raise ValueError("base_increment_ms must not be negative")
        if initial_delay_ms < 0:
            raise ValueError("initial_delay_ms must not be negative")
        self.base_increment_ms = int(base_increment_ms)
        self.client_name = client_name
        self._queued_delay_ms = int(initial_delay_ms)
        self._lock = threading.Lock()
        self._sleep = sleep or time.sleep

    @property
    def queued_delay(self) -> int:
        """Milliseconds currently reserved by requests still waiting."""

        with self._lock:
            return self._queued_delay_ms

    def schedule(
        self,
        action: Callable[[], T],
        *,
        method: str = "call",
        bucket: Optional[str] = None,
    ) -> T:
        """Run ``action`` after the queued delay and return its result."""

        with self._lock:
            delay_ms = self._queued_delay_ms
            self._queued_delay_ms += self.base_increment_ms

        try:
            self._sleep(delay_ms / 1000)
        finally:
            with self._lock:
                self._queued_delay_ms -= self.base_increment_ms
                remaining = self._queued_delay_ms

        failed = False
        try:
            return action()
        except BaseException:
            failed = True
            raise
        finally:
            LOGGER.info(
                "%s.%s(%s) => err: %s; next: %d",
                self.client_name,
                method,
                bucket,
                str(failed).lower(),
                remaining,
            )
