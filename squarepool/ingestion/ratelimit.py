from __future__ import annotations

import threading
import time

from squarepool.ingestion.errors import SyncCancelled


class RateLimiter:
    """Token bucket shared by every request a client makes.

    ``wait`` blocks until a token is available rather than rejecting the call.
    When a cancel event is given, the wait ends early with SyncCancelled.
    """

    def __init__(self, rate_per_second: float, burst: int = 1, *, time_fn=time.monotonic, sleep_fn=time.sleep) -> None:
        if rate_per_second <= 0:
            raise ValueError("rate_per_second must be positive")
        self.capacity = max(1, int(burst))
        self.tokens = float(self.capacity)
        self.refill_rate_per_sec = float(rate_per_second)
        self._now = time_fn
        self._sleep = sleep_fn
        self.last_refill = time_fn()
        self._lock = threading.Lock()

    def allow(self, n: int = 1) -> bool:
        with self._lock:
            self._refill()
            if self.tokens >= n:
                self.tokens -= n
                return True
            return False

    def wait(self, cancel: threading.Event | None = None) -> None:
        while True:
            if cancel is not None and cancel.is_set():
                raise SyncCancelled("cancelled while waiting for rate limiter")
            with self._lock:
                self._refill()
                if self.tokens >= 1:
                    self.tokens -= 1
                    return
                delay = (1 - self.tokens) / self.refill_rate_per_sec
            if cancel is not None:
                if cancel.wait(delay):
                    raise SyncCancelled("cancelled while waiting for rate limiter")
            else:
                self._sleep(delay)

    def _refill(self) -> None:
        now = self._now()
        elapsed = max(0.0, now - self.last_refill)
        self.last_refill = now
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate_per_sec)
