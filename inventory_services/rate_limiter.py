"""
SlidingWindowRateLimiter -- per-client request budget.

Responsibility:
    Caps how many requests a client may make within a rolling window.
    Request handlers call ``hit(client_key)`` before doing work and map
    ``RateLimitExceededError`` to a 429 response.

Architecture position:
    Services -- stateful, in-process.  Holds no database session.  The
    limiter is an ordinary object: callers create one and inject it where
    needed, and tests pass a DeterministicClock.

Invariants enforced:
    - At most ``limit`` accepted hits per client in any window of
      ``window_seconds``.
    - Rejected hits are not recorded, so a client that keeps retrying is
      admitted again as soon as its oldest hit leaves the window.
    - Thread-safe: one lock guards all buckets.

Failure modes:
    - RateLimitExceededError with ``retry_after`` in seconds.
"""

from __future__ import annotations

import threading
from collections import deque

from inventory_config.schema import RateLimitSettings
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.exceptions import RateLimitExceededError
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.rate_limiter")


class SlidingWindowRateLimiter:
    """
    Sliding-window limiter keyed by client identity.

    Contract:
        hit() records a request or raises; remaining() and sweep() never
        raise.  Buckets for idle clients stay in memory until sweep() runs.
    """

    def __init__(
        self,
        limit: int = 100,
        window_seconds: float = 60,
        clock: Clock | None = None,
    ):
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be > 0, got {window_seconds}")
        self._limit = limit
        self._window = window_seconds
        self._clock = clock or SystemClock()
        self._buckets: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls, settings: RateLimitSettings, clock: Clock | None = None
    ) -> SlidingWindowRateLimiter:
        return cls(
            limit=settings.limit,
            window_seconds=settings.window_seconds,
            clock=clock,
        )

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window

    def _prune(self, bucket: deque[float], now: float) -> None:
        cutoff = now - self._window
        while bucket and bucket[0] <= cutoff:
            bucket.popleft()

    def hit(self, client_key: str) -> int:
        """
        Record one request for ``client_key``.

        Returns:
            Requests still available in the current window.

        Raises:
            RateLimitExceededError: the client has used its budget.
        """
        now = self._clock.monotonic()
        with self._lock:
            bucket = self._buckets.setdefault(client_key, deque())
            self._prune(bucket, now)
            if len(bucket) >= self._limit:
                retry_after = bucket[0] + self._window - now
                logger.warning(
                    "rate_limit_exceeded",
                    extra={
                        "client_key": client_key,
                        "limit": self._limit,
                        "retry_after": retry_after,
                    },
                )
                raise RateLimitExceededError(
                    client_key, self._limit, int(self._window), retry_after
                )
            bucket.append(now)
            return self._limit - len(bucket)

    def remaining(self, client_key: str) -> int:
        """Requests ``client_key`` may still make without recording one."""
        now = self._clock.monotonic()
        with self._lock:
            bucket = self._buckets.get(client_key)
            if bucket is None:
                return self._limit
            self._prune(bucket, now)
            return self._limit - len(bucket)

    def reset(self, client_key: str) -> None:
        with self._lock:
            self._buckets.pop(client_key, None)

    def sweep(self) -> int:
        """
        Drop buckets whose hits have all left the window.

        Returns:
            Number of client buckets removed.
        """
        now = self._clock.monotonic()
        with self._lock:
            idle = []
            for key, bucket in self._buckets.items():
                self._prune(bucket, now)
                if not bucket:
                    idle.append(key)
            for key in idle:
                del self._buckets[key]
        if idle:
            logger.debug("rate_limit_buckets_swept", extra={"removed": len(idle)})
        return len(idle)

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._buckets)
