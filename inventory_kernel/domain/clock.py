"""
Clock -- injectable time source.

Movement and bill timestamps, the invoice date (and with it the financial
year in a bill number) and rate-limit windows all read time through a Clock,
never through ``datetime.now()`` or ``time.monotonic()`` directly.

SystemClock is the only implementation that touches the real clock.
"""

import time
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

# Start of financial year 2024-25, noon UTC
DEFAULT_TEST_TIME = datetime(2024, 4, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """
    Guarantees:
        - ``now()`` is timezone-aware (UTC).
        - ``monotonic()`` never goes back.
    """

    @abstractmethod
    def now(self) -> datetime: ...

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds on an arbitrary monotonic scale (for windows)."""

    def today(self) -> date:
        """Calendar date of ``now()``; the default invoice date."""
        return self.now().date()


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()


class DeterministicClock(Clock):
    """
    Test clock that only moves when told to.

    ``now()`` and ``monotonic()`` advance together, so a test can step
    through a rate-limit window or space movements apart in created_at.
    """

    def __init__(self, start: datetime | None = None):
        self._start = start or DEFAULT_TEST_TIME
        self._elapsed = 0.0

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._elapsed)

    def monotonic(self) -> float:
        return self._elapsed

    def advance(self, seconds: float = 1) -> None:
        if seconds < 0:
            raise ValueError(f"A clock cannot go back: {seconds}")
        self._elapsed += seconds

    def tick(self) -> datetime:
        """Advance one second and return the new time."""
        self.advance(1)
        return self.now()
