"""
Clock -- injectable time source.

Responsibility:
    Services stamp new records (warehouse logs, payments, expenses) with the
    current date.  They receive a Clock instead of calling ``date.today()``
    so tests and replays are deterministic.

Architecture position:
    Kernel > Domain.  SystemClock is the one place that reads real time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Guarantees:
        - ``now()`` returns a timezone-aware ``datetime``.
        - ``today()`` returns the ISO date string used on stored records.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...

    def today(self) -> str:
        """Current date as ``YYYY-MM-DD``."""
        return self.now().date().isoformat()


class SystemClock(Clock):
    """Production clock returning actual UTC time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    ``now()`` returns the same value until ``advance()`` moves it forward.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc
        )
        self._advance_seconds = 0

    def now(self) -> datetime:
        return self._fixed_time + timedelta(seconds=self._advance_seconds)

    def advance(self, seconds: int = 1) -> None:
        self._advance_seconds += seconds

    def advance_days(self, days: int = 1) -> None:
        self.advance(days * 86400)
