"""Clock capability supplying the reference time for temporal checks."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    """Abstract clock interface."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current instant as a timezone-aware UTC datetime."""
        pass


class SystemClock(Clock):
    """Wall clock of the running process."""

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant (replays, tests)."""

    def __init__(self, instant: datetime):
        """Initialize with the instant to report; naive values are taken as UTC."""
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant.astimezone(timezone.utc)

    def now(self) -> datetime:
        """Return the frozen instant."""
        return self._instant
