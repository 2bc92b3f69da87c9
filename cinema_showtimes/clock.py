"""Injectable source of the current time."""

from abc import ABC, abstractmethod
from datetime import datetime


class Clock(ABC):
    """Supplies "now" to everything that classifies showtimes by time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current local time (naive datetime)."""
        pass


class SystemClock(Clock):
    """Wall clock."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock pinned to a given instant, movable by hand."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def set(self, instant: datetime) -> None:
        self.instant = instant
