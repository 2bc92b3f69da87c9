"""Data models for showtime administration."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Union


class ShowtimeStatus(str, Enum):
    """Lifecycle states recognized by the filtering core."""

    SCHEDULED = "Scheduled"
    HIDDEN = "Hidden"


class StatusFilter(str, Enum):
    """Status narrowing chosen in the filter bar."""

    ALL = "all"
    SCHEDULED = "scheduled"
    HIDDEN = "hidden"


class DateFilter(str, Enum):
    """Temporal categories a showtime can be classified into."""

    ALL = "all"
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this-week"
    NEXT_WEEK = "next-week"
    THIS_MONTH = "this-month"
    NEXT_MONTH = "next-month"
    UPCOMING = "upcoming"
    PAST = "past"
    EXPIRED = "expired"
    ACTIVE = "active"
    CUSTOM_DATE = "custom-date"


def parse_show_date(value: Union[str, date]) -> date:
    """
    Parse a calendar date.

    Args:
        value: date, datetime or "YYYY-MM-DD" string (a trailing ISO time part is ignored)

    Returns:
        date object

    Raises:
        ValueError: If the value is not a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid show date: {value!r}")
    return date.fromisoformat(value.strip()[:10])


def parse_time_of_day(value: Union[str, time, None]) -> Optional[time]:
    """
    Parse a time of day in "HH:MM" or "HH:MM:SS" format.

    Returns:
        time object, or None for an empty value

    Raises:
        ValueError: If the value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(float(parts[2])) if len(parts) == 3 else 0
    return time(hour, minute, second)


def _parse_status(value: Optional[str]) -> str:
    # Labels used elsewhere in the system (e.g. "Cancelled") are kept verbatim
    try:
        return ShowtimeStatus(value)
    except ValueError:
        return value or ""


@dataclass
class Showtime:
    """Represents a single scheduled screening."""

    id: int
    movie_id: Optional[int]
    room_id: Optional[int]
    show_date: date
    start_time: time
    end_time: Optional[time] = None
    status: str = ShowtimeStatus.SCHEDULED
    room_name: Optional[str] = None
    movie_name: Optional[str] = None
    movie_duration: Optional[int] = None  # in minutes

    def __str__(self) -> str:
        """Human-readable representation."""
        end = self.end_time.strftime("%H:%M") if self.end_time else "?"
        movie = self.movie_name or f"movie {self.movie_id}"
        room = self.room_name or f"room {self.room_id}"
        return (
            f"#{self.id} {movie} - {room} "
            f"{self.show_date.isoformat()} {self.start_time.strftime('%H:%M')}-{end} "
            f"[{getattr(self.status, 'value', self.status)}]"
        )

    def start_at(self) -> datetime:
        """Instant the screening starts."""
        return datetime.combine(self.show_date, self.start_time)

    def end_at(self) -> datetime:
        """Instant the screening ends (start instant when no end time is known)."""
        return datetime.combine(self.show_date, self.end_time or self.start_time)

    def fingerprint(self) -> tuple:
        """Hashable snapshot of every field, used as a memoization key."""
        return (
            self.id,
            self.movie_id,
            self.room_id,
            self.show_date,
            self.start_time,
            self.end_time,
            str(getattr(self.status, "value", self.status)),
            self.room_name,
            self.movie_name,
            self.movie_duration,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "movie_id": self.movie_id,
            "room_id": self.room_id,
            "show_date": self.show_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M:%S"),
            "end_time": self.end_time.strftime("%H:%M:%S") if self.end_time else None,
            "status": getattr(self.status, "value", self.status),
            "room_name": self.room_name,
            "movie_name": self.movie_name,
            "movie_duration": self.movie_duration,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Showtime":
        """
        Create Showtime instance from a dictionary.

        Accepts both the package's own to_dict() shape and the backend record
        shape (Showtime_ID, Show_Date, Start_Time, nested Rooms/Movies, ...).

        Args:
            data: Raw record

        Returns:
            Showtime instance

        Raises:
            ValueError: If the record lacks an id, date or start time
        """
        if "Showtime_ID" in data:
            return cls._from_backend(data)

        if data.get("id") is None:
            raise ValueError("Showtime record has no id")
        start_time = parse_time_of_day(data.get("start_time"))
        if start_time is None:
            raise ValueError(f"Showtime {data['id']} has no start time")
        return cls(
            id=int(data["id"]),
            movie_id=data.get("movie_id"),
            room_id=data.get("room_id"),
            show_date=parse_show_date(data.get("show_date")),
            start_time=start_time,
            end_time=parse_time_of_day(data.get("end_time")),
            status=_parse_status(data.get("status")),
            room_name=data.get("room_name"),
            movie_name=data.get("movie_name"),
            movie_duration=data.get("movie_duration"),
        )

    @classmethod
    def _from_backend(cls, data: Dict[str, Any]) -> "Showtime":
        rooms = data.get("Rooms") or {}
        movie = data.get("Movies") or data.get("Movie") or {}

        start_time = parse_time_of_day(data.get("Start_Time"))
        if start_time is None:
            raise ValueError(f"Showtime {data['Showtime_ID']} has no start time")

        return cls(
            id=int(data["Showtime_ID"]),
            movie_id=data.get("Movie_ID") or movie.get("Movie_ID"),
            room_id=data.get("Cinema_Room_ID") or rooms.get("Cinema_Room_ID"),
            show_date=parse_show_date(data.get("Show_Date")),
            start_time=start_time,
            end_time=parse_time_of_day(data.get("End_Time")),
            status=_parse_status(data.get("Status")),
            room_name=data.get("Room_Name") or rooms.get("Room_Name"),
            movie_name=movie.get("Movie_Name"),
            movie_duration=movie.get("Duration"),
        )


@dataclass(frozen=True)
class ShowtimeFilters:
    """Transient filter-bar state; never persisted."""

    search: str = ""
    date_filter: str = DateFilter.ALL
    custom_date: Optional[Union[date, str]] = None
    status_filter: str = StatusFilter.ALL

    def with_search(self, search: str) -> "ShowtimeFilters":
        return replace(self, search=search)

    def with_date_filter(self, date_filter: str) -> "ShowtimeFilters":
        """Switch category; leaving custom-date drops the chosen day."""
        custom_date = self.custom_date if date_filter == DateFilter.CUSTOM_DATE else None
        return replace(self, date_filter=date_filter, custom_date=custom_date)

    def with_custom_date(self, custom_date: Optional[Union[date, str]]) -> "ShowtimeFilters":
        return replace(self, custom_date=custom_date)

    def with_status_filter(self, status_filter: str) -> "ShowtimeFilters":
        return replace(self, status_filter=status_filter)

    def date_cleared(self) -> "ShowtimeFilters":
        return replace(self, date_filter=DateFilter.ALL, custom_date=None)

    def cleared(self) -> "ShowtimeFilters":
        return ShowtimeFilters()

    def cache_key(self) -> tuple:
        return (
            self.search,
            str(getattr(self.date_filter, "value", self.date_filter)),
            str(self.custom_date) if self.custom_date is not None else None,
            str(getattr(self.status_filter, "value", self.status_filter)),
        )


@dataclass
class OperationResult:
    """Outcome of a mutation requested from the showtime service."""

    success: bool
    message: Optional[str] = None
    failed_ids: List[int] = field(default_factory=list)


@dataclass
class ExpirySweepResult(OperationResult):
    """Outcome of hiding every started Scheduled showtime."""

    hidden_ids: Set[int] = field(default_factory=set)
