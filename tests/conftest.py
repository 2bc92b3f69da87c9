"""Shared fixtures: showtime factory and an in-memory showtime service."""

from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest

from cinema_showtimes.api_client import ShowtimeApiError
from cinema_showtimes.base_directory import BaseShowtimeDirectory
from cinema_showtimes.clock import Clock, FixedClock
from cinema_showtimes.models import Showtime, ShowtimeStatus, parse_show_date, parse_time_of_day


def build_showtime(
    showtime_id: int,
    show_date: str = "2024-06-01",
    start: str = "09:00",
    end: Optional[str] = "11:00",
    status: str = ShowtimeStatus.SCHEDULED,
    movie_name: Optional[str] = "Dune: Part Two",
    room_name: Optional[str] = "Room 1",
    movie_id: int = 1,
    room_id: int = 1,
) -> Showtime:
    return Showtime(
        id=showtime_id,
        movie_id=movie_id,
        room_id=room_id,
        show_date=parse_show_date(show_date),
        start_time=parse_time_of_day(start),
        end_time=parse_time_of_day(end),
        status=status,
        room_name=room_name,
        movie_name=movie_name,
    )


class FakeShowtimeDirectory(BaseShowtimeDirectory):
    """Showtime service kept in memory, with switchable failures."""

    def __init__(self, showtimes=(), clock: Optional[Clock] = None):
        self.records: Dict[int, Showtime] = {s.id: replace(s) for s in showtimes}
        self.clock = clock or FixedClock(datetime(2024, 6, 1, 10, 0))
        self.fail_list = False
        self.fail_sweep = False
        self.fail_update_ids = set()
        self.fail_delete_ids = set()
        self.calls: List[tuple] = []
        self.closed = False

    async def close(self) -> None:
        self.closed = True

    async def list(self) -> List[Showtime]:
        self.calls.append(("list",))
        if self.fail_list:
            raise ShowtimeApiError("Service unavailable", status_code=503)
        return [replace(s) for s in self.records.values()]

    async def create(self, data: Dict[str, Any]) -> Showtime:
        self.calls.append(("create", data))
        showtime = Showtime.from_dict({**data, "id": max(self.records, default=0) + 1})
        self.records[showtime.id] = showtime
        return replace(showtime)

    async def update(self, showtime_id: int, data: Dict[str, Any]) -> Optional[Showtime]:
        self.calls.append(("update", showtime_id, data))
        if showtime_id in self.fail_update_ids:
            raise ShowtimeApiError(f"Showtime {showtime_id} is locked", status_code=409)
        if showtime_id not in self.records:
            raise ShowtimeApiError("Showtime not found", status_code=404)
        record = self.records[showtime_id]
        if "Status" in data:
            record.status = ShowtimeStatus(data["Status"])
        return replace(record)

    async def delete(self, showtime_id: int) -> None:
        self.calls.append(("delete", showtime_id))
        if showtime_id in self.fail_delete_ids:
            raise ShowtimeApiError(f"Showtime {showtime_id} has bookings", status_code=400)
        self.records.pop(showtime_id, None)

    async def hide_expired_on_server(self) -> None:
        self.calls.append(("hide_expired",))
        if self.fail_sweep:
            raise ShowtimeApiError("Sweep rejected", status_code=500)
        now = self.clock.now()
        for record in self.records.values():
            if record.status == ShowtimeStatus.SCHEDULED and record.start_at() < now:
                record.status = ShowtimeStatus.HIDDEN

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def make_showtime():
    return build_showtime


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 10, 0)


@pytest.fixture
def clock(now):
    return FixedClock(now)


@pytest.fixture
def make_directory(clock):
    def factory(showtimes=(), directory_clock: Optional[Clock] = None):
        return FakeShowtimeDirectory(showtimes, clock=directory_clock or clock)
    return factory
