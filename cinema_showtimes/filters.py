"""
Showtime filtering engine.

Classifies showtimes by search term, status and temporal category. All
predicates are pure; filter() is order-preserving and never raises.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Hashable, List, Optional, Sequence, Tuple, Union

from loguru import logger

from .models import (
    DateFilter,
    Showtime,
    ShowtimeFilters,
    ShowtimeStatus,
    StatusFilter,
    parse_show_date,
)
from .text import contains_normalized

SUNDAY = calendar.SUNDAY


def _add_months(day: date, months: int) -> date:
    """First day of the month `months` after the month containing `day`."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


@dataclass(frozen=True)
class DateRanges:
    """Calendar boundaries derived from a single "now"."""

    now: datetime
    today: date
    tomorrow: date
    this_week_end: date
    next_week_start: date
    next_week_end: date
    this_month_start: date
    this_month_end: date
    next_month_start: date
    next_month_end: date

    @classmethod
    def from_now(cls, now: datetime, first_weekday: int = SUNDAY) -> "DateRanges":
        """
        Compute every category boundary for the given instant.

        Args:
            now: Current local time
            first_weekday: First day of the week (0=Monday ... 6=Sunday)

        Returns:
            DateRanges instance
        """
        today = now.date()
        weekday_index = (today.weekday() - first_weekday) % 7
        this_week_end = today + timedelta(days=7 - weekday_index)
        next_week_start = this_week_end + timedelta(days=1)

        this_month_start = _add_months(today, 0)
        next_month_start = _add_months(today, 1)

        return cls(
            now=now,
            today=today,
            tomorrow=today + timedelta(days=1),
            this_week_end=this_week_end,
            next_week_start=next_week_start,
            next_week_end=next_week_start + timedelta(days=6),
            this_month_start=this_month_start,
            this_month_end=next_month_start - timedelta(days=1),
            next_month_start=next_month_start,
            next_month_end=_add_months(today, 2) - timedelta(days=1),
        )


@dataclass(frozen=True)
class FilterStats:
    """Counters shown above the showtime table."""

    total: int
    scheduled: int
    hidden: int
    filtered: int


def matches_search(showtime: Showtime, search: str) -> bool:
    """True when the folded term occurs in the room or movie name."""
    if not search:
        return True
    return contains_normalized(showtime.room_name, search) or contains_normalized(showtime.movie_name, search)


def matches_status(showtime: Showtime, status_filter: str) -> bool:
    """Exact status comparison; "all" and unknown filters let everything through."""
    if status_filter == StatusFilter.SCHEDULED:
        return showtime.status == ShowtimeStatus.SCHEDULED
    if status_filter == StatusFilter.HIDDEN:
        return showtime.status == ShowtimeStatus.HIDDEN
    return True


def _coerce_custom_date(value: Union[date, str, None]) -> Tuple[bool, Optional[date]]:
    """Returns (is_set, parsed); parsed is None when the value is set but unparseable."""
    if value is None or value == "":
        return False, None
    try:
        return True, parse_show_date(value)
    except (TypeError, ValueError):
        return True, None


def matches_date(
    showtime: Showtime,
    date_filter: str,
    ranges: DateRanges,
    custom_date: Union[date, str, None] = None,
) -> bool:
    """
    Check a showtime against a temporal category.

    Args:
        showtime: Showtime to classify
        date_filter: DateFilter value
        ranges: Boundaries computed for the current instant
        custom_date: Day chosen for the custom-date category

    Returns:
        True if the showtime belongs to the category
    """
    show_date = showtime.show_date

    if date_filter == DateFilter.TODAY:
        return show_date == ranges.today
    if date_filter == DateFilter.TOMORROW:
        return show_date == ranges.tomorrow
    if date_filter == DateFilter.THIS_WEEK:
        return ranges.today <= show_date <= ranges.this_week_end
    if date_filter == DateFilter.NEXT_WEEK:
        return ranges.next_week_start <= show_date <= ranges.next_week_end
    if date_filter == DateFilter.THIS_MONTH:
        return ranges.this_month_start <= show_date <= ranges.this_month_end
    if date_filter == DateFilter.NEXT_MONTH:
        return ranges.next_month_start <= show_date <= ranges.next_month_end
    if date_filter == DateFilter.UPCOMING:
        return show_date >= ranges.today
    if date_filter == DateFilter.PAST:
        return show_date < ranges.today
    if date_filter == DateFilter.EXPIRED:
        # End time, unlike the expiry sweep which uses the start time
        return showtime.end_at() < ranges.now
    if date_filter == DateFilter.ACTIVE:
        return showtime.start_at() <= ranges.now <= showtime.end_at()
    if date_filter == DateFilter.CUSTOM_DATE:
        is_set, selected = _coerce_custom_date(custom_date)
        if not is_set:
            return True
        return selected is not None and show_date == selected

    # "all" and unrecognized categories
    return True


class FilterEngine:
    """
    Composes the search, status and temporal predicates over a collection.

    The last computed result is memoized against a key built from every
    input, so re-rendering with unchanged inputs does not re-filter.
    """

    def __init__(self, first_weekday: int = SUNDAY):
        """
        Initialize the engine.

        Args:
            first_weekday: First day of the week (0=Monday ... 6=Sunday)
        """
        if not 0 <= first_weekday <= 6:
            raise ValueError(f"first_weekday must be between 0 and 6, got {first_weekday}")
        self.first_weekday = first_weekday
        self._cache_key: Optional[Hashable] = None
        self._cache_value: List[Showtime] = []
        self.cache_hits = 0
        self.cache_misses = 0

    def date_ranges(self, now: datetime) -> DateRanges:
        return DateRanges.from_now(now, self.first_weekday)

    def matches(self, showtime: Showtime, filters: ShowtimeFilters, ranges: DateRanges) -> bool:
        """All predicates ANDed for a single showtime."""
        return (
            matches_search(showtime, filters.search)
            and matches_status(showtime, filters.status_filter)
            and matches_date(showtime, filters.date_filter, ranges, filters.custom_date)
        )

    def filter(
        self,
        showtimes: Sequence[Showtime],
        filters: ShowtimeFilters,
        now: datetime,
    ) -> List[Showtime]:
        """
        Return the showtimes matching every active filter, in input order.

        Args:
            showtimes: Collection to filter
            filters: Current filter-bar state
            now: Instant temporal categories are evaluated against

        Returns:
            New list with the matching showtimes
        """
        key = (
            # A hit must return the caller's own objects, not equal copies
            tuple((id(s), s.fingerprint()) for s in showtimes),
            filters.cache_key(),
            now,
            self.first_weekday,
        )
        if key == self._cache_key:
            self.cache_hits += 1
            return list(self._cache_value)

        self.cache_misses += 1
        ranges = self.date_ranges(now)
        result = [s for s in showtimes if self.matches(s, filters, ranges)]
        date_filter = getattr(filters.date_filter, "value", filters.date_filter)
        status_filter = getattr(filters.status_filter, "value", filters.status_filter)
        logger.debug(
            f"[Filter] {len(result)} of {len(showtimes)} showtimes kept | "
            f"search='{filters.search}' date={date_filter} status={status_filter}"
        )

        self._cache_key = key
        self._cache_value = result
        return list(result)

    @staticmethod
    def stats(showtimes: Sequence[Showtime], filtered: Sequence[Showtime]) -> FilterStats:
        return FilterStats(
            total=len(showtimes),
            scheduled=sum(1 for s in showtimes if s.status == ShowtimeStatus.SCHEDULED),
            hidden=sum(1 for s in showtimes if s.status == ShowtimeStatus.HIDDEN),
            filtered=len(filtered),
        )
