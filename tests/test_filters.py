"""Tests for the showtime filter engine."""

import calendar
from datetime import date, datetime, timedelta

import pytest

from cinema_showtimes.filters import DateRanges, FilterEngine, matches_date, matches_search, matches_status
from cinema_showtimes.models import DateFilter, ShowtimeFilters, ShowtimeStatus, StatusFilter

# 2024-06-01 is a Saturday
SATURDAY_MORNING = datetime(2024, 6, 1, 10, 0)


def ranges(now=SATURDAY_MORNING, first_weekday=calendar.SUNDAY):
    return DateRanges.from_now(now, first_weekday)


def test_scheduled_filter_on_todays_showtimes(make_showtime):
    showtimes = [
        make_showtime(1, status=ShowtimeStatus.SCHEDULED),
        make_showtime(2, status=ShowtimeStatus.SCHEDULED),
        make_showtime(3, status=ShowtimeStatus.HIDDEN),
    ]
    filters = ShowtimeFilters(search="", date_filter=DateFilter.ALL, status_filter=StatusFilter.SCHEDULED)

    result = FilterEngine().filter(showtimes, filters, SATURDAY_MORNING)

    assert [s.id for s in result] == [1, 2]
    assert all(s.status == ShowtimeStatus.SCHEDULED for s in result)


def test_search_ignores_accents_and_case(make_showtime):
    showtime = make_showtime(1, movie_name="Avéngers: Kỷ Nguyên", room_name="Phòng 2")

    assert matches_search(showtime, "avengers")
    assert matches_search(showtime, "KY NGUYEN")
    assert matches_search(showtime, "phong")
    assert not matches_search(showtime, "batman")


def test_empty_search_matches_records_without_names(make_showtime):
    assert matches_search(make_showtime(1, movie_name=None, room_name=None), "")
    assert not matches_search(make_showtime(1, movie_name=None, room_name=None), "a")


@pytest.mark.parametrize("status", [ShowtimeStatus.SCHEDULED, ShowtimeStatus.HIDDEN, "Cancelled"])
def test_status_all_matches_everything(make_showtime, status):
    assert matches_status(make_showtime(1, status=status), StatusFilter.ALL)


def test_unknown_status_label_matches_neither_bucket(make_showtime):
    showtime = make_showtime(1, status="Cancelled")
    assert not matches_status(showtime, StatusFilter.SCHEDULED)
    assert not matches_status(showtime, StatusFilter.HIDDEN)


def test_today_and_tomorrow_never_overlap(make_showtime):
    for offset in range(-3, 4):
        day = (SATURDAY_MORNING.date() + timedelta(days=offset)).isoformat()
        showtime = make_showtime(1, show_date=day)
        hits = [
            matches_date(showtime, DateFilter.TODAY, ranges()),
            matches_date(showtime, DateFilter.TOMORROW, ranges()),
        ]
        assert sum(hits) <= 1
        assert hits[0] == (offset == 0)
        assert hits[1] == (offset == 1)


def test_this_week_on_last_day_of_week_reaches_one_day_ahead(make_showtime):
    # Saturday is the last day of a Sunday-first week: window is [Sat, Sun]
    r = ranges()
    assert r.this_week_end == date(2024, 6, 2)
    assert matches_date(make_showtime(1, show_date="2024-06-02"), DateFilter.THIS_WEEK, r)
    assert not matches_date(make_showtime(1, show_date="2024-06-03"), DateFilter.THIS_WEEK, r)
    assert not matches_date(make_showtime(1, show_date="2024-05-31"), DateFilter.THIS_WEEK, r)


def test_this_week_on_first_day_of_week(make_showtime):
    r = ranges(datetime(2024, 6, 2, 8, 0))
    assert r.this_week_end == date(2024, 6, 9)
    assert r.next_week_start == date(2024, 6, 10)
    assert r.next_week_end == date(2024, 6, 16)
    assert matches_date(make_showtime(1, show_date="2024-06-16"), DateFilter.NEXT_WEEK, r)
    assert not matches_date(make_showtime(1, show_date="2024-06-17"), DateFilter.NEXT_WEEK, r)


def test_monday_first_week():
    r = ranges(first_weekday=calendar.MONDAY)
    assert r.this_week_end == date(2024, 6, 3)
    assert r.next_week_start == date(2024, 6, 4)


def test_month_boundaries_roll_over_the_year(make_showtime):
    r = ranges(datetime(2024, 12, 15, 12, 0))
    assert (r.this_month_start, r.this_month_end) == (date(2024, 12, 1), date(2024, 12, 31))
    assert (r.next_month_start, r.next_month_end) == (date(2025, 1, 1), date(2025, 1, 31))
    assert matches_date(make_showtime(1, show_date="2025-01-31"), DateFilter.NEXT_MONTH, r)
    assert not matches_date(make_showtime(1, show_date="2025-02-01"), DateFilter.NEXT_MONTH, r)


def test_leap_february():
    r = ranges(datetime(2024, 1, 31, 12, 0))
    assert r.next_month_end == date(2024, 2, 29)


def test_upcoming_and_past_split_on_today(make_showtime):
    today = make_showtime(1, show_date="2024-06-01", start="08:00")
    yesterday = make_showtime(2, show_date="2024-05-31")

    assert matches_date(today, DateFilter.UPCOMING, ranges())
    assert not matches_date(today, DateFilter.PAST, ranges())
    assert matches_date(yesterday, DateFilter.PAST, ranges())
    assert not matches_date(yesterday, DateFilter.UPCOMING, ranges())


@pytest.mark.parametrize("now, active", [
    (datetime(2024, 6, 1, 8, 59), False),
    (datetime(2024, 6, 1, 9, 0), True),
    (datetime(2024, 6, 1, 10, 0), True),
    (datetime(2024, 6, 1, 11, 0), True),
    (datetime(2024, 6, 1, 11, 1), False),
])
def test_active_includes_both_endpoints(make_showtime, now, active):
    showtime = make_showtime(1, start="09:00", end="11:00")
    assert matches_date(showtime, DateFilter.ACTIVE, ranges(now)) is active


def test_expired_uses_end_time(make_showtime):
    showtime = make_showtime(1, start="09:00", end="11:00")

    assert not matches_date(showtime, DateFilter.EXPIRED, ranges(datetime(2024, 6, 1, 10, 0)))
    assert not matches_date(showtime, DateFilter.EXPIRED, ranges(datetime(2024, 6, 1, 11, 0)))
    assert matches_date(showtime, DateFilter.EXPIRED, ranges(datetime(2024, 6, 1, 11, 0, 1)))


def test_expired_without_end_time_uses_start(make_showtime):
    showtime = make_showtime(1, start="09:00", end=None)
    assert matches_date(showtime, DateFilter.EXPIRED, ranges(datetime(2024, 6, 1, 9, 30)))


@pytest.mark.parametrize("custom_date", ["", None])
def test_unset_custom_date_lets_everything_through(make_showtime, custom_date):
    showtimes = [make_showtime(i, show_date=f"2024-06-0{i}") for i in range(1, 5)]
    filters = ShowtimeFilters(date_filter=DateFilter.CUSTOM_DATE, custom_date=custom_date)

    assert FilterEngine().filter(showtimes, filters, SATURDAY_MORNING) == showtimes


def test_custom_date_matches_single_day(make_showtime):
    showtimes = [make_showtime(i, show_date=f"2024-06-0{i}") for i in range(1, 5)]

    by_string = ShowtimeFilters(date_filter=DateFilter.CUSTOM_DATE, custom_date="2024-06-03")
    by_date = ShowtimeFilters(date_filter=DateFilter.CUSTOM_DATE, custom_date=date(2024, 6, 3))
    engine = FilterEngine()

    assert [s.id for s in engine.filter(showtimes, by_string, SATURDAY_MORNING)] == [3]
    assert [s.id for s in engine.filter(showtimes, by_date, SATURDAY_MORNING)] == [3]


def test_unparseable_custom_date_matches_nothing(make_showtime):
    filters = ShowtimeFilters(date_filter=DateFilter.CUSTOM_DATE, custom_date="not-a-date")
    assert FilterEngine().filter([make_showtime(1)], filters, SATURDAY_MORNING) == []


def test_unknown_category_is_permissive(make_showtime):
    filters = ShowtimeFilters(date_filter="someday")
    assert len(FilterEngine().filter([make_showtime(1)], filters, SATURDAY_MORNING)) == 1


@pytest.mark.parametrize("filters", [
    ShowtimeFilters(),
    ShowtimeFilters(status_filter=StatusFilter.HIDDEN),
    ShowtimeFilters(date_filter=DateFilter.UPCOMING),
    ShowtimeFilters(search="room 2"),
    ShowtimeFilters(search="dune", date_filter=DateFilter.THIS_MONTH, status_filter=StatusFilter.SCHEDULED),
])
def test_result_is_an_ordered_subsequence(make_showtime, filters):
    showtimes = [
        make_showtime(
            i,
            show_date=f"2024-06-{(i % 9) + 1:02d}" if i % 2 else "2024-05-28",
            status=ShowtimeStatus.HIDDEN if i % 3 == 0 else ShowtimeStatus.SCHEDULED,
            room_name=f"Room {i % 4}",
        )
        for i in range(1, 30)
    ]

    result = FilterEngine().filter(showtimes, filters, SATURDAY_MORNING)

    positions = [showtimes.index(s) for s in result]
    assert positions == sorted(positions)
    assert len(set(positions)) == len(positions)


def test_identical_inputs_hit_the_cache(make_showtime):
    showtimes = [make_showtime(1), make_showtime(2)]
    engine = FilterEngine()
    filters = ShowtimeFilters(status_filter=StatusFilter.SCHEDULED)

    first = engine.filter(showtimes, filters, SATURDAY_MORNING)
    second = engine.filter(showtimes, filters, SATURDAY_MORNING)

    assert first == second
    assert first is not second
    assert (engine.cache_hits, engine.cache_misses) == (1, 1)


def test_equal_reload_returns_the_new_objects(make_showtime):
    engine = FilterEngine()
    filters = ShowtimeFilters()
    engine.filter([make_showtime(1)], filters, SATURDAY_MORNING)

    reloaded = [make_showtime(1)]
    result = engine.filter(reloaded, filters, SATURDAY_MORNING)

    assert result[0] is reloaded[0]
    assert engine.cache_misses == 2


def test_cache_misses_when_a_record_changes(make_showtime):
    showtimes = [make_showtime(1), make_showtime(2)]
    engine = FilterEngine()
    filters = ShowtimeFilters(status_filter=StatusFilter.SCHEDULED)

    assert len(engine.filter(showtimes, filters, SATURDAY_MORNING)) == 2
    showtimes[0].status = ShowtimeStatus.HIDDEN
    assert [s.id for s in engine.filter(showtimes, filters, SATURDAY_MORNING)] == [2]
    assert engine.cache_misses == 2


def test_stats(make_showtime):
    showtimes = [
        make_showtime(1),
        make_showtime(2, status=ShowtimeStatus.HIDDEN),
        make_showtime(3, status="Cancelled"),
    ]
    stats = FilterEngine.stats(showtimes, showtimes[:1])
    assert (stats.total, stats.scheduled, stats.hidden, stats.filtered) == (3, 1, 1, 1)


def test_first_weekday_is_validated():
    with pytest.raises(ValueError):
        FilterEngine(first_weekday=7)
