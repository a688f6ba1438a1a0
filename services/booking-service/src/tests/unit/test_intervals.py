# services/booking-service/src/tests/unit/test_intervals.py
"""
Unit Tests for Time Intervals
"""

from datetime import date, datetime, timedelta, timezone as dt_timezone

import pytest

from apps.core.services.intervals import (
    TimeInterval,
    date_range,
    days_touched,
    local_date,
    local_day_span,
    merge,
    merge_all,
)


def utc(day, hour, minute=0):
    return datetime(2024, 6, day, hour, minute, tzinfo=dt_timezone.utc)


class TestOverlap:
    """Half-open overlap semantics."""

    def test_touching_intervals_do_not_overlap(self):
        first = TimeInterval(utc(3, 10), utc(3, 11))
        second = TimeInterval(utc(3, 11), utc(3, 12))

        assert not first.overlaps(second)
        assert not second.overlaps(first)

    def test_overlap_is_symmetric(self):
        first = TimeInterval(utc(3, 10), utc(3, 11))
        second = TimeInterval(utc(3, 10, 30), utc(3, 12))

        assert first.overlaps(second)
        assert second.overlaps(first)

    def test_overlap_compares_instants_across_zones(self):
        oslo = dt_timezone(timedelta(hours=2))
        local = TimeInterval(
            datetime(2024, 6, 3, 12, 0, tzinfo=oslo),
            datetime(2024, 6, 3, 13, 0, tzinfo=oslo),
        )
        same_instant = TimeInterval(utc(3, 10), utc(3, 11))

        assert local.overlaps(same_instant)

    def test_whole_day_ranges(self):
        june_1_to_3 = TimeInterval.for_days(date(2024, 6, 1), date(2024, 6, 3))
        june_4 = TimeInterval.for_days(date(2024, 6, 4), date(2024, 6, 4))
        june_3 = TimeInterval.for_days(date(2024, 6, 3), date(2024, 6, 3))

        assert not june_1_to_3.overlaps(june_4)
        assert june_1_to_3.overlaps(june_3)
        assert june_1_to_3.contains(june_3)

    def test_mixing_dates_and_datetimes_is_rejected(self):
        with pytest.raises(TypeError):
            TimeInterval.for_days(date(2024, 6, 1), date(2024, 6, 1)).overlaps(
                TimeInterval(utc(1, 10), utc(1, 11))
            )

    def test_empty_interval(self):
        assert TimeInterval(utc(3, 10), utc(3, 10)).is_empty
        assert TimeInterval(utc(3, 11), utc(3, 10)).is_empty


class TestMerge:

    def test_merge_touching(self):
        merged = merge(TimeInterval(utc(3, 9), utc(3, 10)), TimeInterval(utc(3, 10), utc(3, 11)))
        assert merged == TimeInterval(utc(3, 9), utc(3, 11))

    def test_merge_disjoint_returns_none(self):
        assert merge(TimeInterval(utc(3, 9), utc(3, 10)), TimeInterval(utc(3, 11), utc(3, 12))) is None

    def test_merge_all_sorts_and_collapses(self):
        merged = merge_all([
            TimeInterval(utc(3, 14), utc(3, 15)),
            TimeInterval(utc(3, 9), utc(3, 10)),
            TimeInterval(utc(3, 9, 30), utc(3, 11)),
        ])

        assert merged == [
            TimeInterval(utc(3, 9), utc(3, 11)),
            TimeInterval(utc(3, 14), utc(3, 15)),
        ]


class TestLocalDays:
    """Day resolution in the listing's timezone."""

    def test_days_touched_by_datetime_interval(self):
        interval = TimeInterval(utc(3, 22), utc(4, 2))
        assert days_touched(interval, 'UTC') == [date(2024, 6, 3), date(2024, 6, 4)]

    def test_interval_ending_at_midnight_touches_one_day(self):
        interval = TimeInterval(utc(3, 22), utc(4, 0))
        assert days_touched(interval, 'UTC') == [date(2024, 6, 3)]

    def test_days_touched_uses_listing_zone(self):
        # 23:30 UTC on 3 June is already 4 June in Oslo
        interval = TimeInterval(utc(3, 23, 30), utc(3, 23, 45))
        assert days_touched(interval, 'Europe/Oslo') == [date(2024, 6, 4)]

    def test_local_day_span_covers_whole_local_days(self):
        span = local_day_span(date(2024, 6, 1), date(2024, 6, 3), 'Europe/London')

        # British Summer Time is UTC+1
        assert span.start == datetime(2024, 5, 31, 23, 0, tzinfo=dt_timezone.utc)
        assert span.end == datetime(2024, 6, 3, 23, 0, tzinfo=dt_timezone.utc)

    def test_local_date(self):
        assert local_date(utc(3, 23, 30), 'Europe/London') == date(2024, 6, 4)
        assert local_date(utc(3, 23, 30), 'UTC') == date(2024, 6, 3)

    def test_date_range_is_inclusive(self):
        assert date_range(date(2024, 6, 1), date(2024, 6, 3)) == [
            date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 3)
        ]
