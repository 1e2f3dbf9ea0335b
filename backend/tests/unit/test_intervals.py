"""Unit tests for sample instant generation"""
import pytest
from datetime import datetime, timedelta

from balance_history.exceptions import InvalidIntervalError, InvalidRangeError
from balance_history.services.intervals import (
    Interval,
    generate_sample_instants,
    instant_at,
    parse_interval,
)


class TestParseInterval:
    """Tests for interval parsing"""

    def test_all_intervals_parse(self):
        """Every documented interval name is accepted"""
        assert parse_interval("hourly") == Interval.HOURLY
        assert parse_interval("daily") == Interval.DAILY
        assert parse_interval("weekly") == Interval.WEEKLY
        assert parse_interval("monthly") == Interval.MONTHLY

    def test_case_insensitive(self):
        assert parse_interval("Daily") == Interval.DAILY

    def test_unknown_interval_rejected(self):
        with pytest.raises(InvalidIntervalError) as exc_info:
            parse_interval("yearly")
        assert "hourly" in str(exc_info.value)


class TestGenerateSampleInstants:
    """Tests for fixed-duration intervals"""

    def test_daily_instants_inclusive_of_end(self):
        instants = generate_sample_instants(
            datetime(2025, 1, 1), datetime(2025, 1, 5), Interval.DAILY
        )
        assert instants == [datetime(2025, 1, d) for d in range(1, 6)]

    def test_start_equals_end_yields_single_instant(self):
        start = datetime(2025, 1, 1, 12, 30)
        assert generate_sample_instants(start, start, Interval.HOURLY) == [start]

    def test_stops_at_last_instant_not_after_end(self):
        instants = generate_sample_instants(
            datetime(2025, 12, 1), datetime(2025, 12, 5, 20, 14), Interval.DAILY
        )
        assert len(instants) == 5
        assert instants[-1] == datetime(2025, 12, 5)

    def test_anchored_at_start_time(self):
        """Instants keep the start's time of day rather than snapping to midnight"""
        instants = generate_sample_instants(
            datetime(2025, 1, 1, 7, 15), datetime(2025, 1, 3, 7, 14), Interval.DAILY
        )
        assert instants == [datetime(2025, 1, 1, 7, 15), datetime(2025, 1, 2, 7, 15)]

    @pytest.mark.parametrize("interval,step", [
        (Interval.HOURLY, timedelta(hours=1)),
        (Interval.DAILY, timedelta(days=1)),
        (Interval.WEEKLY, timedelta(weeks=1)),
    ])
    def test_uniform_spacing_within_range(self, interval, step):
        start = datetime(2025, 2, 10, 3, 0)
        end = datetime(2025, 4, 1)
        instants = generate_sample_instants(start, end, interval)

        assert instants[0] == start
        assert all(start <= i <= end for i in instants)
        assert all(b - a == step for a, b in zip(instants, instants[1:]))
        assert instants[-1] + step > end

    def test_start_after_end_rejected(self):
        with pytest.raises(InvalidRangeError):
            generate_sample_instants(datetime(2025, 1, 2), datetime(2025, 1, 1), Interval.DAILY)

    def test_max_points_enforced(self):
        with pytest.raises(InvalidRangeError):
            generate_sample_instants(
                datetime(2025, 1, 1), datetime(2025, 12, 31), Interval.HOURLY, max_points=100
            )

    def test_max_points_allows_exact_count(self):
        instants = generate_sample_instants(
            datetime(2025, 1, 1), datetime(2025, 1, 10), Interval.DAILY, max_points=10
        )
        assert len(instants) == 10


class TestMonthlyInstants:
    """Tests for calendar-month stepping"""

    def test_month_steps_preserve_day(self):
        instants = generate_sample_instants(
            datetime(2025, 1, 15), datetime(2025, 4, 15), Interval.MONTHLY
        )
        assert instants == [
            datetime(2025, 1, 15),
            datetime(2025, 2, 15),
            datetime(2025, 3, 15),
            datetime(2025, 4, 15),
        ]

    def test_clamps_to_last_day_and_returns_to_anchor_day(self):
        """Anchored on the 31st: short months clamp, longer months go back to the 31st"""
        instants = generate_sample_instants(
            datetime(2025, 1, 31), datetime(2025, 5, 31), Interval.MONTHLY
        )
        assert instants == [
            datetime(2025, 1, 31),
            datetime(2025, 2, 28),
            datetime(2025, 3, 31),
            datetime(2025, 4, 30),
            datetime(2025, 5, 31),
        ]

    def test_leap_year_february(self):
        assert instant_at(datetime(2024, 1, 30), Interval.MONTHLY, 1) == datetime(2024, 2, 29)

    def test_not_a_fixed_thirty_day_step(self):
        instants = generate_sample_instants(
            datetime(2025, 6, 1), datetime(2025, 12, 31, 23, 59, 59), Interval.MONTHLY
        )
        assert len(instants) == 7
        assert [i.month for i in instants] == [6, 7, 8, 9, 10, 11, 12]
        assert all(i.day == 1 for i in instants)

    def test_strictly_increasing(self):
        instants = generate_sample_instants(
            datetime(2024, 1, 31, 6), datetime(2026, 1, 31, 6), Interval.MONTHLY
        )
        assert all(a < b for a, b in zip(instants, instants[1:]))
        assert len(instants) == 25


class TestUpperBound:
    """Tests for ranges ending near the largest representable datetime"""

    @pytest.mark.parametrize("interval", list(Interval))
    def test_last_representable_instant(self, interval):
        start = datetime(9999, 12, 31, 23)
        assert generate_sample_instants(start, start, interval) == [start]

    def test_hourly_up_to_last_hour(self):
        instants = generate_sample_instants(
            datetime(9999, 12, 31, 21), datetime(9999, 12, 31, 23, 59), Interval.HOURLY
        )
        assert instants == [datetime(9999, 12, 31, h) for h in (21, 22, 23)]
