"""
Tests for tenant-local day boundaries and instant parsing.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from agenda.services.errors import InvalidDate, InvalidStart, InvalidTimeZone
from agenda.services.timezones import (
    day_bounds_utc,
    format_local_label,
    local_minute_to_utc,
    local_weekday,
    parse_calendar_date,
    parse_start_instant,
    to_db_utc,
    to_utc_iso,
)


class TestDayBounds:
    def test_fixed_offset_zone(self):
        start, end = day_bounds_utc("2024-06-05", "America/Caracas")

        assert start == datetime(2024, 6, 5, 4, 0, tzinfo=timezone.utc)
        assert end == datetime(2024, 6, 6, 4, 0, tzinfo=timezone.utc)

    def test_spring_forward_day_is_23_hours(self):
        start, end = day_bounds_utc(date(2024, 3, 10), "America/New_York")

        assert start == datetime(2024, 3, 10, 5, 0, tzinfo=timezone.utc)
        assert end - start == timedelta(hours=23)

    def test_fall_back_day_is_25_hours(self):
        start, end = day_bounds_utc(date(2024, 11, 3), "America/New_York")

        assert end - start == timedelta(hours=25)

    def test_ordinary_day_in_dst_zone_is_24_hours(self):
        start, end = day_bounds_utc("2024-07-01", "Europe/Berlin")

        assert start == datetime(2024, 6, 30, 22, 0, tzinfo=timezone.utc)
        assert end - start == timedelta(hours=24)

    @pytest.mark.parametrize("zone", ["Mars/Olympus_Mons", "", "   ", None, "../etc/passwd"])
    def test_unknown_zone(self, zone):
        with pytest.raises(InvalidTimeZone):
            day_bounds_utc("2024-06-05", zone)

    @pytest.mark.parametrize("value", ["2024-02-30", "06/05/2024", "2024-6-5", "", "tomorrow", 20240605])
    def test_malformed_date(self, value):
        with pytest.raises(InvalidDate):
            day_bounds_utc(value, "UTC")


def test_parse_calendar_date_accepts_date_and_datetime():
    assert parse_calendar_date(date(2024, 6, 5)) == date(2024, 6, 5)
    assert parse_calendar_date(datetime(2024, 6, 5, 10, 30)) == date(2024, 6, 5)
    assert parse_calendar_date(" 2024-06-05 ") == date(2024, 6, 5)


def test_local_weekday_starts_on_sunday():
    assert local_weekday(date(2024, 6, 9)) == 0  # Sunday
    assert local_weekday(date(2024, 6, 5)) == 3  # Wednesday
    assert local_weekday(date(2024, 6, 8)) == 6  # Saturday


class TestLocalMinuteToUtc:
    def test_wall_clock_after_spring_forward(self):
        # 09:00 on the transition day is EDT (UTC-4), not EST
        instant = local_minute_to_utc(date(2024, 3, 10), 9 * 60, "America/New_York")

        assert instant == datetime(2024, 3, 10, 13, 0, tzinfo=timezone.utc)

    def test_minute_1440_is_next_local_midnight(self):
        _, day_end = day_bounds_utc("2024-03-10", "America/New_York")

        assert local_minute_to_utc(date(2024, 3, 10), 1440, "America/New_York") == day_end

    def test_out_of_range_minute(self):
        with pytest.raises(ValueError):
            local_minute_to_utc(date(2024, 6, 5), 1441, "UTC")


class TestParseStartInstant:
    def test_zulu_suffix(self):
        assert parse_start_instant("2024-06-05T13:00:00Z") == datetime(2024, 6, 5, 13, 0, tzinfo=timezone.utc)

    def test_offset_is_normalised_to_utc(self):
        result = parse_start_instant("2024-06-05T09:00:00-04:00")

        assert result == datetime(2024, 6, 5, 13, 0, tzinfo=timezone.utc)
        assert result.utcoffset() == timedelta(0)

    def test_naive_is_taken_as_utc(self):
        assert parse_start_instant("2024-06-05T13:00:00") == datetime(2024, 6, 5, 13, 0, tzinfo=timezone.utc)
        assert parse_start_instant(datetime(2024, 6, 5, 13, 0)).tzinfo == timezone.utc

    @pytest.mark.parametrize("value", ["", "not-a-date", "2024-13-01T00:00:00Z", None, 1717592400])
    def test_invalid(self, value):
        with pytest.raises(InvalidStart):
            parse_start_instant(value)

    @pytest.mark.parametrize("value", ["9999-12-31T23:50:00Z", "9999-12-31T12:00:00", datetime.max])
    def test_no_room_after_start(self, value):
        with pytest.raises(InvalidStart):
            parse_start_instant(value)


def test_storage_round_trip_helpers():
    aware = datetime(2024, 6, 5, 9, 0, tzinfo=timezone(timedelta(hours=-4)))

    assert to_db_utc(aware) == datetime(2024, 6, 5, 13, 0)
    assert to_utc_iso(to_db_utc(aware)) == "2024-06-05T13:00:00Z"
    assert format_local_label(aware, "America/Caracas") == "09:00"
