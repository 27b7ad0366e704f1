"""Tests for timezone handling and RFC 3339 parsing."""

from datetime import datetime, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from taskwatch.services.timezone import (
    DATE_FORMAT,
    TimezoneService,
    get_timezone_service,
    parse_rfc3339,
    reset_timezone_service,
)


class TestParseRfc3339:
    def test_zulu_suffix(self):
        result = parse_rfc3339("2026-10-19T00:00:00.000Z")

        assert result == datetime(2026, 10, 19, tzinfo=timezone.utc)
        assert result.utcoffset().total_seconds() == 0

    def test_explicit_offset(self):
        result = parse_rfc3339("2026-10-19T08:30:00+07:00")

        assert result.utcoffset().total_seconds() == 7 * 3600

    def test_surrounding_whitespace(self):
        assert parse_rfc3339(" 2026-10-19T00:00:00Z ").day == 19

    @pytest.mark.parametrize("value", ["", "   ", "tomorrow", "2026-13-40T00:00:00Z"])
    def test_invalid_raises_value_error(self, value):
        with pytest.raises(ValueError):
            parse_rfc3339(value)


class TestTimezoneService:
    def test_uses_given_zone(self):
        service = TimezoneService("Asia/Jakarta")

        assert service.name == "Asia/Jakarta"
        assert service.tzinfo == ZoneInfo("Asia/Jakarta")

    def test_defaults_to_settings(self):
        with patch("taskwatch.services.timezone.settings") as mock_settings:
            mock_settings.user_timezone = "Europe/London"
            service = TimezoneService()

        assert service.name == "Europe/London"

    def test_unknown_zone_falls_back_to_utc(self, caplog):
        service = TimezoneService("Mars/Olympus_Mons")

        assert service.name == "UTC"
        assert "falling back to UTC" in caplog.text

    def test_now_is_aware_in_zone(self, tz):
        current = tz.now()

        assert current.tzinfo == ZoneInfo("Asia/Jakarta")

    def test_localize_naive_keeps_wall_clock(self, tz):
        result = tz.localize(datetime(2026, 10, 18, 6, 0))

        assert result.hour == 6
        assert result.utcoffset().total_seconds() == 7 * 3600

    def test_localize_aware_converts(self, tz):
        result = tz.localize(datetime(2026, 10, 18, 23, 0, tzinfo=timezone.utc))

        assert (result.day, result.hour) == (19, 6)

    def test_parse_due_in_configured_zone(self, tz):
        due = tz.parse_due("2026-10-19T00:00:00.000Z")

        assert due.tzinfo == ZoneInfo("Asia/Jakarta")
        assert due.hour == 7

    def test_format_date_day_month_year(self, tz):
        assert tz.format_date(datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)) == "04/03/2026"

    def test_format_date_crosses_midnight(self):
        """An instant late on the 19th UTC is the 20th in Jakarta."""
        instant = datetime(2026, 10, 19, 20, 0, tzinfo=timezone.utc)

        assert TimezoneService("Asia/Jakarta").format_date(instant) == "20/10/2026"
        assert TimezoneService("UTC").format_date(instant) == "19/10/2026"

    def test_date_format_constant(self):
        assert DATE_FORMAT == "%d/%m/%Y"


class TestTimezoneSingleton:
    def test_returns_same_instance(self):
        assert get_timezone_service("UTC") is get_timezone_service()

    def test_zone_only_used_on_first_call(self):
        first = get_timezone_service("Asia/Tokyo")
        second = get_timezone_service("Europe/Paris")

        assert second is first
        assert second.name == "Asia/Tokyo"

    def test_reset(self):
        first = get_timezone_service("UTC")
        reset_timezone_service()

        assert get_timezone_service("UTC") is not first
