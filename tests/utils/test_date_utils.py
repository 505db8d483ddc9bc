# tests/utils/test_date_utils.py
"""Tests for local-date helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest

from argfolio.utils.date_utils import LOCAL_TZ, date_of, now_iso, today_local


class TestDateOf:
    """Tests for extracting the calendar date from ISO strings."""

    @pytest.mark.parametrize("value,expected", [
        ("2025-03-01", date(2025, 3, 1)),
        ("2025-03-01T00:01:00", date(2025, 3, 1)),
        ("2025-03-01T23:59:59-03:00", date(2025, 3, 1)),
        ("2024-02-29T12:00", date(2024, 2, 29)),
    ])
    def test_valid(self, value, expected):
        assert date_of(value) == expected

    @pytest.mark.parametrize("value", ["", "01/03/2025", "2025-02-30"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            date_of(value)


class TestClock:
    """Tests for the clock helpers."""

    def test_today_is_buenos_aires_date(self):
        expected = datetime.now(LOCAL_TZ).date()

        # tolerate a midnight rollover between the two calls
        assert today_local() in (expected, expected + timedelta(days=1))

    def test_now_iso_is_utc(self):
        parsed = datetime.fromisoformat(now_iso())

        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == timezone.utc.utcoffset(None)
