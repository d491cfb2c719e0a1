"""Tests for the inclusive date range predicate."""

from datetime import date, datetime

import pandas as pd
import pytest

from pivot_report.services.filters.dates import DateRangeMatcher, date_range_matcher


class TestInRange:
    """Day-granular values."""

    @pytest.fixture
    def matcher(self):
        return DateRangeMatcher()

    def test_bounds_are_inclusive(self, matcher):
        assert matcher.in_range("2017-05-01", "2017-05-01", "2017-05-31")
        assert matcher.in_range("2017-05-31", "2017-05-01", "2017-05-31")

    def test_outside_range(self, matcher):
        assert not matcher.in_range("2017-04-30", "2017-05-01", "2017-05-31")
        assert not matcher.in_range("2017-06-01", "2017-05-01", "2017-05-31")

    def test_open_bounds(self, matcher):
        assert matcher.in_range("1999-01-01", None, "2017-05-31")
        assert matcher.in_range("2099-01-01", "2017-05-01", None)
        assert matcher.in_range("2017-05-15")

    def test_blank_bound_means_unbounded(self, matcher):
        assert matcher.in_range("2017-05-15", "", "  ")

    def test_time_of_day_is_ignored(self, matcher):
        assert matcher.in_range("2017-05-31 23:59:59", "2017-05-01", "2017-05-31")
        assert matcher.in_range(datetime(2017, 5, 31, 18, 0), "2017-05-01", "2017-05-31")

    def test_date_objects(self, matcher):
        assert matcher.in_range(date(2017, 5, 10), date(2017, 5, 1), date(2017, 5, 31))

    def test_start_after_end_is_empty(self, matcher):
        assert not matcher.in_range("2017-05-15", "2017-05-31", "2017-05-01")

    def test_unparseable_value_does_not_match(self, matcher):
        assert not matcher.in_range("not a date", "2017-05-01", "2017-05-31")
        assert not matcher.in_range(None)
        assert not matcher.in_range("")
        assert not matcher.in_range(12345)

    def test_unparseable_bound_does_not_match(self, matcher):
        assert not matcher.in_range("2017-05-15", "garbage", None)

    def test_missing_timestamp_does_not_match(self, matcher):
        assert not matcher.in_range(pd.NaT, "2017-01-01", "2017-12-31")
        assert not matcher.in_range(pd.NaT)
        assert matcher.parse_date(pd.NaT) is None

    def test_missing_timestamp_bound_does_not_match(self, matcher):
        assert not matcher.in_range("2017-05-15", pd.NaT, None)


class TestMonthGranular:
    """``YYYY-MM`` and ``YY-MM`` values span the whole month."""

    def test_long_month_overlaps(self):
        assert date_range_matcher.in_range("2017-05", "2017-05-20", "2017-06-10")

    def test_short_month_overlaps(self):
        assert date_range_matcher.in_range("17-06", "2017-05-20", "2017-06-10")

    def test_month_before_range(self):
        assert not date_range_matcher.in_range("17-04", "2017-05-20", "2017-06-10")

    def test_invalid_month(self):
        assert date_range_matcher.parse_span("2017-13") is None

    def test_december_span(self):
        assert date_range_matcher.parse_span("2016-12") == (date(2016, 12, 1), date(2016, 12, 31))

    def test_short_year_before_2000(self):
        assert date_range_matcher.parse_span("99-12") == (date(1999, 12, 1), date(1999, 12, 31))
        assert date_range_matcher.in_range("99-12", "1999-12-01", "1999-12-31")
        assert date_range_matcher.in_range("70-01", "1970-01-15", None)

    def test_short_year_after_2000(self):
        assert date_range_matcher.parse_span("68-02") == (date(2068, 2, 1), date(2068, 2, 29))
        assert date_range_matcher.parse_span("00-01")[0] == date(2000, 1, 1)

    def test_year_zero(self):
        assert date_range_matcher.parse_span("0000-05") is None


class TestLocaleHint:
    def test_dayfirst(self):
        assert DateRangeMatcher(dayfirst=True).parse_date("03/04/2020") == date(2020, 4, 3)

    def test_monthfirst(self):
        assert DateRangeMatcher().parse_date("03/04/2020") == date(2020, 3, 4)
