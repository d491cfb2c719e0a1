"""Tests for relative date presets."""

from datetime import date

import pytest

from pivot_report.core.exceptions import InvalidFilterPreset
from pivot_report.services.filters.base import CalendarParams, DateBounds
from pivot_report.services.filters.relative import (
    RelativeFilterPreset,
    RelativeFilterResolver,
    add_months,
    period_start,
)

# A Monday
TODAY = date(2026, 10, 19)


def resolve(preset_id, cal=None, today=TODAY):
    return RelativeFilterPreset.parse(preset_id).resolve(cal or CalendarParams(), today)


class TestPeriodArithmetic:
    def test_add_months_clamps_day(self):
        assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert add_months(date(2026, 3, 15), -3) == date(2025, 12, 15)

    def test_week_start_sunday(self):
        assert period_start(TODAY, "week", CalendarParams(week_starts_on=0)) == date(2026, 10, 18)

    def test_week_start_monday(self):
        assert period_start(TODAY, "week", CalendarParams(week_starts_on=1)) == TODAY

    def test_fiscal_year_start(self):
        cal = CalendarParams(fiscal_year_start_month=4)
        assert period_start(TODAY, "fiscal_year", cal) == date(2026, 4, 1)
        assert period_start(date(2026, 2, 1), "fiscal_year", cal) == date(2025, 4, 1)


class TestPresetResolve:
    def test_this_month(self):
        assert resolve("this.month") == DateBounds("2026-10-01", "2026-10-31")

    def test_current_month(self):
        assert resolve("current.month") == DateBounds("2026-10-01", "2026-10-19")

    def test_previous_month(self):
        assert resolve("previous.month") == DateBounds("2026-09-01", "2026-09-30")

    def test_previous_n_quarters(self):
        assert resolve("previous_2.quarter") == DateBounds("2026-04-01", "2026-09-30")

    def test_previous_before_year(self):
        assert resolve("previous_before.year") == DateBounds("2024-01-01", "2024-12-31")

    def test_next_week(self):
        assert resolve("next.week") == DateBounds("2026-10-25", "2026-10-31")

    def test_ending_week(self):
        assert resolve("ending.week") == DateBounds("2026-10-13", "2026-10-19")

    def test_earlier_and_greater(self):
        assert resolve("earlier.month") == DateBounds(None, "2026-09-30")
        assert resolve("greater.month") == DateBounds("2026-10-01", None)

    def test_this_fiscal_year(self):
        cal = CalendarParams(fiscal_year_start_month=4)
        assert resolve("this.fiscal_year", cal) == DateBounds("2026-04-01", "2027-03-31")

    @pytest.mark.parametrize("preset_id", ["", "month", "this.decade", "this_2.month", "sometime.day"])
    def test_unsupported_ids(self, preset_id):
        assert RelativeFilterPreset.parse(preset_id) is None


class TestResolver:
    @pytest.fixture
    def resolver(self):
        rows = [
            {"value": "this.month", "label": "This month"},
            {"value": "previous.year", "label": "Previous year"},
            {"value": "bogus.preset", "label": "Bogus"},
        ]
        return RelativeFilterResolver.from_option_values(rows, CalendarParams())

    def test_unsupported_rows_skipped(self, resolver):
        assert [p.id for p in resolver.presets] == ["this.month", "previous.year"]
        assert not resolver.has("bogus.preset")

    def test_any_preset(self, resolver):
        bounds = resolver.resolve("")
        assert bounds.is_any
        assert resolver.has("")

    def test_unknown_preset_raises(self, resolver):
        with pytest.raises(InvalidFilterPreset) as exc_info:
            resolver.resolve("this.week")
        assert exc_info.value.error_code == "INVALID_FILTER_PRESET"
        assert exc_info.value.preset_id == "this.week"

    def test_resolve(self, resolver):
        assert resolver.resolve("previous.year", TODAY) == DateBounds("2025-01-01", "2025-12-31")

    def test_options_any_first(self, resolver):
        options = resolver.options()
        assert options[0] == {"value": "", "label": "- Any -"}
        assert options[1] == {"value": "this.month", "label": "This month"}


class TestCalendarParams:
    def test_from_settings(self):
        cal = CalendarParams.from_settings({"weekBegins": "1", "fiscalYearStart": {"M": "7", "d": "1"}})
        assert cal == CalendarParams(week_starts_on=1, fiscal_year_start_month=7)

    def test_from_empty_settings(self):
        assert CalendarParams.from_settings(None) == CalendarParams()

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            CalendarParams(week_starts_on=7)
        with pytest.raises(ValueError):
            CalendarParams(fiscal_year_start_month=0)
