"""Tests for custom filter default values."""

from datetime import date

from pivot_report.services.filters.base import FieldDescriptor
from pivot_report.services.filters.defaults import (
    FilterDefaultsResolver,
    filter_defaults_resolver,
    is_empty,
)

FIELDS = [
    FieldDescriptor("activity_date_time", "date"),
    FieldDescriptor("created", "datetime"),
    FieldDescriptor("status", "string"),
]


class TestResolveDefaults:
    def test_date_fields_default_to_today(self):
        defaults = filter_defaults_resolver.resolve_defaults(FIELDS, today=date(2026, 10, 19))
        assert defaults == {"activity_date_time": "2026-10-19", "created": "2026-10-19"}

    def test_external_defaults_win(self):
        defaults = filter_defaults_resolver.resolve_defaults(
            FIELDS,
            {"created": "2026-01-01", "status": "Completed", "ignored": ""},
            today=date(2026, 10, 19),
        )
        assert defaults["created"] == "2026-01-01"
        assert defaults["status"] == "Completed"
        assert defaults["activity_date_time"] == "2026-10-19"
        assert "ignored" not in defaults

    def test_custom_date_format(self):
        resolver = FilterDefaultsResolver("%d/%m/%Y")
        defaults = resolver.resolve_defaults(FIELDS[:1], today=date(2026, 10, 19))
        assert defaults == {"activity_date_time": "19/10/2026"}


class TestApplyDefaults:
    def test_fills_only_empty_values(self):
        values = {"status": "Scheduled", "activity_date_time": "", "created": None}
        merged = FilterDefaultsResolver.apply_defaults(
            values,
            {"status": "Completed", "activity_date_time": "2026-10-19", "created": "2026-10-01"},
        )
        assert merged == {
            "status": "Scheduled",
            "activity_date_time": "2026-10-19",
            "created": "2026-10-01",
        }

    def test_input_not_mutated(self):
        values = {"status": ""}
        FilterDefaultsResolver.apply_defaults(values, {"status": "Completed"})
        assert values == {"status": ""}


def test_is_empty():
    assert is_empty(None)
    assert is_empty("  ")
    assert is_empty([])
    assert not is_empty(0)
    assert not is_empty(False)
    assert not is_empty("x")
