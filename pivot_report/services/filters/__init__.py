"""
Date filtering — matcher, relative presets, input defaults.

Modules:
  base      : CalendarParams, DateBounds, FieldDescriptor, FilterOption.
  dates     : DateRangeMatcher (inclusive range predicate).
  relative  : RelativeFilterResolver + RelativeFilterPreset.
  defaults  : FilterDefaultsResolver.
"""

from pivot_report.services.filters.base import (
    CalendarParams,
    DateBounds,
    FieldDescriptor,
    FilterOption,
)
from pivot_report.services.filters.dates import DateRangeMatcher, date_range_matcher
from pivot_report.services.filters.defaults import (
    FilterDefaultsResolver,
    filter_defaults_resolver,
)
from pivot_report.services.filters.relative import (
    RelativeFilterPreset,
    RelativeFilterResolver,
)

__all__ = [
    "CalendarParams",
    "DateBounds",
    "FieldDescriptor",
    "FilterOption",
    "DateRangeMatcher",
    "date_range_matcher",
    "FilterDefaultsResolver",
    "filter_defaults_resolver",
    "RelativeFilterPreset",
    "RelativeFilterResolver",
]
