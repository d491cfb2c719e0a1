"""
RelativeFilterResolver — Turns a relative date preset into a range.

The set of presets is enumerated once per session from the remote
``relative_date_filters`` option group.  Only presets whose id
matches the grammar in ``pivot_report.config.relative_filters`` are
kept; anything else is dropped with a warning, so it can never be
resolved later.

Usage::

    resolver = RelativeFilterResolver.from_option_values(rows, calendar)
    bounds = resolver.resolve("this.fiscal_year")
    # DateBounds(start="2026-04-01", end="2027-03-31")
"""

from __future__ import annotations

import calendar as _calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pivot_report.config.relative_filters import (
    ANY_PRESET_ID,
    ANY_PRESET_LABEL,
    PERIOD_UNITS,
    RELATIVE_TERMS,
)
from pivot_report.core.exceptions import InvalidFilterPreset
from pivot_report.services.filters.base import CalendarParams, DateBounds, FilterOption

logger = logging.getLogger(__name__)

_PRESET_RE = re.compile(
    r"^(?P<relative>previous_before|[a-z]+)(?:_(?P<count>\d+))?\.(?P<unit>[a-z_]+)$"
)


# ─────────────────────────────────────────────────────────────
#  PERIOD ARITHMETIC
# ─────────────────────────────────────────────────────────────

def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    last = _calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last))


def period_start(day: date, unit: str, cal: CalendarParams) -> date:
    """First day of the *unit* period containing *day*."""
    if unit == "day":
        return day
    if unit == "week":
        # isoweekday: Mon=1..Sun=7 → Sun=0..Sat=6
        offset = (day.isoweekday() % 7 - cal.week_starts_on) % 7
        return day - timedelta(days=offset)
    if unit == "month":
        return day.replace(day=1)
    if unit == "quarter":
        return date(day.year, (day.month - 1) // 3 * 3 + 1, 1)
    if unit == "year":
        return date(day.year, 1, 1)
    if unit == "fiscal_year":
        start_month = cal.fiscal_year_start_month
        year = day.year if day.month >= start_month else day.year - 1
        return date(year, start_month, 1)
    raise ValueError(f"Unknown period unit '{unit}'")


def shift(day: date, unit: str, count: int) -> date:
    """Move *day* by *count* whole *unit* periods."""
    if unit == "day":
        return day + timedelta(days=count)
    if unit == "week":
        return day + timedelta(weeks=count)
    if unit == "month":
        return add_months(day, count)
    if unit == "quarter":
        return add_months(day, 3 * count)
    if unit in ("year", "fiscal_year"):
        return add_months(day, 12 * count)
    raise ValueError(f"Unknown period unit '{unit}'")


# ─────────────────────────────────────────────────────────────
#  PRESET
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class RelativeFilterPreset:
    """One named relative date range, e.g. ``previous.month``."""
    id: str
    label: str
    relative: str
    unit: str
    count: int = 1

    @classmethod
    def parse(cls, preset_id: str, label: Optional[str] = None) -> Optional["RelativeFilterPreset"]:
        """Build a preset from its id, or ``None`` if the id is not understood."""
        match = _PRESET_RE.match(preset_id or "")
        if not match:
            return None

        relative = match.group("relative")
        unit = match.group("unit")
        count_text = match.group("count")
        if relative not in RELATIVE_TERMS or unit not in PERIOD_UNITS:
            return None

        accepts_count = RELATIVE_TERMS[relative][0]
        if count_text is not None and not accepts_count:
            return None
        count = int(count_text) if count_text is not None else 1
        if count < 1:
            return None

        return cls(
            id=preset_id,
            label=label or preset_id,
            relative=relative,
            unit=unit,
            count=count,
        )

    def resolve(self, cal: CalendarParams, today: Optional[date] = None) -> DateBounds:
        """Concrete inclusive range for *today* under *cal*."""
        today = today or date.today()
        unit, n = self.unit, self.count
        start = period_start(today, unit, cal)
        one_day = timedelta(days=1)

        if self.relative == "this":
            return DateBounds.from_dates(start, shift(start, unit, 1) - one_day)
        if self.relative == "current":
            return DateBounds.from_dates(start, today)
        if self.relative == "previous":
            return DateBounds.from_dates(shift(start, unit, -n), start - one_day)
        if self.relative == "previous_before":
            return DateBounds.from_dates(
                shift(start, unit, -2), shift(start, unit, -1) - one_day,
            )
        if self.relative == "next":
            return DateBounds.from_dates(
                shift(start, unit, 1), shift(start, unit, n + 1) - one_day,
            )
        if self.relative == "ending":
            return DateBounds.from_dates(shift(today, unit, -n) + one_day, today)
        if self.relative == "earlier":
            return DateBounds.from_dates(None, start - one_day)
        if self.relative == "greater":
            return DateBounds.from_dates(start, None)
        raise ValueError(f"Unhandled relative term '{self.relative}'")

    def to_option(self) -> FilterOption:
        return FilterOption(value=self.id, label=self.label)


# ─────────────────────────────────────────────────────────────
#  RESOLVER
# ─────────────────────────────────────────────────────────────

class RelativeFilterResolver:
    """
    Resolves preset ids from a fixed, enumerated set.

    The empty id is the "- Any -" selection and resolves to an
    unbounded ``DateBounds`` (``is_any`` is ``True``).
    """

    def __init__(
        self,
        presets: Iterable[RelativeFilterPreset],
        calendar: CalendarParams,
    ) -> None:
        self._presets: Dict[str, RelativeFilterPreset] = {p.id: p for p in presets}
        self.calendar = calendar

    @classmethod
    def from_option_values(
        cls,
        values: Iterable[Mapping[str, Any]],
        calendar: CalendarParams,
    ) -> "RelativeFilterResolver":
        """
        Build from option-group rows (``{"value": ..., "label": ...}``).

        Rows whose value is not a known preset id are skipped.
        """
        presets: List[RelativeFilterPreset] = []
        for row in values or []:
            preset_id = str(row.get("value") or row.get("name") or "")
            preset = RelativeFilterPreset.parse(preset_id, row.get("label"))
            if preset is None:
                logger.warning(
                    f"[RelativeFilterResolver] Skipping unsupported preset '{preset_id}'"
                )
                continue
            presets.append(preset)

        logger.debug(f"[RelativeFilterResolver] {len(presets)} preset(s) enumerated")
        return cls(presets, calendar)

    @property
    def presets(self) -> List[RelativeFilterPreset]:
        return list(self._presets.values())

    def has(self, preset_id: str) -> bool:
        return preset_id == ANY_PRESET_ID or preset_id in self._presets

    def resolve(self, preset_id: str, today: Optional[date] = None) -> DateBounds:
        """
        Resolve *preset_id* into an inclusive date range.

        Raises:
            InvalidFilterPreset: *preset_id* is not in the enumerated set.
        """
        if preset_id == ANY_PRESET_ID:
            return DateBounds()

        preset = self._presets.get(preset_id)
        if preset is None:
            raise InvalidFilterPreset(preset_id)
        return preset.resolve(self.calendar, today)

    def options(self) -> List[Dict[str, Any]]:
        """Dropdown options, "- Any -" first."""
        out = [FilterOption(value=ANY_PRESET_ID, label=ANY_PRESET_LABEL).to_dict()]
        out.extend(p.to_option().to_dict() for p in self._presets.values())
        return out
