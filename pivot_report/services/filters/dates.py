"""
DateRangeMatcher — Pure "is this value inside the range" predicate.

Used to decide which distinct values of a date field a checkbox-style
filter treats as matching.  Values come from loaded records and are
not trusted: anything that fails to parse simply does not match.

Policy:
  - Both bounds inclusive, each independently optional.
  - Time of day is ignored (values are normalized to ``date``).
  - ``start > end`` is an empty range, never swapped.
  - Month-granular values (``2017-05`` or the ``17-05`` form of the
    per-month derived attribute) match when any day of the month does.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

# "2017-05" or "17-05"
_MONTH_RE = re.compile(r"^\s*(\d{2}|\d{4})-(\d{1,2})\s*$")

DateSpan = Tuple[date, date]


class DateRangeMatcher:
    """
    Inclusive date range predicate.

    Args:
        dayfirst: Locale hint for ambiguous numeric dates
                  (``03/04/2020`` → 3 April when ``True``).
    """

    def __init__(self, dayfirst: bool = False) -> None:
        self.dayfirst = dayfirst

    def in_range(self, value: Any, start: Any = None, end: Any = None) -> bool:
        """Return ``True`` if *value* falls inside ``[start, end]``."""
        span = self.parse_span(value)
        if span is None:
            return False

        lower = self._parse_bound(start)
        upper = self._parse_bound(end)
        if lower is False or upper is False:
            # A bound was supplied but is not a date
            return False
        if lower is not None and upper is not None and lower > upper:
            return False

        first, last = span
        if lower is not None and last < lower:
            return False
        if upper is not None and first > upper:
            return False
        return True

    # ─────────────────────────────────────────────────────────
    #  PARSING
    # ─────────────────────────────────────────────────────────

    def parse_span(self, value: Any) -> Optional[DateSpan]:
        """
        Normalize *value* into a ``(first_day, last_day)`` span.

        A plain date gives a one-day span; a month-granular string gives
        the whole month.  Returns ``None`` if nothing can be parsed.
        """
        if value is None or value is pd.NaT:
            return None
        if isinstance(value, datetime):
            return value.date(), value.date()
        if isinstance(value, date):
            return value, value
        if not isinstance(value, str):
            return None

        text = value.strip()
        if not text:
            return None

        month = _MONTH_RE.match(text)
        if month:
            return _month_span(month.group(1), month.group(2))

        day = self.parse_date(text)
        if day is None:
            return None
        return day, day

    def parse_date(self, value: Any) -> Optional[date]:
        """Lenient single-date parse; ``None`` on failure."""
        if value is pd.NaT:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            return None
        try:
            parsed = pd.to_datetime(value, errors="coerce", dayfirst=self.dayfirst)
        except (ValueError, TypeError, OverflowError):
            return None
        if parsed is None or pd.isna(parsed):
            return None
        return parsed.date()

    def _parse_bound(self, bound: Any):
        """``None`` for unbounded, ``False`` for garbage, else a ``date``."""
        if bound is None or (isinstance(bound, str) and not bound.strip()):
            return None
        parsed = self.parse_date(bound)
        if parsed is None:
            logger.debug(f"[DateRangeMatcher] Unparseable bound {bound!r}")
            return False
        return parsed


def _month_span(year_text: str, month_text: str) -> Optional[DateSpan]:
    month = int(month_text)
    if not 1 <= month <= 12:
        return None
    if len(year_text) == 2:
        # %y pivot: 69-99 are 19xx, 00-68 are 20xx
        year = datetime.strptime(f"{year_text}-{month:02d}", "%y-%m").year
    else:
        year = int(year_text)
    if year < 1:
        return None
    first = date(year, month, 1)
    if month == 12:
        last = date(year, 12, 31)
    else:
        last = date(year, month + 1, 1) - timedelta(days=1)
    return first, last


# ── Singleton ────────────────────────────────────────────────────
date_range_matcher = DateRangeMatcher()
