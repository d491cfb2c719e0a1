"""
Filter dataclasses shared by the date matcher, the relative preset
resolver and the defaults resolver.

  - ``FilterOption``: single selectable option (used for presets).
  - ``CalendarParams``: week start / fiscal year start, immutable.
  - ``DateBounds``: inclusive ``[start, end]`` pair, each side optional.
  - ``FieldDescriptor``: one input of the custom filter form.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional

# Canonical wire format for every resolved date bound.
CANONICAL_DATE_FORMAT = "%Y-%m-%d"


# ─────────────────────────────────────────────────────────────
#  DATA CLASSES
# ─────────────────────────────────────────────────────────────

@dataclass(slots=True)
class FilterOption:
    """Single selectable option for a dropdown."""
    value: Any
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "label": self.label}


@dataclass(frozen=True, slots=True)
class CalendarParams:
    """
    Locale calendar settings, sourced once per session.

    ``week_starts_on`` uses 0 = Sunday … 6 = Saturday.
    """
    week_starts_on: int = 0
    fiscal_year_start_month: int = 1

    def __post_init__(self) -> None:
        if not 0 <= self.week_starts_on <= 6:
            raise ValueError(f"week_starts_on must be 0..6, got {self.week_starts_on}")
        if not 1 <= self.fiscal_year_start_month <= 12:
            raise ValueError(
                f"fiscal_year_start_month must be 1..12, got {self.fiscal_year_start_month}"
            )

    @classmethod
    def from_settings(cls, values: Optional[Mapping[str, Any]]) -> "CalendarParams":
        """
        Build from the remote settings payload.

        Accepts ``{"weekBegins": "1", "fiscalYearStart": {"M": "4", "d": "1"}}``
        and falls back to Sunday / January for missing keys.
        """
        values = values or {}
        week = values.get("weekBegins", 0)
        fiscal = values.get("fiscalYearStart") or {}
        month = fiscal.get("M", 1) if isinstance(fiscal, Mapping) else fiscal
        return cls(
            week_starts_on=int(week or 0),
            fiscal_year_start_month=int(month or 1),
        )


@dataclass(frozen=True, slots=True)
class DateBounds:
    """
    Inclusive date range in canonical ``YYYY-MM-DD`` form.

    ``None`` on either side means unbounded on that side; both ``None``
    is the explicit "any date" selection.
    """
    start: Optional[str] = None
    end: Optional[str] = None

    @property
    def is_any(self) -> bool:
        return self.start is None and self.end is None

    @classmethod
    def from_dates(cls, start: Optional[date], end: Optional[date]) -> "DateBounds":
        return cls(
            start=start.strftime(CANONICAL_DATE_FORMAT) if start else None,
            end=end.strftime(CANONICAL_DATE_FORMAT) if end else None,
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """An input of the custom filter form (name + data type)."""
    name: str
    data_type: str = "string"

    @property
    def is_date(self) -> bool:
        return self.data_type in ("date", "datetime")
