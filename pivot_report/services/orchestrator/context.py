"""
DatasetContext — Completed dataset handed to the aggregation engine.

Created once by ``AcquisitionSession`` when a load reaches COMPLETE,
then consumed read-only.  Partial data from a failed load never ends
up in a ``DatasetContext``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from pivot_report.services.filters.base import DateBounds
from pivot_report.services.loading.models import Header, LoadStrategy, Record

# Suffix of the derived month attribute created for each date field.
PER_MONTH_SUFFIX = " (per month)"
PER_MONTH_FORMAT = "%y-%m"

RecordPredicate = Callable[[Record], bool]


class DatasetContext:
    """
    All data + metadata produced by one completed load.

    Attributes:
        header:         Field names, in source order.
        records:        Materialized records.
        date_fields:    Header fields holding dates.
        filter_bounds:  Bounds of the load, ``None`` for load-all.
        strategy:       Strategy in effect when the load started.
        total_expected: Count announced before the load.
        custom_filter:  Optional record predicate applied before aggregation.
    """

    __slots__ = (
        "header",
        "records",
        "date_fields",
        "filter_bounds",
        "strategy",
        "total_expected",
        "custom_filter",
    )

    def __init__(
        self,
        header: Header,
        records: List[Record],
        date_fields: List[str],
        filter_bounds: Optional[DateBounds],
        strategy: Optional[LoadStrategy],
        total_expected: int,
        custom_filter: Optional[RecordPredicate] = None,
    ):
        self.header = list(header)
        self.records = records
        self.date_fields = [f for f in date_fields if f in self.header]
        self.filter_bounds = filter_bounds
        self.strategy = strategy
        self.total_expected = total_expected
        self.custom_filter = custom_filter

    # ── Read-only helpers ────────────────────────────────────

    @property
    def total_records(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def filtered_records(self) -> List[Record]:
        """Records passing ``custom_filter`` (all of them when unset)."""
        if self.custom_filter is None:
            return self.records
        return [r for r in self.records if self.custom_filter(r)]

    def derived_attribute_names(self) -> Dict[str, str]:
        """``"<field> (per month)"`` → source field, for every date field."""
        return {f"{field}{PER_MONTH_SUFFIX}": field for field in self.date_fields}

    def to_dataframe(self, derived: bool = True) -> pd.DataFrame:
        """
        Build the aggregation input frame.

        Args:
            derived: Append the per-month columns for date fields.
        """
        df = pd.DataFrame(self.filtered_records(), columns=self.header)
        if derived and not df.empty:
            for name, source in self.derived_attribute_names().items():
                months = pd.to_datetime(df[source], errors="coerce", format="mixed")
                df[name] = months.dt.strftime(PER_MONTH_FORMAT)
        return df

    def to_dict(self) -> Dict[str, Any]:
        return {
            "header": self.header,
            "date_fields": self.date_fields,
            "total_records": self.total_records,
            "total_expected": self.total_expected,
            "filter_bounds": self.filter_bounds.to_dict() if self.filter_bounds else None,
            "strategy": self.strategy.value if self.strategy else None,
            "derived_attributes": list(self.derived_attribute_names()),
        }
