"""
RowMaterializer — Positional rows → named records.

Pure transformation (no I/O).  Keeps a running ``total_loaded``
counter that grows by the number of rows materialized per call, so
progress tracks what was actually accumulated even when the source
returns duplicates or fewer rows than its count announced.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence

from pivot_report.services.loading.models import Header, RawRow, Record

# Value used for header positions a row does not reach.
ABSENT = None


def duplicate_names(header: Sequence[str]) -> List[str]:
    return sorted(name for name, seen in Counter(header).items() if seen > 1)


class RowMaterializer:
    """Maps raw rows onto a fixed header."""

    def __init__(self, header: Sequence[str]) -> None:
        duplicates = duplicate_names(header)
        if duplicates:
            raise ValueError(f"Header field names must be unique: {duplicates}")
        self.header: Header = list(header)
        self.total_loaded = 0

    def materialize(self, raw_rows: Iterable[RawRow]) -> List[Record]:
        """
        Combine each row with the header.

        Extra positions are ignored; missing ones become ``ABSENT``.
        """
        width = len(self.header)
        result: List[Record] = []
        for row in raw_rows:
            values = list(row or [])[:width]
            values.extend([ABSENT] * (width - len(values)))
            result.append(dict(zip(self.header, values)))

        self.total_loaded += len(result)
        return result
