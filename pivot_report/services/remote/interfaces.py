"""
Remote source contract consumed by the acquisition pipeline.

``PivotReportAPI`` is the HTTP implementation; tests plug in an
in-memory fake.  Implementations raise ``MetadataFetchFailure`` for
count/metadata errors and ``PageFetchFailure`` for page errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from pivot_report.services.filters.base import CalendarParams
from pivot_report.services.filters.relative import RelativeFilterPreset
from pivot_report.services.loading.models import Cursor, Header, PageResult


@dataclass(slots=True)
class SourceMetadata:
    """Everything fetched once at session start besides the counts."""
    header: Header
    date_fields: List[str] = field(default_factory=list)
    relative_filters: List[RelativeFilterPreset] = field(default_factory=list)
    calendar: CalendarParams = field(default_factory=CalendarParams)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "header": list(self.header),
            "date_fields": list(self.date_fields),
            "relative_filters": [p.to_option().to_dict() for p in self.relative_filters],
            "calendar": {
                "week_starts_on": self.calendar.week_starts_on,
                "fiscal_year_start_month": self.calendar.fiscal_year_start_month,
            },
        }


@runtime_checkable
class RemoteSource(Protocol):
    """Paged, countable, described tabular source."""

    async def count(self, entity: str, filter_params: Optional[Mapping[str, Any]] = None) -> int:
        """Number of records matching *filter_params*."""

    async def total_count(self, entity: str) -> int:
        """Number of records in the whole entity dataset."""

    async def fetch_page(
        self,
        entity: str,
        cursor: Cursor,
        filter_params: Optional[Mapping[str, Any]] = None,
    ) -> PageResult:
        """One page starting at *cursor*."""

    async def metadata(self, entity: str) -> SourceMetadata:
        """Header, date fields, relative presets and calendar settings."""
