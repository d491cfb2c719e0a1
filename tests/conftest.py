"""Pytest configuration and shared fixtures for the pivot_report test suite."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pytest

from pivot_report.core.exceptions import MetadataFetchFailure, PageFetchFailure
from pivot_report.services.filters.base import CalendarParams
from pivot_report.services.filters.relative import RelativeFilterPreset
from pivot_report.services.loading.models import Cursor, PageResult
from pivot_report.services.remote.interfaces import SourceMetadata

HEADER = ["id", "subject", "activity_date_time"]

# (rows, next key) per page index
PageSpec = Tuple[List[List[Any]], Optional[str]]


def make_rows(start: int, count: int, day: str = "2026-10-05") -> List[List[Any]]:
    """Raw positional rows matching ``HEADER``."""
    return [[i, f"Subject {i}", day] for i in range(start, start + count)]


class FakeSource:
    """
    In-memory ``RemoteSource``.

    Pages are looked up by ``cursor.page``.  When the call carries a
    ``keyvalue_from``/``keyvalue_to`` param, ``filtered_pages`` is used
    unless ``pages_by_from`` has an entry for that ``keyvalue_from``.
    A page index listed in ``gates`` waits for its ``asyncio.Event``
    before returning.
    """

    def __init__(
        self,
        pages: Sequence[PageSpec] = (),
        total: int = 0,
        filtered_total: Optional[int] = None,
        filtered_pages: Optional[Sequence[PageSpec]] = None,
        header: Sequence[str] = HEADER,
        date_fields: Sequence[str] = ("activity_date_time",),
        presets: Sequence[str] = ("this.month", "previous.month", "this.year"),
        calendar: Optional[CalendarParams] = None,
    ) -> None:
        self.pages = list(pages)
        self.filtered_pages = list(filtered_pages) if filtered_pages is not None else None
        self.pages_by_from: Dict[str, List[PageSpec]] = {}
        self.total = total
        self.filtered_total = total if filtered_total is None else filtered_total
        self.header = list(header)
        self.date_fields = list(date_fields)
        self.presets = [RelativeFilterPreset.parse(p) for p in presets]
        self.calendar = calendar or CalendarParams()

        self.fail_metadata: Optional[str] = None
        self.fail_count: Optional[str] = None
        self.fail_page: Optional[int] = None
        self.gates: Dict[int, asyncio.Event] = {}

        self.count_calls: List[Dict[str, Any]] = []
        self.total_count_calls = 0
        self.page_calls: List[Tuple[Cursor, Dict[str, Any]]] = []

    async def count(self, entity: str, filter_params: Optional[Mapping[str, Any]] = None) -> int:
        params = dict(filter_params or {})
        self.count_calls.append(params)
        if self.fail_count:
            raise MetadataFetchFailure(self.fail_count, operation="pivot_count")
        return self.filtered_total if params else self.total

    async def total_count(self, entity: str) -> int:
        self.total_count_calls += 1
        return self.total

    async def fetch_page(
        self,
        entity: str,
        cursor: Cursor,
        filter_params: Optional[Mapping[str, Any]] = None,
    ) -> PageResult:
        params = dict(filter_params or {})
        self.page_calls.append((cursor, params))

        gate = self.gates.get(cursor.page)
        if gate is not None:
            await gate.wait()
        if self.fail_page == cursor.page:
            raise PageFetchFailure("Remote error", page=cursor.page)

        pages = self.pages_by_from.get(params.get("keyvalue_from"))
        if pages is None:
            pages = self.filtered_pages if params and self.filtered_pages is not None else self.pages
        rows, next_key = pages[cursor.page]
        return PageResult(rows=rows, next_cursor=cursor.advance(next_key, None))

    async def metadata(self, entity: str) -> SourceMetadata:
        if self.fail_metadata:
            raise MetadataFetchFailure(self.fail_metadata, operation="pivot_header")
        return SourceMetadata(
            header=list(self.header),
            date_fields=list(self.date_fields),
            relative_filters=list(self.presets),
            calendar=self.calendar,
        )


class CollectingListener:
    """Records every listener callback in order."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Any]] = []

    def on_progress(self, percent: int) -> None:
        self.events.append(("progress", percent))

    def on_complete(self, dataset) -> None:
        self.events.append(("complete", dataset))

    def on_error(self, kind: str, message: str) -> None:
        self.events.append(("error", kind))

    def on_empty(self, message: str) -> None:
        self.events.append(("empty", message))

    def on_notice(self, message: str) -> None:
        self.events.append(("notice", message))

    def of(self, kind: str) -> List[Any]:
        return [payload for name, payload in self.events if name == kind]


@pytest.fixture
def today() -> date:
    return date(2026, 10, 19)


@pytest.fixture
def two_page_source() -> FakeSource:
    """Page 0 points at K2, page 1 ends the sequence."""
    return FakeSource(
        pages=[(make_rows(1, 3), "K2"), (make_rows(4, 2), "")],
        total=5,
    )


@pytest.fixture
def listener() -> CollectingListener:
    return CollectingListener()
