"""
AcquisitionSession — State machine for one entity's data acquisition.

Flow::

    IDLE → METADATA_FETCH → STRATEGY_DECISION
         → AUTO:     LOADING → COMPLETE
         → FILTERED: AWAITING_FILTER_INPUT → LOADING → COMPLETE

``FAILED`` is reachable from METADATA_FETCH and LOADING.  ``load_all()``
and ``apply_filter()`` always start a fresh loading sub-session: the
accumulated records and cursor are replaced, and the load identity is
bumped so a chain started earlier stops at its next resume and its
late page is dropped.

Usage::

    session = AcquisitionSession(PivotReportAPI(), LoadConfig.from_settings("Activity"))
    await session.start()
    if session.state is SessionState.AWAITING_FILTER_INPUT:
        await session.apply_relative_filter("this.month")
    frame = session.dataset.to_dataframe()
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pivot_report.core.config import settings
from pivot_report.core.exceptions import (
    LoadFailure,
    MetadataFetchFailure,
    PivotReportError,
)
from pivot_report.services.filters.base import DateBounds, FilterOption
from pivot_report.services.filters.dates import date_range_matcher
from pivot_report.services.filters.defaults import FilterDefaultsResolver
from pivot_report.services.filters.relative import RelativeFilterResolver
from pivot_report.services.loading.materializer import RowMaterializer, duplicate_names
from pivot_report.services.loading.models import Cursor, LoadStrategy, Record
from pivot_report.services.loading.pagination import PaginationController
from pivot_report.services.loading.strategy import select_strategy
from pivot_report.services.orchestrator.context import DatasetContext
from pivot_report.services.orchestrator.hooks import LoadConfig, SessionListener
from pivot_report.services.remote.interfaces import RemoteSource, SourceMetadata

logger = logging.getLogger(__name__)

EMPTY_FILTER_MESSAGE = "There are no items matching specified filter."


class SessionState(str, Enum):
    IDLE = "idle"
    METADATA_FETCH = "metadata_fetch"
    STRATEGY_DECISION = "strategy_decision"
    AWAITING_FILTER_INPUT = "awaiting_filter_input"
    LOADING = "loading"
    COMPLETE = "complete"
    FAILED = "failed"


class LoadOutcome(str, Enum):
    """How one ``load_all`` / ``apply_filter`` call ended."""
    COMPLETE = "complete"
    EMPTY = "empty"
    FAILED = "failed"
    SUPERSEDED = "superseded"


class AcquisitionSession:
    """
    Owns the accumulated dataset of one entity.

    Nothing else mutates ``records``, the cursor or ``total_loaded``.
    """

    def __init__(
        self,
        source: RemoteSource,
        config: LoadConfig,
        listener: Optional[SessionListener] = None,
        today: Optional[date] = None,
    ) -> None:
        self._source = source
        self.config = config
        self.listener = listener or SessionListener()
        self._today = today
        self._defaults_resolver = FilterDefaultsResolver(settings.DEFAULT_DATE_FORMAT)

        self._state = SessionState.IDLE
        self._strategy: Optional[LoadStrategy] = None
        self._metadata: Optional[SourceMetadata] = None
        self._relative: Optional[RelativeFilterResolver] = None
        self._filter_defaults: Dict[str, Any] = {}

        self._load_id = 0
        self._records: List[Record] = []
        self._partial_records: List[Record] = []
        self._total_expected = 0
        self._progress = 0
        self._cursor: Optional[Cursor] = None
        self._filter_bounds: Optional[DateBounds] = None
        self._dataset: Optional[DatasetContext] = None
        self._error: Optional[PivotReportError] = None
        self._closed = False

    # ─────────────────────────────────────────────────────────
    #  READ-ONLY STATE
    # ─────────────────────────────────────────────────────────

    @property
    def entity(self) -> str:
        return self.config.entity

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def strategy(self) -> Optional[LoadStrategy]:
        return self._strategy

    @property
    def metadata(self) -> Optional[SourceMetadata]:
        return self._metadata

    @property
    def records(self) -> List[Record]:
        return self._records

    @property
    def total_loaded(self) -> int:
        return len(self._records)

    @property
    def partial_records(self) -> List[Record]:
        """Records of the last failed load, for diagnostics only."""
        return self._partial_records

    @property
    def total_expected(self) -> int:
        return self._total_expected

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def cursor(self) -> Optional[Cursor]:
        return self._cursor

    @property
    def filter_bounds(self) -> Optional[DateBounds]:
        return self._filter_bounds

    @property
    def dataset(self) -> Optional[DatasetContext]:
        """The completed dataset; ``None`` unless the state is COMPLETE."""
        return self._dataset if self._state is SessionState.COMPLETE else None

    @property
    def error(self) -> Optional[PivotReportError]:
        return self._error

    @property
    def filter_defaults(self) -> Dict[str, Any]:
        return dict(self._filter_defaults)

    # ─────────────────────────────────────────────────────────
    #  PUBLIC API
    # ─────────────────────────────────────────────────────────

    async def start(self) -> SessionState:
        """
        Fetch metadata + count, resolve defaults, pick a strategy and,
        when allowed, run the initial load.

        Raises:
            MetadataFetchFailure: metadata or count could not be fetched.
        """
        if self._state is not SessionState.IDLE or self._metadata is not None:
            raise RuntimeError(f"Session for '{self.entity}' was already started")

        load_id = self._next_load_id()
        self._set_state(SessionState.METADATA_FETCH)

        try:
            metadata, total, custom_defaults = await self._fetch_required_data()
        except MetadataFetchFailure as exc:
            if self._is_current(load_id):
                self._fail(exc)
            raise

        if not self._is_current(load_id):
            return self._state

        self._metadata = metadata
        self._relative = RelativeFilterResolver(metadata.relative_filters, metadata.calendar)
        self._filter_defaults = self._defaults_resolver.resolve_defaults(
            self.config.filter_fields, custom_defaults, self._today,
        )

        self._set_state(SessionState.STRATEGY_DECISION)
        self._update_expected(total, entity_wide=True)
        logger.info(
            f"[Session] {self.entity}: {total} records, "
            f"threshold={self.config.threshold or 'none'}, strategy={self._strategy.value}"
        )

        if self._strategy is LoadStrategy.AUTO:
            await self.load_all()
            return self._state

        self._set_state(SessionState.AWAITING_FILTER_INPUT)
        if self.config.initial_load_message:
            self.listener.on_notice(self.config.initial_load_message)

        initial = self.config.hooks.get_filter()
        if initial is not None and not initial.is_any:
            await self.apply_filter(initial.start, initial.end)
        return self._state

    async def load_all(self) -> LoadOutcome:
        """Discard the current data and load the whole entity dataset."""
        self._require_started()
        load_id = self._begin_load(None)

        try:
            total = await self._source.total_count(self.entity)
            if not self._is_current(load_id):
                return LoadOutcome.SUPERSEDED

            self._update_expected(total, entity_wide=True)
            return await self._run_load(load_id, Cursor.start(), {}, total)
        except Exception as exc:
            return self._fail_load(load_id, self._as_error(exc))

    async def apply_filter(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> LoadOutcome:
        """
        Discard the current data and load the records inside ``[start, end]``.

        A zero count skips loading, signals ``on_empty`` and returns the
        session to AWAITING_FILTER_INPUT.
        """
        self._require_started()
        bounds = DateBounds(start or None, end or None)
        load_id = self._begin_load(bounds)

        try:
            params = self.config.hooks.get_count_params(bounds.start, bounds.end)
            total = await self._source.count(self.entity, params)
            if not self._is_current(load_id):
                return LoadOutcome.SUPERSEDED

            self._update_expected(total)
            if not total:
                logger.info(f"[Session] {self.entity}: no records for {bounds.to_dict()}")
                self._set_state(SessionState.AWAITING_FILTER_INPUT)
                self.listener.on_empty(EMPTY_FILTER_MESSAGE)
                return LoadOutcome.EMPTY

            cursor = Cursor.start(bounds.start, bounds.end)
            return await self._run_load(load_id, cursor, params, total)
        except Exception as exc:
            return self._fail_load(load_id, self._as_error(exc))

    async def apply_relative_filter(
        self,
        preset_id: str,
        today: Optional[date] = None,
    ) -> LoadOutcome:
        """
        Resolve a relative preset and apply it as a filter.

        Raises:
            InvalidFilterPreset: before any fetch, for an unknown preset.
        """
        bounds = self.resolve_preset(preset_id, today)
        return await self.apply_filter(bounds.start, bounds.end)

    def resolve_preset(self, preset_id: str, today: Optional[date] = None) -> DateBounds:
        self._require_started()
        return self._relative.resolve(preset_id, today or self._today)

    def preset_options(self) -> List[Dict[str, Any]]:
        if self._relative is None:
            return []
        return self._relative.options()

    def apply_filter_defaults(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Fill empty custom filter inputs with their defaults."""
        return self._defaults_resolver.apply_defaults(values, self._filter_defaults)

    def matching_date_values(
        self,
        field_name: str,
        start: Optional[str],
        end: Optional[str],
    ) -> List[FilterOption]:
        """
        Distinct values of *field_name* inside ``[start, end]``.

        This is what a checkbox-style date filter shows as selected.
        """
        matcher = date_range_matcher
        seen: Dict[Any, None] = {}
        for record in self._records:
            value = record.get(field_name)
            if value not in seen and matcher.in_range(value, start, end):
                seen[value] = None
        return [FilterOption(value=v, label=str(v)) for v in seen]

    def close(self) -> None:
        """Invalidate any in-flight load; the session cannot be reused."""
        self._closed = True
        self._next_load_id()
        logger.debug(f"[Session] {self.entity}: closed")

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of the session state."""
        return {
            "entity": self.entity,
            "state": self._state.value,
            "strategy": self._strategy.value if self._strategy else None,
            "progress": self._progress,
            "total_expected": self._total_expected,
            "total_loaded": self.total_loaded,
            "filter_bounds": self._filter_bounds.to_dict() if self._filter_bounds else None,
            "error": self._error.to_dict() if self._error else None,
        }

    # ─────────────────────────────────────────────────────────
    #  LOADING
    # ─────────────────────────────────────────────────────────

    async def _run_load(
        self,
        load_id: int,
        cursor: Cursor,
        params: Mapping[str, Any],
        total: int,
    ) -> LoadOutcome:
        """
        Pull every page of one loading sub-session into ``records``.

        Errors propagate; the public caller routes them to ``_fail_load``.
        """
        controller = PaginationController(
            self._source, self.entity, RowMaterializer(self._metadata.header),
        )
        self._cursor = cursor

        async with aclosing(controller.fetch_all(cursor, params, total)) as batches:
            async for batch in batches:
                if not self._is_current(load_id):
                    logger.info(
                        f"[Session] {self.entity}: dropped late page {batch.page} "
                        f"of abandoned load #{load_id}"
                    )
                    return LoadOutcome.SUPERSEDED

                self._records.extend(batch.records)
                self._cursor = batch.cursor
                self._progress = batch.progress
                self.listener.on_progress(batch.progress)

        if not self._is_current(load_id):
            return LoadOutcome.SUPERSEDED

        self._dataset = DatasetContext(
            header=self._metadata.header,
            records=self._records,
            date_fields=self._metadata.date_fields,
            filter_bounds=self._filter_bounds,
            strategy=self._strategy,
            total_expected=total,
            custom_filter=self.config.custom_filter,
        )
        self._set_state(SessionState.COMPLETE)
        logger.info(
            f"[Session] {self.entity}: load #{load_id} complete, "
            f"{self.total_loaded}/{total} records"
        )
        self.listener.on_complete(self._dataset)
        return LoadOutcome.COMPLETE

    def _begin_load(self, bounds: Optional[DateBounds]) -> int:
        """Invalidate any previous load and reset the owned state."""
        load_id = self._next_load_id()
        self._records = []
        self._partial_records = []
        self._progress = 0
        self._cursor = None
        self._filter_bounds = bounds
        self._dataset = None
        self._error = None
        self._set_state(SessionState.LOADING)
        return load_id

    async def _fetch_required_data(self):
        """Metadata, count and custom defaults, concurrently."""
        try:
            params = self.config.hooks.get_count_params(None, None)
        except Exception as exc:
            raise MetadataFetchFailure(
                f"Unexpected error: {exc}", operation="count_params",
            ) from exc
        results = await asyncio.gather(
            self._source.metadata(self.entity),
            self._source.count(self.entity, params),
            self.config.hooks.resolve_custom_filter_default_values(),
            return_exceptions=True,
        )
        for outcome, operation in zip(results, ("metadata", "count", "custom_filter_defaults")):
            if isinstance(outcome, MetadataFetchFailure):
                raise outcome
            if isinstance(outcome, Exception):
                raise MetadataFetchFailure(
                    f"Unexpected error: {outcome}", operation=operation,
                ) from outcome
            if isinstance(outcome, BaseException):
                raise outcome

        duplicates = duplicate_names(results[0].header)
        if duplicates:
            raise MetadataFetchFailure(
                f"Duplicate field names in header: {', '.join(duplicates)}",
                operation="metadata",
                details={"duplicates": duplicates},
            )
        return results

    # ─────────────────────────────────────────────────────────
    #  INTERNAL HELPERS
    # ─────────────────────────────────────────────────────────

    def _update_expected(self, total: int, entity_wide: bool = False) -> None:
        """
        Store the count progress is measured against.

        Only an unfiltered count re-evaluates the strategy; a filtered
        count describes the filter, not the entity.
        """
        self._total_expected = total
        if entity_wide:
            self._strategy = select_strategy(total, self.config.threshold)

    def _as_error(self, exc: Exception) -> PivotReportError:
        if isinstance(exc, PivotReportError):
            return exc
        logger.exception(f"[Session] {self.entity}: unexpected error while loading")
        return LoadFailure(f"Unexpected error: {exc}", {"type": type(exc).__name__})

    def _fail_load(self, load_id: int, exc: PivotReportError) -> LoadOutcome:
        if not self._is_current(load_id):
            return LoadOutcome.SUPERSEDED
        self._partial_records = self._records
        self._records = []
        self._fail(exc)
        return LoadOutcome.FAILED

    def _fail(self, exc: PivotReportError) -> None:
        self._error = exc
        self._set_state(SessionState.FAILED)
        logger.error(f"[Session] {self.entity}: {exc.error_code}: {exc.message}")
        self.listener.on_error(exc.error_code, exc.message)

    def _next_load_id(self) -> int:
        self._load_id += 1
        return self._load_id

    def _is_current(self, load_id: int) -> bool:
        return not self._closed and load_id == self._load_id

    def _require_started(self) -> None:
        if self._closed:
            raise RuntimeError(f"Session for '{self.entity}' is closed")
        if self._metadata is None:
            raise RuntimeError(f"Session for '{self.entity}' has not been started")

    def _set_state(self, state: SessionState) -> None:
        if state is not self._state:
            logger.debug(f"[Session] {self.entity}: {self._state.value} → {state.value}")
        self._state = state
