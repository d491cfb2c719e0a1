"""
PaginationController — Sequential cursor-driven page loop.

Drives ``fetch_page`` one request at a time: the next page is only
requested when the consumer pulls the next batch from
``fetch_all()``, so an abandoned consumer never triggers another
fetch.  The loop ends when the server returns an empty next key;
there is no page limit.

One controller per load.  ``fetch_all`` cannot be restarted.

Usage::

    controller = PaginationController(source, "Activity", RowMaterializer(header))
    async for batch in controller.fetch_all(Cursor.start(), {}, total_expected=250):
        print(batch.progress)
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, List, Mapping, Optional

from pivot_report.core.exceptions import PageFetchFailure, PivotReportError
from pivot_report.services.loading.materializer import RowMaterializer
from pivot_report.services.loading.models import Cursor, PageBatch, Record
from pivot_report.services.loading.strategy import compute_progress
from pivot_report.services.remote.interfaces import RemoteSource

logger = logging.getLogger(__name__)


class PaginationController:
    """
    Fetches every page of one load and accumulates its records.

    Attributes:
        records:   Records materialized so far (partial after a failure).
        pages:     Number of pages fetched successfully.
        completed: ``True`` once the end-of-sequence page was seen.
    """

    def __init__(
        self,
        source: RemoteSource,
        entity: str,
        materializer: RowMaterializer,
    ) -> None:
        self._source = source
        self._entity = entity
        self._materializer = materializer
        self._started = False
        self.records: List[Record] = []
        self.pages = 0
        self.completed = False

    @property
    def total_loaded(self) -> int:
        return self._materializer.total_loaded

    async def fetch_all(
        self,
        initial_cursor: Cursor,
        filter_params: Optional[Mapping[str, Any]],
        total_expected: int,
    ) -> AsyncIterator[PageBatch]:
        """
        Yield one ``PageBatch`` per page until end of sequence.

        Raises:
            PageFetchFailure: a page could not be fetched; remaining
                pages are not requested.
            RuntimeError:     called twice on the same controller.
        """
        if self._started:
            raise RuntimeError("PaginationController.fetch_all() is not restartable")
        self._started = True

        cursor: Optional[Cursor] = initial_cursor
        while cursor is not None:
            page = await self._fetch(cursor, filter_params)

            records = self._materializer.materialize(page.rows)
            self.records.extend(records)
            self.pages += 1

            is_last = page.is_last
            progress = self._progress(total_expected, is_last)

            logger.debug(
                f"[Pagination] {self._entity}: page={cursor.page}, "
                f"rows={len(records)}, loaded={self.total_loaded}/{total_expected}, "
                f"progress={progress}%"
            )

            if is_last:
                self.completed = True

            yield PageBatch(
                records=records,
                page=cursor.page,
                total_loaded=self.total_loaded,
                progress=progress,
                is_last=is_last,
                cursor=page.next_cursor,
            )
            cursor = page.next_cursor

        logger.info(
            f"[Pagination] {self._entity}: {self.total_loaded} records "
            f"in {self.pages} page(s)"
        )

    # ─────────────────────────────────────────────────────────
    #  INTERNAL HELPERS
    # ─────────────────────────────────────────────────────────

    async def _fetch(self, cursor: Cursor, filter_params: Optional[Mapping[str, Any]]):
        try:
            return await self._source.fetch_page(self._entity, cursor, filter_params)
        except PivotReportError as exc:
            raise PageFetchFailure(
                exc.message,
                page=cursor.page,
                loaded=self.total_loaded,
                details=exc.details,
            ) from exc
        except Exception as exc:
            logger.exception(f"[Pagination] {self._entity}: page {cursor.page} failed")
            raise PageFetchFailure(
                f"Unexpected error: {exc}",
                page=cursor.page,
                loaded=self.total_loaded,
            ) from exc

    def _progress(self, total_expected: int, is_last: bool) -> int:
        """
        Percentage for the current batch.

        Only the final page may report 100; the a-priori count can be
        off when the source changes during the load.
        """
        if total_expected <= 0:
            return 0
        if is_last:
            return 100
        return min(compute_progress(self.total_loaded, total_expected), 99)
