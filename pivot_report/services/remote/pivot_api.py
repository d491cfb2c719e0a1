"""
PivotReportAPI — HTTP implementation of ``RemoteSource``.

Maps the four pipeline operations onto the operations declared in
``remote_api.yml`` and turns failed ``APIResult`` dicts into the
pipeline's exceptions.  No retries: a failed call fails the step.

Usage::

    api = PivotReportAPI()
    meta = await api.metadata("Activity")
    total = await api.count("Activity", {"keyvalue_from": "2026-01-01"})
    page = await api.fetch_page("Activity", Cursor.start(), {})
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from pivot_report.core.exceptions import MetadataFetchFailure, PageFetchFailure
from pivot_report.services.filters.base import CalendarParams
from pivot_report.services.filters.relative import RelativeFilterResolver
from pivot_report.services.loading.materializer import duplicate_names
from pivot_report.services.loading.models import Cursor, PageResult
from pivot_report.services.remote.api_config import RemoteConfigLoader, remote_config_loader
from pivot_report.services.remote.http_client import HTTPClient, http_client
from pivot_report.services.remote.interfaces import SourceMetadata

logger = logging.getLogger(__name__)


class PivotReportAPI:
    """Remote pivot data source over HTTP."""

    def __init__(
        self,
        client: Optional[HTTPClient] = None,
        config: Optional[RemoteConfigLoader] = None,
    ) -> None:
        self._client = client or http_client
        self._config = config or remote_config_loader

    # ─────────────────────────────────────────────────────────
    #  COUNTS
    # ─────────────────────────────────────────────────────────

    async def count(self, entity: str, filter_params: Optional[Mapping[str, Any]] = None) -> int:
        params = {**(filter_params or {}), "entity": entity}
        data = await self._metadata_call("pivot_count", params)
        return _to_int(data, "pivot_count")

    async def total_count(self, entity: str) -> int:
        data = await self._metadata_call("pivot_total_count", {"entity": entity})
        return _to_int(data, "pivot_total_count")

    # ─────────────────────────────────────────────────────────
    #  PAGES
    # ─────────────────────────────────────────────────────────

    async def fetch_page(
        self,
        entity: str,
        cursor: Cursor,
        filter_params: Optional[Mapping[str, Any]] = None,
    ) -> PageResult:
        """
        Fetch one page.  The response body is expected as::

            {"values": [{"data": [[...], ...], "nextKeyValue": "K2", "nextPage": 1}]}
        """
        endpoint = self._config.get("pivot_page")
        if endpoint is None:
            raise PageFetchFailure("Operation 'pivot_page' is not configured", page=cursor.page)

        params = {**(filter_params or {}), **cursor.to_params(), "entity": entity}
        result = await self._client.fetch(endpoint, extra_params=params)
        if not result["ok"]:
            raise PageFetchFailure(
                result["error"], page=cursor.page, details={"status": result["status"]},
            )

        payload = result["data"]
        if not isinstance(payload, dict) or not isinstance(payload.get("data", []), list):
            raise PageFetchFailure("Malformed page response", page=cursor.page)

        next_cursor = cursor.advance(payload.get("nextKeyValue"), payload.get("nextPage"))
        return PageResult(rows=payload.get("data") or [], next_cursor=next_cursor)

    # ─────────────────────────────────────────────────────────
    #  METADATA
    # ─────────────────────────────────────────────────────────

    async def metadata(self, entity: str) -> SourceMetadata:
        """Fetch header, date fields, presets and calendar settings concurrently."""
        results = await asyncio.gather(
            self._metadata_call("pivot_header", {"entity": entity}),
            self._metadata_call("pivot_date_fields", {"entity": entity}),
            self._metadata_call("relative_filters", {}),
            self._metadata_call("calendar_settings", {}),
            return_exceptions=True,
        )
        for outcome in results:
            if isinstance(outcome, BaseException):
                raise outcome
        header, date_fields, relative_rows, calendar_values = results

        try:
            calendar = CalendarParams.from_settings(calendar_values)
        except (TypeError, ValueError) as exc:
            raise MetadataFetchFailure(
                f"Invalid calendar settings: {exc}", operation="calendar_settings",
            ) from exc

        resolver = RelativeFilterResolver.from_option_values(_as_list(relative_rows), calendar)
        meta = SourceMetadata(
            header=[str(h) for h in _as_list(header)],
            date_fields=[str(f) for f in _as_list(date_fields)],
            relative_filters=resolver.presets,
            calendar=calendar,
        )
        if not meta.header:
            raise MetadataFetchFailure(f"Empty header for '{entity}'", operation="pivot_header")
        duplicates = duplicate_names(meta.header)
        if duplicates:
            raise MetadataFetchFailure(
                f"Duplicate field names in header for '{entity}': {', '.join(duplicates)}",
                operation="pivot_header",
                details={"duplicates": duplicates},
            )

        logger.info(
            f"[PivotReportAPI] {entity}: {len(meta.header)} fields, "
            f"{len(meta.date_fields)} date field(s), "
            f"{len(meta.relative_filters)} preset(s)"
        )
        return meta

    # ─────────────────────────────────────────────────────────
    #  INTERNAL HELPERS
    # ─────────────────────────────────────────────────────────

    async def _metadata_call(self, api_id: str, params: Dict[str, Any]) -> Any:
        endpoint = self._config.get(api_id)
        if endpoint is None:
            raise MetadataFetchFailure(f"Operation '{api_id}' is not configured", operation=api_id)

        result = await self._client.fetch(endpoint, extra_params=params)
        if not result["ok"]:
            raise MetadataFetchFailure(
                result["error"], operation=api_id, details={"status": result["status"]},
            )
        return result["data"]


def _to_int(value: Any, operation: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MetadataFetchFailure(
            f"Expected an integer count, got {value!r}", operation=operation,
        ) from exc


def _as_list(value: Any) -> List[Any]:
    """Accept both sequential lists and id-keyed dicts."""
    if value is None:
        return []
    if isinstance(value, dict):
        return list(value.values())
    return list(value)
