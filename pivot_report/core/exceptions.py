"""
Error hierarchy for the acquisition pipeline.

Every error carries a stable ``error_code`` used as the ``kind``
argument of ``SessionListener.on_error`` and in API responses.
An empty filter result is not an error and has no class here.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PivotReportError(Exception):
    """Base class for acquisition errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "PIVOT_REPORT_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": dict(self.details),
        }


class MetadataFetchFailure(PivotReportError):
    """Count, header, preset or calendar settings could not be fetched."""

    def __init__(
        self,
        message: str,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message, "METADATA_FETCH_FAILURE", {**(details or {}), "operation": operation},
        )
        self.operation = operation


class PageFetchFailure(PivotReportError):
    """A page request failed mid-load; the load is aborted."""

    def __init__(
        self,
        message: str,
        page: int,
        loaded: int = 0,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            "PAGE_FETCH_FAILURE",
            {**(details or {}), "page": page, "loaded": loaded},
        )
        self.page = page
        self.loaded = loaded


class InvalidFilterPreset(PivotReportError):
    """A relative date preset id outside the enumerated set was requested."""

    def __init__(self, preset_id: str):
        super().__init__(
            f"Unknown relative date filter '{preset_id}'",
            "INVALID_FILTER_PRESET",
            {"preset_id": preset_id},
        )
        self.preset_id = preset_id


class LoadFailure(PivotReportError):
    """An unexpected error (hook, materialization) aborted a load."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "LOAD_FAILURE", details)
