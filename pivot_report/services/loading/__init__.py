"""
Data loading — cursor pagination, row materialization, strategy.

Modules:
  models       : Cursor, PageResult, PageBatch, LoadStrategy.
  materializer : RowMaterializer (positional rows → records).
  strategy     : select_strategy / compute_progress.
  pagination   : PaginationController (sequential page loop).
"""

from pivot_report.services.loading.materializer import (
    ABSENT,
    RowMaterializer,
    duplicate_names,
)
from pivot_report.services.loading.models import (
    Cursor,
    LoadStrategy,
    PageBatch,
    PageResult,
)
from pivot_report.services.loading.strategy import compute_progress, select_strategy

__all__ = [
    "ABSENT",
    "RowMaterializer",
    "duplicate_names",
    "Cursor",
    "LoadStrategy",
    "PageBatch",
    "PageResult",
    "compute_progress",
    "select_strategy",
]
