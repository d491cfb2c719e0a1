"""
Load strategy selection — auto-load vs. filter-first.
"""

from __future__ import annotations

from typing import Optional

from pivot_report.services.loading.models import LoadStrategy


def select_strategy(total_expected: int, threshold: Optional[int]) -> LoadStrategy:
    """
    AUTO when no threshold is configured or the dataset fits under it,
    FILTERED otherwise.
    """
    if not threshold or total_expected <= threshold:
        return LoadStrategy.AUTO
    return LoadStrategy.FILTERED


def compute_progress(total_loaded: int, total_expected: int) -> int:
    """``floor(loaded / expected * 100)`` clamped to 0..100; 0 when nothing is expected."""
    if total_expected <= 0:
        return 0
    percent = total_loaded * 100 // total_expected
    return max(0, min(100, percent))
