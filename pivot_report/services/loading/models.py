"""
Loading dataclasses — cursor, page results and page batches.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

Header = List[str]
RawRow = List[Any]
Record = Dict[str, Any]


class LoadStrategy(str, Enum):
    """How the initial load proceeds."""
    AUTO = "auto"           # load everything immediately
    FILTERED = "filtered"   # a bounding filter is required first


@dataclass(frozen=True, slots=True)
class Cursor:
    """
    Opaque position in the remote ordering.

    ``from_key=None`` with ``page=0`` is the start of a sequence.
    """
    from_key: Optional[str] = None
    to_key: Optional[str] = None
    page: int = 0

    @classmethod
    def start(cls, from_key: Optional[str] = None, to_key: Optional[str] = None) -> "Cursor":
        return cls(from_key=from_key, to_key=to_key, page=0)

    def advance(self, next_key: Optional[str], next_page: Optional[int]) -> Optional["Cursor"]:
        """
        Cursor for the following page, or ``None`` at end of sequence.

        ``to_key`` carries over unchanged; the page index falls back to
        ``page + 1`` when the server does not send one.
        """
        if next_key is None or next_key == "":
            return None
        page = self.page + 1 if next_page is None else int(next_page)
        return Cursor(from_key=str(next_key), to_key=self.to_key, page=page)

    def to_params(self) -> Dict[str, Any]:
        return {
            "keyvalue_from": self.from_key,
            "keyvalue_to": self.to_key,
            "page": self.page,
        }


@dataclass(slots=True)
class PageResult:
    """One page as returned by the remote source."""
    rows: List[RawRow]
    next_cursor: Optional[Cursor]

    @property
    def is_last(self) -> bool:
        return self.next_cursor is None


@dataclass(slots=True)
class PageBatch:
    """One materialized page, as yielded by ``PaginationController``."""
    records: List[Record]
    page: int
    total_loaded: int
    progress: int
    is_last: bool
    cursor: Optional[Cursor] = None
