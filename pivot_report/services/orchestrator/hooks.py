"""
Session collaborators supplied by the caller.

  - ``SessionHooks``: capability hooks (default filter, custom filter
    defaults, count params).  Subclass and override what you need.
  - ``SessionListener``: progress / completion / error sink.
  - ``LoadConfig``: per-entity load settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pivot_report.core.config import settings
from pivot_report.services.filters.base import DateBounds, FieldDescriptor
from pivot_report.services.orchestrator.context import RecordPredicate

if TYPE_CHECKING:
    from pivot_report.services.orchestrator.context import DatasetContext


class SessionHooks:
    """
    Default hooks.  Every method may be overridden.
    """

    def get_filter(self) -> DateBounds:
        """Initial filter applied when the dataset is over the threshold."""
        return DateBounds()

    async def resolve_custom_filter_default_values(self) -> Dict[str, Any]:
        """Defaults for custom filter inputs, keyed by input name."""
        return {}

    def get_count_params(
        self,
        key_from: Optional[str],
        key_to: Optional[str],
    ) -> Dict[str, Any]:
        """Params restricting count and page requests to the filter range."""
        params = {"keyvalue_from": key_from, "keyvalue_to": key_to}
        return {k: v for k, v in params.items() if v is not None}


class SessionListener:
    """No-op listener; override the callbacks you care about."""

    def on_progress(self, percent: int) -> None:
        pass

    def on_complete(self, dataset: "DatasetContext") -> None:
        pass

    def on_error(self, kind: str, message: str) -> None:
        pass

    def on_empty(self, message: str) -> None:
        pass

    def on_notice(self, message: str) -> None:
        pass


@dataclass
class LoadConfig:
    """
    Load settings for one entity.

    ``threshold`` of 0 disables the filter-first gate.
    """
    entity: str
    threshold: int = 0
    initial_load_message: str = ""
    hooks: SessionHooks = field(default_factory=SessionHooks)
    filter_fields: List[FieldDescriptor] = field(default_factory=list)
    custom_filter: Optional[RecordPredicate] = None

    @classmethod
    def from_settings(cls, entity: str, **overrides: Any) -> "LoadConfig":
        values: Dict[str, Any] = {
            "threshold": settings.INITIAL_LOAD_LIMIT,
            "initial_load_message": settings.INITIAL_LOAD_MESSAGE,
        }
        values.update(overrides)
        return cls(entity=entity, **values)
