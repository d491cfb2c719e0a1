"""
FilterDefaultsResolver — Default values for custom filter inputs.

Date inputs default to today; the caller-supplied provider
(``resolve_custom_filter_default_values`` hook) can override any
input by name.  Defaults are only ever used to fill an empty value,
never to overwrite something the user entered.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional

from pivot_report.services.filters.base import CANONICAL_DATE_FORMAT, FieldDescriptor


def is_empty(value: Any) -> bool:
    """``None``, blank strings and empty containers count as empty."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


class FilterDefaultsResolver:
    """Computes and applies default filter values."""

    def __init__(self, date_format: str = CANONICAL_DATE_FORMAT) -> None:
        self.date_format = date_format

    def resolve_defaults(
        self,
        fields: Iterable[FieldDescriptor],
        external_defaults: Optional[Mapping[str, Any]] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Build the ``field name → default`` map.

        Args:
            fields:            Inputs of the custom filter form.
            external_defaults: Provider result; wins over built-ins.
            today:             Reference day for date inputs.
        """
        today_text = (today or date.today()).strftime(self.date_format)
        defaults: Dict[str, Any] = {
            f.name: today_text for f in fields if f.is_date
        }
        for name, value in (external_defaults or {}).items():
            if not is_empty(value):
                defaults[name] = value
        return defaults

    @staticmethod
    def apply_defaults(
        values: Mapping[str, Any],
        defaults: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """Return *values* with every empty entry filled from *defaults*."""
        merged = dict(values)
        for name, default in defaults.items():
            if is_empty(merged.get(name)):
                merged[name] = default
        return merged


# ── Singleton ────────────────────────────────────────────────────
filter_defaults_resolver = FilterDefaultsResolver()
