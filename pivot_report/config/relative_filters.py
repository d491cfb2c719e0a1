"""
Relative Date Filter Grammar.

Preset ids follow the ``<relative>.<unit>`` convention of the
``relative_date_filters`` option group, e.g. ``this.month``,
``previous_2.year``, ``ending.week``, ``this.fiscal_year``.

RELATIVE_TERMS — relative keyword → (accepts a count suffix, description)
PERIOD_UNITS   — unit keyword → description

To support a new relative keyword:
  1. Add it here.
  2. Add its branch in ``RelativeFilterPreset.resolve``.
"""

RELATIVE_TERMS: dict[str, tuple[bool, str]] = {
    "this":            (False, "The whole current period"),
    "current":         (False, "Start of the current period up to today"),
    "previous":        (True,  "The N periods before the current one"),
    "previous_before": (False, "The period before the previous one"),
    "next":            (True,  "The N periods after the current one"),
    "ending":          (True,  "The last N periods ending today"),
    "earlier":         (False, "Everything up to the end of the previous period"),
    "greater":         (False, "Everything from the start of the current period"),
}

PERIOD_UNITS: dict[str, str] = {
    "day":         "Calendar day",
    "week":        "Week, starting on the configured week day",
    "month":       "Calendar month",
    "quarter":     "Calendar quarter",
    "year":        "Calendar year",
    "fiscal_year": "Fiscal year, starting on the configured month",
}

# The "- Any -" option: no date restriction.
ANY_PRESET_ID = ""
ANY_PRESET_LABEL = "- Any -"
