"""
Pivot Report — incremental data acquisition engine.

Fetches a large tabular dataset from a paginated remote source,
gates the load behind a filter when the dataset is too big, and
hands named records to an aggregation engine.
"""

__version__ = "1.0.0"
