"""
Remote pivot API access.

Modules:
  interfaces  : RemoteSource protocol + SourceMetadata.
  api_config  : YAML loader for operation definitions.
  http_client : Async HTTP wrapper with auth, timeout, error handling.
  pivot_api   : PivotReportAPI — RemoteSource over HTTP.
"""

from pivot_report.services.remote.interfaces import RemoteSource, SourceMetadata

__all__ = ["RemoteSource", "SourceMetadata"]
