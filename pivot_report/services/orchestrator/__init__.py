"""
Orchestrator package — acquisition session workflow.

Modules:
  context   — DatasetContext handed to the aggregation engine
  hooks     — SessionHooks, SessionListener, LoadConfig
  session   — AcquisitionSession state machine
  registry  — SessionRegistry (one session per entity, background runs)

Usage::

    from pivot_report.services.orchestrator import AcquisitionSession, LoadConfig

    session = AcquisitionSession(source, LoadConfig.from_settings("Activity"))
    await session.start()
"""

from pivot_report.services.orchestrator.context import DatasetContext
from pivot_report.services.orchestrator.hooks import (
    LoadConfig,
    SessionHooks,
    SessionListener,
)
from pivot_report.services.orchestrator.registry import SessionRegistry, session_registry
from pivot_report.services.orchestrator.session import (
    AcquisitionSession,
    LoadOutcome,
    SessionState,
)

__all__ = [
    "DatasetContext",
    "LoadConfig",
    "SessionHooks",
    "SessionListener",
    "SessionRegistry",
    "session_registry",
    "AcquisitionSession",
    "LoadOutcome",
    "SessionState",
]
