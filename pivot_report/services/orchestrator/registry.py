"""
SessionRegistry — One live ``AcquisitionSession`` per entity.

Used by the HTTP layer: loads run as background tasks so a request
returns immediately and progress is polled.  The registry keeps a
reference to each task until it finishes and logs any exception it
raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Dict, List, Optional, Set

from pivot_report.services.orchestrator.context import DatasetContext
from pivot_report.services.orchestrator.hooks import LoadConfig, SessionListener
from pivot_report.services.orchestrator.session import AcquisitionSession
from pivot_report.services.remote.interfaces import RemoteSource

logger = logging.getLogger(__name__)


class RecordingListener(SessionListener):
    """Keeps the latest events so they can be polled."""

    def __init__(self) -> None:
        self.progress = 0
        self.notices: List[str] = []
        self.empty_message: Optional[str] = None
        self.last_error: Optional[Dict[str, str]] = None
        self.completed = False

    def on_progress(self, percent: int) -> None:
        self.progress = percent

    def on_complete(self, dataset: DatasetContext) -> None:
        self.completed = True

    def on_error(self, kind: str, message: str) -> None:
        self.last_error = {"kind": kind, "message": message}

    def on_empty(self, message: str) -> None:
        self.empty_message = message

    def on_notice(self, message: str) -> None:
        self.notices.append(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "notices": list(self.notices),
            "empty_message": self.empty_message,
            "last_error": self.last_error,
        }


class SessionRegistry:
    """Creates, replaces and runs sessions keyed by entity name."""

    def __init__(self, source: Optional[RemoteSource] = None) -> None:
        self.source = source
        self._sessions: Dict[str, AcquisitionSession] = {}
        self._tasks: Set[asyncio.Task] = set()

    def _get_source(self) -> RemoteSource:
        if self.source is None:
            from pivot_report.services.remote.pivot_api import PivotReportAPI
            self.source = PivotReportAPI()
        return self.source

    def get(self, entity: str) -> Optional[AcquisitionSession]:
        return self._sessions.get(entity)

    def states(self) -> Dict[str, str]:
        return {entity: s.state.value for entity, s in self._sessions.items()}

    def create(self, entity: str, config: Optional[LoadConfig] = None) -> AcquisitionSession:
        """Replace any existing session for *entity* with a fresh one."""
        previous = self._sessions.pop(entity, None)
        if previous is not None:
            previous.close()

        session = AcquisitionSession(
            self._get_source(),
            config or LoadConfig.from_settings(entity),
            listener=RecordingListener(),
        )
        self._sessions[entity] = session
        return session

    def run(self, session: AcquisitionSession, coro: Coroutine) -> asyncio.Task:
        """Schedule *coro* (a session operation) in the background."""
        task = asyncio.create_task(coro, name=f"pivot-{session.entity}")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"[SessionRegistry] {task.get_name()} failed: {exc}")


# ── Singleton ────────────────────────────────────────────────────
session_registry = SessionRegistry()
