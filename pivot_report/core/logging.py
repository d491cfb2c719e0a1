"""
Logging setup — stdlib ``logging`` driven by ``LOG_LEVEL`` / ``LOG_FILE``.

Modules keep using ``logging.getLogger(__name__)``; this only wires
handlers on the root logger once per process.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from pivot_report.core.config import settings

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_configured = False


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure console + rotating file handlers on the root logger.

    Args:
        level:    Overrides ``settings.LOG_LEVEL``.
        log_file: Overrides ``settings.LOG_FILE``. Empty string disables
                  the file handler.
    """
    global _configured
    if _configured:
        return

    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())
    formatter = logging.Formatter(_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    path = settings.LOG_FILE if log_file is None else log_file
    if path:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True
