"""
RemoteConfig — YAML loader for the remote pivot API operations.

Single Responsibility: parse ``remote_api.yml`` into typed dataclasses.
No HTTP calls, no business logic.

Usage::

    from pivot_report.services.remote.api_config import remote_config_loader

    ep = remote_config_loader.get("pivot_page")   # RemoteEndpoint | None
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from pivot_report.core.config import settings

logger = logging.getLogger(__name__)

# Bundled config (pivot_report/config/remote_api.yml)
_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "remote_api.yml"


# ── Dataclass ────────────────────────────────────────────────────

@dataclass(frozen=True)
class RemoteEndpoint:
    """
    Immutable definition of one remote operation.

    Parsed from one entry in ``remote_api.yml``.
    """
    api_id: str
    name: str
    url: str
    method: str = "GET"
    timeout: int = 30
    auth_type: str = "none"
    auth_env_var: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    response_key: Optional[str] = None
    error_key: Optional[str] = None


# ── Loader ───────────────────────────────────────────────────────

class RemoteConfigLoader:
    """
    Loads and caches the parsed operation definitions from YAML.

    The YAML is read once on first access.  Call ``reload()`` to
    re-read after manual edits.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        base_url: Optional[str] = None,
    ):
        configured = settings.REMOTE_API_CONFIG
        self._config_path = Path(config_path or configured or _CONFIG_PATH)
        self._base_url = (base_url or settings.PIVOT_API_BASE_URL).rstrip("/")
        self._endpoints: Dict[str, RemoteEndpoint] = {}
        self._loaded = False

    def get_all(self) -> Dict[str, RemoteEndpoint]:
        """Return all configured operations (keyed by api_id)."""
        self._ensure_loaded()
        return dict(self._endpoints)

    def get(self, api_id: str) -> Optional[RemoteEndpoint]:
        """Return a single operation by its api_id, or ``None``."""
        self._ensure_loaded()
        return self._endpoints.get(api_id)

    def list_ids(self) -> List[str]:
        self._ensure_loaded()
        return list(self._endpoints.keys())

    def reload(self) -> None:
        """Force re-read of the YAML file."""
        self._loaded = False
        self._endpoints.clear()
        self._ensure_loaded()

    # ── Internal ─────────────────────────────────────────────

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._load()

    def _load(self) -> None:
        """Parse the YAML file into RemoteEndpoint dataclasses."""
        if not self._config_path.exists():
            logger.warning(
                f"[RemoteConfig] Config file not found: {self._config_path}"
            )
            self._loaded = True
            return

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            logger.error(f"[RemoteConfig] YAML parse error: {exc}")
            self._loaded = True
            return

        if not raw or not isinstance(raw, dict):
            logger.info("[RemoteConfig] No operations configured in YAML")
            self._loaded = True
            return

        for api_id, definition in raw.items():
            if not isinstance(definition, dict):
                continue
            try:
                self._endpoints[api_id] = self._parse(api_id, definition)
            except (KeyError, ValueError, TypeError) as exc:
                logger.error(
                    f"[RemoteConfig] Skipping invalid entry '{api_id}': {exc}"
                )

        self._loaded = True
        logger.info(
            f"[RemoteConfig] Loaded {len(self._endpoints)} operation(s)"
        )

    def _parse(self, api_id: str, definition: Dict[str, Any]) -> RemoteEndpoint:
        url = definition.get("base_url")
        if not url:
            url = self._base_url + "/" + definition["path"].lstrip("/")

        auth_type = definition.get("auth_type", "none")
        auth_env_var = definition.get("auth_env_var")
        if auth_type != "none" and not auth_env_var:
            auth_env_var = settings.PIVOT_API_KEY_ENV_VAR

        return RemoteEndpoint(
            api_id=api_id,
            name=definition.get("name", api_id),
            url=url,
            method=definition.get("method", "GET").upper(),
            timeout=int(definition.get("timeout", settings.PIVOT_API_TIMEOUT)),
            auth_type=auth_type,
            auth_env_var=auth_env_var,
            headers=definition.get("headers") or {},
            params=definition.get("params") or {},
            response_key=definition.get("response_key"),
            error_key=definition.get("error_key"),
        )


# ── Singleton ────────────────────────────────────────────────────
remote_config_loader = RemoteConfigLoader()
