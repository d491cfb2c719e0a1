"""
HTTPClient — One request per ``RemoteEndpoint``, answered as a result dict.

The pivot API reports failures two ways: a non-2xx status, or a 200
whose body carries ``is_error: 1``.  Both come back as
``{"ok": False, "error": ...}``; transport problems do too.  Nothing in
here raises, so ``PivotReportAPI`` decides which exception a failed
result becomes.

    result = await http_client.fetch(endpoint, extra_params={"entity": "Activity"})
    result["ok"], result["data"]
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx

from pivot_report.services.remote.api_config import RemoteEndpoint

logger = logging.getLogger(__name__)

APIResult = Dict[str, Any]

# auth_type → header template
_AUTH_HEADERS = {
    "api_key": ("X-Civi-Key", "{token}"),
    "bearer": ("Authorization", "Bearer {token}"),
}


class HTTPClient:
    """Stateless; opens an ``httpx.AsyncClient`` per call.

    ``transport`` is forwarded to that client, which lets tests plug in
    ``httpx.MockTransport``.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    async def fetch(
        self,
        endpoint: RemoteEndpoint,
        extra_params: Optional[Dict[str, Any]] = None,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> APIResult:
        """Call *endpoint*; ``None``-valued params are left out of the query."""
        merged = {**endpoint.params, **(extra_params or {})}
        params = {name: value for name, value in merged.items() if value is not None}
        headers = {**endpoint.headers, **(extra_headers or {}), **self._auth_header(endpoint)}

        try:
            async with httpx.AsyncClient(
                timeout=endpoint.timeout, transport=self._transport,
            ) as client:
                if endpoint.method == "POST":
                    response = await client.post(endpoint.url, headers=headers, data=params)
                else:
                    response = await client.get(endpoint.url, headers=headers, params=params)
            status = response.status_code
            if status >= 400:
                return self._failed(endpoint, f"HTTP {status}: {response.text[:200]}", status)
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            return self._failed(endpoint, self._describe(exc, endpoint), 0)

        remote_error = self._extract_remote_error(body, endpoint.error_key)
        if remote_error:
            return self._failed(endpoint, remote_error, status)

        return {
            "ok": True,
            "data": self._extract_response_key(body, endpoint.response_key),
            "status": status,
            "api_id": endpoint.api_id,
        }

    @staticmethod
    def _auth_header(endpoint: RemoteEndpoint) -> Dict[str, str]:
        template = _AUTH_HEADERS.get(endpoint.auth_type)
        if template is None or not endpoint.auth_env_var:
            return {}

        token = os.environ.get(endpoint.auth_env_var, "")
        if not token:
            logger.warning(
                f"[HTTPClient] {endpoint.api_id}: no credential in "
                f"${endpoint.auth_env_var}, sending unauthenticated"
            )
            return {}

        name, value = template
        return {name: value.format(token=token)}

    @staticmethod
    def _describe(exc: Exception, endpoint: RemoteEndpoint) -> str:
        if isinstance(exc, httpx.TimeoutException):
            return f"Timeout after {endpoint.timeout}s"
        if isinstance(exc, httpx.ConnectError):
            return f"Connection failed: {exc}"
        if isinstance(exc, httpx.HTTPError):
            return f"HTTP error: {exc}"
        # json.JSONDecodeError is a ValueError
        return f"Invalid JSON response: {exc}"

    @staticmethod
    def _extract_response_key(data: Any, response_key: Optional[str]) -> Any:
        """Follow a dotted path such as ``values.0.nextKeyValue``.

        Digits index into lists; any miss yields ``None``.
        """
        if not response_key:
            return data

        for part in response_key.split("."):
            if isinstance(data, dict):
                data = data.get(part)
            elif isinstance(data, list) and part.isdigit() and int(part) < len(data):
                data = data[int(part)]
            else:
                return None
        return data

    @staticmethod
    def _extract_remote_error(data: Any, error_key: Optional[str]) -> Optional[str]:
        if not error_key or not isinstance(data, dict) or not data.get(error_key):
            return None
        return str(data.get("error_message") or "Remote API reported an error")

    @staticmethod
    def _failed(endpoint: RemoteEndpoint, error: str, status: int) -> APIResult:
        logger.error(f"[HTTPClient] {endpoint.api_id}: {error}")
        return {
            "ok": False,
            "error": error,
            "status": status,
            "api_id": endpoint.api_id,
            "data": None,
        }


# ── Singleton ────────────────────────────────────────────────────
http_client = HTTPClient()
