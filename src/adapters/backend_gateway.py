"""Backend HTTP adapter.

Sends JSON to the relay backend at ``<root_url>/<backend_token>/<path>``.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Any, Mapping, Optional

from core.config import RelayConfig
from core.ports import GatewayError

LOGGER = logging.getLogger(__name__)


class BackendGateway:
    """Blocking JSON client implementing the core BackendPort."""

    def __init__(self, config: RelayConfig) -> None:
        self._root_url = config.root_url.rstrip("/")
        self._backend_token = config.backend_token.strip("/")
        self._timeout = config.request_timeout

    def url_for(self, path: str) -> str:
        parts = [self._root_url, self._backend_token, path.lstrip("/")]
        return "/".join(part for part in parts if part)

    def post(self, path: str, payload: Mapping[str, Any]) -> Any:
        return self._request("POST", path, payload)

    def get(self, path: str) -> Any:
        return self._request("GET", path)

    def _request(self, method: str, path: str, payload: Optional[Mapping[str, Any]] = None) -> Any:
        data = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self.url_for(path), data=data, method=method)
        request.add_header("Accept", "application/json")
        if data is not None:
            request.add_header("Content-Type", "application/json")

        # The log line names the path only; the full URL embeds the backend token.
        LOGGER.debug("%s %s", method, path)
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                body = response.read()
        except urllib.error.HTTPError as e:
            detail = e.read().decode("utf-8", errors="replace")
            raise GatewayError(f"Backend error {e.code} on {path}: {detail}") from e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise GatewayError(f"Backend unreachable on {path}: {e}") from e

        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as e:
            raise GatewayError(f"Backend returned invalid JSON on {path}") from e
