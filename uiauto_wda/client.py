# uiauto_wda/client.py
"""
@file client.py
@brief Minimal HTTP client for the WebDriverAgent query endpoints the resolver uses.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from .config import TimeConfig
from .exceptions import QueryError
from .interfaces import IQueryClient


W3C_ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"
LEGACY_ELEMENT_KEY = "ELEMENT"


class WDAClient(IQueryClient):
    """
    Synchronous client for element lookup, element attributes and page source.

    Session creation is out of scope; pass the id of an existing session.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8100",
        session_id: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session_id = session_id
        self.log = logger or logging.getLogger("uiauto_wda")
        effective_timeout = timeout if timeout is not None else TimeConfig.current().http_request.timeout
        self._http = httpx.Client(base_url=self.base_url, timeout=effective_timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> WDAClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _session_path(self, path: str) -> str:
        if self.session_id:
            return f"/session/{self.session_id}{path}"
        return path

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            resp = self._http.request(method, path, json=body)
        except httpx.HTTPError as e:
            raise QueryError(f"{method} {path} failed: {type(e).__name__}: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise QueryError(
                f"failed to parse response from {path}: {e} (body: {resp.text[:200]})",
                status_code=resp.status_code,
            ) from e

        if not isinstance(data, dict):
            raise QueryError(f"unexpected response from {path}: {data!r}", status_code=resp.status_code)

        value = data.get("value")
        if isinstance(value, dict) and isinstance(value.get("error"), str):
            message = value.get("message") or value["error"]
            raise QueryError(f"WDA error: {message}", status_code=resp.status_code)
        if resp.status_code >= 400:
            raise QueryError(f"{method} {path} returned HTTP {resp.status_code}", status_code=resp.status_code)
        return data

    def find_element(self, using: str, value: str) -> str:
        data = self._request("POST", self._session_path("/element"), {"using": using, "value": value})
        found = data.get("value")
        if isinstance(found, dict):
            for key in (W3C_ELEMENT_KEY, LEGACY_ELEMENT_KEY):
                if isinstance(found.get(key), str) and found[key]:
                    return found[key]
            for key, handle in found.items():
                if isinstance(handle, str) and handle and key != "error":
                    return handle
        raise QueryError("element not found")

    def element_text(self, element_id: str) -> str:
        data = self._request("GET", self._session_path(f"/element/{element_id}/text"))
        value = data.get("value")
        return value if isinstance(value, str) else ""

    def element_displayed(self, element_id: str) -> bool:
        data = self._request("GET", self._session_path(f"/element/{element_id}/displayed"))
        return data.get("value") is True

    def element_rect(self, element_id: str) -> Tuple[int, int, int, int]:
        data = self._request("GET", self._session_path(f"/element/{element_id}/rect"))
        rect = data.get("value")
        if not isinstance(rect, dict):
            return 0, 0, 0, 0

        def num(key: str) -> int:
            raw = rect.get(key)
            return int(raw) if isinstance(raw, (int, float)) and not isinstance(raw, bool) else 0

        return num("x"), num("y"), num("width"), num("height")

    def source(self) -> str:
        data = self._request("GET", self._session_path("/source"))
        value = data.get("value")
        if not isinstance(value, str):
            raise QueryError("invalid source response")
        return value
