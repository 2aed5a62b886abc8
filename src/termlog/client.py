"""HTTP client for the log service.

Every call returns a tagged result: Ok carrying LogEntry objects, or Err.
Network failures and responses without an envelope become TRANSPORT errors.
Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .models import Err, ErrorKind, LogEntry, Ok, Result

logger = logging.getLogger(__name__)


def _kind_from(error_type: Optional[str]) -> ErrorKind:
    for kind in ErrorKind:
        if kind.value == error_type:
            return kind
    return ErrorKind.PERSISTENCE


class LogClient:
    """Thin client for the /logs endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 10.0,
        http: Optional[httpx.Client] = None,
    ):
        """Create a client.

        Args:
            base_url: Service root URL
            timeout: Request timeout in seconds
            http: Existing httpx client to use instead of opening one
        """
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(base_url=self.base_url, timeout=timeout)

    def __enter__(self) -> "LogClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Result:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, path, e)
            return Err(ErrorKind.TRANSPORT, f"Connection error: {e}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict) or "success" not in body:
            return Err(
                ErrorKind.TRANSPORT,
                f"Unexpected response from log service (HTTP {response.status_code})",
            )

        if not body["success"]:
            return Err(_kind_from(body.get("error_type")), body.get("error") or "Request failed")

        if not response.is_success:
            return Err(ErrorKind.TRANSPORT, f"Log service answered HTTP {response.status_code}")

        return Ok(body.get("data"), message=body.get("message"))

    def _path(self, entry_id: Any) -> str:
        return "/logs/" + quote(str(entry_id), safe="")

    def _entry_result(self, result: Result) -> Result:
        if isinstance(result, Ok):
            return Ok(LogEntry.from_dict(result.data), message=result.message)
        return result

    def create(self, title: str, content: str = "", tags: Optional[list[str]] = None) -> Result:
        payload = {"title": title, "content": content, "tags": tags or []}
        return self._entry_result(self._request("POST", "/logs", json=payload))

    def list(self, search: Optional[str] = None, limit: Optional[int] = None) -> Result:
        """Fetch entries in list order, optionally filtered by title substring."""
        params: dict[str, Any] = {}
        if search:
            params["search"] = search
        if limit is not None:
            params["limit"] = limit
        result = self._request("GET", "/logs", params=params)
        if isinstance(result, Ok):
            return Ok([LogEntry.from_dict(item) for item in result.data or []])
        return result

    def get(self, entry_id: Any) -> Result:
        return self._entry_result(self._request("GET", self._path(entry_id)))

    def update(
        self,
        entry_id: Any,
        title: str,
        content: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> Result:
        """Replace an entry's title; content and tags are sent only when given."""
        payload: dict[str, Any] = {"title": title}
        if content is not None:
            payload["content"] = content
        if tags is not None:
            payload["tags"] = tags
        return self._entry_result(self._request("PUT", self._path(entry_id), json=payload))

    def delete(self, entry_id: Any) -> Result:
        return self._entry_result(self._request("DELETE", self._path(entry_id)))
