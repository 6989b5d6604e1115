"""HTTP client for the releases API.

Every call unwraps the ``data`` member of the response envelope and turns
non-2xx answers into :class:`ReleaseApiError`.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from releasecheck.core.config import get_settings
from releasecheck.domain.checklist import classify_status, compute_progress
from releasecheck.schemas import ReleaseResponse

__all__ = [
    "ReleaseApiClient",
    "ReleaseApiError",
    "calculate_release_status",
    "compute_progress",
]


class ReleaseApiError(Exception):
    """Raised when the API answers with a non-2xx status or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def calculate_release_status(completed: int, total: int) -> str:
    return classify_status(completed, total).value


def _normalize_base_url(value: str) -> str:
    raw = value.strip()
    if not raw:
        raise ValueError("api_base_url_empty")
    if "://" not in raw:
        raw = f"http://{raw}"
    parsed = urlparse(raw)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"invalid_api_base_url:{value}")
    return raw.rstrip("/")


def _error_message(status_code: int, raw_body: bytes) -> str:
    fallback = f"HTTP error! status: {status_code}"
    try:
        body = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return fallback
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
    return fallback


def _unwrap(body: Any) -> Any:
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class ReleaseApiClient:
    def __init__(self, base_url: str | None = None, timeout_seconds: float | None = None) -> None:
        settings = get_settings()
        self.base_url = _normalize_base_url(base_url or settings.releasecheck_api_url)
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.client_timeout_seconds

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        headers = {"Accept": "application/json"}
        data = None
        if payload is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(payload).encode("utf-8")

        request = Request(f"{self.base_url}{path}", data=data, method=method, headers=headers)
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:
                raw_body = response.read()
        except HTTPError as exc:
            raise ReleaseApiError(_error_message(exc.code, exc.read()), status_code=exc.code) from exc
        except URLError as exc:
            raise ReleaseApiError(f"url_error:{exc.reason}") from exc
        except (TimeoutError, OSError) as exc:
            raise ReleaseApiError(f"transport_error:{exc}") from exc

        if not raw_body:
            return None
        try:
            return json.loads(raw_body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise ReleaseApiError("invalid_json_response") from exc

    def list_releases(self) -> list[ReleaseResponse]:
        data = _unwrap(self._request("GET", "/releases"))
        return [ReleaseResponse.model_validate(item) for item in data]

    def get_release(self, release_id: int) -> ReleaseResponse:
        data = _unwrap(self._request("GET", f"/releases/{release_id}"))
        return ReleaseResponse.model_validate(data)

    def create_release(self, payload: dict[str, Any]) -> ReleaseResponse:
        data = _unwrap(self._request("POST", "/releases", payload))
        return ReleaseResponse.model_validate(data)

    def update_release(self, release_id: int, changes: dict[str, Any]) -> ReleaseResponse:
        data = _unwrap(self._request("PUT", f"/releases/{release_id}", changes))
        return ReleaseResponse.model_validate(data)

    def delete_release(self, release_id: int) -> str | None:
        body = self._request("DELETE", f"/releases/{release_id}")
        if isinstance(body, dict):
            return body.get("message")
        return None
