"""Low-level HTTP client for the remote users API.

Handles bearer credential attachment, response envelope parsing,
and normalization of HTTP failures into gateway exceptions.
"""
from __future__ import annotations
import logging
import os
from typing import Optional, Dict, Any

import requests

from .exceptions import TransportError, ValidationError

DEFAULT_BASE_URL = "https://gorest.co.in/public-api"
REQUEST_TIMEOUT = 5

logger = logging.getLogger(__name__)


class UsersApiClient:
    """HTTP client for the users REST API.

    Features:
    - Bearer credential on mutating requests only (reads are public)
    - Envelope-aware status detection (``{"code": ..., "data": ...}``)
    - Centralized error handling: 4xx on writes -> ValidationError,
      everything else -> TransportError

    Usage:
        client = UsersApiClient("https://gorest.co.in/public-api", token="...")
        response = client.get("/users")
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None, timeout: Optional[float] = None):
        """Initialize users API client.

        Args:
            base_url: API base URL (defaults to USERS_API_BASE_URL env var)
            token: Bearer token for mutating calls (may be empty)
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or os.environ.get("USERS_API_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self._token = token or ""
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def get(self, path: str, params: Optional[Dict] = None) -> requests.Response:
        """Execute unauthenticated GET request.

        Raises:
            TransportError: On network failure or any HTTP error
        """
        url = f"{self.base_url}{path}"
        resp = self._send(requests.get, url, params=params, headers={"Accept": "application/json"})
        self._handle_error(resp, url)
        return resp

    def post(self, path: str, json: Optional[Dict] = None) -> requests.Response:
        """Execute authenticated POST request.

        Raises:
            ValidationError: On 4xx response
            TransportError: On network failure or 5xx response
        """
        url = f"{self.base_url}{path}"
        resp = self._send(requests.post, url, json=json, headers=self._auth_headers())
        self._handle_error(resp, url, client_errors_are_validation=True)
        return resp

    def put(self, path: str, json: Optional[Dict] = None) -> requests.Response:
        """Execute authenticated PUT request.

        Raises:
            ValidationError: On 4xx response
            TransportError: On network failure or 5xx response
        """
        url = f"{self.base_url}{path}"
        resp = self._send(requests.put, url, json=json, headers=self._auth_headers())
        self._handle_error(resp, url, client_errors_are_validation=True)
        return resp

    def delete(self, path: str) -> requests.Response:
        """Execute authenticated DELETE request.

        Raises:
            TransportError: On network failure or any HTTP error
        """
        url = f"{self.base_url}{path}"
        resp = self._send(requests.delete, url, headers=self._auth_headers())
        self._handle_error(resp, url)
        return resp

    def _auth_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        else:
            logger.warning("No users API token configured; the service will reject this request")
        return headers

    def _send(self, method, url: str, **kwargs) -> requests.Response:
        try:
            return method(url, timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:
            raise TransportError(0, f"Request timed out after {self.timeout}s: {exc}", url) from exc
        except requests.RequestException as exc:
            raise TransportError(0, f"Network error: {exc}", url) from exc

    def _handle_error(self, resp: requests.Response, url: str, client_errors_are_validation: bool = False) -> None:
        """Centralized error handling for HTTP responses.

        Args:
            resp: Response object to check
            url: Requested URL (used as endpoint in errors)
            client_errors_are_validation: Map 4xx to ValidationError instead of TransportError

        Raises:
            ValidationError: 4xx on a mutating call
            TransportError: Any other error status
        """
        body = read_body(resp)
        status = effective_status(resp, body)
        if status < 400:
            return

        message = _error_message(body) or (resp.text or "").strip() or f"HTTP {status}"
        if client_errors_are_validation and 400 <= status < 500:
            raise ValidationError(status, message, url, field_errors=_field_errors(body))
        raise TransportError(status, message, url)


def read_body(resp: requests.Response) -> Any:
    """Decode a JSON body, returning None for empty or non-JSON bodies."""
    if resp.status_code == 204 or not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


def effective_status(resp: requests.Response, body: Any = None) -> int:
    """Return the status the service meant, honouring the v1 ``code`` envelope."""
    if isinstance(body, dict):
        code = body.get("code")
        if isinstance(code, int) and not isinstance(code, bool):
            return code
    return resp.status_code


def _error_message(body: Any) -> str:
    if isinstance(body, dict):
        if isinstance(body.get("message"), str):
            return body["message"]
        data = body.get("data")
        if isinstance(data, dict) and isinstance(data.get("message"), str):
            return data["message"]
        if isinstance(data, list):
            return "Validation failed"
    if isinstance(body, list):
        return "Validation failed"
    return ""


def _field_errors(body: Any) -> Dict[str, str]:
    """Collect ``[{"field": ..., "message": ...}]`` entries from either envelope shape."""
    items = body.get("data") if isinstance(body, dict) else body
    if not isinstance(items, list):
        return {}
    errors: Dict[str, str] = {}
    for item in items:
        if isinstance(item, dict) and item.get("field"):
            errors[str(item["field"])] = str(item.get("message", "is invalid"))
    return errors
