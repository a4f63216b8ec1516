"""Remote user collection operations (list, create, update, delete)."""
from __future__ import annotations
import logging
from typing import Any, List, Optional

import requests

from ..models import UserDraft, UserRecord
from .client import UsersApiClient, effective_status, read_body
from .exceptions import ResponseFormatError, TransportError

logger = logging.getLogger(__name__)


class UserGateway:
    """Gateway for the remote ``/users`` collection.

    Each method is a single round trip and is never retried. Results are not
    applied anywhere locally; callers merge them into their own state.
    """

    def __init__(self, client: UsersApiClient):
        """Initialize user gateway.

        Args:
            client: Configured users API client
        """
        self.client = client

    def list_users(self) -> List[UserRecord]:
        """Return the whole collection in server order.

        Raises:
            TransportError: On network/HTTP failure or malformed body
        """
        resp = self.client.get("/users")
        data = self._data(resp)
        if not isinstance(data, list):
            raise ResponseFormatError(resp.status_code, "Expected a list under 'data'", resp.url)
        records = [self._record(item, resp) for item in data]
        logger.info("Loaded %d users from %s", len(records), self.client.base_url)
        return records

    def create_user(self, draft: UserDraft) -> UserRecord:
        """Create a user; the server assigns the id.

        Raises:
            ValidationError: Server rejected the payload (4xx)
            TransportError: Network failure or 5xx
        """
        resp = self.client.post("/users", json=draft.to_payload())
        record = self._record(self._data(resp), resp)
        logger.info("Created user id=%s", record.id)
        return record

    def update_user(self, user_id: int, draft: UserDraft) -> UserRecord:
        """Replace the mutable fields of a user. The returned record is authoritative.

        Raises:
            ValidationError: Server rejected the payload (4xx)
            TransportError: Network failure or 5xx
        """
        resp = self.client.put(f"/users/{user_id}", json=draft.to_payload())
        record = self._record(self._data(resp), resp)
        logger.info("Updated user id=%s", record.id)
        return record

    def delete_user(self, user_id: int) -> None:
        """Delete a user.

        HTTP 204 and a ``{"data": null}`` body are equivalent success signals.

        Raises:
            TransportError: Any other response
        """
        resp = self.client.delete(f"/users/{user_id}")
        if resp.status_code == 204:
            logger.info("Deleted user id=%s (no content)", user_id)
            return

        body = read_body(resp)
        if isinstance(body, dict) and "data" in body and body["data"] is None:
            logger.info("Deleted user id=%s (null data)", user_id)
            return

        raise TransportError(
            effective_status(resp, body),
            f"Unexpected response to delete of user {user_id}",
            resp.url,
        )

    @staticmethod
    def _data(resp: requests.Response) -> Any:
        body = read_body(resp)
        if not isinstance(body, dict) or "data" not in body:
            raise ResponseFormatError(resp.status_code, "Response has no 'data' member", resp.url)
        return body["data"]

    @staticmethod
    def _record(payload: Any, resp: requests.Response) -> UserRecord:
        try:
            return UserRecord.from_api(payload)
        except (TypeError, ValueError) as exc:
            raise ResponseFormatError(resp.status_code, f"Invalid user representation: {exc}", resp.url) from exc


def build_gateway(config=None, token: Optional[str] = None) -> UserGateway:
    """Create a gateway from application settings.

    Args:
        config: AppConfig instance (loaded from the environment when omitted)
        token: Explicit token overriding the configured one
    """
    if config is None:
        from usermirror.config import load_settings
        config = load_settings()
    client = UsersApiClient(
        config.api_base_url,
        token=token if token is not None else config.api_token,
        timeout=config.request_timeout,
    )
    return UserGateway(client)
