"""Pytest shared fixtures."""
import json
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from scripts import audit
from usermirror.core.models import UserRecord
from usermirror.core.user_store import UserCollectionStore

_NO_JSON = object()


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code: int = 200, url: str = "https://api.test/users", text=None):
        self._payload = payload
        self.status_code = status_code
        self.url = url
        if text is not None:
            self.text = text
            self._payload = _NO_JSON
        elif payload is None:
            self.text = ""
        else:
            self.text = json.dumps(payload)
        self.content = self.text.encode("utf-8")

    def json(self):
        if self._payload is _NO_JSON or self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeGateway:
    """In-memory UserGateway double with per-operation failure injection."""

    def __init__(self, users=None, next_id: int = 100):
        self.users = [UserRecord.from_api(u) for u in (users or [])]
        self.next_id = next_id
        self.failures = {}
        self.calls = []

    def _maybe_fail(self, op):
        exc = self.failures.pop(op, None)
        if exc is not None:
            raise exc

    def list_users(self):
        self.calls.append(("list",))
        self._maybe_fail("list")
        return list(self.users)

    def create_user(self, draft):
        self.calls.append(("create", draft.to_payload()))
        self._maybe_fail("create")
        record = UserRecord(id=self.next_id, **draft.to_payload())
        self.next_id += 1
        self.users.append(record)
        return record

    def update_user(self, user_id, draft):
        self.calls.append(("update", user_id, draft.to_payload()))
        self._maybe_fail("update")
        record = UserRecord(id=user_id, **draft.to_payload())
        self.users = [record if u.id == user_id else u for u in self.users]
        return record

    def delete_user(self, user_id):
        self.calls.append(("delete", user_id))
        self._maybe_fail("delete")
        self.users = [u for u in self.users if u.id != user_id]


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from hitting the live users API.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _guard(method):
        def _stub(url, *args, **kwargs):
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")
        return _stub

    for method in ("get", "post", "put", "delete"):
        monkeypatch.setattr(requests, method, _guard(method.upper()))


@pytest.fixture(autouse=True)
def audit_file(monkeypatch, tmp_path):
    """Send audit events to an isolated directory for every test."""
    audit_dir = tmp_path / "audit"
    audit_log = audit_dir / "user-events.jsonl"
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_log)
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-signing-key-for-audit-trail")
    return audit_log


# ─────────────────────────────────────────────────────────────────────────────
# Users fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def ann_and_bo():
    """The two-user collection used by the filter and delete scenarios."""
    return [
        {"id": 1, "name": "Ann", "email": "ann@example.com", "gender": "female", "status": "active"},
        {"id": 2, "name": "Bo", "email": "bo@example.com", "gender": "male", "status": "inactive"},
    ]


@pytest.fixture()
def fake_gateway(ann_and_bo):
    return FakeGateway(ann_and_bo)


@pytest.fixture()
def store(fake_gateway):
    """Loaded store that confirms every delete."""
    user_store = UserCollectionStore(fake_gateway, confirm=lambda record: True, operator="tester")
    result = user_store.initialize()
    assert result.ok
    fake_gateway.calls.clear()
    return user_store


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a reachable users API)"
    )


@pytest.fixture()
def make_response():
    """Factory for stub HTTP responses."""
    return StubResponse


@pytest.fixture()
def gateway_factory():
    """Factory for in-memory gateways."""
    return FakeGateway
