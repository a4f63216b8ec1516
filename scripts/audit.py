"""Signed JSONL trail of remote user mutations.

Every create, update and delete the store sends to the users API ends up here,
successful or not. Lines are HMAC-SHA256 signed when a signing key is set.

    python -m scripts.audit            # verify signatures
    python -m scripts.audit --tail 20  # show the most recent events
"""

from __future__ import annotations
import argparse
import datetime
import hashlib
import hmac
import json
import os
import sys
from pathlib import Path
from typing import Any, Iterator, Literal

AUDIT_LOG_DIR = Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit"))
AUDIT_LOG_FILE = AUDIT_LOG_DIR / "user-events.jsonl"

EventType = Literal["user_create", "user_update", "user_delete"]


def _get_signing_key() -> bytes:
    """Signing key from AUDIT_LOG_SIGNING_KEY_FILE, falling back to AUDIT_LOG_SIGNING_KEY."""
    key_file = os.environ.get("AUDIT_LOG_SIGNING_KEY_FILE")
    if key_file and Path(key_file).is_file():
        try:
            return Path(key_file).read_text(encoding="utf-8").strip().encode("utf-8")
        except OSError as exc:
            print(f"[audit] Warning: Cannot read signing key file {key_file}: {exc}", file=sys.stderr)
    return os.environ.get("AUDIT_LOG_SIGNING_KEY", "").strip().encode("utf-8")


def _signature(event: dict[str, Any], key: bytes) -> str:
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":"))
    return hmac.new(key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def build_event(
    event_type: EventType,
    user_id: int | None,
    operator: str,
    details: dict[str, Any] | None,
    success: bool,
) -> dict[str, Any]:
    """Assemble one audit line, signed when a key is configured."""
    event = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "user_id": user_id,
        "operator": operator,
        "success": success,
        "details": details or {},
    }
    key = _get_signing_key()
    if key:
        event["signature"] = _signature(event, key)
    return event


def log_user_event(
    event_type: EventType,
    user_id: int | None,
    *,
    operator: str = "operator",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Append a mutation outcome to the trail.

    Args:
        event_type: user_create, user_update or user_delete
        user_id: Target user id (None for a create rejected before an id existed)
        operator: Who asked for the mutation
        details: Submitted fields or the error message
        success: Whether the server confirmed the mutation

    Raises:
        OSError: The trail directory or file cannot be written
    """
    event = build_event(event_type, user_id, operator, details, success)

    # Owner-only directory and file
    AUDIT_LOG_DIR.mkdir(parents=True, exist_ok=True)
    AUDIT_LOG_DIR.chmod(0o700)
    with AUDIT_LOG_FILE.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(event, ensure_ascii=False) + "\n")
    AUDIT_LOG_FILE.chmod(0o600)


def safe_log_user_event(event_type: EventType, user_id: int | None, **kwargs: Any) -> bool:
    """Like log_user_event, but a write failure is reported on stderr.

    A mutation the server already applied must not be reported as failed
    because the trail is unwritable, so callers get a bool instead.
    """
    try:
        log_user_event(event_type, user_id, **kwargs)
    except OSError as exc:
        print(f"[audit] Warning: Failed to log {event_type} event for user {user_id}: {exc}", file=sys.stderr)
        return False
    return True


def read_events() -> Iterator[dict[str, Any] | None]:
    """Yield parsed events in file order; None for lines that are not JSON objects."""
    if not AUDIT_LOG_FILE.exists():
        return
    with AUDIT_LOG_FILE.open("r", encoding="utf-8") as fh:
        for line in fh:
            if not line.strip():
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                yield None
                continue
            yield event if isinstance(event, dict) else None


def verify_audit_log() -> tuple[int, int]:
    """Count events and how many of them carry a valid signature.

    Returns:
        (total_events, valid_signatures)
    """
    key = _get_signing_key()
    total = valid = 0
    for event in read_events():
        total += 1
        if event is None or not key:
            continue
        stored = event.pop("signature", "")
        if stored and hmac.compare_digest(stored, _signature(event, key)):
            valid += 1
    return total, valid


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Inspect the user mutation audit trail")
    parser.add_argument("--tail", type=int, default=0, help="Print the last N events instead of verifying")
    args = parser.parse_args(argv)

    if args.tail > 0:
        events = [e for e in read_events() if e is not None]
        for event in events[-args.tail:]:
            outcome = "ok" if event.get("success") else "FAILED"
            print(f"{event.get('timestamp')} {event.get('event_type')} user={event.get('user_id')} "
                  f"by={event.get('operator')} {outcome}")
        return 0

    total, valid = verify_audit_log()
    print(f"Audit log: {valid}/{total} events with valid signatures")
    return 0 if total == valid else 1


if __name__ == "__main__":
    sys.exit(main())
