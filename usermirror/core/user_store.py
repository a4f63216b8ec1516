"""User collection store: owner of the local users mirror.

Architecture:
    presentation (JSON API / CLI) ──> UserCollectionStore ──> UserGateway ──> users API
                                            │
                                            ├── EditSessionController (draft + mode)
                                            └── apply_filter (read-only view)

All mirror writes happen here and only after the remote call succeeded.
Every outcome is returned as an OperationResult; gateway exceptions never
escape the store. Writers are serialized: a second write started while one
is in flight is rejected with a "busy" result.
"""
from __future__ import annotations
import logging
import threading
from dataclasses import replace
from typing import Callable, Iterable, List, Optional

from scripts import audit

from .edit_session import Creating, EditSession, EditSessionController, Editing, SessionError
from .filtering import apply_filter
from .gorest import GatewayError, UserGateway, ValidationError
from .models import FilterCriteria, OperationResult, UserRecord
from .validators import validate_draft

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[UserRecord], bool]


class UserCollectionStore:
    """Authoritative local mirror of the remote users collection."""

    def __init__(
        self,
        gateway: UserGateway,
        controller: Optional[EditSessionController] = None,
        confirm: Optional[ConfirmFn] = None,
        operator: str = "operator",
    ):
        """Initialize the store with an empty mirror.

        Args:
            gateway: Remote users gateway
            controller: Edit session controller (a fresh one by default)
            confirm: Confirmation surface asked before destructive actions
            operator: Identifier written to the audit trail
        """
        self.gateway = gateway
        self.controller = controller or EditSessionController()
        self.operator = operator
        self.criteria = FilterCriteria()
        self.load_error: Optional[OperationResult] = None
        self._confirm = confirm
        self._mirror: tuple[UserRecord, ...] = ()
        self._write_lock = threading.Lock()

    # ─────────────────────────────────────────────────────────────────────────
    # Read access
    # ─────────────────────────────────────────────────────────────────────────
    @property
    def records(self) -> tuple[UserRecord, ...]:
        """Snapshot of the mirror in server order."""
        return self._mirror

    @property
    def session(self) -> EditSession:
        return self.controller.session

    @property
    def busy(self) -> bool:
        return self._write_lock.locked()

    def find(self, user_id: int) -> Optional[UserRecord]:
        for record in self._mirror:
            if record.id == user_id:
                return record
        return None

    def visible_records(self, criteria: Optional[FilterCriteria] = None) -> List[UserRecord]:
        """Filtered view of the mirror (stored criteria unless given)."""
        return apply_filter(self._mirror, criteria or self.criteria)

    def update_criteria(self, gender_filter: Optional[str] = None, name_filter: Optional[str] = None) -> FilterCriteria:
        """Replace the stored filter criteria.

        Raises:
            ValueError: If gender_filter is not all/male/female
        """
        changes = {}
        if gender_filter is not None:
            changes["gender_filter"] = gender_filter
        if name_filter is not None:
            changes["name_filter"] = name_filter
        self.criteria = replace(self.criteria, **changes)
        return self.criteria

    # ─────────────────────────────────────────────────────────────────────────
    # Loading
    # ─────────────────────────────────────────────────────────────────────────
    def initialize(self) -> OperationResult:
        """Fetch the collection and replace the mirror.

        On failure the mirror keeps its previous contents (empty on first load)
        and ``load_error`` is set. No retry.
        """
        busy = self._acquire("load")
        if busy:
            return busy
        try:
            try:
                records = self.gateway.list_users()
            except GatewayError as exc:
                logger.error("Failed to load users: %s", exc)
                self.load_error = self._failure("load", exc)
                return self.load_error

            self._mirror = _unique_by_id(records)
            self.load_error = None
            return OperationResult.success("load", message=f"Loaded {len(self._mirror)} users")
        finally:
            self._write_lock.release()

    # ─────────────────────────────────────────────────────────────────────────
    # Edit sessions
    # ─────────────────────────────────────────────────────────────────────────
    def begin_edit(self, user_id: int) -> OperationResult:
        record = self.find(user_id)
        if record is None:
            return OperationResult.failure("begin_edit", "not_found", f"User {user_id} is not in the collection")
        try:
            self.controller.begin_edit(record)
        except SessionError as exc:
            return OperationResult.failure("begin_edit", "session", str(exc), record=record)
        return OperationResult.success("begin_edit", record=record)

    def begin_create(self) -> OperationResult:
        try:
            self.controller.begin_create()
        except SessionError as exc:
            return OperationResult.failure("begin_create", "session", str(exc))
        return OperationResult.success("begin_create")

    def update_draft(self, **changes: str) -> OperationResult:
        try:
            self.controller.update_draft(**changes)
        except SessionError as exc:
            return OperationResult.failure("draft", "session", str(exc))
        return OperationResult.success("draft")

    def cancel_session(self) -> OperationResult:
        """Discard the draft. Does not abort a request already in flight."""
        if self.controller.cancel():
            return OperationResult.success("cancel")
        return OperationResult.success("cancel", message="No edit session was active")

    def submit_session(self) -> OperationResult:
        """Send the active draft to the server and reconcile the response.

        Editing submits an update, Creating submits a create. On any failure
        the session and its draft are retained with the error attached.
        """
        session = self.controller.session
        if not isinstance(session, (Editing, Creating)):
            return OperationResult.failure("submit", "session", "No edit session is active")

        editing = isinstance(session, Editing)
        action = "update" if editing else "create"
        target = session.record if editing else None

        if editing and self.find(target.id) is None:
            result = OperationResult.failure(
                action, "not_found", f"User {target.id} is no longer in the collection", record=target
            )
            self.controller.record_failure(session, result)
            return result

        field_errors = validate_draft(session.draft)
        if field_errors:
            result = OperationResult.failure(
                action, "validation", "Please correct the highlighted fields", field_errors, record=target
            )
            self.controller.record_failure(session, result)
            return result

        busy = self._acquire(action)
        if busy:
            return busy
        try:
            draft = replace(session.draft)
            try:
                if editing:
                    record = self.gateway.update_user(target.id, draft)
                else:
                    record = self.gateway.create_user(draft)
            except GatewayError as exc:
                logger.error("Failed to %s user: %s", action, exc)
                result = self._failure(action, exc, record=target)
                self.controller.record_failure(session, result)
                self._audit(action, target.id if target else None, False, {"error": str(exc)})
                return result

            if editing:
                self._replace(record)
            else:
                self._append(record)
            self.controller.finish(session)
            self._audit(action, record.id, True, {"fields": draft.to_payload()})
            return OperationResult.success(action, record=record)
        finally:
            self._write_lock.release()

    # ─────────────────────────────────────────────────────────────────────────
    # Deletion
    # ─────────────────────────────────────────────────────────────────────────
    def request_delete(self, user_id: int, confirm: Optional[ConfirmFn] = None) -> OperationResult:
        """Delete a user after operator confirmation.

        The record is removed from the mirror only once the server confirmed
        the deletion. Without a confirmation surface the request is declined.
        """
        record = self.find(user_id)
        if record is None:
            return OperationResult.failure("delete", "not_found", f"User {user_id} is not in the collection")

        confirm = confirm or self._confirm
        if confirm is None:
            logger.warning("Delete of user %s requested without a confirmation surface", user_id)
            return OperationResult.declined_by_operator("delete", record)
        if not confirm(record):
            return OperationResult.declined_by_operator("delete", record)

        busy = self._acquire("delete")
        if busy:
            return busy
        try:
            try:
                self.gateway.delete_user(user_id)
            except GatewayError as exc:
                logger.error("Failed to delete user %s: %s", user_id, exc)
                self._audit("delete", user_id, False, {"error": str(exc)})
                return self._failure("delete", exc, record=record)

            self._mirror = tuple(r for r in self._mirror if r.id != user_id)
            session = self.controller.session
            if isinstance(session, Editing) and session.record.id == user_id:
                self.controller.cancel()
            self._audit("delete", user_id, True, {"name": record.name})
            return OperationResult.success("delete", record=record)
        finally:
            self._write_lock.release()

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────
    def _acquire(self, action: str) -> Optional[OperationResult]:
        if self._write_lock.acquire(blocking=False):
            return None
        logger.warning("Rejected %s: another change is in progress", action)
        return OperationResult.failure(action, "busy", "Another change is still in progress; try again")

    def _append(self, record: UserRecord) -> None:
        if self.find(record.id) is not None:
            logger.warning("Created user id=%s already in mirror; replacing it", record.id)
            self._replace(record)
            return
        self._mirror = self._mirror + (record,)

    def _replace(self, record: UserRecord) -> None:
        if self.find(record.id) is None:
            logger.warning("Updated user id=%s is no longer in the mirror; not re-adding", record.id)
            return
        self._mirror = tuple(record if r.id == record.id else r for r in self._mirror)

    def _audit(self, action: str, user_id: Optional[int], success: bool, details: dict) -> None:
        audit.safe_log_user_event(
            f"user_{action}",
            user_id,
            operator=self.operator,
            details=details,
            success=success,
        )

    @staticmethod
    def _failure(action: str, exc: GatewayError, record: Optional[UserRecord] = None) -> OperationResult:
        if isinstance(exc, ValidationError):
            return OperationResult.failure(
                action, "validation", exc.message, exc.field_errors, record=record
            )
        return OperationResult.failure(action, "transport", getattr(exc, "message", str(exc)), record=record)


def _unique_by_id(records: Iterable[UserRecord]) -> tuple[UserRecord, ...]:
    seen: set[int] = set()
    unique = []
    for record in records:
        if record.id in seen:
            logger.warning("Duplicate user id=%s in server list; keeping the first", record.id)
            continue
        seen.add(record.id)
        unique.append(record)
    return tuple(unique)
