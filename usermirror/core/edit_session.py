"""Edit session state machine.

A single tagged session replaces separate "editing" and "creating" flags:

    Idle --begin_edit(record)--> Editing(record, draft)
    Idle --begin_create()------> Creating(draft)
    Editing | Creating --cancel / successful submit--> Idle

Beginning a session while another one is active is rejected. The draft
lives only inside the session; nothing here touches the mirror.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Union

from .models import DRAFT_FIELDS, OperationResult, UserDraft, UserRecord


class SessionError(Exception):
    """Unsupported edit session transition."""
    pass


@dataclass(frozen=True)
class Idle:
    kind: str = field(default="idle", init=False)

    def to_dict(self) -> dict:
        return {"kind": self.kind}


@dataclass(eq=False)
class Editing:
    record: UserRecord
    draft: UserDraft
    last_error: Optional[OperationResult] = None
    kind: str = field(default="editing", init=False)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "record": self.record.to_dict(),
            "draft": self.draft.to_payload(),
            "last_error": self.last_error.to_dict() if self.last_error else None,
        }


@dataclass(eq=False)
class Creating:
    draft: UserDraft
    last_error: Optional[OperationResult] = None
    kind: str = field(default="creating", init=False)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "draft": self.draft.to_payload(),
            "last_error": self.last_error.to_dict() if self.last_error else None,
        }


EditSession = Union[Idle, Editing, Creating]
IDLE = Idle()


class EditSessionController:
    """Holds at most one in-progress form session."""

    def __init__(self):
        self._session: EditSession = IDLE

    @property
    def session(self) -> EditSession:
        return self._session

    @property
    def is_active(self) -> bool:
        return not isinstance(self._session, Idle)

    def begin_edit(self, record: UserRecord) -> Editing:
        """Start editing record; the draft is seeded from its current values.

        Raises:
            SessionError: If a session is already active
        """
        self._ensure_idle("edit")
        self._session = Editing(record=record, draft=UserDraft.from_record(record))
        return self._session

    def begin_create(self) -> Creating:
        """Start creating a new user with a blank draft.

        Raises:
            SessionError: If a session is already active
        """
        self._ensure_idle("create")
        self._session = Creating(draft=UserDraft())
        return self._session

    def update_draft(self, **changes: str) -> UserDraft:
        """Change draft fields of the active session.

        Raises:
            SessionError: If no session is active or a field is unknown
        """
        if not self.is_active:
            raise SessionError("No edit session is active")
        unknown = sorted(set(changes) - set(DRAFT_FIELDS))
        if unknown:
            raise SessionError(f"Unknown draft field(s): {', '.join(unknown)}")

        draft = self._session.draft
        for name, value in changes.items():
            if value is not None:
                setattr(draft, name, str(value))
        return draft

    def cancel(self) -> bool:
        """Discard the active session and its draft.

        Returns:
            True if a session was active
        """
        was_active = self.is_active
        self._session = IDLE
        return was_active

    def finish(self, session: EditSession) -> None:
        """Return to Idle after a successful submit of ``session``.

        A session cancelled or replaced while its request was in flight is
        left alone.
        """
        if self._session is session:
            self._session = IDLE

    def record_failure(self, session: EditSession, result: OperationResult) -> None:
        """Keep the session and its draft, attaching the failure for display."""
        if self._session is session and self.is_active:
            session.last_error = result

    def _ensure_idle(self, intent: str) -> None:
        if self.is_active:
            raise SessionError(
                f"Cannot begin {intent}: a {self._session.kind} session is already active"
            )

