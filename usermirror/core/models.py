"""Data model for the users mirror.

UserRecord is immutable: a record only changes by being replaced with the
representation the server returned. UserDraft is the mutable, unsaved form
state owned by an edit session.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

Gender = Literal["male", "female"]
Status = Literal["active", "inactive"]
GenderFilter = Literal["all", "male", "female"]

GENDERS: tuple[str, ...] = ("male", "female")
STATUSES: tuple[str, ...] = ("active", "inactive")
GENDER_FILTERS: tuple[str, ...] = ("all",) + GENDERS
DRAFT_FIELDS: tuple[str, ...] = ("name", "email", "gender", "status")

ErrorKind = Literal["validation", "transport", "busy", "not_found", "session"]
Action = Literal["load", "create", "update", "delete", "submit", "begin_edit", "begin_create", "cancel", "draft"]


@dataclass(frozen=True)
class UserRecord:
    """A user as last confirmed by the remote service."""
    id: int
    name: str
    email: str
    gender: str
    status: str

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "UserRecord":
        """Build a record from a server representation.

        Raises:
            ValueError: If the payload is not an object or has no usable id
        """
        if not isinstance(payload, dict):
            raise ValueError(f"user payload must be an object, got {type(payload).__name__}")
        raw_id = payload.get("id")
        if raw_id is None or isinstance(raw_id, bool):
            raise ValueError("user payload has no id")
        if isinstance(raw_id, float) and not raw_id.is_integer():
            raise ValueError(f"user id must be an integer, got {raw_id!r}")
        return cls(
            id=int(raw_id),
            name=str(payload.get("name") or ""),
            email=str(payload.get("email") or ""),
            gender=str(payload.get("gender") or ""),
            status=str(payload.get("status") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "gender": self.gender,
            "status": self.status,
        }


@dataclass
class UserDraft:
    """In-progress field values of an edit or create form."""
    name: str = ""
    email: str = ""
    gender: Gender = "male"
    status: Status = "active"

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserDraft":
        return cls(name=record.name, email=record.email, gender=record.gender, status=record.status)

    def to_payload(self) -> dict[str, str]:
        """Request body for POST/PUT /users."""
        return {"name": self.name, "email": self.email, "gender": self.gender, "status": self.status}


@dataclass(frozen=True)
class FilterCriteria:
    """View-only filter parameters. Never persisted or sent remotely."""
    gender_filter: GenderFilter = "all"
    name_filter: str = ""

    def __post_init__(self):
        if self.gender_filter not in GENDER_FILTERS:
            raise ValueError(
                f"gender_filter must be one of {', '.join(GENDER_FILTERS)}, got {self.gender_filter!r}"
            )
        if self.name_filter is None:
            object.__setattr__(self, "name_filter", "")
        elif not isinstance(self.name_filter, str):
            raise ValueError(f"name_filter must be a string, got {type(self.name_filter).__name__}")


@dataclass
class OperationResult:
    """Outcome of a store operation, handed to the presentation layer.

    ``declined`` marks an operator declining a confirmation: not an error,
    nothing happened.
    """
    ok: bool
    action: Action
    record: Optional[UserRecord] = None
    error: Optional[ErrorKind] = None
    message: str = ""
    field_errors: dict[str, str] = field(default_factory=dict)
    declined: bool = False

    @classmethod
    def success(cls, action: str, record: Optional[UserRecord] = None, message: str = "") -> "OperationResult":
        return cls(ok=True, action=action, record=record, message=message)

    @classmethod
    def failure(
        cls,
        action: str,
        error: str,
        message: str,
        field_errors: Optional[dict[str, str]] = None,
        record: Optional[UserRecord] = None,
    ) -> "OperationResult":
        return cls(
            ok=False,
            action=action,
            record=record,
            error=error,
            message=message,
            field_errors=dict(field_errors or {}),
        )

    @classmethod
    def declined_by_operator(cls, action: str, record: Optional[UserRecord] = None) -> "OperationResult":
        return cls(ok=False, action=action, record=record, declined=True, message="Cancelled by operator")

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "action": self.action,
            "record": self.record.to_dict() if self.record else None,
            "error": self.error,
            "message": self.message,
            "field_errors": dict(self.field_errors),
            "declined": self.declined,
        }
