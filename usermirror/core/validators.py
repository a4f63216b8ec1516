"""Input validation helpers for user drafts."""
from __future__ import annotations

from .models import GENDERS, STATUSES, UserDraft

NAME_MAX_LENGTH = 200
EMAIL_MAX_LENGTH = 254


def validate_name(name: str, field: str = "Name") -> str:
    """Validate the user's display name.

    Args:
        name: Name to validate
        field: Field name for error messages

    Returns:
        Trimmed name

    Raises:
        ValueError: If name is invalid
    """
    name = (name or "").strip()
    if not name:
        raise ValueError(f"{field} is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValueError(f"{field} exceeds maximum length")
    return name


def validate_email(email: str) -> str:
    """Validate email address syntax.

    Args:
        email: Email address to validate

    Returns:
        Trimmed email address

    Raises:
        ValueError: If email is invalid
    """
    email = (email or "").strip()
    if not email or "@" not in email:
        raise ValueError("Invalid email format")

    local, domain = email.rsplit("@", 1)
    if not local or not domain or "." not in domain:
        raise ValueError("Invalid email format")
    if domain.startswith(".") or domain.endswith(".") or any(char.isspace() for char in email):
        raise ValueError("Invalid email format")
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValueError("Email exceeds maximum length")

    return email


def validate_choice(value: str, allowed: tuple[str, ...], field: str) -> str:
    """Validate that value is one of the allowed options."""
    if value not in allowed:
        raise ValueError(f"{field} must be one of: {', '.join(allowed)}")
    return value


def validate_draft(draft: UserDraft) -> dict[str, str]:
    """Check a draft against the form constraints.

    Returns:
        Mapping of field name to error message (empty when the draft is valid)
    """
    errors: dict[str, str] = {}
    checks = (
        ("name", lambda: validate_name(draft.name)),
        ("email", lambda: validate_email(draft.email)),
        ("gender", lambda: validate_choice(draft.gender, GENDERS, "Gender")),
        ("status", lambda: validate_choice(draft.status, STATUSES, "Status")),
    )
    for field, check in checks:
        try:
            check()
        except ValueError as exc:
            errors[field] = str(exc)
    return errors
