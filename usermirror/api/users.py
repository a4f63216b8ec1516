"""Users collection routes: filtered view, edit session intents, deletion.

The presentation layer (any UI) reads state and posts intents here; all
state lives in the process-wide UserCollectionStore.
"""
from __future__ import annotations
import logging

from flask import Blueprint, abort, current_app, jsonify, request

from usermirror.core.models import DRAFT_FIELDS, FilterCriteria, OperationResult
from usermirror.core.user_store import UserCollectionStore

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__)

_STATUS_BY_ERROR = {
    "validation": 422,
    "transport": 502,
    "busy": 409,
    "session": 409,
    "not_found": 404,
}


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions
# ─────────────────────────────────────────────────────────────────────────────
def _store() -> UserCollectionStore:
    return current_app.extensions["user_store"]


def _respond(result: OperationResult, success_status: int = 200):
    """Serialize an OperationResult together with the current session."""
    if result.ok or result.declined:
        status = success_status if result.ok else 200
    else:
        status = _STATUS_BY_ERROR.get(result.error, 400)
    payload = result.to_dict()
    payload["session"] = _store().session.to_dict()
    return jsonify(payload), status


def _draft_changes() -> dict:
    """Read draft fields from the JSON body, rejecting unknown ones."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        abort(400, description="Request body must be a JSON object")
    unknown = sorted(set(body) - set(DRAFT_FIELDS))
    if unknown:
        abort(400, description=f"Unknown field(s): {', '.join(unknown)}")
    for name, value in body.items():
        if not isinstance(value, str):
            abort(400, description=f"Field '{name}' must be a string")
    return body


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y"}


# ─────────────────────────────────────────────────────────────────────────────
# Collection
# ─────────────────────────────────────────────────────────────────────────────
@bp.get("/users")
def list_users():
    """Visible users under the query criteria (stored criteria by default)."""
    store = _store()
    try:
        criteria = FilterCriteria(
            gender_filter=request.args.get("gender", store.criteria.gender_filter),
            name_filter=request.args.get("name", store.criteria.name_filter),
        )
    except ValueError as exc:
        abort(400, description=str(exc))

    visible = store.visible_records(criteria)
    return jsonify({
        "data": [record.to_dict() for record in visible],
        "total": len(store.records),
        "filter": {"gender": criteria.gender_filter, "name": criteria.name_filter},
        "load_error": store.load_error.to_dict() if store.load_error else None,
    })


@bp.put("/filter")
def update_filter():
    """Replace the stored filter criteria."""
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        abort(400, description="Request body must be a JSON object")
    try:
        criteria = _store().update_criteria(
            gender_filter=body.get("gender"),
            name_filter=body.get("name"),
        )
    except ValueError as exc:
        abort(400, description=str(exc))
    return jsonify({"gender": criteria.gender_filter, "name": criteria.name_filter})


@bp.post("/users/reload")
def reload_users():
    return _respond(_store().initialize())


@bp.delete("/users/<int:user_id>")
def delete_user(user_id: int):
    """Delete a user. The caller confirms with ``?confirm=true``."""
    confirmed = _truthy(request.args.get("confirm"))
    result = _store().request_delete(user_id, confirm=lambda record: confirmed)
    return _respond(result)


# ─────────────────────────────────────────────────────────────────────────────
# Edit session
# ─────────────────────────────────────────────────────────────────────────────
@bp.get("/session")
def get_session():
    return jsonify(_store().session.to_dict())


@bp.post("/session/edit/<int:user_id>")
def begin_edit(user_id: int):
    return _respond(_store().begin_edit(user_id))


@bp.post("/session/create")
def begin_create():
    return _respond(_store().begin_create())


@bp.patch("/session/draft")
def update_draft():
    return _respond(_store().update_draft(**_draft_changes()))


@bp.post("/session/submit")
def submit_session():
    """Apply optional draft fields from the body, then submit the session."""
    store = _store()
    changes = _draft_changes()
    if changes:
        result = store.update_draft(**changes)
        if not result.ok:
            return _respond(result)

    result = store.submit_session()
    if result.ok:
        logger.info("Submitted %s for user id=%s", result.action, result.record.id)
    return _respond(result, success_status=201 if result.action == "create" else 200)


@bp.post("/session/cancel")
def cancel_session():
    return _respond(_store().cancel_session())
