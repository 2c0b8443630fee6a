from flask import Blueprint, request, jsonify, g

from models import db
from models.court import Court
from models.queue_entry import ENTRY_STATUSES, QueueEntry
from models.queue_match import QueueMatch
from models.queue_session import SESSION_STATUSES, QueueSession
from models.user import User
from security.rbac import require_roles
from services import matchmaking
from services import queue as queue_service
from utils.audit import log_event
from utils.errors import ForbiddenError
from utils.resources import court_json, queue_entry_json, queue_match_json, queue_session_json
from utils.validation import (
    FieldErrors,
    get_or_404,
    json_body,
    parse_int,
    parse_number,
    require_date,
    require_time,
)

queue_bp = Blueprint("queue", __name__, url_prefix="/queue")

QUEUE_ROLES = ("owner", "queue_master")


def _authorize_session(session: QueueSession):
    """superadmin, the session owner, or any queue master."""
    user = g.user
    if user.is_superadmin() or session.owner_id == user.id or user.role == "queue_master":
        return
    raise ForbiddenError("This action is unauthorized.")


def _level_field(data: dict, errors: FieldErrors, required: bool):
    raw = data.get("level")
    if raw is None:
        if required:
            errors.add("level", "The level field is required.")
        return None
    level = parse_number(raw)
    if level is None:
        errors.add("level", "The level must be a number.")
    elif not 1 <= level <= 7:
        errors.add("level", "The level must be between 1 and 7.")
    return level


def _optional_text(data: dict, field: str, max_len: int, errors: FieldErrors):
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        errors.add(field, f"The {field} must be a string.")
        return None
    if len(value) > max_len:
        errors.add(field, f"The {field} may not be greater than {max_len} characters.")
    return value


# ---------- lookups ----------
@queue_bp.get("/users")
@require_roles(*QUEUE_ROLES)
def search_users():
    q = (request.args.get("q") or "").strip()
    if len(q) < 2:
        return jsonify([]), 200

    pattern = f"%{q}%"
    users = (
        User.query
        .filter(db.or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        .order_by(User.name.asc())
        .limit(10)
        .all()
    )
    return jsonify([
        {"id": u.id, "name": u.name, "email": u.email, "level": u.level}
        for u in users
    ]), 200


@queue_bp.get("/owners")
@require_roles(*QUEUE_ROLES)
def list_owners():
    owners = User.query.filter_by(role="owner").order_by(User.name.asc()).all()
    return jsonify([{"id": u.id, "name": u.name} for u in owners]), 200


# ---------- sessions ----------
@queue_bp.get("/sessions")
@require_roles(*QUEUE_ROLES)
def list_sessions():
    q = QueueSession.query
    if g.user.role == "owner":
        q = q.filter_by(owner_id=g.user.id)
    elif request.args.get("owner_id"):
        q = q.filter_by(owner_id=parse_int(request.args.get("owner_id")))

    sessions = q.order_by(QueueSession.date.desc(), QueueSession.start_time.desc()).all()
    return jsonify([queue_session_json(s) for s in sessions]), 200


@queue_bp.post("/sessions")
@require_roles(*QUEUE_ROLES)
def create_session():
    data = json_body()

    errors = FieldErrors()
    day = require_date(data, "date", errors, "Date")
    start = require_time(data, "start_time", errors, "Start time")
    end = require_time(data, "end_time", errors, "End time", required=False)
    if start and end and end <= start:
        errors.add("end_time", "The end time must be after the start time.")

    owner_id = None
    if data.get("owner_id") is not None:
        owner_id = parse_int(data.get("owner_id"))
        if owner_id is None:
            errors.add("owner_id", "The selected owner_id is invalid.")
    errors.raise_if_any()

    session = queue_service.create_session(
        {"date": day, "start_time": start, "end_time": end, "owner_id": owner_id},
        g.user,
    )
    log_event("QUEUE_SESSION_CREATE", user_id=g.user.id, entity="queue_session", entity_id=session.id)
    return jsonify(queue_session_json(session)), 201


@queue_bp.get("/sessions/<int:session_id>")
@require_roles(*QUEUE_ROLES)
def get_session(session_id: int):
    session = get_or_404(QueueSession, session_id, "Queue session not found")
    _authorize_session(session)
    return jsonify(queue_service.session_detail(session)), 200


@queue_bp.patch("/sessions/<int:session_id>")
@require_roles(*QUEUE_ROLES)
def update_session(session_id: int):
    session = get_or_404(QueueSession, session_id, "Queue session not found")
    _authorize_session(session)
    data = json_body()

    errors = FieldErrors()
    if "status" in data and data.get("status") not in SESSION_STATUSES:
        errors.add("status", "The selected status is invalid.")
    end = None
    if "end_time" in data:
        end = require_time(data, "end_time", errors, "End time", required=False)
    errors.raise_if_any()

    if "status" in data:
        session.status = data["status"]
    if "end_time" in data:
        session.end_time = end
    db.session.commit()

    log_event("QUEUE_SESSION_UPDATE", user_id=g.user.id, entity="queue_session", entity_id=session.id, metadata=data)
    return jsonify(queue_session_json(session)), 200


@queue_bp.get("/sessions/<int:session_id>/available-courts")
@require_roles(*QUEUE_ROLES)
def session_available_courts(session_id: int):
    session = get_or_404(QueueSession, session_id, "Queue session not found")
    _authorize_session(session)
    return jsonify([court_json(c) for c in queue_service.available_courts(session)]), 200


@queue_bp.get("/sessions/<int:session_id>/courts")
@require_roles(*QUEUE_ROLES)
def session_courts(session_id: int):
    session = get_or_404(QueueSession, session_id, "Queue session not found")
    _authorize_session(session)
    return jsonify(queue_service.courts_with_status(session)), 200


@queue_bp.post("/sessions/<int:session_id>/suggest-match")
@require_roles(*QUEUE_ROLES)
def suggest_match(session_id: int):
    session = get_or_404(QueueSession, session_id, "Queue session not found")
    _authorize_session(session)
    data = json_body()

    errors = FieldErrors()
    court_id = parse_int(data.get("court_id"))
    if court_id is None:
        errors.add("court_id", "The court id field is required.")
    elif Court.query.get(court_id) is None:
        errors.add("court_id", "The selected court id is invalid.")
    errors.raise_if_any()

    return jsonify(matchmaking.suggest_match(session, court_id)), 200


# ---------- entries ----------
@queue_bp.get("/sessions/<int:session_id>/entries")
@require_roles(*QUEUE_ROLES)
def list_entries(session_id: int):
    session = get_or_404(QueueSession, session_id, "Queue session not found")
    _authorize_session(session)
    return jsonify([queue_entry_json(e) for e in queue_service.session_entries(session)]), 200


@queue_bp.post("/sessions/<int:session_id>/entries")
@require_roles(*QUEUE_ROLES)
def create_entry(session_id: int):
    session = get_or_404(QueueSession, session_id, "Queue session not found")
    _authorize_session(session)
    data = json_body()

    errors = FieldErrors()
    fields = {}
    if data.get("user_id") is not None:
        user_id = parse_int(data.get("user_id"))
        if user_id is None:
            errors.add("user_id", "The selected user_id is invalid.")
        fields["user_id"] = user_id
    guest_name = _optional_text(data, "guest_name", 255, errors)
    if guest_name is not None and guest_name.strip():
        fields["guest_name"] = guest_name.strip()
    fields["level"] = _level_field(data, errors, required=False)
    fields["phone"] = _optional_text(data, "phone", 50, errors)
    fields["notes"] = _optional_text(data, "notes", 500, errors)
    errors.raise_if_any()

    entry = queue_service.create_entry(session, fields)
    log_event("QUEUE_ENTRY_CREATE", user_id=g.user.id, entity="queue_entry", entity_id=entry.id)
    return jsonify(queue_entry_json(entry)), 201


@queue_bp.patch("/entries/<int:entry_id>")
@require_roles(*QUEUE_ROLES)
def update_entry(entry_id: int):
    entry = get_or_404(QueueEntry, entry_id, "Queue entry not found")
    _authorize_session(entry.queue_session)
    data = json_body()

    errors = FieldErrors()
    fields = {}
    if "status" in data:
        if data.get("status") not in ENTRY_STATUSES:
            errors.add("status", "The selected status is invalid.")
        fields["status"] = data.get("status")
    if "level" in data:
        fields["level"] = _level_field(data, errors, required=True)
    if "phone" in data:
        fields["phone"] = _optional_text(data, "phone", 50, errors)
    if "notes" in data:
        fields["notes"] = _optional_text(data, "notes", 500, errors)
    errors.raise_if_any()

    entry = queue_service.update_entry(entry, fields)
    return jsonify(queue_entry_json(entry)), 200


@queue_bp.delete("/entries/<int:entry_id>")
@require_roles(*QUEUE_ROLES)
def delete_entry(entry_id: int):
    entry = get_or_404(QueueEntry, entry_id, "Queue entry not found")
    _authorize_session(entry.queue_session)

    db.session.delete(entry)
    db.session.commit()

    log_event("QUEUE_ENTRY_DELETE", user_id=g.user.id, entity="queue_entry", entity_id=entry_id)
    return "", 204


# ---------- matches ----------
def _id_list(data: dict, field: str, size: int, errors: FieldErrors):
    raw = data.get(field)
    if raw is None:
        return None
    if not isinstance(raw, list) or len(raw) != size:
        errors.add(field, f"The {field} must contain {size} items.")
        return None
    ids = [parse_int(v) for v in raw]
    if any(i is None for i in ids):
        errors.add(field, f"The {field} must contain integer ids.")
        return None
    return ids


@queue_bp.post("/matches")
@require_roles(*QUEUE_ROLES)
def create_match():
    data = json_body()

    errors = FieldErrors()
    session_id = parse_int(data.get("queue_session_id"))
    if session_id is None:
        errors.add("queue_session_id", "The queue session id field is required.")
    elif QueueSession.query.get(session_id) is None:
        errors.add("queue_session_id", "The selected queue session id is invalid.")

    court_id = parse_int(data.get("court_id"))
    if court_id is None:
        errors.add("court_id", "The court id field is required.")
    elif Court.query.get(court_id) is None:
        errors.add("court_id", "The selected court id is invalid.")

    fields = {
        "court_id": court_id,
        "queue_entry_ids": _id_list(data, "queue_entry_ids", 4, errors),
        "teamA": _id_list(data, "teamA", 2, errors),
        "teamB": _id_list(data, "teamB", 2, errors),
    }
    errors.raise_if_any()

    session = QueueSession.query.get(session_id)
    _authorize_session(session)

    match = queue_service.create_match(session, fields)
    log_event("QUEUE_MATCH_CREATE", user_id=g.user.id, entity="queue_match", entity_id=match.id)
    return jsonify(queue_match_json(match)), 201


@queue_bp.patch("/matches/<int:match_id>")
@require_roles(*QUEUE_ROLES)
def update_match(match_id: int):
    match = get_or_404(QueueMatch, match_id, "Queue match not found")
    _authorize_session(match.queue_session)
    data = json_body()

    errors = FieldErrors()
    if data.get("status") != "completed":
        errors.add("status", "The selected status is invalid.")

    shuttlecocks_used = None
    if data.get("shuttlecocks_used") is not None:
        shuttlecocks_used = parse_int(data.get("shuttlecocks_used"))
        if shuttlecocks_used is None:
            errors.add("shuttlecocks_used", "The shuttlecocks used must be an integer.")
        elif shuttlecocks_used < 0:
            errors.add("shuttlecocks_used", "The shuttlecocks used must be at least 0.")
    errors.raise_if_any()

    match = queue_service.complete_match(match, shuttlecocks_used)
    log_event("QUEUE_MATCH_COMPLETE", user_id=g.user.id, entity="queue_match", entity_id=match.id,
              metadata={"shuttlecocks_used": shuttlecocks_used})
    return jsonify(queue_match_json(match)), 200
