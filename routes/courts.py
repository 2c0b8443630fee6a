from flask import Blueprint, request, jsonify, g

from models import db
from models.court import Court
from models.user import User
from security.rbac import require_roles
from services.scheduling import available_time_slots
from utils.audit import log_event
from utils.auth_context import login_required
from utils.errors import ForbiddenError
from utils.resources import court_json
from utils.validation import FieldErrors, get_or_404, json_body, parse_bool, parse_int, parse_number, require_date

court_bp = Blueprint("court", __name__)

COURT_FIELDS = ("name", "is_active", "hourly_rate", "reservation_fee_percentage")


def _validate_court(data: dict, partial: bool) -> dict:
    """Returns only the fields present (all of them when creating)."""
    errors = FieldErrors()
    out = {}

    if "name" in data or not partial:
        name = data.get("name")
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            errors.add("name", "Court name is required.")
        elif len(name) > 50:
            errors.add("name", "Court name cannot exceed 50 characters.")
        out["name"] = name

    if "is_active" in data:
        is_active = parse_bool(data.get("is_active"))
        if is_active is None:
            errors.add("is_active", "Active status must be true or false.")
        out["is_active"] = is_active

    if data.get("hourly_rate") is not None:
        rate = parse_number(data.get("hourly_rate"))
        if rate is None:
            errors.add("hourly_rate", "Hourly rate must be a valid number.")
        elif rate < 0:
            errors.add("hourly_rate", "Hourly rate cannot be negative.")
        out["hourly_rate"] = rate
    elif "hourly_rate" in data:
        out["hourly_rate"] = None

    if data.get("reservation_fee_percentage") is not None:
        fee = parse_number(data.get("reservation_fee_percentage"))
        if fee is None:
            errors.add("reservation_fee_percentage", "Reservation fee percentage must be a valid number.")
        elif fee < 0:
            errors.add("reservation_fee_percentage", "Reservation fee percentage cannot be negative.")
        elif fee > 100:
            errors.add("reservation_fee_percentage", "Reservation fee percentage cannot exceed 100%.")
        out["reservation_fee_percentage"] = fee

    errors.raise_if_any()
    return out


# ---------- OWNER: manage courts ----------
@court_bp.get("/courts")
@require_roles("owner")
def list_courts():
    if g.user.is_superadmin():
        courts = Court.query.order_by(Court.id.asc()).all()
        return jsonify([court_json(c, with_owner=True) for c in courts]), 200

    courts = Court.query.filter_by(owner_id=g.user.id).order_by(Court.id.asc()).all()
    return jsonify([court_json(c) for c in courts]), 200


@court_bp.post("/courts")
@require_roles("owner")
def create_court():
    data = json_body()
    fields = _validate_court(data, partial=False)

    owner_id = g.user.id
    if g.user.is_superadmin() and data.get("owner_id") is not None:
        requested = parse_int(data.get("owner_id"))
        if requested is None or User.query.get(requested) is None:
            errors = FieldErrors()
            errors.add("owner_id", "The selected owner_id is invalid.")
            errors.raise_if_any()
        owner_id = requested

    court = Court(
        owner_id=owner_id,
        name=fields["name"],
        is_active=fields.get("is_active", True),
        hourly_rate=fields.get("hourly_rate"),
        reservation_fee_percentage=fields.get("reservation_fee_percentage") or 0,
    )
    db.session.add(court)
    db.session.commit()

    log_event("COURT_CREATE", user_id=g.user.id, entity="court", entity_id=court.id)
    return jsonify(court_json(court, with_owner=True)), 201


@court_bp.patch("/courts/<int:court_id>")
@require_roles("owner")
def update_court(court_id: int):
    court = get_or_404(Court, court_id, "Court not found")
    if not g.user.is_superadmin() and court.owner_id != g.user.id:
        raise ForbiddenError()

    data = json_body()
    fields = _validate_court(data, partial=True)
    for key in COURT_FIELDS:
        if key in fields:
            setattr(court, key, fields[key])
    if court.reservation_fee_percentage is None:
        court.reservation_fee_percentage = 0
    db.session.commit()

    log_event("COURT_UPDATE", user_id=g.user.id, entity="court", entity_id=court.id, metadata=fields)
    return jsonify(court_json(court)), 200


# ---------- PLAYERS: courts with hourly slots ----------
@court_bp.get("/player/courts")
@login_required
def courts_for_players():
    errors = FieldErrors()
    day = require_date(request.args, "date", errors, "Date")
    errors.raise_if_any()

    courts = Court.query.filter(Court.active_filter()).order_by(Court.id.asc()).all()

    result = []
    for court in courts:
        slots = available_time_slots(court, day)
        # courts closed on that weekday are left out
        if slots:
            row = court_json(court)
            row["slots"] = slots
            result.append(row)

    return jsonify(result), 200
