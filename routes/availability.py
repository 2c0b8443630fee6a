from flask import Blueprint, jsonify, g
from sqlalchemy.exc import IntegrityError

from models import db
from models.court import Court
from models.court_availability import CourtAvailability
from utils.audit import log_event
from utils.auth_context import login_required
from utils.errors import ForbiddenError
from utils.resources import availability_json
from utils.validation import FieldErrors, get_or_404, json_body, parse_int, require_time

availability_bp = Blueprint("availability", __name__, url_prefix="/owner/courts")


def _managed_court(court_id: int) -> Court:
    """Only a superadmin or the court's owner may manage its schedule."""
    court = get_or_404(Court, court_id, "Court not found")
    if not g.user.is_superadmin() and court.owner_id != g.user.id:
        raise ForbiddenError()
    return court


def _court_availability(court: Court, availability_id: int) -> CourtAvailability:
    availability = get_or_404(CourtAvailability, availability_id, "Availability not found")
    if availability.court_id != court.id:
        raise ForbiddenError()
    return availability


def _check_window(errors: FieldErrors, open_time, close_time):
    if open_time and close_time and close_time <= open_time:
        errors.add("close_time", "Close time must be after open time.")


@availability_bp.get("/<int:court_id>/availability")
@login_required
def list_availability(court_id: int):
    court = _managed_court(court_id)
    rows = (
        CourtAvailability.query
        .filter_by(court_id=court.id)
        .order_by(CourtAvailability.day_of_week.asc())
        .all()
    )
    return jsonify([availability_json(a) for a in rows]), 200


@availability_bp.post("/<int:court_id>/availability")
@login_required
def create_availability(court_id: int):
    court = _managed_court(court_id)
    data = json_body()

    errors = FieldErrors()
    day = data.get("day_of_week")
    day_of_week = parse_int(day)
    if day is None:
        errors.add("day_of_week", "Day of week is required.")
    elif day_of_week is None:
        errors.add("day_of_week", "Day of week must be a number (0-6).")
    elif not 0 <= day_of_week <= 6:
        errors.add("day_of_week", "Day of week must be between 0 (Sunday) and 6 (Saturday).")
    open_time = require_time(data, "open_time", errors, "Open time")
    close_time = require_time(data, "close_time", errors, "Close time")
    _check_window(errors, open_time, close_time)
    errors.raise_if_any()

    availability = CourtAvailability(
        court_id=court.id,
        day_of_week=day_of_week,
        open_time=open_time,
        close_time=close_time,
    )
    db.session.add(availability)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # uq_court_day_of_week
        errors.add("day_of_week", "This court already has opening hours for that day.")
        errors.raise_if_any()

    log_event("AVAILABILITY_CREATE", user_id=g.user.id, entity="court_availability", entity_id=availability.id)
    return jsonify(availability_json(availability)), 201


@availability_bp.put("/<int:court_id>/availability/<int:availability_id>")
@login_required
def update_availability(court_id: int, availability_id: int):
    court = _managed_court(court_id)
    availability = _court_availability(court, availability_id)
    data = json_body()

    errors = FieldErrors()
    open_time = availability.open_time
    close_time = availability.close_time
    if "open_time" in data:
        open_time = require_time(data, "open_time", errors, "Open time")
    if "close_time" in data:
        close_time = require_time(data, "close_time", errors, "Close time")
    _check_window(errors, open_time, close_time)
    errors.raise_if_any()

    availability.open_time = open_time
    availability.close_time = close_time
    db.session.commit()

    log_event("AVAILABILITY_UPDATE", user_id=g.user.id, entity="court_availability", entity_id=availability.id)
    return jsonify(availability_json(availability)), 200


@availability_bp.delete("/<int:court_id>/availability/<int:availability_id>")
@login_required
def delete_availability(court_id: int, availability_id: int):
    court = _managed_court(court_id)
    availability = _court_availability(court, availability_id)

    db.session.delete(availability)
    db.session.commit()

    log_event("AVAILABILITY_DELETE", user_id=g.user.id, entity="court_availability", entity_id=availability_id)
    return "", 204
