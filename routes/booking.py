from datetime import date, datetime

from flask import Blueprint, request, jsonify, g, Response

from models import db
from models.court import Court
from models.court_booking import CourtBooking
from security.rbac import require_roles
from services.analytics import daily_analytics, default_range, export_report_csv, owner_court_ids, owner_stats
from services.scheduling import booking_window, create_booking
from utils.audit import log_event
from utils.auth_context import login_required
from utils.errors import ForbiddenError
from utils.resources import booking_json
from utils.validation import (
    FieldErrors,
    get_or_404,
    json_body,
    parse_bool,
    parse_date,
    parse_int,
    require_date,
    require_time,
)

booking_bp = Blueprint("booking", __name__)

PAYMENT_STATUSES = ("reserved", "paid")


def _newest_first(query):
    return query.order_by(CourtBooking.date.desc(), CourtBooking.start_time.desc())


def _apply_list_filters(query):
    """?status=, ?upcoming=true (confirmed bookings from today on)."""
    status = request.args.get("status")
    if status:
        query = query.filter(CourtBooking.status == status)
    if request.args.get("upcoming") == "true":
        query = query.filter(CourtBooking.date >= date.today(), CourtBooking.status == "confirmed")
    return query


def _date_range_args():
    errors = FieldErrors()
    start = end = None
    if request.args.get("start_date"):
        start = parse_date(request.args.get("start_date"))
        if start is None:
            errors.add("start_date", "Start date must be a valid date (YYYY-MM-DD).")
    if request.args.get("end_date"):
        end = parse_date(request.args.get("end_date"))
        if end is None:
            errors.add("end_date", "End date must be a valid date (YYYY-MM-DD).")
    errors.raise_if_any()
    return default_range(start, end)


# ---------- PLAYERS ----------
@booking_bp.get("/courts/<int:court_id>/bookings")
@login_required
def court_bookings(court_id: int):
    court = get_or_404(Court, court_id, "Court not found")
    q = CourtBooking.query.filter_by(court_id=court.id, status="confirmed")

    if request.args.get("date"):
        day = parse_date(request.args.get("date"))
        if day is None:
            errors = FieldErrors()
            errors.add("date", "Date must be a valid date (YYYY-MM-DD).")
            errors.raise_if_any()
        q = q.filter(CourtBooking.date == day)

    bookings = q.order_by(CourtBooking.date.asc(), CourtBooking.start_time.asc()).all()
    return jsonify([booking_json(b) for b in bookings]), 200


@booking_bp.post("/courts/<int:court_id>/bookings")
@login_required
def create_court_booking(court_id: int):
    court = get_or_404(Court, court_id, "Court not found")
    data = json_body()

    errors = FieldErrors()
    day = require_date(data, "date", errors, "Date")
    start = require_time(data, "start_time", errors, "Start time")
    end = require_time(data, "end_time", errors, "End time")

    if day is not None:
        first, last = booking_window()
        if day < first:
            errors.add("date", "Bookings cannot be made for past dates.")
        elif day > last:
            errors.add("date", f"Bookings can only be made up to {(last - first).days} days in advance.")
    if start and end and end <= start:
        errors.add("end_time", "End time must be after start time.")

    payment_status = data.get("payment_status")
    if payment_status is not None and payment_status not in PAYMENT_STATUSES:
        errors.add("payment_status", "The selected payment status is invalid.")
    errors.raise_if_any()

    booking = create_booking(court, g.user, day, start, end, payment_status=payment_status)

    log_event("BOOKING_CREATE", user_id=g.user.id, entity="court_booking", entity_id=booking.id)
    return jsonify(booking_json(booking, with_user=True)), 201


@booking_bp.delete("/bookings/<int:booking_id>")
@login_required
def cancel_booking(booking_id: int):
    booking = get_or_404(CourtBooking, booking_id, "Booking not found")

    court_owner_id = booking.court.owner_id if booking.court else None
    if g.user.id not in (booking.user_id, court_owner_id):
        raise ForbiddenError()

    booking.status = "cancelled"
    db.session.commit()

    log_event("BOOKING_CANCEL", user_id=g.user.id, entity="court_booking", entity_id=booking.id)
    return jsonify(message="Booking cancelled successfully"), 200


@booking_bp.get("/player/bookings")
@login_required
def my_bookings():
    q = CourtBooking.query.filter_by(user_id=g.user.id)
    bookings = _newest_first(_apply_list_filters(q)).all()
    return jsonify([booking_json(b) for b in bookings]), 200


# ---------- OWNER ----------
@booking_bp.get("/owner/bookings")
@require_roles("owner")
def owner_bookings():
    q = CourtBooking.query.filter(CourtBooking.court_id.in_(owner_court_ids(g.user)))

    if request.args.get("date"):
        day = parse_date(request.args.get("date"))
        if day is None:
            errors = FieldErrors()
            errors.add("date", "Date must be a valid date (YYYY-MM-DD).")
            errors.raise_if_any()
        q = q.filter(CourtBooking.date == day)

    bookings = _newest_first(_apply_list_filters(q)).all()
    return jsonify([booking_json(b, with_user=True) for b in bookings]), 200


@booking_bp.patch("/owner/bookings/<int:booking_id>")
@require_roles("owner")
def owner_update_booking(booking_id: int):
    booking = get_or_404(CourtBooking, booking_id, "Booking not found")
    if not booking.court or booking.court.owner_id != g.user.id:
        raise ForbiddenError("Unauthorized.")

    data = json_body()
    errors = FieldErrors()

    shuttlecock_count = None
    if data.get("shuttlecock_count") not in (None, ""):
        shuttlecock_count = parse_int(data.get("shuttlecock_count"))
        if shuttlecock_count is None:
            errors.add("shuttlecock_count", "Shuttlecock count must be an integer.")
        elif shuttlecock_count < 0:
            errors.add("shuttlecock_count", "Shuttlecock count cannot be negative.")

    start_session = False
    if data.get("start_session") is not None:
        start_session = parse_bool(data.get("start_session"))
        if start_session is None:
            errors.add("start_session", "Start session must be true or false.")

    payment_status = data.get("payment_status")
    if payment_status is not None and payment_status not in PAYMENT_STATUSES:
        errors.add("payment_status", "The selected payment status is invalid.")
    errors.raise_if_any()

    if "shuttlecock_count" in data:
        booking.shuttlecock_count = shuttlecock_count
    if start_session and booking.started_at is None:
        booking.started_at = datetime.utcnow()
    if payment_status is not None:
        booking.payment_status = payment_status
    db.session.commit()

    log_event("BOOKING_UPDATE", user_id=g.user.id, entity="court_booking", entity_id=booking.id, metadata=data)
    return jsonify(booking_json(booking, with_user=True)), 200


@booking_bp.get("/owner/stats")
@require_roles("owner")
def stats():
    return jsonify(owner_stats(g.user)), 200


@booking_bp.get("/owner/analytics")
@require_roles("owner")
def analytics():
    start, end = _date_range_args()
    return jsonify(data=daily_analytics(g.user, start, end)), 200


@booking_bp.get("/owner/reports/export")
@require_roles("owner")
def export_report():
    start, end = _date_range_args()
    csv_text = export_report_csv(g.user, start, end)

    log_event("REPORT_EXPORT", user_id=g.user.id, metadata={"start": start.isoformat(), "end": end.isoformat()})
    filename = f"report_{start.isoformat()}_{end.isoformat()}.csv"
    return Response(
        csv_text,
        status=200,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
